from fastapi import APIRouter, Body, Depends, HTTPException, Response
from fastapi.security import OAuth2PasswordRequestForm
from passlib.context import CryptContext
from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import uuid

from models import RevokedToken, Role, User
from schemas import RefreshRequest, SessionRead, Token
from deps import AuthSession, get_session
from services import config

router = APIRouter(tags=["auth"])
logger = logging.getLogger("uvicorn")
pwd_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto")


def create_token(data: dict, secret: str, expires: int) -> str:
    to_encode = data.copy()
    to_encode["exp"] = datetime.now(timezone.utc) + timedelta(seconds=expires)
    to_encode["jti"] = uuid.uuid4().hex
    return jwt.encode(to_encode, secret, algorithm=config.ALGORITHM)


def issue_tokens(user: User) -> dict:
    data = {"sub": str(user.id), "email": user.email, "role": Role(user.role).value}
    return {
        "access_token": create_token(data, config.SECRET_KEY, config.ACCESS_EXPIRE),
        "refresh_token": create_token(data, config.REFRESH_SECRET, config.REFRESH_EXPIRE),
        "token_type": "bearer",
    }


async def _revoke(token: str, secret: str) -> None:
    try:
        claims = jwt.decode(token, secret, algorithms=[config.ALGORITHM])
    except JWTError:
        return
    jti, exp = claims.get("jti"), claims.get("exp")
    if jti and not await RevokedToken.exists(jti=jti):
        await RevokedToken.create(jti=jti, expires_at=datetime.fromtimestamp(exp, tz=timezone.utc))


@router.post("/login/access-token", response_model=Token)
async def login(form: OAuth2PasswordRequestForm = Depends()):
    # the form's "username" field carries the email
    user = await User.get_or_none(email=form.username.strip().lower())
    if not user or not pwd_ctx.verify(form.password, user.hashed_password):
        logger.info(f"[auth] failed login for {form.username}")
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if user.disabled:
        raise HTTPException(status_code=400, detail="Inactive user")
    logger.info(f"[auth] login {user.email}")
    return issue_tokens(user)


@router.post("/login/refresh-token", response_model=Token)
async def refresh_token(payload: RefreshRequest):
    try:
        decoded = jwt.decode(payload.refresh_token, config.REFRESH_SECRET, algorithms=[config.ALGORITHM])
        sub = decoded.get("sub")
        if not sub:
            raise HTTPException(status_code=401, detail="Invalid refresh token")
        user_id = uuid.UUID(sub)
    except (JWTError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    jti = decoded.get("jti")
    if jti and await RevokedToken.exists(jti=jti):
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    user = await User.get_or_none(id=user_id)
    if not user or user.disabled:
        raise HTTPException(status_code=401, detail="User not found")
    return issue_tokens(user)


@router.post("/logout", status_code=204)
async def logout(
    refresh_token: Optional[str] = Body(None, embed=True),
    session: AuthSession = Depends(get_session),
):
    """Ends the session: the presented access token (and refresh token, if sent) stop working."""
    if session.token_id:
        # purgeable once the access token itself would have expired
        await RevokedToken.create(
            jti=session.token_id,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=config.ACCESS_EXPIRE),
        )
    if refresh_token:
        await _revoke(refresh_token, config.REFRESH_SECRET)
    logger.info(f"[auth] logout {session.email}")
    return Response(status_code=204)


@router.get("/session", response_model=SessionRead)
async def read_session(session: AuthSession = Depends(get_session)):
    return SessionRead(
        user_id=session.user_id,
        email=session.email,
        role=session.role,
        is_admin=session.is_admin,
        is_finance=session.is_finance,
        permissions=session.permissions(),
    )
