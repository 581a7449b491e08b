from dataclasses import dataclass
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
import uuid

from models import RevokedToken, Role, User
from services import config, policy
from services.policy import Action

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="login/access-token")


@dataclass(frozen=True)
class AuthSession:
    """The authenticated principal of one request; passed explicitly to policy checks."""
    user_id: uuid.UUID
    email: str
    role: Role
    token_id: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_finance(self) -> bool:
        return policy.is_finance_user(self.email, self.is_admin)

    def can(self, action: Action) -> bool:
        return policy.is_allowed(action, self.email, self.is_admin)

    def require(self, action: Action) -> None:
        policy.require(action, self.email, self.is_admin)

    def permissions(self) -> dict[str, bool]:
        return policy.permissions_for(self.email, self.is_admin)


async def _authenticate(token: str) -> tuple[User, str | None]:
    cred_exc = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
        user_id = uuid.UUID(payload.get("sub"))
    except (JWTError, ValueError, TypeError):
        raise cred_exc
    jti = payload.get("jti")
    if jti and await RevokedToken.exists(jti=jti):
        raise cred_exc
    user = await User.get_or_none(id=user_id)
    if not user:
        raise cred_exc
    if user.disabled:
        raise HTTPException(status_code=400, detail="Inactive user")
    return user, jti


async def get_current_user(token: str = Depends(oauth2_scheme)) -> User:
    user, _ = await _authenticate(token)
    return user


async def get_session(token: str = Depends(oauth2_scheme)) -> AuthSession:
    user, jti = await _authenticate(token)
    return AuthSession(
        user_id=user.id,
        email=user.email.lower(),
        role=Role(user.role),
        token_id=jti,
    )


async def get_admin_session(session: AuthSession = Depends(get_session)) -> AuthSession:
    if not session.is_admin:
        raise HTTPException(status_code=403, detail="Not enough permissions")
    return session


def require_action(action: Action):
    """Dependency factory: 403 unless the caller's session allows ``action``."""
    async def checker(session: AuthSession = Depends(get_session)) -> AuthSession:
        session.require(action)
        return session
    return checker
