# routers/users.py: staff accounts; admins manage them, everyone can read themselves
from fastapi import APIRouter, Depends, HTTPException
from passlib.hash import bcrypt
import logging
import uuid

from models import Role, User
from schemas import UserCreate, UserRead, UserUpdate
from api_utils import RAListParams, apply_filter_map, contains, flag, one_of, paginate_and_respond, respond_item
from deps import AuthSession, get_admin_session, get_current_user
from services import config

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger("uvicorn")

ALLOWED_SORTS = {"email", "role", "disabled", "created_at"}


def default_role(email: str) -> Role:
    """The finance mailbox is provisioned as finance; everybody else starts as a plain user."""
    return Role.FINANCE if email.lower() == config.FINANCE_EMAIL else Role.USER


def to_user_read(m: User) -> UserRead:
    return UserRead.model_validate(m)


async def _user_or_404(user_id: uuid.UUID) -> User:
    obj = await User.get_or_none(id=user_id)
    if not obj:
        raise HTTPException(404, "User not found")
    return obj


async def _ensure_email_free(email: str, owner_id: uuid.UUID | None = None) -> None:
    qs = User.filter(email=email)
    if owner_id is not None:
        qs = qs.exclude(id=owner_id)
    if await qs.exists():
        raise HTTPException(409, "Email already registered")


@router.get("", response_model=list[UserRead])
async def list_users(params: RAListParams = Depends(), _: AuthSession = Depends(get_admin_session)):
    qs = apply_filter_map(User.all(), params.filters, {
        "email": contains("email"),
        "role": one_of("role", Role),
        "disabled": flag("disabled"),
    })
    return await paginate_and_respond(qs, params.skip, params.limit, params.order(ALLOWED_SORTS, "email"), to_user_read)


# /me is declared before /{user_id:uuid}
@router.get("/me", response_model=UserRead)
async def read_me(current_user: User = Depends(get_current_user)):
    return to_user_read(current_user)


@router.get("/{user_id:uuid}", response_model=UserRead)
async def get_user(user_id: uuid.UUID, _: AuthSession = Depends(get_admin_session)):
    return respond_item(await _user_or_404(user_id), to_user_read)


@router.post("", response_model=UserRead, status_code=201)
async def create_user(payload: UserCreate, session: AuthSession = Depends(get_admin_session)):
    email = str(payload.email).lower()
    await _ensure_email_free(email)
    obj = await User.create(
        email=email,
        hashed_password=bcrypt.hash(payload.password),
        role=payload.role or default_role(email),
    )
    logger.info(f"[auth] {session.email} created user {email} ({obj.role})")
    return respond_item(obj, to_user_read, status_code=201)


@router.put("/{user_id:uuid}", response_model=UserRead)
async def update_user(user_id: uuid.UUID, payload: UserUpdate, session: AuthSession = Depends(get_admin_session)):
    obj = await _user_or_404(user_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if obj.id == session.user_id and (changes.get("disabled") or changes.get("role", Role.ADMIN) != Role.ADMIN):
        raise HTTPException(400, "Admins cannot disable or demote their own account")
    if "email" in changes:
        changes["email"] = str(changes["email"]).lower()
        await _ensure_email_free(changes["email"], owner_id=obj.id)
    if "password" in changes:
        changes["hashed_password"] = bcrypt.hash(changes.pop("password"))
    obj.update_from_dict(changes)
    await obj.save()
    return respond_item(obj, to_user_read)
