import logging

from fastapi import APIRouter, Depends, Request, status
from sqlmodel import select

from app.api.deps import get_current_user
from app.core.config import settings
from app.core.errors import Forbidden, Unauthenticated
from app.core.limiter import limiter
from app.core.security import create_access_token, get_password_hash, verify_password
from app.db import SessionDep, commit_or_conflict
from app.models import User, UserRole
from app.schemas.user import LoginResponse, UserLogin, UserRead, UserRegister

logger = logging.getLogger(__name__)

router = APIRouter()


def _login_response(user: User) -> LoginResponse:
    token = create_access_token(
        user.id,
        claims={"username": user.username, "role": user.role, "name": user.name},
    )
    return LoginResponse(access_token=token, user=UserRead.model_validate(user))


@router.post(
    "/register",
    response_model=LoginResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new end user",
)
@limiter.limit(settings.AUTH_RATE_LIMIT)
def register_user(request: Request, payload: UserRegister, session: SessionDep) -> LoginResponse:
    user = User(
        username=payload.username,
        hashed_password=get_password_hash(payload.password),
        role=UserRole.END_USER.value,
        name=payload.name,
        department=payload.department,
        phone=payload.phone,
    )
    session.add(user)
    commit_or_conflict(session, "Username already exists")
    session.refresh(user)
    logger.info(f"End user '{user.username}' registered")
    return _login_response(user)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Login and obtain an access token",
)
@limiter.limit(settings.AUTH_RATE_LIMIT)
def login(request: Request, payload: UserLogin, session: SessionDep) -> LoginResponse:
    username = payload.username.strip().lower()
    user = session.exec(select(User).where(User.username == username)).one_or_none()
    if not user or not verify_password(payload.password, user.hashed_password):
        logger.warning(f"Failed login attempt for '{username}'")
        raise Unauthenticated("Incorrect username or password")
    if not user.is_active:
        raise Forbidden("User is inactive")

    return _login_response(user)


@router.get("/me", response_model=UserRead, summary="Get current user profile")
def read_me(current_user: User = Depends(get_current_user)) -> User:
    return current_user
