from __future__ import annotations

from typing import Callable, Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from app.core.config import settings
from app.core.errors import Forbidden, Unauthenticated
from app.core.security import verify_token
from app.db import SessionDep
from app.models import User, UserRole

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)


def get_current_user(
    session: SessionDep,
    token: Optional[str] = Depends(oauth2_scheme),
) -> User:
    if not token:
        raise Unauthenticated("Not authenticated")
    try:
        payload = verify_token(token, token_type="access")
        user_id = UUID(payload.get("sub") or "")
    except ValueError:
        raise Unauthenticated("Could not validate credentials") from None

    user = session.get(User, user_id)
    if not user or not user.is_active:
        raise Unauthenticated("Inactive or missing user")
    return user


def require_roles(*roles: UserRole) -> Callable[..., User]:
    """Dependency factory: the caller's role must be in the allow-list."""
    allowed = frozenset(role.value for role in roles)

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise Forbidden("Insufficient role for this operation")
        return current_user

    return dependency


require_staff = require_roles(UserRole.ADMIN, UserRole.AGENT)
require_admin = require_roles(UserRole.ADMIN)
