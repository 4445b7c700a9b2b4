from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import func, or_
from sqlmodel import select

from app.api.deps import require_staff
from app.core.errors import DependencyError, Forbidden, NotFound
from app.core.security import get_password_hash
from app.db import SessionDep, commit_or_conflict
from app.models import Ticket, TicketHistory, TicketNote, User, UserRole
from app.schemas.user import UserCreate, UserRead, UserUpdate
from app.services.permissions import ensure_can_manage_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=List[UserRead], summary="List users")
def list_users(
    session: SessionDep,
    current_user: User = Depends(require_staff),
) -> List[User]:
    statement = select(User).order_by(User.role, User.name)
    return list(session.exec(statement).all())


@router.get("/end-users", response_model=List[UserRead], summary="List end users")
def list_end_users(
    session: SessionDep,
    current_user: User = Depends(require_staff),
) -> List[User]:
    statement = (
        select(User)
        .where(User.role == UserRole.END_USER.value)
        .order_by(User.name)
    )
    return list(session.exec(statement).all())


@router.post(
    "/",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
)
def create_user(
    payload: UserCreate,
    session: SessionDep,
    current_user: User = Depends(require_staff),
) -> User:
    ensure_can_manage_user(current_user, payload.role)

    user = User(
        username=payload.username,
        hashed_password=get_password_hash(payload.password),
        role=payload.role.value,
        name=payload.name,
        department=payload.department,
        phone=payload.phone,
    )
    session.add(user)
    commit_or_conflict(session, "Username already exists")
    session.refresh(user)
    logger.info(f"User '{user.username}' ({user.role}) created by {current_user.username}")
    return user


@router.patch("/{user_id}", response_model=UserRead, summary="Update user by id")
def update_user(
    user_id: UUID,
    payload: UserUpdate,
    session: SessionDep,
    current_user: User = Depends(require_staff),
) -> User:
    """Partial update; agents may only edit end-user accounts and cannot promote them."""
    user = session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    ensure_can_manage_user(current_user, user.role)

    payload_dict = payload.model_dump(exclude_unset=True)

    if payload_dict.get("role") is not None:
        ensure_can_manage_user(current_user, payload_dict["role"])
        if user.id == current_user.id and payload_dict["role"] != current_user.role:
            raise Forbidden("You cannot change your own role")
        user.role = payload_dict["role"].value
    if payload_dict.get("name") is not None:
        user.name = payload_dict["name"]
    if "department" in payload_dict:
        user.department = payload_dict["department"]
    if "phone" in payload_dict:
        user.phone = payload_dict["phone"]
    if payload_dict.get("password") is not None:
        user.hashed_password = get_password_hash(payload_dict["password"])
    if payload_dict.get("is_active") is not None:
        if user.id == current_user.id and not payload_dict["is_active"]:
            raise Forbidden("You cannot deactivate your own account")
        user.is_active = payload_dict["is_active"]

    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info(f"User '{user.username}' updated by {current_user.username}")
    return user


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete user by id",
)
def delete_user(
    user_id: UUID,
    session: SessionDep,
    current_user: User = Depends(require_staff),
):
    user = session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    ensure_can_manage_user(current_user, user.role)
    if user.id == current_user.id:
        raise Forbidden("You cannot delete your own account")

    # Tickets keep their creator and assignee; such accounts are deactivated instead
    linked = session.exec(
        select(func.count(Ticket.id)).where(
            or_(Ticket.created_by == user.id, Ticket.assignee_id == user.id)
        )
    ).one()
    if linked:
        raise DependencyError(f"User is referenced by {linked} ticket(s); deactivate the account instead")
    authored = session.exec(
        select(func.count(TicketNote.id)).where(TicketNote.user_id == user.id)
    ).one() + session.exec(
        select(func.count(TicketHistory.id)).where(TicketHistory.user_id == user.id)
    ).one()
    if authored:
        raise DependencyError("User has ticket notes or history entries; deactivate the account instead")

    session.delete(user)
    session.commit()
    logger.info(f"User '{user.username}' deleted by {current_user.username}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
