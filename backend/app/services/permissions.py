from __future__ import annotations

from uuid import UUID

from sqlmodel import Session

from app.core.errors import Forbidden, NotFound
from app.models import Ticket, User, UserRole


def ensure_ticket_access(session: Session, ticket_id: UUID, user: User) -> Ticket:
    """Staff may read any ticket; end users only the tickets they created."""
    ticket = session.get(Ticket, ticket_id)
    if not ticket:
        raise NotFound("Ticket not found")

    if user.role == UserRole.END_USER and ticket.created_by != user.id:
        raise Forbidden("Access to ticket denied")
    return ticket


def ensure_staff(user: User, action: str = "perform this action") -> None:
    if not user.is_staff:
        raise Forbidden(f"Only staff can {action}")


def ensure_can_manage_user(actor: User, target_role: str) -> None:
    """Admins manage every account; agents only end-user accounts."""
    if actor.role == UserRole.ADMIN:
        return
    if actor.role == UserRole.AGENT and target_role == UserRole.END_USER:
        return
    raise Forbidden("Not allowed to manage this account")
