"""
Ticket lifecycle: creation, staff updates with history, and internal notes.

The acting user is always passed in explicitly by the API layer.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import case
from sqlmodel import Session, select

from app.core.errors import (
    InvalidAssignee,
    MissingProfileData,
    NoChanges,
    NotFound,
    ValidationFailed,
)
from app.core.timeutils import utcnow
from app.models import (
    CustomFieldValue,
    STAFF_ROLES,
    Ticket,
    TicketHistory,
    TicketHistoryAction,
    TicketNote,
    TicketPriority,
    TicketStatus,
    User,
    UserRole,
)
from app.models.ticket_history import UNASSIGNED_VALUE
from app.schemas.ticket import TicketCreate, TicketUpdate
from app.services.permissions import ensure_staff, ensure_ticket_access
from app.services.taxonomy import validate_custom_fields

logger = logging.getLogger(__name__)

UNASSIGNED = "unassigned"

PRIORITY_ORDER = case(
    (Ticket.priority == TicketPriority.HIGH.value, 1),
    (Ticket.priority == TicketPriority.MEDIUM.value, 2),
    (Ticket.priority == TicketPriority.LOW.value, 3),
    else_=4,
)


def _assignee_repr(assignee_id: Optional[UUID]) -> str:
    return str(assignee_id) if assignee_id else UNASSIGNED_VALUE


def create_ticket(session: Session, actor: User, payload: TicketCreate) -> Ticket:
    """
    Create a ticket and its custom field values in one transaction.

    END_USER tickets take caller name and department from the creator's
    profile; staff supply both explicitly.
    """
    if actor.role == UserRole.END_USER:
        if not actor.department:
            raise MissingProfileData("Your profile has no department; update it before submitting tickets")
        caller_name = actor.name
        department = actor.department
        phone = payload.phone or actor.phone
    else:
        errors = []
        if not payload.caller_name or not payload.caller_name.strip():
            errors.append("caller_name is required")
        if not payload.department or not payload.department.strip():
            errors.append("department is required")
        if errors:
            raise ValidationFailed("Missing required fields", errors)
        caller_name = payload.caller_name.strip()
        department = payload.department.strip()
        phone = payload.phone

    normalized = validate_custom_fields(
        session, payload.category_id, payload.subcategory_id, payload.custom_fields
    )

    ticket = Ticket(
        caller_name=caller_name,
        department=department,
        phone=phone or None,
        description=payload.description,
        priority=payload.priority.value,
        status=TicketStatus.OPEN.value,
        created_by=actor.id,
        category_id=payload.category_id,
        subcategory_id=payload.subcategory_id,
    )
    session.add(ticket)
    for field in normalized:
        session.add(
            CustomFieldValue(
                ticket_id=ticket.id,
                field_definition_id=field.field_definition_id,
                value_text=field.text_repr,
                value_json=field.json_repr,
            )
        )

    try:
        session.commit()
    except Exception:
        session.rollback()
        raise
    session.refresh(ticket)
    logger.info(f"Ticket {ticket.id} created by {actor.username} with {len(normalized)} custom field(s)")
    return ticket


def update_ticket(
    session: Session,
    actor: User,
    ticket_id: UUID,
    payload: TicketUpdate,
    now: Optional[datetime] = None,
) -> Ticket:
    """
    Apply a staff update and append its history rows atomically.

    Only fields present in the payload are considered. A status change to
    RESOLVED stamps closed_at; leaving RESOLVED clears it.
    """
    ensure_staff(actor, "update tickets")
    ticket = session.get(Ticket, ticket_id)
    if not ticket:
        raise NotFound("Ticket not found")

    now = now or utcnow()
    provided = payload.model_fields_set
    assignee_changed = "assignee_id" in provided and payload.assignee_id != ticket.assignee_id
    if assignee_changed and payload.assignee_id is not None:
        assignee = session.get(User, payload.assignee_id)
        if not assignee or assignee.role not in STAFF_ROLES:
            raise InvalidAssignee("Assignee must be an existing admin or agent")

    history: List[TicketHistory] = []
    changed = False

    if "status" in provided and payload.status is not None and payload.status != ticket.status:
        old_status = ticket.status
        new_status = payload.status.value
        ticket.status = new_status
        if new_status == TicketStatus.RESOLVED:
            ticket.closed_at = now
        elif old_status == TicketStatus.RESOLVED:
            ticket.closed_at = None
        history.append(
            TicketHistory(
                ticket_id=ticket.id,
                user_id=actor.id,
                action=TicketHistoryAction.STATUS_CHANGE.value,
                old_value=old_status,
                new_value=new_status,
                created_at=now,
            )
        )
        changed = True

    if assignee_changed:
        history.append(
            TicketHistory(
                ticket_id=ticket.id,
                user_id=actor.id,
                action=TicketHistoryAction.ASSIGNEE_CHANGE.value,
                old_value=_assignee_repr(ticket.assignee_id),
                new_value=_assignee_repr(payload.assignee_id),
                created_at=now,
            )
        )
        ticket.assignee_id = payload.assignee_id
        changed = True

    if (
        "resolution_note" in provided
        and payload.resolution_note is not None
        and payload.resolution_note != ticket.resolution_note
    ):
        ticket.resolution_note = payload.resolution_note
        changed = True

    if not changed:
        raise NoChanges("No fields to update")

    ticket.updated_at = now
    session.add(ticket)
    for entry in history:
        session.add(entry)

    try:
        session.commit()
    except Exception:
        session.rollback()
        raise
    session.refresh(ticket)
    logger.info(
        f"Ticket {ticket.id} updated by {actor.username}: "
        f"{', '.join(entry.action for entry in history) or 'resolution note'}"
    )
    return ticket


def list_tickets(
    session: Session,
    actor: User,
    status: Optional[TicketStatus] = None,
    priority: Optional[TicketPriority] = None,
    assignee_id: Optional[str] = None,
    category_id: Optional[UUID] = None,
    sort: str = "date_desc",
) -> List[Ticket]:
    statement = select(Ticket)

    if actor.role == UserRole.END_USER:
        statement = statement.where(Ticket.created_by == actor.id)

    if status:
        statement = statement.where(Ticket.status == status.value)
    if priority:
        statement = statement.where(Ticket.priority == priority.value)
    if assignee_id:
        statement = statement.where(assignee_condition(assignee_id))
    if category_id:
        statement = statement.where(Ticket.category_id == category_id)

    if sort == "priority":
        statement = statement.order_by(PRIORITY_ORDER, Ticket.created_at.desc())
    elif sort == "date_asc":
        statement = statement.order_by(Ticket.created_at.asc())
    else:
        statement = statement.order_by(Ticket.created_at.desc())
    return list(session.exec(statement).all())


def assignee_condition(assignee_id: str):
    """SQL condition for an assignee filter: a user id or "unassigned"."""
    if assignee_id == UNASSIGNED:
        return Ticket.assignee_id == None
    try:
        return Ticket.assignee_id == UUID(assignee_id)
    except ValueError:
        raise ValidationFailed("assignee_id must be a user id or 'unassigned'") from None


def get_ticket(session: Session, actor: User, ticket_id: UUID) -> Ticket:
    return ensure_ticket_access(session, ticket_id, actor)


def add_note(session: Session, actor: User, ticket_id: UUID, body: str) -> TicketNote:
    ensure_staff(actor, "add notes")
    if not session.get(Ticket, ticket_id):
        raise NotFound("Ticket not found")

    note = TicketNote(ticket_id=ticket_id, user_id=actor.id, body=body)
    session.add(note)
    session.commit()
    session.refresh(note)
    logger.info(f"Note {note.id} added to ticket {ticket_id} by {actor.username}")
    return note


def list_notes(session: Session, actor: User, ticket_id: UUID) -> List[tuple[TicketNote, User]]:
    ensure_staff(actor, "view notes")
    if not session.get(Ticket, ticket_id):
        raise NotFound("Ticket not found")
    statement = (
        select(TicketNote, User)
        .join(User, TicketNote.user_id == User.id)
        .where(TicketNote.ticket_id == ticket_id)
        .order_by(TicketNote.created_at.asc())
    )
    return list(session.exec(statement).all())


def list_history(session: Session, actor: User, ticket_id: UUID) -> List[tuple[TicketHistory, User]]:
    ensure_staff(actor, "view ticket history")
    if not session.get(Ticket, ticket_id):
        raise NotFound("Ticket not found")
    statement = (
        select(TicketHistory, User)
        .join(User, TicketHistory.user_id == User.id)
        .where(TicketHistory.ticket_id == ticket_id)
        .order_by(TicketHistory.created_at.asc())
    )
    return list(session.exec(statement).all())
