from __future__ import annotations

from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, select

from app.api.deps import get_current_user, require_staff
from app.db import SessionDep
from app.models import (
    CustomFieldDefinition,
    CustomFieldValue,
    Ticket,
    TicketCategory,
    TicketPriority,
    TicketStatus,
    TicketSubcategory,
    User,
)
from app.schemas.ticket import (
    CustomFieldValueRead,
    TicketCreate,
    TicketCreated,
    TicketHistoryRead,
    TicketNoteCreate,
    TicketNoteRead,
    TicketRead,
    TicketUpdate,
)
from app.services import tickets as ticket_service

router = APIRouter()


def _user_name(session: Session, user_id: Optional[UUID]) -> Optional[str]:
    if not user_id:
        return None
    user = session.get(User, user_id)
    return user.name if user else None


def build_ticket_read(session: Session, ticket: Ticket, with_fields: bool = False) -> TicketRead:
    """Ticket plus the labels the client displays next to it."""
    ticket_data = TicketRead.model_validate(ticket)
    ticket_data.assignee_name = _user_name(session, ticket.assignee_id)
    ticket_data.created_by_name = _user_name(session, ticket.created_by)

    if ticket.category_id:
        category = session.get(TicketCategory, ticket.category_id)
        ticket_data.category_name = category.name if category else None
    if ticket.subcategory_id:
        subcategory = session.get(TicketSubcategory, ticket.subcategory_id)
        ticket_data.subcategory_name = subcategory.name if subcategory else None

    if with_fields:
        rows = session.exec(
            select(CustomFieldValue, CustomFieldDefinition)
            .join(CustomFieldDefinition, CustomFieldValue.field_definition_id == CustomFieldDefinition.id)
            .where(CustomFieldValue.ticket_id == ticket.id)
            .order_by(CustomFieldDefinition.sort_order, CustomFieldDefinition.field_key)
        ).all()
        ticket_data.custom_fields = [
            CustomFieldValueRead(
                field_definition_id=definition.id,
                field_key=definition.field_key,
                label=definition.label,
                field_type=definition.field_type,
                value_text=value.value_text,
                value=value.value_json,
            )
            for value, definition in rows
        ]
    return ticket_data


@router.get(
    "/",
    response_model=List[TicketRead],
    status_code=status.HTTP_200_OK,
)
def list_tickets(
    session: SessionDep,
    current_user: User = Depends(get_current_user),
    status_filter: Optional[TicketStatus] = Query(None, alias="status"),
    priority_filter: Optional[TicketPriority] = Query(None, alias="priority"),
    assignee_id: Optional[str] = Query(None, description="User id or 'unassigned'"),
    category_id: Optional[UUID] = Query(None),
    sort: Literal["date_desc", "date_asc", "priority"] = Query("date_desc"),
) -> List[TicketRead]:
    """List tickets. End users only see the tickets they created."""
    tickets = ticket_service.list_tickets(
        session,
        current_user,
        status=status_filter,
        priority=priority_filter,
        assignee_id=assignee_id,
        category_id=category_id,
        sort=sort,
    )
    return [build_ticket_read(session, ticket) for ticket in tickets]


@router.post(
    "/",
    response_model=TicketCreated,
    status_code=status.HTTP_201_CREATED,
)
def create_ticket(
    ticket_data: TicketCreate,
    session: SessionDep,
    current_user: User = Depends(get_current_user),
) -> TicketCreated:
    """Create a new ticket."""
    ticket = ticket_service.create_ticket(session, current_user, ticket_data)
    return TicketCreated(id=ticket.id, status=ticket.status)


@router.get(
    "/{ticket_id}",
    response_model=TicketRead,
    status_code=status.HTTP_200_OK,
)
def get_ticket(
    ticket_id: UUID,
    session: SessionDep,
    current_user: User = Depends(get_current_user),
) -> TicketRead:
    """Get a specific ticket by ID."""
    ticket = ticket_service.get_ticket(session, current_user, ticket_id)
    return build_ticket_read(session, ticket, with_fields=True)


@router.patch(
    "/{ticket_id}",
    response_model=TicketRead,
    status_code=status.HTTP_200_OK,
)
def update_ticket(
    ticket_id: UUID,
    ticket_update: TicketUpdate,
    session: SessionDep,
    current_user: User = Depends(require_staff),
) -> TicketRead:
    """Update status, assignee or resolution note (staff only)."""
    ticket = ticket_service.update_ticket(session, current_user, ticket_id, ticket_update)
    return build_ticket_read(session, ticket, with_fields=True)


@router.get(
    "/{ticket_id}/notes",
    response_model=List[TicketNoteRead],
    status_code=status.HTTP_200_OK,
)
def list_ticket_notes(
    ticket_id: UUID,
    session: SessionDep,
    current_user: User = Depends(require_staff),
) -> List[TicketNoteRead]:
    notes = []
    for note, author in ticket_service.list_notes(session, current_user, ticket_id):
        note_data = TicketNoteRead.model_validate(note)
        note_data.author_name = author.name
        notes.append(note_data)
    return notes


@router.post(
    "/{ticket_id}/notes",
    response_model=TicketNoteRead,
    status_code=status.HTTP_201_CREATED,
)
def add_ticket_note(
    ticket_id: UUID,
    note_data: TicketNoteCreate,
    session: SessionDep,
    current_user: User = Depends(require_staff),
) -> TicketNoteRead:
    """Append an internal note (staff only)."""
    note = ticket_service.add_note(session, current_user, ticket_id, note_data.body)
    result = TicketNoteRead.model_validate(note)
    result.author_name = current_user.name
    return result


@router.get(
    "/{ticket_id}/history",
    response_model=List[TicketHistoryRead],
    status_code=status.HTTP_200_OK,
)
def list_ticket_history(
    ticket_id: UUID,
    session: SessionDep,
    current_user: User = Depends(require_staff),
) -> List[TicketHistoryRead]:
    entries = []
    for entry, actor in ticket_service.list_history(session, current_user, ticket_id):
        entry_data = TicketHistoryRead.model_validate(entry)
        entry_data.actor_name = actor.name
        entries.append(entry_data)
    return entries
