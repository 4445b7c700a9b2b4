from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.ticket import TicketPriority, TicketStatus


class CustomFieldInput(BaseModel):
    field_definition_id: UUID
    value: Any = None


class TicketCreate(BaseModel):
    """
    Ticket submission.

    caller_name and department are required from staff; for END_USER callers
    they are taken from the profile and any submitted values are ignored.
    """
    caller_name: Optional[str] = Field(default=None, max_length=255)
    department: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    description: str = Field(min_length=1, max_length=5000)
    priority: TicketPriority
    category_id: UUID
    subcategory_id: UUID
    custom_fields: List[CustomFieldInput] = Field(default_factory=list)


class TicketUpdate(BaseModel):
    """Partial update; only fields present in the payload are applied."""
    status: Optional[TicketStatus] = None
    assignee_id: Optional[UUID] = None
    resolution_note: Optional[str] = Field(default=None, max_length=5000)


class TicketCreated(BaseModel):
    id: UUID
    status: TicketStatus
    message: str = "Ticket created"


class CustomFieldValueRead(BaseModel):
    field_definition_id: UUID
    field_key: str
    label: str
    field_type: str
    value_text: str
    value: Any = None


class TicketRead(BaseModel):
    id: UUID
    caller_name: str
    department: str
    phone: Optional[str] = None
    description: str
    priority: TicketPriority
    status: TicketStatus
    assignee_id: Optional[UUID] = None
    created_by: UUID
    category_id: Optional[UUID] = None
    subcategory_id: Optional[UUID] = None
    resolution_note: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    closed_at: Optional[datetime] = None
    # Display labels (populated by the API)
    assignee_name: Optional[str] = None
    created_by_name: Optional[str] = None
    category_name: Optional[str] = None
    subcategory_name: Optional[str] = None
    custom_fields: List[CustomFieldValueRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class TicketNoteCreate(BaseModel):
    body: str = Field(min_length=1, max_length=5000)


class TicketNoteRead(BaseModel):
    id: UUID
    ticket_id: UUID
    user_id: UUID
    body: str
    created_at: datetime
    author_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class TicketHistoryRead(BaseModel):
    id: UUID
    ticket_id: UUID
    user_id: UUID
    action: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    created_at: datetime
    actor_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
