from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from app.core.timeutils import utcnow


class TicketHistoryAction(str, Enum):
    STATUS_CHANGE = "STATUS_CHANGE"
    ASSIGNEE_CHANGE = "ASSIGNEE_CHANGE"


# Stored in old_value/new_value when a ticket has no assignee
UNASSIGNED_VALUE = "null"


class TicketHistory(SQLModel, table=True):
    """Append-only audit entry for a status or assignee change (staff only)."""

    __tablename__ = "ticket_history"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    ticket_id: UUID = Field(foreign_key="tickets.id", index=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)  # who made the change
    action: str = Field(max_length=50, index=True)
    old_value: Optional[str] = Field(default=None, max_length=255)
    new_value: Optional[str] = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, nullable=False, index=True)
