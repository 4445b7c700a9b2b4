from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from app.core.timeutils import utcnow


class TicketNote(SQLModel, table=True):
    """Internal staff note on a ticket. Notes are never edited or deleted."""

    __tablename__ = "ticket_notes"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    ticket_id: UUID = Field(foreign_key="tickets.id", index=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    body: str = Field(max_length=5000)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, nullable=False, index=True)
