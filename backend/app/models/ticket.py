from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from app.core.timeutils import utcnow


class TicketStatus(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"


class TicketPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Ticket(SQLModel, table=True):
    """Represents a support ticket."""

    __tablename__ = "tickets"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    caller_name: str = Field(max_length=255)
    department: str = Field(max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    description: str = Field(max_length=5000)
    priority: str = Field(default=TicketPriority.MEDIUM.value, max_length=20, index=True)
    status: str = Field(default=TicketStatus.OPEN.value, max_length=20, index=True)
    assignee_id: Optional[UUID] = Field(default=None, foreign_key="users.id", nullable=True, index=True)
    created_by: UUID = Field(foreign_key="users.id", index=True)
    category_id: Optional[UUID] = Field(
        default=None, foreign_key="ticket_categories.id", nullable=True, index=True
    )
    subcategory_id: Optional[UUID] = Field(
        default=None, foreign_key="ticket_subcategories.id", nullable=True, index=True
    )
    resolution_note: Optional[str] = Field(default=None, max_length=5000)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, nullable=False, index=True)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, nullable=False)
    # Set while the ticket is RESOLVED, cleared when it is reopened
    closed_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
