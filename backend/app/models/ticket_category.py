from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from app.core.timeutils import utcnow


class TicketCategory(SQLModel, table=True):
    """Top-level ticket classification (Hardware, Software, ...)."""

    __tablename__ = "ticket_categories"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    name: str = Field(max_length=100, unique=True, index=True)
    description: Optional[str] = Field(default=None, max_length=400)
    sort_order: int = Field(default=0)
    # Inactive categories stay attached to historical tickets
    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, nullable=False)

    def touch(self):
        """Updates the updated_at timestamp."""
        self.updated_at = utcnow()


class TicketSubcategory(SQLModel, table=True):
    """Second-level classification, always owned by one category."""

    __tablename__ = "ticket_subcategories"
    __table_args__ = (UniqueConstraint("category_id", "name", name="uq_subcategory_name"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    category_id: UUID = Field(foreign_key="ticket_categories.id", index=True)
    name: str = Field(max_length=120)
    description: Optional[str] = Field(default=None, max_length=400)
    sort_order: int = Field(default=0)
    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, nullable=False)

    def touch(self):
        """Updates the updated_at timestamp."""
        self.updated_at = utcnow()
