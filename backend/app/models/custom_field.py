from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Column, Field, JSON, SQLModel

from app.core.timeutils import utcnow

VALUE_TEXT_MAX_LENGTH = 2000


class FieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    CHECKBOX = "checkbox"
    SELECT = "select"


class CustomFieldDefinition(SQLModel, table=True):
    """Extra ticket field, scoped to a category and optionally one subcategory."""

    __tablename__ = "ticket_custom_field_definitions"
    # NULL subcategory_id means "every subcategory of the category"; the
    # service layer checks that scope since NULLs never collide in SQL.
    __table_args__ = (
        UniqueConstraint("category_id", "subcategory_id", "field_key", name="uq_field_key_scope"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    category_id: UUID = Field(foreign_key="ticket_categories.id", index=True)
    subcategory_id: Optional[UUID] = Field(
        default=None, foreign_key="ticket_subcategories.id", nullable=True, index=True
    )
    field_key: str = Field(max_length=120)
    label: str = Field(max_length=120)
    field_type: str = Field(max_length=20)
    required: bool = Field(default=False)
    placeholder: Optional[str] = Field(default=None, max_length=255)
    options: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    sort_order: int = Field(default=0)
    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, nullable=False)

    def touch(self):
        """Updates the updated_at timestamp."""
        self.updated_at = utcnow()


class CustomFieldValue(SQLModel, table=True):
    """Value of one custom field on one ticket."""

    __tablename__ = "ticket_custom_field_values"
    __table_args__ = (
        UniqueConstraint("ticket_id", "field_definition_id", name="uq_ticket_field_value"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    ticket_id: UUID = Field(foreign_key="tickets.id", index=True)
    field_definition_id: UUID = Field(foreign_key="ticket_custom_field_definitions.id", index=True)
    value_text: str = Field(max_length=VALUE_TEXT_MAX_LENGTH)
    value_json: Any = Field(default=None, sa_column=Column(JSON, nullable=True))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, nullable=False)
