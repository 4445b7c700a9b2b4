from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from app.core.timeutils import utcnow


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    AGENT = "AGENT"
    END_USER = "END_USER"


STAFF_ROLES = (UserRole.ADMIN, UserRole.AGENT)


class User(SQLModel, table=True):
    """Helpdesk account: staff member or ticket requester."""

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    username: str = Field(index=True, unique=True, max_length=255)
    hashed_password: str = Field(max_length=255)
    role: str = Field(default=UserRole.END_USER.value, max_length=20, index=True)
    name: str = Field(max_length=255)
    # Required for END_USER tickets, optional for staff
    department: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, nullable=False)

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES
