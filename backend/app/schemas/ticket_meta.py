from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.custom_field import FieldType


class TicketCategoryCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, max_length=400)
    sort_order: int = Field(default=0, ge=0)


class TicketCategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, max_length=400)
    sort_order: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class TicketCategoryRead(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    sort_order: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TicketSubcategoryCreate(BaseModel):
    category_id: UUID
    name: str = Field(min_length=2, max_length=120)
    description: Optional[str] = Field(default=None, max_length=400)
    sort_order: int = Field(default=0, ge=0)


class TicketSubcategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=120)
    description: Optional[str] = Field(default=None, max_length=400)
    sort_order: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class TicketSubcategoryRead(BaseModel):
    id: UUID
    category_id: UUID
    name: str
    description: Optional[str] = None
    sort_order: int
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class CustomFieldCreate(BaseModel):
    category_id: UUID
    subcategory_id: Optional[UUID] = None
    field_key: str = Field(min_length=2, max_length=120, pattern=r"^[a-z0-9_]+$")
    label: str = Field(min_length=2, max_length=120)
    field_type: FieldType
    required: bool = False
    placeholder: Optional[str] = Field(default=None, max_length=255)
    options: List[str] = Field(default_factory=list)
    sort_order: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def check_options(self) -> "CustomFieldCreate":
        self.options = [option.strip() for option in self.options if option.strip()]
        if self.field_type == FieldType.SELECT and not self.options:
            raise ValueError("Select fields require at least one option")
        return self


class CustomFieldUpdate(BaseModel):
    """Scope, key and type are fixed once values may exist."""
    label: Optional[str] = Field(default=None, min_length=2, max_length=120)
    required: Optional[bool] = None
    placeholder: Optional[str] = Field(default=None, max_length=255)
    options: Optional[List[str]] = None
    sort_order: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class CustomFieldRead(BaseModel):
    id: UUID
    category_id: UUID
    subcategory_id: Optional[UUID] = None
    subcategory_name: Optional[str] = None
    field_key: str
    label: str
    field_type: FieldType
    required: bool
    placeholder: Optional[str] = None
    options: List[str] = Field(default_factory=list)
    sort_order: int
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
