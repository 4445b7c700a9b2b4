"""
Ticket taxonomy validation.

Checks a (category, subcategory) selection and turns submitted custom field
values into typed values ready to be stored. Every stored value keeps two
representations: a canonical string (``value_text``) and a typed JSON value
(``value_json``).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Tuple, Union
from uuid import UUID

from sqlalchemy import or_
from sqlmodel import Session, select

from app.core.errors import (
    DuplicateField,
    InvalidFieldValue,
    InvalidSelection,
    MissingRequiredField,
    UnknownField,
)
from app.models import CustomFieldDefinition, FieldType, TicketCategory, TicketSubcategory
from app.models.custom_field import VALUE_TEXT_MAX_LENGTH
from app.schemas.ticket import CustomFieldInput


@dataclass(frozen=True)
class TextValue:
    value: str

    @property
    def text(self) -> str:
        return self.value

    @property
    def json(self) -> str:
        return self.value


@dataclass(frozen=True)
class NumberValue:
    value: float

    @property
    def text(self) -> str:
        if self.value.is_integer():
            return str(int(self.value))
        return repr(self.value)

    @property
    def json(self) -> float:
        return self.value


@dataclass(frozen=True)
class BoolValue:
    value: bool

    @property
    def text(self) -> str:
        return "true" if self.value else "false"

    @property
    def json(self) -> bool:
        return self.value


@dataclass(frozen=True)
class DateValue:
    value: str  # YYYY-MM-DD

    @property
    def text(self) -> str:
        return self.value

    @property
    def json(self) -> str:
        return self.value


FieldValue = Union[TextValue, NumberValue, BoolValue, DateValue]


@dataclass(frozen=True)
class NormalizedFieldValue:
    field_definition_id: UUID
    value: FieldValue

    @property
    def text_repr(self) -> str:
        return self.value.text

    @property
    def json_repr(self) -> Any:
        return self.value.json


def validate_selection(
    session: Session,
    category_id: UUID,
    subcategory_id: UUID,
) -> Tuple[TicketCategory, TicketSubcategory]:
    """Both entries must exist, be active, and belong together."""
    category = session.get(TicketCategory, category_id)
    if not category or not category.is_active:
        raise InvalidSelection("Category not found or inactive")

    subcategory = session.get(TicketSubcategory, subcategory_id)
    if not subcategory or not subcategory.is_active:
        raise InvalidSelection("Subcategory not found or inactive")
    if subcategory.category_id != category.id:
        raise InvalidSelection("Subcategory does not belong to selected category")
    return category, subcategory


def scope_definitions(
    session: Session,
    category_id: UUID,
    subcategory_id: Optional[UUID] = None,
    include_inactive: bool = False,
) -> List[CustomFieldDefinition]:
    """Category-wide definitions plus those specific to the subcategory."""
    statement = select(CustomFieldDefinition).where(
        CustomFieldDefinition.category_id == category_id
    )
    if subcategory_id is not None:
        statement = statement.where(
            or_(
                CustomFieldDefinition.subcategory_id.is_(None),
                CustomFieldDefinition.subcategory_id == subcategory_id,
            )
        )
    if not include_inactive:
        statement = statement.where(CustomFieldDefinition.is_active == True)
    statement = statement.order_by(CustomFieldDefinition.sort_order, CustomFieldDefinition.field_key)
    return list(session.exec(statement).all())


def is_blank(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def _bounded_text(definition: CustomFieldDefinition, text: str) -> TextValue:
    if len(text) > VALUE_TEXT_MAX_LENGTH:
        raise InvalidFieldValue(
            f"Value for field '{definition.label}' exceeds {VALUE_TEXT_MAX_LENGTH} characters"
        )
    return TextValue(text)


def coerce_field_value(definition: CustomFieldDefinition, raw: Any) -> FieldValue:
    """Validate one submitted value against its definition's declared type."""
    field_type = definition.field_type
    invalid = InvalidFieldValue(f"Invalid value for field '{definition.label}'")

    if field_type == FieldType.TEXT:
        if not isinstance(raw, str) or not raw.strip():
            raise invalid
        return _bounded_text(definition, raw.strip())

    if field_type == FieldType.NUMBER:
        if isinstance(raw, bool):
            raise invalid
        if isinstance(raw, (int, float, str)):
            try:
                number = float(raw.strip() if isinstance(raw, str) else raw)
            except (ValueError, OverflowError):
                raise invalid from None
        else:
            raise invalid
        if not math.isfinite(number):
            raise invalid
        return NumberValue(number)

    if field_type == FieldType.DATE:
        if not isinstance(raw, str):
            raise invalid
        candidate = raw.strip()
        try:
            parsed = date.fromisoformat(candidate)
        except ValueError:
            try:
                parsed = datetime.fromisoformat(candidate).date()
            except ValueError:
                raise invalid from None
        return DateValue(parsed.isoformat())

    if field_type == FieldType.CHECKBOX:
        if isinstance(raw, bool):
            return BoolValue(raw)
        if isinstance(raw, str) and raw.strip().lower() in ("true", "false"):
            return BoolValue(raw.strip().lower() == "true")
        raise invalid

    if field_type == FieldType.SELECT:
        if not isinstance(raw, str) or raw.strip() not in (definition.options or []):
            raise invalid
        return _bounded_text(definition, raw.strip())

    raise invalid


def validate_custom_fields(
    session: Session,
    category_id: UUID,
    subcategory_id: UUID,
    submitted: Iterable[CustomFieldInput],
) -> List[NormalizedFieldValue]:
    """
    Validate a ticket's taxonomy selection and custom field values.

    Raises InvalidSelection, DuplicateField, UnknownField,
    MissingRequiredField or InvalidFieldValue. Returns one normalized value
    per definition that received a non-blank value, in definition order.
    """
    validate_selection(session, category_id, subcategory_id)
    definitions = scope_definitions(session, category_id, subcategory_id)
    by_id = {definition.id: definition for definition in definitions}

    values: dict[UUID, Any] = {}
    for item in submitted:
        if item.field_definition_id in values:
            raise DuplicateField(f"Field {item.field_definition_id} was submitted more than once")
        if item.field_definition_id not in by_id:
            raise UnknownField(f"Field {item.field_definition_id} does not apply to this category")
        values[item.field_definition_id] = item.value

    normalized: List[NormalizedFieldValue] = []
    for definition in definitions:
        raw = values.get(definition.id)
        if is_blank(raw):
            if definition.required:
                raise MissingRequiredField(f"Field '{definition.label}' is required")
            continue
        normalized.append(NormalizedFieldValue(definition.id, coerce_field_value(definition, raw)))
    return normalized
