from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlmodel import Session, select

from app.api.deps import get_current_user, require_admin
from app.core.errors import Conflict, InvalidSelection, NotFound, ValidationFailed
from app.db import SessionDep, commit_or_conflict
from app.models import (
    CustomFieldDefinition,
    FieldType,
    TicketCategory,
    TicketSubcategory,
    User,
    UserRole,
)
from app.schemas.ticket_meta import (
    CustomFieldCreate,
    CustomFieldRead,
    CustomFieldUpdate,
    TicketCategoryCreate,
    TicketCategoryRead,
    TicketCategoryUpdate,
    TicketSubcategoryCreate,
    TicketSubcategoryRead,
    TicketSubcategoryUpdate,
)
from app.services.taxonomy import scope_definitions

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_category(session: Session, category_id: UUID) -> TicketCategory:
    category = session.get(TicketCategory, category_id)
    if not category:
        raise NotFound("Category not found")
    return category


def _get_subcategory(session: Session, subcategory_id: UUID) -> TicketSubcategory:
    subcategory = session.get(TicketSubcategory, subcategory_id)
    if not subcategory:
        raise NotFound("Subcategory not found")
    return subcategory


def _get_field(session: Session, field_id: UUID) -> CustomFieldDefinition:
    field = session.get(CustomFieldDefinition, field_id)
    if not field:
        raise NotFound("Custom field not found")
    return field


def _field_read(session: Session, field: CustomFieldDefinition) -> CustomFieldRead:
    result = CustomFieldRead.model_validate(field)
    if field.subcategory_id:
        subcategory = session.get(TicketSubcategory, field.subcategory_id)
        result.subcategory_name = subcategory.name if subcategory else None
    return result


# === CATEGORIES ===

@router.get(
    "/categories",
    response_model=List[TicketCategoryRead],
    status_code=status.HTTP_200_OK,
)
def list_categories(
    session: SessionDep,
    current_user: User = Depends(get_current_user),
    include_inactive: bool = Query(False),
) -> List[TicketCategory]:
    """Get ticket categories; inactive ones are listed for admins on request."""
    statement = select(TicketCategory)
    if not (include_inactive and current_user.role == UserRole.ADMIN):
        statement = statement.where(TicketCategory.is_active == True)
    statement = statement.order_by(TicketCategory.sort_order, TicketCategory.name)
    return list(session.exec(statement).all())


@router.post(
    "/categories",
    response_model=TicketCategoryRead,
    status_code=status.HTTP_201_CREATED,
)
def create_category(
    category_data: TicketCategoryCreate,
    session: SessionDep,
    current_user: User = Depends(require_admin),
) -> TicketCategory:
    category = TicketCategory(
        name=category_data.name.strip(),
        description=category_data.description,
        sort_order=category_data.sort_order,
    )
    session.add(category)
    commit_or_conflict(session, "Category already exists")
    session.refresh(category)
    logger.info(f"Category '{category.name}' created by {current_user.username}")
    return category


@router.patch(
    "/categories/{category_id}",
    response_model=TicketCategoryRead,
    status_code=status.HTTP_200_OK,
)
def update_category(
    category_id: UUID,
    category_update: TicketCategoryUpdate,
    session: SessionDep,
    current_user: User = Depends(require_admin),
) -> TicketCategory:
    category = _get_category(session, category_id)

    if category_update.name is not None:
        category.name = category_update.name.strip()
    if category_update.description is not None:
        category.description = category_update.description
    if category_update.sort_order is not None:
        category.sort_order = category_update.sort_order
    if category_update.is_active is not None:
        category.is_active = category_update.is_active

    category.touch()
    session.add(category)
    commit_or_conflict(session, "Category already exists")
    session.refresh(category)
    return category


@router.delete(
    "/categories/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def delete_category(
    category_id: UUID,
    session: SessionDep,
    current_user: User = Depends(require_admin),
):
    """Deactivate a category; existing tickets keep referring to it."""
    category = _get_category(session, category_id)
    category.is_active = False
    category.touch()
    session.add(category)
    session.commit()
    logger.info(f"Category '{category.name}' deactivated by {current_user.username}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# === SUBCATEGORIES ===

@router.get(
    "/categories/{category_id}/subcategories",
    response_model=List[TicketSubcategoryRead],
    status_code=status.HTTP_200_OK,
)
def list_subcategories(
    category_id: UUID,
    session: SessionDep,
    current_user: User = Depends(get_current_user),
    include_inactive: bool = Query(False),
) -> List[TicketSubcategory]:
    _get_category(session, category_id)
    statement = select(TicketSubcategory).where(TicketSubcategory.category_id == category_id)
    if not (include_inactive and current_user.role == UserRole.ADMIN):
        statement = statement.where(TicketSubcategory.is_active == True)
    statement = statement.order_by(TicketSubcategory.sort_order, TicketSubcategory.name)
    return list(session.exec(statement).all())


@router.post(
    "/subcategories",
    response_model=TicketSubcategoryRead,
    status_code=status.HTTP_201_CREATED,
)
def create_subcategory(
    subcategory_data: TicketSubcategoryCreate,
    session: SessionDep,
    current_user: User = Depends(require_admin),
) -> TicketSubcategory:
    category = session.get(TicketCategory, subcategory_data.category_id)
    if not category or not category.is_active:
        raise InvalidSelection("Category not found or inactive")

    subcategory = TicketSubcategory(
        category_id=category.id,
        name=subcategory_data.name.strip(),
        description=subcategory_data.description,
        sort_order=subcategory_data.sort_order,
    )
    session.add(subcategory)
    commit_or_conflict(session, "Subcategory already exists for this category")
    session.refresh(subcategory)
    logger.info(f"Subcategory '{subcategory.name}' created under '{category.name}'")
    return subcategory


@router.patch(
    "/subcategories/{subcategory_id}",
    response_model=TicketSubcategoryRead,
    status_code=status.HTTP_200_OK,
)
def update_subcategory(
    subcategory_id: UUID,
    subcategory_update: TicketSubcategoryUpdate,
    session: SessionDep,
    current_user: User = Depends(require_admin),
) -> TicketSubcategory:
    subcategory = _get_subcategory(session, subcategory_id)

    if subcategory_update.name is not None:
        subcategory.name = subcategory_update.name.strip()
    if subcategory_update.description is not None:
        subcategory.description = subcategory_update.description
    if subcategory_update.sort_order is not None:
        subcategory.sort_order = subcategory_update.sort_order
    if subcategory_update.is_active is not None:
        subcategory.is_active = subcategory_update.is_active

    subcategory.touch()
    session.add(subcategory)
    commit_or_conflict(session, "Subcategory already exists for this category")
    session.refresh(subcategory)
    return subcategory


@router.delete(
    "/subcategories/{subcategory_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def delete_subcategory(
    subcategory_id: UUID,
    session: SessionDep,
    current_user: User = Depends(require_admin),
):
    """Deactivate a subcategory."""
    subcategory = _get_subcategory(session, subcategory_id)
    subcategory.is_active = False
    subcategory.touch()
    session.add(subcategory)
    session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# === CUSTOM FIELDS ===

@router.get(
    "/fields",
    response_model=List[CustomFieldRead],
    status_code=status.HTTP_200_OK,
)
def list_fields(
    session: SessionDep,
    category_id: UUID = Query(...),
    subcategory_id: Optional[UUID] = Query(None),
    include_inactive: bool = Query(False),
    current_user: User = Depends(get_current_user),
) -> List[CustomFieldRead]:
    """Field definitions visible at a category (and optional subcategory) scope."""
    fields = scope_definitions(
        session,
        category_id,
        subcategory_id,
        include_inactive=include_inactive and current_user.role == UserRole.ADMIN,
    )
    return [_field_read(session, field) for field in fields]


@router.post(
    "/fields",
    response_model=CustomFieldRead,
    status_code=status.HTTP_201_CREATED,
)
def create_field(
    field_data: CustomFieldCreate,
    session: SessionDep,
    current_user: User = Depends(require_admin),
) -> CustomFieldRead:
    category = session.get(TicketCategory, field_data.category_id)
    if not category or not category.is_active:
        raise InvalidSelection("Category not found or inactive")
    if field_data.subcategory_id is not None:
        subcategory = session.get(TicketSubcategory, field_data.subcategory_id)
        if not subcategory or subcategory.category_id != category.id:
            raise InvalidSelection("Subcategory does not belong to selected category")

    # NULL subcategory scopes are not covered by the unique constraint
    existing = session.exec(
        select(CustomFieldDefinition).where(
            CustomFieldDefinition.category_id == field_data.category_id,
            CustomFieldDefinition.subcategory_id == field_data.subcategory_id
            if field_data.subcategory_id is not None
            else CustomFieldDefinition.subcategory_id == None,
            CustomFieldDefinition.field_key == field_data.field_key,
        )
    ).first()
    if existing:
        raise Conflict("Field key already exists for this category/subcategory scope")

    field = CustomFieldDefinition(
        category_id=field_data.category_id,
        subcategory_id=field_data.subcategory_id,
        field_key=field_data.field_key,
        label=field_data.label,
        field_type=field_data.field_type.value,
        required=field_data.required,
        placeholder=field_data.placeholder,
        options=field_data.options,
        sort_order=field_data.sort_order,
    )
    session.add(field)
    commit_or_conflict(session, "Field key already exists for this category/subcategory scope")
    session.refresh(field)
    logger.info(f"Custom field '{field.field_key}' created for category '{category.name}'")
    return _field_read(session, field)


@router.patch(
    "/fields/{field_id}",
    response_model=CustomFieldRead,
    status_code=status.HTTP_200_OK,
)
def update_field(
    field_id: UUID,
    field_update: CustomFieldUpdate,
    session: SessionDep,
    current_user: User = Depends(require_admin),
) -> CustomFieldRead:
    field = _get_field(session, field_id)

    if field_update.label is not None:
        field.label = field_update.label
    if field_update.required is not None:
        field.required = field_update.required
    if field_update.placeholder is not None:
        field.placeholder = field_update.placeholder
    if field_update.options is not None:
        options = [option.strip() for option in field_update.options if option.strip()]
        if field.field_type == FieldType.SELECT and not options:
            raise ValidationFailed("Select fields require at least one option")
        field.options = options
    if field_update.sort_order is not None:
        field.sort_order = field_update.sort_order
    if field_update.is_active is not None:
        field.is_active = field_update.is_active

    field.touch()
    session.add(field)
    session.commit()
    session.refresh(field)
    return _field_read(session, field)


@router.delete(
    "/fields/{field_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def delete_field(
    field_id: UUID,
    session: SessionDep,
    current_user: User = Depends(require_admin),
):
    """Deactivate a field definition; stored values are kept."""
    field = _get_field(session, field_id)
    field.is_active = False
    field.touch()
    session.add(field)
    session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
