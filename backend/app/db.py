from __future__ import annotations

import logging
from collections.abc import Generator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, SQLModel, create_engine, select

from app.core.config import settings
from app.core.errors import Conflict

logger = logging.getLogger(__name__)


def _build_engine():
    connect_args = {}
    if settings.DATABASE_URL.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
    return create_engine(settings.DATABASE_URL, connect_args=connect_args)


engine = _build_engine()


def init_db(bind=None) -> None:
    """Create database tables in environments without migrations."""
    # Register every table on the metadata before create_all
    from app import models  # noqa: F401

    bind = bind or engine
    SQLModel.metadata.create_all(bind=bind)
    if settings.FIRST_ADMIN_USERNAME and settings.FIRST_ADMIN_PASSWORD:
        with Session(bind) as session:
            seed_admin(session)


def seed_admin(session: Session) -> None:
    from app.core.security import get_password_hash
    from app.models import User, UserRole

    username = settings.FIRST_ADMIN_USERNAME.lower()
    existing = session.exec(select(User).where(User.username == username)).first()
    if existing:
        logger.info(f"Admin user '{username}' already exists")
        return
    session.add(
        User(
            username=username,
            hashed_password=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
            role=UserRole.ADMIN.value,
            name=settings.FIRST_ADMIN_NAME,
        )
    )
    session.commit()
    logger.info(f"Admin user '{username}' seeded")


def commit_or_conflict(session: Session, message: str) -> None:
    """Commit the unit of work; unique-constraint failures become Conflict."""
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        logger.info(f"Integrity error on commit: {exc.orig}")
        raise Conflict(message) from exc


def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_session)]
