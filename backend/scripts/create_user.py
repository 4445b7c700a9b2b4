#!/usr/bin/env python3
"""Create a helpdesk account from the command line.

Usage: python scripts/create_user.py <username> <password> <role> <name>
"""

import logging
import sys
from pathlib import Path

# Make the backend package importable when run from any directory
BASE_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BASE_DIR))

from sqlmodel import Session, select

from app.core.logging_config import configure_logging
from app.core.security import get_password_hash
from app.db import engine, init_db
from app.models import User, UserRole

logger = logging.getLogger("create_user")

USAGE = "Usage: create_user.py <username> <password> <role> <name>"


def create_user(username: str, password: str, role: str, name: str) -> int:
    username = username.strip().lower()
    try:
        role = UserRole(role.upper()).value
    except ValueError:
        valid = ", ".join(item.value for item in UserRole)
        logger.error(f"Unknown role '{role}', expected one of: {valid}")
        return 1

    with Session(engine) as session:
        existing = session.exec(select(User).where(User.username == username)).first()
        if existing:
            logger.warning(f"User '{username}' already exists, nothing to do")
            return 1

        user = User(
            username=username,
            hashed_password=get_password_hash(password),
            role=role,
            name=name,
        )
        session.add(user)
        session.commit()
        session.refresh(user)

    logger.info(f"Created {role} '{username}' ({user.id})")
    return 0


def main(argv: list[str]) -> int:
    if len(argv) != 4:
        print(USAGE)
        return 2
    configure_logging()
    init_db()
    return create_user(*argv)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
