from functools import lru_cache

from app.core.security import create_access_token, get_password_hash
from app.models import User

PASSWORD = "password123"


@lru_cache
def hashed_password(password: str) -> str:
    return get_password_hash(password)


def make_user(session, username, role, name, department=None, phone=None, is_active=True) -> User:
    user = User(
        username=username,
        hashed_password=hashed_password(PASSWORD),
        role=role.value,
        name=name,
        department=department,
        phone=phone,
        is_active=is_active,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    token = create_access_token(
        user.id, claims={"username": user.username, "role": user.role, "name": user.name}
    )
    return {"Authorization": f"Bearer {token}"}
