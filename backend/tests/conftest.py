import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.db import get_session
from app.main import app
from app.models import (
    CustomFieldDefinition,
    FieldType,
    TicketCategory,
    TicketSubcategory,
    UserRole,
)
from tests.utils import auth_headers, make_user


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def admin(session):
    return make_user(session, "admin", UserRole.ADMIN, "Alice Admin")


@pytest.fixture
def agent(session):
    return make_user(session, "agent", UserRole.AGENT, "Bob Agent", department="IT")


@pytest.fixture
def end_user(session):
    return make_user(
        session, "enduser", UserRole.END_USER, "Eve User", department="Finance", phone="555-0100"
    )


@pytest.fixture
def other_end_user(session):
    return make_user(session, "otheruser", UserRole.END_USER, "Oscar Other", department="Sales")


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def agent_headers(agent):
    return auth_headers(agent)


@pytest.fixture
def end_user_headers(end_user):
    return auth_headers(end_user)


@pytest.fixture
def taxonomy(session):
    """Hardware/Laptop with a required operating_system select field."""
    hardware = TicketCategory(name="Hardware", sort_order=1)
    software = TicketCategory(name="Software", sort_order=2)
    session.add(hardware)
    session.add(software)
    session.commit()

    laptop = TicketSubcategory(category_id=hardware.id, name="Laptop")
    printer = TicketSubcategory(category_id=hardware.id, name="Printer")
    office = TicketSubcategory(category_id=software.id, name="Office")
    session.add(laptop)
    session.add(printer)
    session.add(office)
    session.commit()

    operating_system = CustomFieldDefinition(
        category_id=hardware.id,
        subcategory_id=laptop.id,
        field_key="operating_system",
        label="Operating system",
        field_type=FieldType.SELECT.value,
        required=True,
        options=["Windows", "macOS", "Linux"],
        sort_order=1,
    )
    asset_tag = CustomFieldDefinition(
        category_id=hardware.id,
        field_key="asset_tag",
        label="Asset tag",
        field_type=FieldType.TEXT.value,
        sort_order=2,
    )
    session.add(operating_system)
    session.add(asset_tag)
    session.commit()

    return {
        "hardware": hardware,
        "software": software,
        "laptop": laptop,
        "printer": printer,
        "office": office,
        "operating_system": operating_system,
        "asset_tag": asset_tag,
    }


@pytest.fixture
def laptop_ticket_payload(taxonomy):
    return {
        "description": "Laptop does not boot",
        "priority": "HIGH",
        "category_id": str(taxonomy["hardware"].id),
        "subcategory_id": str(taxonomy["laptop"].id),
        "custom_fields": [
            {"field_definition_id": str(taxonomy["operating_system"].id), "value": "Windows"}
        ],
    }
