from uuid import UUID

from sqlalchemy import DateTime
from sqlmodel import SQLModel, select

from app.core.timeutils import utcnow
from app.models import TicketNote


def test_timestamp_columns_are_naive_datetimes():
    columns = [
        (table.name, column)
        for table in SQLModel.metadata.sorted_tables
        for column in table.columns
        if column.name.endswith("_at")
    ]

    assert columns
    for table_name, column in columns:
        assert type(column.type) is DateTime, f"{table_name}.{column.name}"
        assert column.type.timezone is False, f"{table_name}.{column.name}"


def test_naive_utc_timestamp_round_trips(client, session, agent, end_user_headers, laptop_ticket_payload):
    response = client.post("/api/v1/tickets/", json=laptop_ticket_payload, headers=end_user_headers)
    assert response.status_code == 201, response.text

    written_at = utcnow()
    assert written_at.tzinfo is None
    note = TicketNote(
        ticket_id=UUID(response.json()["id"]),
        user_id=agent.id,
        body="Checked cabling",
        created_at=written_at,
    )
    session.add(note)
    session.commit()
    session.expire_all()

    stored = session.exec(select(TicketNote)).one()
    assert stored.created_at == written_at
