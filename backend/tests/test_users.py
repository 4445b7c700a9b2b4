from app.models import UserRole
from tests.utils import auth_headers, make_user

USERS_URL = "/api/v1/users/"


def new_user(role="END_USER", username="newperson"):
    return {
        "username": username,
        "password": "s3cret-pass",
        "name": "New Person",
        "department": "HR",
        "role": role,
    }


def test_end_user_cannot_list_users(client, end_user_headers):
    assert client.get(USERS_URL, headers=end_user_headers).status_code == 403


def test_end_users_listing(client, agent_headers, end_user, other_end_user, admin):
    response = client.get(f"{USERS_URL}end-users", headers=agent_headers)

    assert response.status_code == 200
    assert [user["name"] for user in response.json()] == ["Eve User", "Oscar Other"]


def test_admin_creates_any_role(client, admin_headers):
    response = client.post(USERS_URL, json=new_user(role="AGENT"), headers=admin_headers)

    assert response.status_code == 201
    assert response.json()["role"] == "AGENT"


def test_agent_manages_only_end_users(client, session, agent_headers, admin):
    assert client.post(USERS_URL, json=new_user(role="AGENT"), headers=agent_headers).status_code == 403

    created = client.post(USERS_URL, json=new_user(), headers=agent_headers)
    assert created.status_code == 201
    user_id = created.json()["id"]

    promoted = client.patch(f"{USERS_URL}{user_id}", json={"role": "ADMIN"}, headers=agent_headers)
    assert promoted.status_code == 403

    edited = client.patch(f"{USERS_URL}{user_id}", json={"phone": "555-0199"}, headers=agent_headers)
    assert edited.status_code == 200
    assert edited.json()["phone"] == "555-0199"

    assert client.delete(f"{USERS_URL}{admin.id}", headers=agent_headers).status_code == 403


def test_duplicate_username_conflicts(client, admin_headers, end_user):
    response = client.post(USERS_URL, json=new_user(username="enduser"), headers=admin_headers)

    assert response.status_code == 409


def test_admin_cannot_deactivate_self(client, admin, admin_headers):
    response = client.patch(f"{USERS_URL}{admin.id}", json={"is_active": False}, headers=admin_headers)

    assert response.status_code == 403


def test_delete_user_without_tickets(client, session, admin_headers):
    user = make_user(session, "temp", UserRole.END_USER, "Temp User", department="Ops")

    response = client.delete(f"{USERS_URL}{user.id}", headers=admin_headers)

    assert response.status_code == 204
    listed = client.get(USERS_URL, headers=admin_headers).json()
    assert "temp" not in [item["username"] for item in listed]


def test_delete_user_with_tickets_is_blocked(client, end_user, admin_headers, laptop_ticket_payload):
    client.post("/api/v1/tickets/", json=laptop_ticket_payload, headers=auth_headers(end_user))

    response = client.delete(f"{USERS_URL}{end_user.id}", headers=admin_headers)

    assert response.status_code == 409
    assert response.json()["error_code"] == "DEPENDENCY_ERROR"


def test_dashboard_stats_admin_only(client, agent, agent_headers, admin_headers, end_user_headers, laptop_ticket_payload):
    first = client.post("/api/v1/tickets/", json=laptop_ticket_payload, headers=end_user_headers).json()
    second = client.post("/api/v1/tickets/", json=laptop_ticket_payload, headers=end_user_headers).json()
    client.post("/api/v1/tickets/", json=laptop_ticket_payload, headers=end_user_headers)
    client.patch(
        f"/api/v1/tickets/{first['id']}",
        json={"status": "IN_PROGRESS", "assignee_id": str(agent.id)},
        headers=agent_headers,
    )
    client.patch(
        f"/api/v1/tickets/{second['id']}",
        json={"status": "RESOLVED", "assignee_id": str(agent.id)},
        headers=agent_headers,
    )

    assert client.get("/api/v1/stats/", headers=agent_headers).status_code == 403

    stats = client.get("/api/v1/stats/", headers=admin_headers).json()
    assert stats["total_open"] == 1
    workload = {entry["name"]: entry for entry in stats["staff_stats"]}
    assert workload["Bob Agent"]["active_tickets"] == 1
    assert workload["Bob Agent"]["resolved_tickets"] == 1
    assert workload["Alice Admin"]["active_tickets"] == 0
    assert workload["Alice Admin"]["resolved_tickets"] == 0
    assert "Eve User" not in workload
