META_URL = "/api/v1/ticket-meta"


def test_category_crud_is_admin_only(client, admin_headers, agent_headers):
    payload = {"name": "Network", "description": "LAN, Wi-Fi, VPN", "sort_order": 3}

    assert client.post(f"{META_URL}/categories", json=payload, headers=agent_headers).status_code == 403

    created = client.post(f"{META_URL}/categories", json=payload, headers=admin_headers)
    assert created.status_code == 201
    category_id = created.json()["id"]

    renamed = client.patch(
        f"{META_URL}/categories/{category_id}", json={"name": "Networking"}, headers=admin_headers
    )
    assert renamed.json()["name"] == "Networking"

    duplicate = client.post(
        f"{META_URL}/categories", json={"name": "Networking"}, headers=admin_headers
    )
    assert duplicate.status_code == 409


def test_deleted_category_is_hidden_but_kept(client, admin_headers, end_user_headers, taxonomy):
    category_id = taxonomy["software"].id

    response = client.delete(f"{META_URL}/categories/{category_id}", headers=admin_headers)
    assert response.status_code == 204

    visible = client.get(f"{META_URL}/categories", headers=end_user_headers).json()
    assert [category["name"] for category in visible] == ["Hardware"]

    everything = client.get(
        f"{META_URL}/categories", params={"include_inactive": True}, headers=admin_headers
    ).json()
    assert [category["name"] for category in everything] == ["Hardware", "Software"]
    assert everything[1]["is_active"] is False


def test_subcategories_listed_per_category(client, admin_headers, end_user_headers, taxonomy):
    hardware_id = taxonomy["hardware"].id

    created = client.post(
        f"{META_URL}/subcategories",
        json={"category_id": str(hardware_id), "name": "Monitor"},
        headers=admin_headers,
    )
    assert created.status_code == 201

    duplicate = client.post(
        f"{META_URL}/subcategories",
        json={"category_id": str(hardware_id), "name": "Monitor"},
        headers=admin_headers,
    )
    assert duplicate.status_code == 409

    listed = client.get(f"{META_URL}/categories/{hardware_id}/subcategories", headers=end_user_headers)
    assert sorted(item["name"] for item in listed.json()) == ["Laptop", "Monitor", "Printer"]


def test_subcategory_needs_active_category(client, admin_headers, taxonomy):
    client.delete(f"{META_URL}/categories/{taxonomy['software'].id}", headers=admin_headers)

    response = client.post(
        f"{META_URL}/subcategories",
        json={"category_id": str(taxonomy["software"].id), "name": "Email"},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_SELECTION"


def test_fields_visible_at_subcategory_scope(client, end_user_headers, taxonomy):
    params = {"category_id": str(taxonomy["hardware"].id), "subcategory_id": str(taxonomy["laptop"].id)}

    fields = client.get(f"{META_URL}/fields", params=params, headers=end_user_headers).json()

    assert [field["field_key"] for field in fields] == ["operating_system", "asset_tag"]
    assert fields[0]["subcategory_name"] == "Laptop"
    assert fields[0]["options"] == ["Windows", "macOS", "Linux"]


def test_create_field_validates_scope_and_key(client, admin_headers, taxonomy):
    payload = {
        "category_id": str(taxonomy["hardware"].id),
        "subcategory_id": str(taxonomy["laptop"].id),
        "field_key": "purchase_date",
        "label": "Purchase date",
        "field_type": "date",
    }

    created = client.post(f"{META_URL}/fields", json=payload, headers=admin_headers)
    assert created.status_code == 201

    assert client.post(f"{META_URL}/fields", json=payload, headers=admin_headers).status_code == 409

    category_wide = dict(payload, subcategory_id=None, field_key="asset_tag")
    assert client.post(f"{META_URL}/fields", json=category_wide, headers=admin_headers).status_code == 409

    wrong_scope = dict(payload, subcategory_id=str(taxonomy["office"].id), field_key="other")
    response = client.post(f"{META_URL}/fields", json=wrong_scope, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_SELECTION"

    bad_key = dict(payload, field_key="Purchase Date")
    assert client.post(f"{META_URL}/fields", json=bad_key, headers=admin_headers).status_code == 422


def test_select_field_requires_options(client, admin_headers, taxonomy):
    payload = {
        "category_id": str(taxonomy["software"].id),
        "field_key": "license",
        "label": "License type",
        "field_type": "select",
        "options": ["  "],
    }

    response = client.post(f"{META_URL}/fields", json=payload, headers=admin_headers)

    assert response.status_code == 422


def test_deactivated_field_no_longer_required(client, admin_headers, end_user_headers, taxonomy, laptop_ticket_payload):
    field_id = taxonomy["operating_system"].id
    assert client.delete(f"{META_URL}/fields/{field_id}", headers=admin_headers).status_code == 204

    payload = dict(laptop_ticket_payload, custom_fields=[])
    response = client.post("/api/v1/tickets/", json=payload, headers=end_user_headers)

    assert response.status_code == 201
