"""
End-to-end access flow through the HTTP API only.

A newly registered user can sign in but sees nothing gated until an
administrator grants a module; the grant applies on the very next request
and shows up in the navigation menu.
"""

from conftest import auth_headers


def menu_labels(menu: dict) -> list[str]:
    labels = [item["label"] for item in menu["items"]]
    for section in menu["sections"]:
        labels.extend(item["label"] for item in section["items"])
    return labels


def test_register_login_grant_flow(client, admin_headers):
    resp = client.post("/api/auth/register", json={
        "username": "neha",
        "password": "Tar&Gravel9",
        "confirm_password": "Tar&Gravel9",
        "first_name": "Neha",
        "last_name": "Joshi",
        "email": "neha@bitumen.test",
    })
    assert resp.status_code == 201
    user_id = resp.json["user"]["id"]

    resp = client.post("/api/auth/login", json={"username": "neha", "password": "Tar&Gravel9"})
    assert resp.status_code == 200
    headers = auth_headers(resp.json["token"])

    # Fresh accounts hold no grants
    assert client.get("/api/auth/permissions", headers=headers).json == {"is_admin": False, "permissions": []}
    assert client.get("/api/users", headers=headers).status_code == 403
    menu = client.get("/api/auth/navigation", headers=headers).json
    assert menu_labels(menu) == ["My Profile"]
    assert menu["sections"] == []

    resp = client.put(f"/api/users/{user_id}/permissions", json={
        "permissions": [{"module": "USER_MANAGEMENT", "action": "VIEW"}],
    }, headers=admin_headers)
    assert resp.status_code == 200

    assert client.get("/api/users", headers=headers).status_code == 200
    menu = client.get("/api/auth/navigation", headers=headers).json
    assert "User Management" in menu_labels(menu)
    assert [s["title"] for s in menu["sections"]] == ["ADMIN"]
    assert menu_labels(menu) == ["My Profile", "User Management"]

    # Still read-only
    resp = client.post("/api/users", json={"username": "x"}, headers=headers)
    assert resp.status_code == 403

    resp = client.put(f"/api/users/{user_id}/permissions", json={"permissions": []}, headers=admin_headers)
    assert resp.status_code == 200
    assert client.get("/api/users", headers=headers).status_code == 403

    client.post("/api/auth/logout", headers=headers)
    assert client.get("/api/auth/me", headers=headers).status_code == 401


def test_order_lifecycle(client, admin_headers, client_record):
    resp = client.post("/api/orders", json={
        "order_number": "SO-2024-17",
        "client_id": client_record.id,
        "amount": "245000.00",
        "expected_delivery_date": "2024-06-10T09:30:00+05:30",
    }, headers=admin_headers)
    assert resp.status_code == 201
    order = resp.json
    assert order["status"] == "PENDING_AGREEMENT"
    assert order["expected_delivery_date"] == "2024-06-10T04:00:00Z"

    for status in ("APPROVED", "LOADING", "IN_TRANSIT", "DELIVERED"):
        resp = client.patch(f"/api/orders/{order['id']}", json={"status": status}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["status"] == status

    resp = client.post("/api/eway-bills", json={
        "eway_number": "EWB-331000112233",
        "order_id": order["id"],
        "vehicle_number": "MH12AB1234",
        "valid_from": "2024-06-09",
        "valid_until": "2024-06-11",
    }, headers=admin_headers)
    assert resp.status_code == 201

    resp = client.post("/api/payments", json={
        "client_id": client_record.id,
        "order_id": order["id"],
        "amount": "245000.00",
        "due_date": "2024-07-10",
    }, headers=admin_headers)
    assert resp.status_code == 201
    assert resp.json["status"] == "PENDING"

    stats = client.get("/api/dashboard/stats", headers=admin_headers).json
    assert stats["open_orders"] == 0
    assert stats["outstanding_payments"]["amount"] == "245000.00"
