"""
Auth API tests: register, login, logout, me, permissions, navigation.
"""

import pytest

from bitumen.extensions import db
from bitumen.models import User
from bitumen.services import auth_service

from conftest import TEST_PASSWORD, auth_headers, auth_headers_for, make_user


REGISTRATION = {
    "username": "ravi",
    "password": "Str0ng!Pass",
    "confirm_password": "Str0ng!Pass",
    "first_name": "Ravi",
    "last_name": "Kumar",
    "email": "ravi@bitumen.test",
}


class TestRegister:
    def test_defaults_to_sales_executive(self, client, db_session):
        resp = client.post("/api/auth/register", json=REGISTRATION)
        assert resp.status_code == 201
        assert resp.json["user"]["role"] == "SALES_EXECUTIVE"
        assert "password_hash" not in resp.json["user"]

    def test_accepts_camel_case_names(self, client, db_session):
        body = dict(REGISTRATION)
        body["firstName"] = body.pop("first_name")
        body["lastName"] = body.pop("last_name")
        body["confirmPassword"] = body.pop("confirm_password")
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 201

    def test_cannot_self_register_as_admin(self, client, db_session):
        resp = client.post("/api/auth/register", json=dict(REGISTRATION, role="ADMIN"))
        assert resp.status_code == 400
        assert "role" in resp.json["fields"]
        assert db.session.query(User).count() == 0

    def test_may_choose_non_admin_role(self, client, db_session):
        resp = client.post("/api/auth/register", json=dict(REGISTRATION, role="operations"))
        assert resp.status_code == 201
        assert resp.json["user"]["role"] == "OPERATIONS"

    def test_collects_all_field_errors(self, client, db_session):
        resp = client.post("/api/auth/register", json={"username": "x"})
        assert resp.status_code == 400
        assert resp.json["error"] == "Validation failed"
        assert set(resp.json["fields"]) >= {"password", "first_name", "last_name", "email"}

    def test_password_mismatch(self, client, db_session):
        resp = client.post("/api/auth/register", json=dict(REGISTRATION, confirm_password="Other!Pass1"))
        assert resp.status_code == 400
        assert "confirm_password" in resp.json["fields"]

    def test_weak_password(self, client, db_session):
        body = dict(REGISTRATION, password="weakpass", confirm_password="weakpass")
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 400
        assert "password" in resp.json["fields"]

    def test_duplicate_username_conflicts(self, client, db_session):
        assert client.post("/api/auth/register", json=REGISTRATION).status_code == 201
        resp = client.post("/api/auth/register", json=dict(REGISTRATION, email="other@bitumen.test"))
        assert resp.status_code == 409

    def test_duplicate_employee_code_conflicts(self, client, db_session):
        assert client.post("/api/auth/register", json=dict(REGISTRATION, employee_code="E1")).status_code == 201
        resp = client.post("/api/auth/register", json=dict(
            REGISTRATION, username="mira", email="mira@bitumen.test", employee_code="E1",
        ))
        assert resp.status_code == 409
        assert resp.json["error"] == "Employee code already exists"
        assert db.session.query(User).count() == 1


class TestLoginRoute:
    def test_sets_http_only_cookie(self, client, sales_exec):
        resp = client.post("/api/auth/login", json={"username": "sales", "password": TEST_PASSWORD})
        assert resp.status_code == 200
        cookie = resp.headers.get("Set-Cookie")
        assert cookie.startswith("sessionToken=")
        assert "HttpOnly" in cookie
        assert "SameSite=Lax" in cookie
        assert "Max-Age=604800" in cookie
        assert resp.json["token"]

    def test_cookie_authenticates_follow_up_requests(self, client, sales_exec):
        client.post("/api/auth/login", json={"username": "sales", "password": TEST_PASSWORD})
        resp = client.get("/api/auth/me")
        assert resp.status_code == 200
        assert resp.json["user"]["username"] == "sales"

    def test_bad_credentials(self, client, sales_exec):
        resp = client.post("/api/auth/login", json={"username": "sales", "password": "Nope!1234"})
        assert resp.status_code == 401
        assert resp.json == {"error": "Invalid credentials"}

    def test_missing_fields(self, client, db_session):
        resp = client.post("/api/auth/login", json={"username": "sales"})
        assert resp.status_code == 400

    @pytest.mark.parametrize("body", [[1], "sales", 5])
    def test_non_object_body(self, client, db_session, body):
        resp = client.post("/api/auth/login", json=body)
        assert resp.status_code == 400
        assert resp.json["error"] == "Validation failed"

    def test_unknown_user_still_checks_a_hash(self, client, db_session, monkeypatch):
        checked = []
        original = auth_service.verify_password

        def spy(password, password_hash):
            checked.append(password_hash)
            return original(password, password_hash)

        monkeypatch.setattr(auth_service, "verify_password", spy)
        resp = client.post("/api/auth/login", json={"username": "ghost", "password": TEST_PASSWORD})
        assert resp.status_code == 401
        assert resp.json == {"error": "Invalid credentials"}
        assert len(checked) == 1
        assert checked[0].startswith("$2")


class TestLogoutRoute:
    def test_logout_invalidates_token(self, client, sales_exec):
        token = client.post(
            "/api/auth/login", json={"username": "sales", "password": TEST_PASSWORD}
        ).json["token"]

        assert client.post("/api/auth/logout", headers=auth_headers(token)).status_code == 200
        client.delete_cookie("sessionToken")
        assert client.get("/api/auth/me", headers=auth_headers(token)).status_code == 401

    def test_logout_without_session_is_ok(self, client, db_session):
        assert client.post("/api/auth/logout").status_code == 200


class TestMe:
    def test_requires_auth(self, client, db_session):
        resp = client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.json == {"error": "Authentication required"}

    def test_unknown_bearer_token(self, client, db_session):
        assert client.get("/api/auth/me", headers=auth_headers("bogus")).status_code == 401

    def test_returns_current_user(self, client, sales_headers):
        resp = client.get("/api/auth/me", headers=sales_headers)
        assert resp.json["user"]["username"] == "sales"


class TestPermissionsAndNavigation:
    def test_permissions_for_user(self, client, db_session):
        user = make_user("ops", grants=[("TASK_MANAGEMENT", "VIEW")])
        resp = client.get("/api/auth/permissions", headers=auth_headers_for(user))
        assert resp.json["is_admin"] is False
        assert resp.json["permissions"] == [{"module": "TASK_MANAGEMENT", "action": "VIEW", "granted": True}]

    def test_navigation_for_admin_has_all_sections(self, client, admin_headers):
        resp = client.get("/api/auth/navigation", headers=admin_headers)
        titles = [s["title"] for s in resp.json["sections"]]
        assert titles == ["PAYMENTS", "CLIENTS", "OPERATIONS", "SALES", "ADMIN"]

    @pytest.mark.parametrize("path", ["/api/auth/permissions", "/api/auth/navigation"])
    def test_require_auth(self, client, db_session, path):
        assert client.get(path).status_code == 401
