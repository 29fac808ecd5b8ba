"""
tests/test_api_routes.py -- Integration tests for the user and store REST routes.

These tests exercise the full stack: FastAPI routing -> Basic-Auth dependency
-> AuthenticationService/StoreService -> SqlDataManager -> response model
serialization. The api_client fixture seeds one account per role; see
ACCOUNTS in conftest.py.

Coverage:
  - Auth failures: 401 with a WWW-Authenticate challenge on every protected route
  - Access table: which role may list, register, read, update, delete
  - Error envelope: 400 names the field, 403/404/409 carry a code
  - Password hashes never appear in any response

The client is module-scoped, so every test that writes uses its own ids.
"""

from __future__ import annotations

import pytest

from auth.roles import Role

PROTECTED = [
    ("get", "/api/v1/users/me"),
    ("get", "/api/v1/users"),
    ("post", "/api/v1/users"),
    ("get", "/api/v1/users/user@x.com"),
    ("put", "/api/v1/users/user@x.com"),
    ("delete", "/api/v1/users/user@x.com"),
    ("get", "/api/v1/stores"),
    ("post", "/api/v1/stores"),
    ("get", "/api/v1/stores/S1"),
    ("put", "/api/v1/stores/S1"),
    ("delete", "/api/v1/stores/S1"),
]


def _error_code(resp) -> str:
    return resp.json()["error"]["code"]


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


class TestApiAuthFailure:
    @pytest.mark.parametrize("method, path", PROTECTED)
    def test_no_credentials(self, api_client, method, path):
        resp = api_client.request(method, path, json={})
        assert resp.status_code == 401, f"{method.upper()} {path}: {resp.status_code}"
        assert resp.headers["WWW-Authenticate"].startswith("Basic")
        assert _error_code(resp) == "unauthorized"

    @pytest.mark.parametrize(
        "email, password",
        [("admin@x.com", "wrong"), ("ghost@x.com", "adminpass"), ("ADMIN@x.com", "adminpass")],
    )
    def test_bad_credentials_look_identical(self, api_client, basic_auth, email, password):
        resp = api_client.get("/api/v1/users/me", headers=basic_auth(email, password))
        assert resp.status_code == 401
        assert resp.json() == {
            "error": {"code": "unauthorized", "message": "Authentication required.", "detail": None}
        }

    def test_malformed_header(self, api_client):
        for header in ("Bearer abc", "Basic !!!", "Basic"):
            resp = api_client.get("/api/v1/stores", headers={"Authorization": header})
            assert resp.status_code == 401

    @pytest.mark.parametrize("role", list(Role))
    def test_me_returns_own_account(self, api_client, as_role, role):
        resp = api_client.get("/api/v1/users/me", headers=as_role(role))
        assert resp.status_code == 200
        data = resp.json()
        assert data["role"] == role.value
        assert "password" not in data


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class TestUserRoutes:
    def test_register_user_as_admin(self, api_client, as_role, basic_auth):
        body = {"email": "new1@x.com", "password": "pw1", "name": "New One", "role": "manager"}
        resp = api_client.post("/api/v1/users", json=body, headers=as_role(Role.ADMIN))
        assert resp.status_code == 201, resp.text
        assert resp.json() == {"email": "new1@x.com", "name": "New One", "role": "MANAGER"}

        me = api_client.get("/api/v1/users/me", headers=basic_auth("new1@x.com", "pw1"))
        assert me.status_code == 200

    def test_unknown_role_registers_as_user(self, api_client, as_role):
        body = {"email": "new2@x.com", "password": "pw", "name": "Two", "role": "root"}
        resp = api_client.post("/api/v1/users", json=body, headers=as_role(Role.ADMIN))
        assert resp.status_code == 201
        assert resp.json()["role"] == "USER"

    def test_oversized_role_registers_as_user(self, api_client, as_role):
        body = {"email": "new3@x.com", "password": "pw", "name": "Three", "role": "super-duper-administrator" * 4}
        resp = api_client.post("/api/v1/users", json=body, headers=as_role(Role.ADMIN))
        assert resp.status_code == 201, resp.text
        assert resp.json()["role"] == "USER"

    def test_password_whitespace_is_preserved(self, api_client, as_role, basic_auth):
        body = {"email": "  spaced@x.com ", "password": "  spaced pw  ", "name": " Spaced "}
        resp = api_client.post("/api/v1/users", json=body, headers=as_role(Role.ADMIN))
        assert resp.status_code == 201, resp.text
        assert resp.json() == {"email": "spaced@x.com", "name": "Spaced", "role": "USER"}

        exact = api_client.get("/api/v1/users/me", headers=basic_auth("spaced@x.com", "  spaced pw  "))
        assert exact.status_code == 200
        stripped = api_client.get("/api/v1/users/me", headers=basic_auth("spaced@x.com", "spaced pw"))
        assert stripped.status_code == 401

    @pytest.mark.parametrize("role", [Role.MANAGER, Role.USER])
    def test_register_user_requires_admin(self, api_client, as_role, role):
        body = {"email": "nope@x.com", "password": "pw", "name": "Nope"}
        resp = api_client.post("/api/v1/users", json=body, headers=as_role(role))
        assert resp.status_code == 403
        assert _error_code(resp) == "forbidden"

    def test_duplicate_email_is_409(self, api_client, as_role):
        body = {"email": "user@x.com", "password": "other", "name": "Impostor", "role": "ADMIN"}
        resp = api_client.post("/api/v1/users", json=body, headers=as_role(Role.ADMIN))
        assert resp.status_code == 409
        assert _error_code(resp) == "conflict"

        me = api_client.get("/api/v1/users/me", headers=as_role(Role.USER))
        assert me.json()["role"] == "USER"

    def test_blank_field_is_400_naming_field(self, api_client, as_role):
        body = {"email": "blank@x.com", "password": "pw", "name": "   "}
        resp = api_client.post("/api/v1/users", json=body, headers=as_role(Role.ADMIN))
        assert resp.status_code == 400
        assert resp.json()["error"]["detail"] == "name"

    def test_missing_field_is_422(self, api_client, as_role):
        resp = api_client.post("/api/v1/users", json={"email": "x@x.com"}, headers=as_role(Role.ADMIN))
        assert resp.status_code == 422
        assert _error_code(resp) == "validation_error"

    @pytest.mark.parametrize("role, expected", [(Role.ADMIN, 200), (Role.MANAGER, 200), (Role.USER, 403)])
    def test_list_users(self, api_client, as_role, role, expected):
        resp = api_client.get("/api/v1/users", headers=as_role(role))
        assert resp.status_code == expected
        if expected == 200:
            emails = {u["email"] for u in resp.json()}
            assert {"admin@x.com", "manager@x.com", "user@x.com"} <= emails
            assert all("password" not in u for u in resp.json())

    def test_user_reads_self_but_not_others(self, api_client, as_role):
        assert api_client.get("/api/v1/users/user@x.com", headers=as_role(Role.USER)).status_code == 200
        resp = api_client.get("/api/v1/users/admin@x.com", headers=as_role(Role.USER))
        assert resp.status_code == 403

    def test_manager_reads_others(self, api_client, as_role):
        resp = api_client.get("/api/v1/users/user@x.com", headers=as_role(Role.MANAGER))
        assert resp.status_code == 200
        assert resp.json()["name"] == "User"

    def test_get_missing_user_is_404(self, api_client, as_role):
        resp = api_client.get("/api/v1/users/ghost@x.com", headers=as_role(Role.ADMIN))
        assert resp.status_code == 404
        assert _error_code(resp) == "not_found"

    def test_self_update_changes_password(self, api_client, as_role, basic_auth):
        body = {"email": "self@x.com", "password": "before", "name": "Self"}
        api_client.post("/api/v1/users", json=body, headers=as_role(Role.ADMIN))

        old = basic_auth("self@x.com", "before")
        resp = api_client.put("/api/v1/users/self@x.com", json={"password": "after"}, headers=old)
        assert resp.status_code == 200
        assert resp.json() == {"email": "self@x.com", "name": "Self", "role": "USER"}

        assert api_client.get("/api/v1/users/me", headers=old).status_code == 401
        assert api_client.get("/api/v1/users/me", headers=basic_auth("self@x.com", "after")).status_code == 200

    @pytest.mark.parametrize("role", [Role.MANAGER, Role.USER])
    def test_non_admin_cannot_update_others(self, api_client, as_role, role):
        resp = api_client.put("/api/v1/users/admin@x.com", json={"name": "Hacked"}, headers=as_role(role))
        assert resp.status_code == 403

    def test_admin_updates_name_role_unchanged(self, api_client, as_role):
        resp = api_client.put(
            "/api/v1/users/manager@x.com", json={"name": "Manager"}, headers=as_role(Role.ADMIN)
        )
        assert resp.status_code == 200
        assert resp.json()["role"] == "MANAGER"

    def test_update_missing_user_is_404(self, api_client, as_role):
        resp = api_client.put("/api/v1/users/ghost@x.com", json={"name": "G"}, headers=as_role(Role.ADMIN))
        assert resp.status_code == 404

    def test_delete_user(self, api_client, as_role):
        body = {"email": "gone@x.com", "password": "pw", "name": "Gone"}
        api_client.post("/api/v1/users", json=body, headers=as_role(Role.ADMIN))

        assert api_client.delete("/api/v1/users/gone@x.com", headers=as_role(Role.MANAGER)).status_code == 403
        assert api_client.delete("/api/v1/users/gone@x.com", headers=as_role(Role.ADMIN)).status_code == 204
        assert api_client.delete("/api/v1/users/gone@x.com", headers=as_role(Role.ADMIN)).status_code == 404


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


class TestStoreRoutes:
    def test_store_lifecycle(self, api_client, as_role):
        body = {"store_id": "L1", "name": "Lifecycle", "address": "1 Loop Rd"}
        created = api_client.post("/api/v1/stores", json=body, headers=as_role(Role.MANAGER))
        assert created.status_code == 201, created.text
        assert created.json() == {"id": "L1", "name": "Lifecycle", "address": "1 Loop Rd", "description": ""}

        shown = api_client.get("/api/v1/stores/L1", headers=as_role(Role.USER))
        assert shown.status_code == 200
        assert shown.json()["name"] == "Lifecycle"

        updated = api_client.put(
            "/api/v1/stores/L1", json={"description": "Outlet"}, headers=as_role(Role.MANAGER)
        )
        assert updated.status_code == 200
        assert updated.json()["description"] == "Outlet"
        assert updated.json()["address"] == "1 Loop Rd"

        listed = api_client.get("/api/v1/stores", headers=as_role(Role.USER))
        assert "L1" in {s["id"] for s in listed.json()}

        assert api_client.delete("/api/v1/stores/L1", headers=as_role(Role.ADMIN)).status_code == 204
        assert api_client.get("/api/v1/stores/L1", headers=as_role(Role.ADMIN)).status_code == 404

    def test_user_cannot_provision(self, api_client, as_role):
        body = {"store_id": "U1", "name": "Nope", "address": "nowhere"}
        resp = api_client.post("/api/v1/stores", json=body, headers=as_role(Role.USER))
        assert resp.status_code == 403
        assert _error_code(resp) == "forbidden"
        assert api_client.get("/api/v1/stores/U1", headers=as_role(Role.ADMIN)).status_code == 404

    def test_duplicate_store_is_409(self, api_client, as_role):
        body = {"store_id": "D1", "name": "Dup", "address": "1 Dup St"}
        assert api_client.post("/api/v1/stores", json=body, headers=as_role(Role.ADMIN)).status_code == 201
        resp = api_client.post("/api/v1/stores", json=body, headers=as_role(Role.ADMIN))
        assert resp.status_code == 409
        assert _error_code(resp) == "conflict"

    def test_blank_address_is_400(self, api_client, as_role):
        body = {"store_id": "B1", "name": "Blank", "address": "  "}
        resp = api_client.post("/api/v1/stores", json=body, headers=as_role(Role.ADMIN))
        assert resp.status_code == 400
        assert resp.json()["error"]["detail"] == "address"

    def test_update_needs_a_field(self, api_client, as_role):
        body = {"store_id": "E1", "name": "Empty", "address": "1 E St"}
        api_client.post("/api/v1/stores", json=body, headers=as_role(Role.ADMIN))
        resp = api_client.put("/api/v1/stores/E1", json={}, headers=as_role(Role.ADMIN))
        assert resp.status_code == 400
        assert _error_code(resp) == "validation_error"

    def test_update_missing_store_is_404(self, api_client, as_role):
        resp = api_client.put("/api/v1/stores/NOPE", json={"address": "x"}, headers=as_role(Role.MANAGER))
        assert resp.status_code == 404

    @pytest.mark.parametrize("role", [Role.MANAGER, Role.USER])
    def test_only_admin_deletes(self, api_client, as_role, role):
        body = {"store_id": f"X-{role.value}", "name": "Keep", "address": "1 Keep St"}
        api_client.post("/api/v1/stores", json=body, headers=as_role(Role.ADMIN))
        resp = api_client.delete(f"/api/v1/stores/X-{role.value}", headers=as_role(role))
        assert resp.status_code == 403
        assert api_client.get(f"/api/v1/stores/X-{role.value}", headers=as_role(role)).status_code == 200

    def test_delete_missing_store_is_404(self, api_client, as_role):
        assert api_client.delete("/api/v1/stores/NOPE", headers=as_role(Role.ADMIN)).status_code == 404
