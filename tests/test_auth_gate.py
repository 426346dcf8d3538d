"""
tests/test_auth_gate.py -- Tests for the bearer-token gate in auth/dependencies.py.

Integration tests run through the real ASGI stack against POST /team, the
simplest admin-only route, so the full dependency chain is exercised:
header parsing -> token verification -> role check -> handler.

Coverage:
  - 401 missing token / invalid token format / invalid token
  - 403 access denied for a valid non-admin token
  - 200 for an admin token
  - require_admin() without an identity -> 401 invalid user
  - Authorization stage never runs before authentication
"""

from __future__ import annotations

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from auth.dependencies import require_admin
from auth.models import Identity
from auth.tokens import create_access_token


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _error(resp) -> dict:
    return resp.json()["error"]


class TestAuthentication:
    def test_missing_header(self, client: TestClient) -> None:
        resp = client.post("/team", json={"name": "x"})
        assert resp.status_code == 401
        assert _error(resp) == {"code": "unauthorized", "message": "missing token"}

    def test_empty_header(self, client: TestClient) -> None:
        resp = client.post("/team", json={"name": "x"}, headers={"Authorization": ""})
        assert resp.status_code == 401
        assert _error(resp)["message"] == "missing token"

    @pytest.mark.parametrize("value", ["abc", "Token abc", "bearer abc", "Bearer a Bearer b"])
    def test_malformed_header(self, client: TestClient, value: str) -> None:
        resp = client.post("/team", json={"name": "x"}, headers={"Authorization": value})
        assert resp.status_code == 401
        assert _error(resp)["message"] == "invalid token format"

    def test_garbage_token(self, client: TestClient) -> None:
        resp = client.post("/team", json={"name": "x"}, headers=_bearer("not.a.token"))
        assert resp.status_code == 401
        assert _error(resp)["message"] == "invalid token"

    def test_foreign_secret_token(self, client: TestClient) -> None:
        forged = create_access_token(1, "root", "admin", secret_key="z" * 40)
        resp = client.post("/team", json={"name": "x"}, headers=_bearer(forged))
        assert resp.status_code == 401
        assert _error(resp)["message"] == "invalid token"

    def test_auth_checked_before_body(self, client: TestClient) -> None:
        """An invalid body behind a missing token is still a 401, not a 400."""
        resp = client.post("/team", json={})
        assert resp.status_code == 401


class TestAuthorization:
    def test_non_admin_forbidden(self, client: TestClient, user_token: str) -> None:
        resp = client.post("/team", json={"name": "x"}, headers=_bearer(user_token))
        assert resp.status_code == 403
        assert _error(resp) == {"code": "forbidden", "message": "access denied"}

    def test_other_role_forbidden(self, client: TestClient) -> None:
        token = create_access_token(1, "eve", "Admin")
        resp = client.post("/team", json={"name": "x"}, headers=_bearer(token))
        assert resp.status_code == 403

    def test_admin_allowed(self, client: TestClient, admin_token: str) -> None:
        resp = client.post("/team", json={"name": "x"}, headers=_bearer(admin_token))
        assert resp.status_code == 200

    def test_role_comes_from_token_not_database(self, client: TestClient, user_store, regular_user) -> None:
        """The gate trusts the signed claims; a token minted with role=admin passes."""
        token = create_access_token(regular_user.id, regular_user.username, "admin")
        resp = client.post("/team", json={"name": "x"}, headers=_bearer(token))
        assert resp.status_code == 200


class TestRequireAdminUnit:
    def test_no_identity(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            require_admin(None)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["message"] == "invalid user"

    def test_non_admin_identity(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            require_admin(Identity(id=1, username="bob", role=""))
        assert exc_info.value.status_code == 403

    def test_admin_identity_passes_through(self) -> None:
        identity = Identity(id=1, username="root", role="admin")
        assert require_admin(identity) is identity
