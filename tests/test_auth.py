"""
Tests for authentication and user management

Covers registration rules, login, token refresh/rotation, logout, password
flows, email verification and the admin user endpoints.
"""

from __future__ import annotations

from datetime import timedelta

from propertyhub.core.security import create_access_token, decode_access_token
from propertyhub.repositories.user import UserRepository

from conftest import PASSWORD, auth_header, create_user, db, login

REGISTER = {
    "email": "jane@example.com",
    "password": PASSWORD,
    "firstName": "Jane",
    "lastName": "Doe",
    "role": "tenant",
}


def _fetch_user(email: str):
    return db(lambda session: UserRepository(session).get_by_email(email))


# =============================================================================
# Registration
# =============================================================================


class TestRegister:
    def test_register_returns_user_and_tokens(self, client):
        resp = client.post("/api/v1/auth/register", json=REGISTER)
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["user"]["email"] == "jane@example.com"
        assert data["user"]["role"] == "tenant"
        assert data["user"]["isEmailVerified"] is False
        assert data["tokens"]["tokenType"] == "bearer"

        payload = decode_access_token(data["tokens"]["accessToken"])
        assert payload["sub"] == data["user"]["id"]
        assert payload["email"] == "jane@example.com"
        assert payload["role"] == "tenant"
        assert payload["type"] == "access"

    def test_duplicate_email_conflicts(self, client):
        client.post("/api/v1/auth/register", json=REGISTER)
        resp = client.post(
            "/api/v1/auth/register", json={**REGISTER, "email": "JANE@example.com"}
        )
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "CONFLICT"

    def test_weak_password_lists_every_failure(self, client):
        resp = client.post("/api/v1/auth/register", json={**REGISTER, "password": "short"})
        assert resp.status_code == 400
        message = resp.json()["error"]["message"]
        assert "at least 8 characters" in message
        assert "uppercase letter" in message
        assert "number" in message
        assert "special character" in message

    def test_admin_role_cannot_be_self_assigned(self, client):
        resp = client.post("/api/v1/auth/register", json={**REGISTER, "role": "admin"})
        assert resp.status_code == 400

    def test_default_role_is_user(self, client):
        body = {k: v for k, v in REGISTER.items() if k != "role"}
        resp = client.post("/api/v1/auth/register", json=body)
        assert resp.json()["data"]["user"]["role"] == "user"


# =============================================================================
# Login / tokens
# =============================================================================


class TestLogin:
    def test_login_succeeds(self, client):
        create_user("bob@example.com")
        data = login(client, "bob@example.com")
        assert data["user"]["lastLoginAt"] is not None

    def test_wrong_password_is_generic_401(self, client):
        create_user("bob@example.com")
        resp = client.post(
            "/api/v1/auth/login", json={"email": "bob@example.com", "password": "Wr0ng!pass"}
        )
        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == "Invalid credentials"

    def test_unknown_email_is_generic_401(self, client):
        resp = client.post(
            "/api/v1/auth/login", json={"email": "nobody@example.com", "password": PASSWORD}
        )
        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == "Invalid credentials"

    def test_deactivated_account_rejected(self, client, admin_headers):
        user = create_user("bob@example.com")
        client.patch(f"/api/v1/users/{user.id}", json={"isActive": False}, headers=admin_headers)
        resp = client.post(
            "/api/v1/auth/login", json={"email": "bob@example.com", "password": PASSWORD}
        )
        assert resp.status_code == 401


class TestTokens:
    def test_me_requires_token(self, client):
        resp = client.get("/api/v1/auth/me")
        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == "Authentication required"

    def test_me_returns_current_user(self, client, user_headers):
        resp = client.get("/api/v1/auth/me", headers=user_headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["email"] == "tenant@example.com"

    def test_garbage_token_rejected(self, client):
        resp = client.get("/api/v1/auth/me", headers=auth_header("not-a-jwt"))
        assert resp.status_code == 401

    def test_expired_token_rejected(self, client):
        user = create_user("bob@example.com")
        token = create_access_token(user.id, expires_delta=timedelta(seconds=-5))
        resp = client.get("/api/v1/auth/me", headers=auth_header(token))
        assert resp.status_code == 401

    def test_refresh_rotates_token(self, client):
        create_user("bob@example.com")
        tokens = login(client, "bob@example.com")["tokens"]

        resp = client.post("/api/v1/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
        assert resp.status_code == 200
        new_tokens = resp.json()["data"]["tokens"]
        assert new_tokens["refreshToken"] != tokens["refreshToken"]

        reused = client.post("/api/v1/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
        assert reused.status_code == 401

    def test_logout_revokes_refresh_tokens(self, client):
        create_user("bob@example.com")
        tokens = login(client, "bob@example.com")["tokens"]
        headers = auth_header(tokens["accessToken"])

        assert client.post("/api/v1/auth/logout", headers=headers).status_code == 200
        resp = client.post("/api/v1/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
        assert resp.status_code == 401


# =============================================================================
# Password and verification flows
# =============================================================================


class TestPasswordFlows:
    def test_change_password(self, client, user_headers):
        resp = client.post(
            "/api/v1/auth/change-password",
            json={"currentPassword": PASSWORD, "newPassword": "N3w!Password"},
            headers=user_headers,
        )
        assert resp.status_code == 200
        login(client, "tenant@example.com", "N3w!Password")

    def test_change_password_wrong_current(self, client, user_headers):
        resp = client.post(
            "/api/v1/auth/change-password",
            json={"currentPassword": "Wr0ng!pass", "newPassword": "N3w!Password"},
            headers=user_headers,
        )
        assert resp.status_code == 400

    def test_forgot_password_unknown_email(self, client):
        resp = client.post("/api/v1/auth/forgot-password", json={"email": "x@example.com"})
        assert resp.status_code == 404

    def test_reset_password_round(self, client):
        create_user("bob@example.com")
        assert (
            client.post("/api/v1/auth/forgot-password", json={"email": "bob@example.com"})
            .status_code
            == 200
        )
        token = _fetch_user("bob@example.com").password_reset_token
        assert token

        check = client.post("/api/v1/auth/validate-reset-token", json={"token": token})
        assert check.json()["data"]["valid"] is True

        resp = client.post(
            "/api/v1/auth/reset-password", json={"token": token, "newPassword": "N3w!Password"}
        )
        assert resp.status_code == 200
        login(client, "bob@example.com", "N3w!Password")

        # Single use
        check = client.post("/api/v1/auth/validate-reset-token", json={"token": token})
        assert check.json()["data"]["valid"] is False

    def test_verify_email(self, client):
        client.post("/api/v1/auth/register", json=REGISTER)
        token = _fetch_user("jane@example.com").email_verification_token

        resp = client.post("/api/v1/auth/verify-email", json={"token": token})
        assert resp.status_code == 200
        assert _fetch_user("jane@example.com").is_email_verified is True

        again = client.post(
            "/api/v1/auth/resend-verification", json={"email": "jane@example.com"}
        )
        assert again.status_code == 400

    def test_verify_email_bad_token(self, client):
        resp = client.post("/api/v1/auth/verify-email", json={"token": "nope"})
        assert resp.status_code == 400


# =============================================================================
# Admin user management
# =============================================================================


class TestUsers:
    def test_non_admin_forbidden(self, client, user_headers):
        resp = client.get("/api/v1/users", headers=user_headers)
        assert resp.status_code == 403
        assert resp.json()["error"]["message"] == "Insufficient permissions"

    def test_admin_lists_and_filters(self, client, admin_headers):
        create_user("l1@example.com", role="landlord")
        create_user("t1@example.com", role="tenant")

        resp = client.get("/api/v1/users", params={"role": "landlord"}, headers=admin_headers)
        body = resp.json()
        assert resp.status_code == 200
        assert body["meta"]["total"] == 1
        assert body["data"][0]["email"] == "l1@example.com"

    def test_admin_updates_role(self, client, admin_headers):
        user = create_user("bob@example.com")
        resp = client.patch(
            f"/api/v1/users/{user.id}", json={"role": "landlord"}, headers=admin_headers
        )
        assert resp.json()["data"]["role"] == "landlord"

    def test_update_own_profile(self, client, user_headers):
        resp = client.patch(
            "/api/v1/users/me", json={"firstName": "Tina", "phone": "0161"}, headers=user_headers
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["firstName"] == "Tina"
