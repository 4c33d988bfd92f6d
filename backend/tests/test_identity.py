"""
Tests for bearer credentials, user provisioning and registration.
"""

import pytest

from tipsy_shared.config.settings import settings
from tipsy_shared.security.auth import get_bearer_token, resolve_credential, sign_jwt, verify_jwt
from tipsy_shared.utils.exceptions import AuthenticationError
from tipsy_api.models import User
from tipsy_api.services.domain.identity_service import IdentityService


class TestBearerToken:

    @pytest.mark.parametrize(
        "header",
        [None, "", "Bearer ", "Basic abc", "bearer abc", "Bearer has space", "Bearer " + "x" * 256],
    )
    def test_unusable_headers_mean_no_identity(self, header):
        assert get_bearer_token(header) is None

    def test_extracts_token(self):
        assert get_bearer_token("Bearer owner_auth_1") == "owner_auth_1"

    def test_missing_header_is_401(self, client):
        response = client.get("/api/users/me")
        assert response.status_code == 401
        assert response.json()["code"] == "AUTHENTICATION_REQUIRED"

    def test_wrong_scheme_is_401(self, client):
        response = client.get("/api/tips", headers={"Authorization": "Token abc"})
        assert response.status_code == 401


class TestProvisioning:

    def test_first_request_provisions_worker(self, client, db_session, headers_for):
        response = client.get("/api/users/me", headers=headers_for("fresh_user_1"))
        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "worker"
        assert data["name"] == "User fresh_user_1"
        assert data["email"] == "fresh_user_1@example.com"
        assert data["authUserId"] == "fresh_user_1"

    def test_provisioning_is_idempotent(self, client, db_session, headers_for):
        first = client.get("/api/users/me", headers=headers_for("fresh_user_2")).json()
        second = client.get("/api/users/me", headers=headers_for("fresh_user_2")).json()
        assert first["id"] == second["id"]
        assert db_session.query(User).filter(User.auth_user_id == "fresh_user_2").count() == 1

    def test_placeholder_email_collision_picks_next_free_address(self, client, make_user, headers_for):
        make_user("someone", email="bob@example.com")
        make_user("someone_else", email="bob+1@example.com")
        response = client.get("/api/users/me", headers=headers_for("bob"))
        assert response.status_code == 200
        assert response.json()["email"] == "bob+2@example.com"

    def test_exhausted_placeholders_conflict_instead_of_crashing(self, client, monkeypatch, headers_for):
        monkeypatch.setattr(IdentityService, "_email_taken", lambda self, email: True)
        response = client.get("/api/users/me", headers=headers_for("locked_out"))
        assert response.status_code == 409
        assert response.json()["code"] == "PROVISIONING_CONFLICT"


class TestJwtMode:

    def test_round_trip_claims(self, monkeypatch):
        monkeypatch.setattr(settings, "identity_mode", "jwt")
        token = sign_jwt("ext-42", name="Raj", email="raj@tipsy.test")
        credential = resolve_credential(token)
        assert credential.external_id == "ext-42"
        assert credential.name == "Raj"
        assert credential.email == "raj@tipsy.test"

    def test_expired_token_rejected(self):
        token = sign_jwt("ext-42", ttl_seconds=-10)
        with pytest.raises(AuthenticationError) as exc_info:
            verify_jwt(token)
        assert exc_info.value.code == "INVALID_TOKEN"

    def test_tampered_token_rejected(self):
        token = sign_jwt("ext-42") + "x"
        with pytest.raises(AuthenticationError):
            verify_jwt(token)

    def test_jwt_claims_seed_provisioned_user(self, client, monkeypatch):
        monkeypatch.setattr(settings, "identity_mode", "jwt")
        token = sign_jwt("ext-77", name="Priya", email="Priya@Tipsy.test")
        response = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["name"] == "Priya"
        assert response.json()["email"] == "priya@tipsy.test"

    def test_invalid_jwt_is_401(self, client, monkeypatch):
        monkeypatch.setattr(settings, "identity_mode", "jwt")
        response = client.get("/api/users/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_TOKEN"


class TestRegistration:

    def test_register_owner(self, client, headers_for):
        response = client.post(
            "/api/users/register",
            headers=headers_for("new_owner"),
            json={"name": "Kavya Nair", "email": "Kavya@Tipsy.test", "role": "owner"},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["role"] == "owner"
        assert data["email"] == "kavya@tipsy.test"

    def test_register_twice_conflicts(self, client, owner, headers_for):
        response = client.post(
            "/api/users/register",
            headers=headers_for(owner),
            json={"name": "Again", "email": "again@tipsy.test"},
        )
        assert response.status_code == 409
        assert response.json()["code"] == "USER_ALREADY_REGISTERED"

    def test_register_duplicate_email(self, client, owner, headers_for):
        response = client.post(
            "/api/users/register",
            headers=headers_for("someone_new"),
            json={"name": "Copy", "email": owner.email},
        )
        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_EMAIL"

    def test_cannot_register_admin(self, client, headers_for):
        response = client.post(
            "/api/users/register",
            headers=headers_for("wannabe_admin"),
            json={"name": "Eve", "email": "eve@tipsy.test", "role": "admin"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ROLE"

    def test_register_requires_credential(self, client):
        response = client.post("/api/users/register", json={"name": "Anon", "email": "anon@tipsy.test"})
        assert response.status_code == 401
