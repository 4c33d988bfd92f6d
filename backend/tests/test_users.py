"""
Tests for the self-profile endpoints.
"""

import pytest

from tipsy_api.models import Tip


class TestGetMe:

    def test_worker_sees_earnings(self, client, db_session, restaurant, worker, headers_for):
        db_session.add_all([
            Tip(worker_user_id=worker.id, restaurant_id=restaurant.id, amount_cents=2500),
            Tip(worker_user_id=worker.id, restaurant_id=restaurant.id, amount_cents=1000),
        ])
        db_session.commit()

        response = client.get("/api/users/me", headers=headers_for(worker))
        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "worker"
        assert data["authUserId"] == "worker_auth_1"
        assert data["total_earnings_cents"] == 3500
        assert data["tips_count"] == 2
        assert "restaurants_count" not in data

    def test_owner_sees_restaurant_count(self, client, restaurant, owner, headers_for):
        data = client.get("/api/users/me", headers=headers_for(owner)).json()
        assert data["role"] == "owner"
        assert data["restaurants_count"] == 1
        assert "tips_count" not in data

    def test_admin_plain_account(self, client, admin, headers_for):
        data = client.get("/api/users/me", headers=headers_for(admin)).json()
        assert data["role"] == "admin"
        assert data["email"] == "admin@tipsy.test"
        assert "tips_count" not in data
        assert "restaurants_count" not in data

    def test_first_call_provisions_worker(self, client, headers_for):
        data = client.get("/api/users/me", headers=headers_for("brand_new")).json()
        assert data["role"] == "worker"
        assert data["tips_count"] == 0

    def test_requires_authentication(self, client):
        response = client.get("/api/users/me")
        assert response.status_code == 401


class TestUpdateMe:

    def test_partial_update(self, client, worker, headers_for):
        response = client.patch(
            "/api/users/me",
            headers=headers_for(worker),
            json={"name": "Aisha S", "phone": "+91-9876543210"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Aisha S"
        assert data["phone"] == "+91-9876543210"
        assert data["email"] == "aisha@tipsy.test"
        assert data["role"] == "worker"

    def test_avatar_url(self, client, worker, headers_for):
        response = client.patch(
            "/api/users/me",
            headers=headers_for(worker),
            json={"avatarUrl": "https://cdn.tipsy.test/a.png"},
        )
        assert response.json()["avatarUrl"] == "https://cdn.tipsy.test/a.png"

    @pytest.mark.parametrize("field", ["userId", "user_id", "authUserId", "auth_user_id", "id"])
    def test_identity_fields_rejected(self, client, worker, headers_for, field):
        response = client.patch("/api/users/me", headers=headers_for(worker), json={field: 5, "name": "x"})
        assert response.status_code == 400
        assert response.json()["code"] == "USER_ID_NOT_ALLOWED"

    def test_role_rejected(self, client, worker, headers_for):
        response = client.patch("/api/users/me", headers=headers_for(worker), json={"role": "admin"})
        assert response.status_code == 400
        assert response.json()["code"] == "ROLE_NOT_ALLOWED"

    def test_empty_body(self, client, worker, headers_for):
        response = client.patch("/api/users/me", headers=headers_for(worker), json={})
        assert response.status_code == 400
        assert response.json()["code"] == "NO_UPDATES"

    @pytest.mark.parametrize(
        "body, code",
        [
            ({"name": None}, "INVALID_NAME"),
            ({"phone": "call me"}, "INVALID_PHONE"),
            ({"avatarUrl": "javascript:alert(1)"}, "INVALID_AVATAR_URL"),
            ({"avatarUrl": "http://localhost/a.png"}, "INVALID_AVATAR_URL"),
        ],
    )
    def test_invalid_values(self, client, worker, headers_for, body, code):
        response = client.patch("/api/users/me", headers=headers_for(worker), json=body)
        assert response.status_code == 400
        assert response.json()["code"] == code

    def test_array_body(self, client, worker, headers_for):
        response = client.patch("/api/users/me", headers=headers_for(worker), json=[{"name": "x"}])
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_BODY_FORMAT"
