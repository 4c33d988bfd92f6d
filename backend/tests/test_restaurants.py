"""
Tests for restaurant management endpoints.
"""

import pytest

from tipsy_api.models import Restaurant, Staff, StaffInvitation, Tip, WorkerProfile


class TestCreateRestaurant:

    def test_owner_creates_restaurant(self, client, db_session, owner, headers_for):
        response = client.post(
            "/api/restaurants",
            headers=headers_for(owner),
            json={"name": "Spice Route", "address": "4 Park Street", "upiHandle": "spice@upi"},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["ownerUserId"] == owner.id
        assert data["upiHandle"] == "spice@upi"
        assert db_session.query(Restaurant).count() == 1

    @pytest.mark.parametrize("field", ["ownerUserId", "owner_user_id"])
    def test_owner_field_rejected(self, client, owner, headers_for, field):
        response = client.post(
            "/api/restaurants",
            headers=headers_for(owner),
            json={"name": "Spice Route", field: 999},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "USER_ID_NOT_ALLOWED"

    def test_identity_field_checked_before_schema(self, client, owner, headers_for):
        response = client.post("/api/restaurants", headers=headers_for(owner), json={"owner_user_id": 1})
        assert response.json()["code"] == "USER_ID_NOT_ALLOWED"

    def test_name_required(self, client, owner, headers_for):
        response = client.post("/api/restaurants", headers=headers_for(owner), json={"address": "x"})
        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_NAME"

    def test_invalid_upi_handle(self, client, owner, headers_for):
        response = client.post(
            "/api/restaurants",
            headers=headers_for(owner),
            json={"name": "Spice Route", "upi_handle": "not a handle"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_UPI_HANDLE"

    def test_worker_cannot_create(self, client, worker, headers_for):
        response = client.post("/api/restaurants", headers=headers_for(worker), json={"name": "Mine"})
        assert response.status_code == 403
        assert response.json()["code"] == "INSUFFICIENT_PERMISSIONS"


class TestListRestaurants:

    def test_lists_own_with_staff_count(self, client, restaurant, staff, owner, headers_for):
        response = client.get("/api/restaurants", headers=headers_for(owner))
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["staffCount"] == 1

    def test_empty_restaurant_counts_zero(self, client, restaurant, owner, headers_for):
        data = client.get("/api/restaurants", headers=headers_for(owner)).json()
        assert data[0]["staffCount"] == 0

    def test_other_owner_sees_none(self, client, restaurant, other_owner, headers_for):
        assert client.get("/api/restaurants", headers=headers_for(other_owner)).json() == []

    def test_admin_role_rejected(self, client, admin, headers_for):
        response = client.get("/api/restaurants", headers=headers_for(admin))
        assert response.status_code == 403


class TestRestaurantDetail:

    def test_owner_reads_detail(self, client, restaurant, staff, owner, headers_for):
        response = client.get(f"/api/restaurants/{restaurant.id}", headers=headers_for(owner))
        assert response.status_code == 200
        data = response.json()
        assert data["owner"]["name"] == "Rajesh Kumar"
        assert [member["qrSlug"] for member in data["staff"]] == ["aisha-qr"]
        assert data["staff"][0]["user"]["name"] == "Aisha Sharma"

    def test_staff_reads_detail(self, client, restaurant, staff, worker, headers_for):
        response = client.get(f"/api/restaurants/{restaurant.id}", headers=headers_for(worker))
        assert response.status_code == 200

    def test_admin_reads_detail(self, client, restaurant, admin, headers_for):
        assert client.get(f"/api/restaurants/{restaurant.id}", headers=headers_for(admin)).status_code == 200

    def test_stranger_denied(self, client, restaurant, other_worker, headers_for):
        response = client.get(f"/api/restaurants/{restaurant.id}", headers=headers_for(other_worker))
        assert response.status_code == 403
        assert response.json()["code"] == "ACCESS_DENIED"

    def test_unknown_restaurant(self, client, owner, headers_for):
        response = client.get("/api/restaurants/9999", headers=headers_for(owner))
        assert response.status_code == 404
        assert response.json()["code"] == "RESTAURANT_NOT_FOUND"

    def test_non_numeric_id(self, client, owner, headers_for):
        response = client.get("/api/restaurants/abc", headers=headers_for(owner))
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REQUEST"


class TestUpdateRestaurant:

    def test_partial_update(self, client, restaurant, owner, headers_for):
        response = client.patch(
            f"/api/restaurants/{restaurant.id}",
            headers=headers_for(owner),
            json={"address": "99 Brigade Road"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["address"] == "99 Brigade Road"
        assert data["name"] == "Tipsy Test Kitchen"

    def test_empty_update(self, client, restaurant, owner, headers_for):
        response = client.patch(f"/api/restaurants/{restaurant.id}", headers=headers_for(owner), json={})
        assert response.status_code == 400
        assert response.json()["code"] == "NO_UPDATES"

    def test_owner_field_rejected(self, client, restaurant, owner, headers_for):
        response = client.patch(
            f"/api/restaurants/{restaurant.id}",
            headers=headers_for(owner),
            json={"ownerUserId": 7, "name": "Takeover"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "USER_ID_NOT_ALLOWED"

    def test_other_owner_denied(self, client, restaurant, other_owner, headers_for):
        response = client.patch(
            f"/api/restaurants/{restaurant.id}",
            headers=headers_for(other_owner),
            json={"name": "Takeover"},
        )
        assert response.status_code == 403

    def test_admin_cannot_update(self, client, restaurant, admin, headers_for):
        response = client.patch(
            f"/api/restaurants/{restaurant.id}",
            headers=headers_for(admin),
            json={"name": "Admin Edit"},
        )
        assert response.status_code == 403


class TestDeleteRestaurant:

    def test_delete_cascades_and_detaches(self, client, db_session, restaurant, staff, worker, owner, headers_for):
        client.post("/api/tips", json={"qr_slug": "aisha-qr", "amount_cents": 500, "rating": 4})
        client.post(
            "/api/staff/invite",
            headers=headers_for(owner),
            json={"restaurantId": restaurant.id, "workerEmail": "newhire@tipsy.test"},
        )
        client.post(
            "/api/workers",
            headers=headers_for(owner),
            json={"user_id": worker.id, "restaurant_id": restaurant.id, "display_name": "Aisha"},
        )
        restaurant_id = restaurant.id

        response = client.delete(f"/api/restaurants/{restaurant_id}", headers=headers_for(owner))
        assert response.status_code == 200
        assert response.json()["success"] is True

        db_session.expire_all()
        assert db_session.get(Restaurant, restaurant_id) is None
        assert db_session.query(Staff).count() == 0
        assert db_session.query(StaffInvitation).count() == 0
        assert db_session.query(WorkerProfile).count() == 0
        tip = db_session.query(Tip).one()
        assert tip.restaurant_id is None

    def test_other_owner_cannot_delete(self, client, db_session, restaurant, other_owner, headers_for):
        response = client.delete(f"/api/restaurants/{restaurant.id}", headers=headers_for(other_owner))
        assert response.status_code == 403
        assert db_session.query(Restaurant).count() == 1
