"""
Tests for feature toggle administration.
"""

import pytest

from tipsy_api.models import Feature


@pytest.fixture
def existing_feature(db_session):
    feature = Feature(key="qr_scanner", name="QR Scanner", description="Scan to tip", enabled=True)
    db_session.add(feature)
    db_session.commit()
    db_session.refresh(feature)
    return feature


class TestListFeatures:

    def test_admin_lists_by_key(self, client, db_session, admin, headers_for):
        db_session.add_all([
            Feature(key="tip_goals", name="Tip Goals", enabled=False),
            Feature(key="owner_analytics", name="Owner Analytics", enabled=True),
        ])
        db_session.commit()

        response = client.get("/api/feature-toggles", headers=headers_for(admin))
        assert response.status_code == 200
        assert [f["key"] for f in response.json()] == ["owner_analytics", "tip_goals"]

    @pytest.mark.parametrize("role_fixture", ["owner", "worker"])
    def test_non_admin_forbidden(self, request, client, headers_for, role_fixture):
        user = request.getfixturevalue(role_fixture)
        response = client.get("/api/feature-toggles", headers=headers_for(user))
        assert response.status_code == 403
        assert response.json()["code"] == "INSUFFICIENT_PERMISSIONS"


class TestUpsertFeatures:

    def test_create_defaults_to_enabled(self, client, admin, headers_for):
        response = client.patch(
            "/api/feature-toggles",
            headers=headers_for(admin),
            json=[{"key": "upi_payments", "name": "UPI Payments"}],
        )
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Processed 1 feature toggles"
        assert data["results"][0]["action"] == "created"
        assert data["results"][0]["feature"]["enabled"] is True

    def test_update_keeps_unspecified_fields(self, client, existing_feature, admin, headers_for):
        response = client.patch(
            "/api/feature-toggles",
            headers=headers_for(admin),
            json=[{"key": "qr_scanner", "name": "QR Scanner v2"}],
        )
        result = response.json()["results"][0]
        assert result["action"] == "updated"
        assert result["feature"]["name"] == "QR Scanner v2"
        assert result["feature"]["description"] == "Scan to tip"
        assert result["feature"]["enabled"] is True

    def test_mixed_batch(self, client, db_session, existing_feature, admin, headers_for):
        response = client.patch(
            "/api/feature-toggles",
            headers=headers_for(admin),
            json=[
                {"key": "qr_scanner", "name": "QR Scanner", "enabled": False},
                {"key": "tip_goals", "name": "Tip Goals", "description": "Monthly goals"},
            ],
        )
        assert [r["action"] for r in response.json()["results"]] == ["updated", "created"]
        db_session.expire_all()
        assert db_session.query(Feature).filter_by(key="qr_scanner").one().enabled is False
        assert db_session.query(Feature).count() == 2

    def test_same_key_twice_in_batch(self, client, db_session, admin, headers_for):
        response = client.patch(
            "/api/feature-toggles",
            headers=headers_for(admin),
            json=[
                {"key": "tip_goals", "name": "First"},
                {"key": "tip_goals", "name": "Second", "enabled": False},
            ],
        )
        assert response.status_code == 200
        assert [r["action"] for r in response.json()["results"]] == ["created", "updated"]
        feature = db_session.query(Feature).filter_by(key="tip_goals").one()
        assert feature.name == "Second"
        assert feature.enabled is False

    def test_object_body(self, client, admin, headers_for):
        response = client.patch(
            "/api/feature-toggles",
            headers=headers_for(admin),
            json={"key": "tip_goals", "name": "Tip Goals"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_BODY_FORMAT"

    def test_empty_array(self, client, admin, headers_for):
        response = client.patch("/api/feature-toggles", headers=headers_for(admin), json=[])
        assert response.status_code == 400
        assert response.json()["code"] == "EMPTY_ARRAY"

    @pytest.mark.parametrize(
        "item, code",
        [
            ({"name": "No key"}, "INVALID_KEY"),
            ({"key": "Bad Key", "name": "x"}, "INVALID_KEY"),
            ({"key": "ok_key"}, "INVALID_NAME"),
            ({"key": "ok_key", "name": "x", "enabled": "yes"}, "INVALID_ENABLED"),
        ],
    )
    def test_invalid_item(self, client, admin, headers_for, item, code):
        response = client.patch("/api/feature-toggles", headers=headers_for(admin), json=[item])
        assert response.status_code == 400
        assert response.json()["code"] == code

    def test_invalid_item_writes_nothing(self, client, db_session, admin, headers_for):
        response = client.patch(
            "/api/feature-toggles",
            headers=headers_for(admin),
            json=[{"key": "good_one", "name": "Good"}, {"key": "BAD", "name": "Bad"}],
        )
        assert response.status_code == 400
        assert db_session.query(Feature).count() == 0

    def test_owner_forbidden(self, client, owner, headers_for):
        response = client.patch(
            "/api/feature-toggles",
            headers=headers_for(owner),
            json=[{"key": "tip_goals", "name": "Tip Goals"}],
        )
        assert response.status_code == 403
