"""
Tests for public tip submission and tip listings.
"""

import pytest

from tipsy_api.models import Notification, Review, Tip
from tipsy_api.services.domain import tip_service
from tipsy_api.services.domain.notification_service import add_notification


class TestSubmitTip:
    """POST /api/tips is public and writes everything in one transaction."""

    def test_tip_with_rating_creates_review_and_notifications(self, client, db_session, staff, worker):
        response = client.post(
            "/api/tips",
            json={
                "qr_slug": "aisha-qr",
                "amount_cents": 25000,
                "payer_name": "Raj",
                "message": "Thanks",
                "rating": 5,
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["tip"]["amountCents"] == 25000
        assert data["tip"]["currency"] == "INR"
        assert data["tip"]["payerName"] == "Raj"
        assert data["worker"] == {"name": "Aisha Sharma"}
        assert data["restaurant"] == {"name": "Tipsy Test Kitchen"}
        assert data["review"]["rating"] == 5
        assert data["review"]["status"] == "pending"

        review = db_session.query(Review).one()
        assert review.tip_id == data["tip"]["id"]
        assert review.comment == "Thanks"

        notifications = db_session.query(Notification).filter_by(user_id=worker.id).all()
        assert sorted(n.type for n in notifications) == ["review_posted", "tip_received"]
        tip_note = next(n for n in notifications if n.type == "tip_received")
        assert tip_note.title == "New Tip Received!"
        assert tip_note.body == 'You received a tip of ₹250.00 from Raj: "Thanks"'

    def test_tip_without_rating_has_no_review(self, client, db_session, staff):
        response = client.post("/api/tips", json={"qrSlug": "aisha-qr", "amountCents": 500})
        assert response.status_code == 201
        assert response.json()["review"] is None
        assert db_session.query(Review).count() == 0
        assert db_session.query(Notification).count() == 1

    @pytest.mark.parametrize(
        "body, code",
        [
            ({"amount_cents": 100}, "MISSING_QR_SLUG"),
            ({"qr_slug": "", "amount_cents": 100}, "MISSING_QR_SLUG"),
            ({"qr_slug": "aisha-qr"}, "INVALID_AMOUNT"),
            ({"qr_slug": "aisha-qr", "amount_cents": 0}, "INVALID_AMOUNT"),
            ({"qr_slug": "aisha-qr", "amount_cents": -5}, "INVALID_AMOUNT"),
            ({"qr_slug": "aisha-qr", "amount_cents": 12.5}, "INVALID_AMOUNT"),
            ({"qr_slug": "aisha-qr", "amount_cents": "100"}, "INVALID_AMOUNT"),
            ({"qr_slug": "aisha-qr", "amount_cents": 100, "rating": 6}, "INVALID_RATING"),
            ({"qr_slug": "aisha-qr", "amount_cents": 100, "rating": 0}, "INVALID_RATING"),
            ({"qr_slug": "aisha-qr", "amount_cents": 100, "rating": 4.5}, "INVALID_RATING"),
            ({"qr_slug": "aisha-qr", "amount_cents": 100, "rating": None}, "INVALID_RATING"),
            ({"qr_slug": "aisha-qr", "amount_cents": 100, "currency": "RUPEES"}, "INVALID_CURRENCY"),
        ],
    )
    def test_validation_codes(self, client, db_session, staff, body, code):
        response = client.post("/api/tips", json=body)
        assert response.status_code == 400
        assert response.json()["code"] == code
        assert db_session.query(Tip).count() == 0

    def test_failed_derived_write_rolls_back_everything(self, client, db_session, staff, monkeypatch):
        staged = []

        def failing_second_notification(db, user_id, type_, title, body):
            staged.append(type_)
            # NOT NULL title makes the commit fail after the tip was flushed
            return add_notification(db, user_id, type_, None if len(staged) == 2 else title, body)

        monkeypatch.setattr(tip_service, "add_notification", failing_second_notification)
        response = client.post("/api/tips", json={"qr_slug": "aisha-qr", "amount_cents": 700, "rating": 4})

        assert response.status_code == 409
        assert staged == ["tip_received", "review_posted"]
        assert db_session.query(Tip).count() == 0
        assert db_session.query(Review).count() == 0
        assert db_session.query(Notification).count() == 0

    def test_validation_order_slug_before_amount(self, client, staff):
        response = client.post("/api/tips", json={"amount_cents": -1, "rating": 9})
        assert response.json()["code"] == "MISSING_QR_SLUG"

    def test_validation_order_amount_before_rating(self, client, staff):
        response = client.post("/api/tips", json={"qr_slug": "aisha-qr", "amount_cents": -1, "rating": 9})
        assert response.json()["code"] == "INVALID_AMOUNT"

    def test_unknown_slug_writes_nothing(self, client, db_session, staff):
        response = client.post("/api/tips", json={"qr_slug": "nobody-qr", "amount_cents": 100, "rating": 4})
        assert response.status_code == 404
        assert response.json()["code"] == "INVALID_QR_SLUG"
        assert db_session.query(Tip).count() == 0
        assert db_session.query(Review).count() == 0
        assert db_session.query(Notification).count() == 0

    def test_invited_staff_cannot_be_tipped(self, client, db_session, staff):
        staff.status = "invited"
        db_session.commit()
        response = client.post("/api/tips", json={"qr_slug": "aisha-qr", "amount_cents": 100})
        assert response.status_code == 404

    def test_body_must_be_object(self, client, staff):
        response = client.post("/api/tips", json=[1, 2])
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_BODY_FORMAT"

    def test_malformed_json(self, client, staff):
        response = client.post(
            "/api/tips",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REQUEST"

    def test_non_json_content_type_rejected(self, client, staff):
        response = client.post("/api/tips", content="qr_slug=aisha-qr", headers={"Content-Type": "text/plain"})
        assert response.status_code == 415
        assert response.json()["code"] == "UNSUPPORTED_MEDIA_TYPE"


class TestListTips:

    def test_lists_own_tips_newest_first(self, client, staff, worker, headers_for):
        for amount in (100, 200, 300):
            client.post("/api/tips", json={"qr_slug": "aisha-qr", "amount_cents": amount})

        response = client.get("/api/tips", headers=headers_for(worker))
        assert response.status_code == 200
        data = response.json()
        assert [tip["amountCents"] for tip in data] == [300, 200, 100]
        assert data[0]["restaurant"]["name"] == "Tipsy Test Kitchen"

    def test_pagination(self, client, staff, worker, headers_for):
        for amount in (100, 200, 300):
            client.post("/api/tips", json={"qr_slug": "aisha-qr", "amount_cents": amount})

        response = client.get("/api/tips?limit=1&offset=1", headers=headers_for(worker))
        assert [tip["amountCents"] for tip in response.json()] == [200]

    def test_limit_above_maximum_rejected(self, client, worker, headers_for):
        response = client.get("/api/tips?limit=101", headers=headers_for(worker))
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REQUEST"

    def test_other_users_see_nothing(self, client, staff, other_worker, headers_for):
        client.post("/api/tips", json={"qr_slug": "aisha-qr", "amount_cents": 100})
        response = client.get("/api/tips", headers=headers_for(other_worker))
        assert response.json() == []

    def test_requires_identity(self, client):
        assert client.get("/api/tips").status_code == 401
