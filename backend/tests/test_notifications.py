"""
Tests for notification listing and read marking.
"""

import pytest

from tipsy_api.models import Notification


@pytest.fixture
def notifications(db_session, worker, other_worker):
    rows = [
        Notification(user_id=worker.id, type="tip_received", title="New Tip Received", body="first", read=True),
        Notification(user_id=worker.id, type="tip_received", title="New Tip Received", body="second"),
        Notification(user_id=worker.id, type="review_received", title="New Review", body="third"),
        Notification(user_id=other_worker.id, type="tip_received", title="New Tip Received", body="not yours"),
    ]
    db_session.add_all(rows)
    db_session.commit()
    for row in rows:
        db_session.refresh(row)
    return rows


class TestListNotifications:

    def test_own_notifications_newest_first(self, client, notifications, worker, headers_for):
        response = client.get("/api/notifications", headers=headers_for(worker))
        assert response.status_code == 200
        assert response.headers["X-Unread-Count"] == "2"
        assert [n["body"] for n in response.json()] == ["third", "second", "first"]

    def test_unread_only(self, client, notifications, worker, headers_for):
        response = client.get("/api/notifications?unread_only=true", headers=headers_for(worker))
        assert [n["body"] for n in response.json()] == ["third", "second"]
        assert response.headers["X-Unread-Count"] == "2"

    def test_unread_count_covers_all_pages(self, client, notifications, worker, headers_for):
        response = client.get("/api/notifications?limit=1", headers=headers_for(worker))
        assert len(response.json()) == 1
        assert response.headers["X-Unread-Count"] == "2"

    def test_empty(self, client, admin, headers_for):
        response = client.get("/api/notifications", headers=headers_for(admin))
        assert response.json() == []
        assert response.headers["X-Unread-Count"] == "0"

    def test_header_exposed_to_browsers(self, client, worker, headers_for):
        response = client.get(
            "/api/notifications",
            headers={**headers_for(worker), "Origin": "http://localhost:3000"},
        )
        assert "X-Unread-Count" in response.headers.get("access-control-expose-headers", "")

    def test_requires_authentication(self, client):
        assert client.get("/api/notifications").status_code == 401


class TestMarkRead:

    def test_mark_read(self, client, notifications, worker, headers_for):
        target = notifications[1]
        response = client.post(f"/api/notifications/{target.id}/read", headers=headers_for(worker))
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Notification marked as read"
        assert data["notification"]["read"] is True

        listing = client.get("/api/notifications", headers=headers_for(worker))
        assert listing.headers["X-Unread-Count"] == "1"

    def test_already_read_is_fine(self, client, notifications, worker, headers_for):
        response = client.post(f"/api/notifications/{notifications[0].id}/read", headers=headers_for(worker))
        assert response.status_code == 200
        assert response.json()["notification"]["read"] is True

    def test_other_users_notification_not_found(self, client, notifications, worker, headers_for):
        response = client.post(f"/api/notifications/{notifications[3].id}/read", headers=headers_for(worker))
        assert response.status_code == 404
        assert response.json()["code"] == "NOTIFICATION_NOT_FOUND"

    def test_unknown(self, client, worker, headers_for):
        response = client.post("/api/notifications/9999/read", headers=headers_for(worker))
        assert response.status_code == 404
