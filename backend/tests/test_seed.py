"""
Tests for the demo seed.
"""

from tipsy_api.models import Feature, Restaurant, Staff, User, WorkerProfile
from tipsy_api.seed import DEFAULT_FEATURES, DEMO_QR_SLUG, WORKER_CREDENTIAL, seed


class TestSeed:

    def test_creates_demo_data(self, db_session):
        seed(db_session)

        assert db_session.query(User).count() == 3
        assert db_session.query(Restaurant).count() == 1
        assert db_session.query(Feature).count() == len(DEFAULT_FEATURES)
        staff = db_session.query(Staff).one()
        assert staff.qr_slug == DEMO_QR_SLUG
        assert staff.user.auth_user_id == WORKER_CREDENTIAL
        assert db_session.query(WorkerProfile).count() == 1

    def test_idempotent(self, db_session):
        seed(db_session)
        seed(db_session)

        assert db_session.query(User).count() == 3
        assert db_session.query(Restaurant).count() == 1
        assert db_session.query(Staff).count() == 1
        assert db_session.query(Feature).count() == len(DEFAULT_FEATURES)

    def test_keeps_admin_feature_changes(self, db_session):
        seed(db_session)
        feature = db_session.query(Feature).filter_by(key="qr_scanner").one()
        feature.enabled = False
        db_session.commit()

        seed(db_session)
        assert db_session.query(Feature).filter_by(key="qr_scanner").one().enabled is False

    def test_seeded_slug_accepts_tips(self, client, db_session):
        seed(db_session)
        response = client.post("/api/tips", json={"qr_slug": DEMO_QR_SLUG, "amount_cents": 5000})
        assert response.status_code == 201
