"""Shared fixtures: in-memory app, frozen clock, captured email."""
from datetime import datetime

import pytest

from app import create_app
from models import db
from models.booking import Booking, SCHEDULED
from models.user import Profile
from utils import clock, emailer
from utils.roles import MEMBER, LEAD_ADMIN, CENTRAL_ADMIN

# Friday; the following week is entirely in the future
FROZEN_NOW = datetime(2025, 1, 3, 10, 0)


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "CRON_SECRET": "cron-test-secret",
        "SMTP_HOST": None,
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture(autouse=True)
def frozen_clock(monkeypatch):
    state = {"now": FROZEN_NOW}
    monkeypatch.setattr(clock, "now", lambda: state["now"])
    return state


@pytest.fixture
def sent_emails(monkeypatch):
    outbox = []

    def fake_send(to_email, subject, body):
        outbox.append({"to": to_email, "subject": subject, "body": body})
        return True, None

    monkeypatch.setattr(emailer, "send_email", fake_send)
    return outbox


@pytest.fixture
def make_profile(app):
    counter = {"n": 0}

    def _make(actor_id, role=MEMBER, email=None, display_name=None):
        counter["n"] += 1
        profile = Profile(
            id=actor_id,
            service_number=f"{100000 + counter['n']}",
            email=email,
            display_name=display_name or actor_id.title(),
            rank="Sd PM",
            unit="CPI-7",
            service_document_number=f"DOC-{counter['n']}",
            role=role,
            created_at=FROZEN_NOW,
        )
        db.session.add(profile)
        db.session.commit()
        return profile

    return _make


@pytest.fixture
def make_booking(app):
    counter = {"n": 0}

    def _make(requester_id, scheduled_at, status=SCHEDULED, reason="Promotion"):
        counter["n"] += 1
        booking = Booking(
            id=f"T{counter['n']:07d}",
            requester_id=requester_id,
            scheduled_at=scheduled_at,
            reason=reason,
            via_service_channel=False,
            status=status,
            created_at=FROZEN_NOW,
        )
        db.session.add(booking)
        db.session.commit()
        return booking

    return _make


@pytest.fixture
def member(make_profile):
    return make_profile("u1", email="u1@example.org")


@pytest.fixture
def other_member(make_profile):
    return make_profile("u2", email="u2@example.org")


@pytest.fixture
def lead_admin(make_profile):
    return make_profile("lead", role=LEAD_ADMIN, email="lead@example.org")


@pytest.fixture
def central_admin(make_profile):
    return make_profile("central", role=CENTRAL_ADMIN, email="central@example.org")
