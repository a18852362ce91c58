from datetime import date, datetime

from models.booking import SCHEDULED, COMPLETED, CANCELLED
from models.notification import Notification
from services import summaries


def test_future_week_summary_notifies_every_admin(app, member, lead_admin, central_admin,
                                                  make_booking, sent_emails):
    make_booking(member.id, datetime(2025, 1, 6, 9, 0), reason="Promotion")
    make_booking(member.id, datetime(2025, 1, 10, 16, 30), reason="Loss")
    make_booking(member.id, datetime(2025, 1, 13, 9, 0))
    make_booking(member.id, datetime(2025, 1, 7, 9, 0), status=CANCELLED)

    result = summaries.future_week_summary(date(2025, 1, 3))

    assert result == {"count": 2, "notified": 2, "emailed": 2}
    notes = Notification.query.all()
    assert {n.recipient_id for n in notes} == {lead_admin.id, central_admin.id}
    assert "2 bookings" in notes[0].message
    assert Notification.query.filter_by(recipient_id=member.id).count() == 0
    assert "Promotion" in sent_emails[0]["body"] and "Loss" in sent_emails[0]["body"]


def test_past_week_closure_counts_completed_only(app, member, lead_admin, make_booking, sent_emails):
    make_booking(member.id, datetime(2025, 1, 6, 9, 0), status=COMPLETED)
    make_booking(member.id, datetime(2025, 1, 7, 9, 0), status=SCHEDULED)

    result = summaries.past_week_closure(date(2025, 1, 15))

    assert result["count"] == 1
    [note] = Notification.query.all()
    assert note.recipient_id == lead_admin.id
    assert "1 functional exchanges" in note.message


def test_past_week_closure_without_exchanges(app, lead_admin, sent_emails):
    result = summaries.past_week_closure(date(2025, 1, 15))

    assert result["count"] == 0
    assert "No exchanges were completed" in sent_emails[0]["body"]


def test_default_reference_is_today(app, member, lead_admin, make_booking, sent_emails):
    make_booking(member.id, datetime(2025, 1, 8, 9, 0))
    assert summaries.future_week_summary()["count"] == 1
