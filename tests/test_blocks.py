from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from models import db
from models.block_period import BlockPeriod
from models.booking import Booking, SCHEDULED, CANCELLED, COMPLETED
from models.notification import Notification
from services import blocks, slots
from services.errors import Forbidden, InvalidInput, InvalidRange, NotFound, Unauthorized
from utils import emailer

WED_8 = datetime(2025, 1, 8, 8, 0)
WED_12 = datetime(2025, 1, 8, 12, 0)


class TestCreateBlock:
    def test_cascade_cancels_booking_in_range_and_notifies_owner(self, app, member, lead_admin,
                                                                 make_booking, sent_emails):
        booking = make_booking(member.id, datetime(2025, 1, 8, 9, 0))

        block, cancelled = blocks.create_block(WED_8, WED_12, "Power outage", lead_admin.id)

        assert cancelled == 1
        assert db.session.get(BlockPeriod, block.id) is not None
        assert db.session.get(Booking, booking.id).status == CANCELLED

        notes = Notification.query.filter_by(recipient_id=member.id).all()
        assert len(notes) == 1
        assert "Power outage" in notes[0].message
        assert booking.id in notes[0].message
        assert notes[0].read is False
        assert [e["to"] for e in sent_emails] == ["u1@example.org"]

    def test_cancels_exactly_scheduled_bookings_inside_half_open_range(
        self, app, member, other_member, central_admin, make_booking
    ):
        inside_start = make_booking(member.id, WED_8)
        inside_late = make_booking(other_member.id, datetime(2025, 1, 8, 11, 30))
        at_end = make_booking(member.id, WED_12)
        before = make_booking(other_member.id, datetime(2025, 1, 8, 7, 30))
        already_cancelled = make_booking(member.id, datetime(2025, 1, 8, 9, 0), status=CANCELLED)
        completed = make_booking(member.id, datetime(2025, 1, 8, 10, 0), status=COMPLETED)

        _, cancelled = blocks.create_block(WED_8, WED_12, "Training", central_admin.id)

        assert cancelled == 2
        status = {b.id: db.session.get(Booking, b.id).status for b in
                  (inside_start, inside_late, at_end, before, already_cancelled, completed)}
        assert status == {
            inside_start.id: CANCELLED,
            inside_late.id: CANCELLED,
            at_end.id: SCHEDULED,
            before.id: SCHEDULED,
            already_cancelled.id: CANCELLED,
            completed.id: COMPLETED,
        }
        assert Notification.query.count() == 2
        assert {n.recipient_id for n in Notification.query.all()} == {member.id, other_member.id}

    def test_one_notification_per_affected_booking(self, app, member, lead_admin, make_booking):
        make_booking(member.id, datetime(2025, 1, 8, 9, 0))
        make_booking(member.id, datetime(2025, 1, 8, 10, 0))

        _, cancelled = blocks.create_block(WED_8, WED_12, "Audit", lead_admin.id)

        assert cancelled == 2
        assert Notification.query.filter_by(recipient_id=member.id).count() == 2

    def test_empty_range_creates_block_without_cancellations(self, app, lead_admin):
        block, cancelled = blocks.create_block(WED_8, WED_12, "Audit", lead_admin.id)
        assert cancelled == 0
        assert Notification.query.count() == 0
        assert datetime(2025, 1, 8, 9, 0) not in slots.available_slots(WED_8.date())
        assert block.created_by_id == lead_admin.id

    def test_email_failures_do_not_stop_the_cascade(self, app, member, other_member, lead_admin,
                                                    make_booking, monkeypatch):
        calls = []

        def flaky(to_email, subject, body):
            calls.append(to_email)
            if to_email == "u1@example.org":
                raise OSError("connection refused")
            return False, "mailbox full"

        monkeypatch.setattr(emailer, "send_email", flaky)
        first = make_booking(member.id, datetime(2025, 1, 8, 9, 0))
        second = make_booking(other_member.id, datetime(2025, 1, 8, 9, 30))

        _, cancelled = blocks.create_block(WED_8, WED_12, "Storm", lead_admin.id)

        assert cancelled == 2
        assert calls == ["u1@example.org", "u2@example.org"]
        assert db.session.get(Booking, first.id).status == CANCELLED
        assert db.session.get(Booking, second.id).status == CANCELLED
        assert Notification.query.count() == 2

    def test_requester_without_email_still_gets_in_app_notification(self, app, make_profile,
                                                                     lead_admin, make_booking, sent_emails):
        no_mail = make_profile("u9")
        make_booking(no_mail.id, datetime(2025, 1, 8, 9, 0))

        blocks.create_block(WED_8, WED_12, "Storm", lead_admin.id)

        assert Notification.query.filter_by(recipient_id="u9").count() == 1
        assert sent_emails == []

    def test_storage_failure_rolls_back_whole_cascade(self, app, member, lead_admin, make_booking,
                                                      monkeypatch, sent_emails):
        booking = make_booking(member.id, datetime(2025, 1, 8, 9, 0))

        def failing_audit(*args, **kwargs):
            raise OperationalError("INSERT INTO audit_logs", {}, Exception("disk I/O error"))

        monkeypatch.setattr(blocks, "log_event", failing_audit)

        with pytest.raises(OperationalError):
            blocks.create_block(WED_8, WED_12, "Storm", lead_admin.id)

        assert BlockPeriod.query.count() == 0
        assert db.session.get(Booking, booking.id).status == SCHEDULED
        assert Notification.query.count() == 0
        assert sent_emails == []

    def test_member_is_forbidden(self, app, member, make_booking):
        booking = make_booking(member.id, datetime(2025, 1, 8, 9, 0))
        with pytest.raises(Forbidden):
            blocks.create_block(WED_8, WED_12, "Nope", member.id)
        assert db.session.get(Booking, booking.id).status == SCHEDULED

    def test_missing_actor(self, app):
        with pytest.raises(Unauthorized):
            blocks.create_block(WED_8, WED_12, "Nope", None)

    @pytest.mark.parametrize("start,end", [(WED_12, WED_8), (WED_8, WED_8)])
    def test_invalid_range(self, app, lead_admin, start, end):
        with pytest.raises(InvalidRange):
            blocks.create_block(start, end, "Backwards", lead_admin.id)
        assert BlockPeriod.query.count() == 0

    def test_invalid_range_is_an_input_error(self):
        assert issubclass(InvalidRange, InvalidInput)

    def test_reason_required(self, app, lead_admin):
        with pytest.raises(InvalidInput):
            blocks.create_block(WED_8, WED_12, "   ", lead_admin.id)

    def test_overlapping_blocks_are_allowed(self, app, lead_admin):
        blocks.create_block(WED_8, WED_12, "A", lead_admin.id)
        blocks.create_block(datetime(2025, 1, 8, 10), datetime(2025, 1, 8, 14), "B", lead_admin.id)
        assert BlockPeriod.query.count() == 2


class TestListActive:
    def test_lists_blocks_ending_in_future_by_start(self, app, lead_admin, frozen_clock):
        late, _ = blocks.create_block(datetime(2025, 1, 9, 8), datetime(2025, 1, 9, 9), "late", lead_admin.id)
        early, _ = blocks.create_block(WED_8, WED_12, "early", lead_admin.id)
        db.session.add(BlockPeriod(id="old", start=datetime(2025, 1, 2, 8), end=datetime(2025, 1, 2, 9),
                                   reason="past", created_by_id=lead_admin.id))
        db.session.commit()

        assert [b.id for b in blocks.list_active(lead_admin.id)] == [early.id, late.id]

    def test_member_gets_empty_list(self, app, member, lead_admin):
        blocks.create_block(WED_8, WED_12, "A", lead_admin.id)
        assert blocks.list_active(member.id) == []
        assert blocks.list_active(None) == []


class TestRemove:
    def test_remove_reopens_slots_but_keeps_cancellations(self, app, member, lead_admin, make_booking):
        booking = make_booking(member.id, datetime(2025, 1, 8, 9, 0))
        block, _ = blocks.create_block(WED_8, WED_12, "Storm", lead_admin.id)

        blocks.remove(block.id, lead_admin.id)

        assert db.session.get(BlockPeriod, block.id) is None
        assert db.session.get(Booking, booking.id).status == CANCELLED
        assert datetime(2025, 1, 8, 9, 0) in slots.available_slots(WED_8.date())

    def test_member_cannot_remove(self, app, member, lead_admin):
        block, _ = blocks.create_block(WED_8, WED_12, "Storm", lead_admin.id)
        with pytest.raises(Forbidden):
            blocks.remove(block.id, member.id)

    def test_unknown_block(self, app, lead_admin):
        with pytest.raises(NotFound):
            blocks.remove("missing", lead_admin.id)
