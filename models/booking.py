from sqlalchemy import text

from models.db import db
from utils import clock
from utils.protocol import WALK_IN_PREFIX

SCHEDULED = "SCHEDULED"
CANCELLED = "CANCELLED"
COMPLETED = "COMPLETED"

BOOKING_STATUSES = (SCHEDULED, CANCELLED, COMPLETED)

ACTIVE_SCHEDULED_WHERE = f"status = '{SCHEDULED}' AND substr(id, 1, 4) <> '{WALK_IN_PREFIX}'"


class Booking(db.Model):
    __tablename__ = "bookings"

    # protocol code handed to the requester, e.g. "3F9A1C0B" or "ENC-7D21AA"
    id = db.Column(db.String(16), primary_key=True)

    requester_id = db.Column(db.String(64), db.ForeignKey("user_profiles.id"), nullable=False, index=True)
    scheduled_at = db.Column(db.DateTime, nullable=False, index=True)
    reason = db.Column(db.String(120), nullable=False)
    via_service_channel = db.Column(db.Boolean, default=False, nullable=False)

    status = db.Column(db.String(20), nullable=False, default=SCHEDULED)
    # status values: SCHEDULED, CANCELLED, COMPLETED (the last two are terminal)

    created_at = db.Column(db.DateTime, default=clock.now, nullable=False)
    cancelled_at = db.Column(db.DateTime, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        # Hard business-rule: one active scheduled booking per instant (prevents double booking).
        # Walk-ins ("ENC-" protocols) sit outside slot capacity.
        db.Index(
            "uq_bookings_active_instant",
            "scheduled_at",
            unique=True,
            sqlite_where=text(ACTIVE_SCHEDULED_WHERE),
            postgresql_where=text(ACTIVE_SCHEDULED_WHERE),
        ),
    )

    @property
    def is_walk_in(self) -> bool:
        return self.id.startswith(WALK_IN_PREFIX)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "requester_id": self.requester_id,
            "scheduled_at": self.scheduled_at.isoformat(),
            "reason": self.reason,
            "via_service_channel": self.via_service_channel,
            "status": self.status,
            "walk_in": self.is_walk_in,
            "created_at": self.created_at.isoformat(),
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
