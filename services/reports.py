"""Report Generator: read-only audit queries over the bookings ledger."""
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Optional

from models import db
from models.booking import Booking, CANCELLED, COMPLETED
from models.user import Profile
from security.rbac import authorize
from services.errors import InvalidInput
from utils import clock
from utils.roles import ELEVATED_ROLES

REPORT_STATUSES = (COMPLETED, CANCELLED)


@dataclass
class ReportRow:
    id: str
    scheduled_at: datetime
    service_number: Optional[str]
    display_name: Optional[str]
    rank: Optional[str]
    reason: str
    service_document_number: Optional[str]
    via_service_channel: bool
    status: str

    def to_dict(self) -> dict:
        out = asdict(self)
        out["scheduled_at"] = self.scheduled_at.isoformat()
        return out


def query_rows(status: str, start: datetime, end: datetime) -> list:
    """Bookings with ``status`` and ``start <= scheduled_at <= end``, joined with their owner."""
    rows = (
        db.session.query(Booking, Profile)
        .outerjoin(Profile, Booking.requester_id == Profile.id)
        .filter(
            Booking.status == status,
            Booking.scheduled_at >= start,
            Booking.scheduled_at <= end,
        )
        .order_by(Booking.scheduled_at.asc())
        .all()
    )
    return [
        ReportRow(
            id=b.id,
            scheduled_at=b.scheduled_at,
            service_number=p.service_number if p else None,
            display_name=p.display_name if p else None,
            rank=p.rank if p else None,
            reason=b.reason,
            service_document_number=p.service_document_number if p else None,
            via_service_channel=b.via_service_channel,
            status=b.status,
        )
        for b, p in rows
    ]


def generate(status: str, start_date: date, end_date: date, actor_id: str) -> list:
    authorize(actor_id, *ELEVATED_ROLES)

    status = (status or "").strip().upper()
    if status not in REPORT_STATUSES:
        raise InvalidInput("status must be COMPLETED or CANCELLED")
    if start_date > end_date:
        raise InvalidInput("start date must not be after end date")

    return query_rows(status, clock.start_of_day(start_date), clock.end_of_day(end_date))
