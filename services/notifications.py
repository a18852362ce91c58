"""
Notification Dispatcher.

In-app notifications are staged in the caller's unit of work so they commit
(or roll back) together with the operation that produced them. Emails are
only queued; ``flush()`` sends them after the caller has committed. Every
email failure is logged and returned in a ``DeliveryReport``; none of them
is ever raised to the caller.
"""
from dataclasses import dataclass
from typing import List, Optional

from flask import current_app

from models import db
from models.notification import Notification
from models.user import Profile
from services.errors import Forbidden, NotFound
from utils import clock, emailer
from utils.protocol import new_id


@dataclass
class OutgoingEmail:
    recipient_id: str
    to_email: str
    subject: str
    body: str


@dataclass
class DeliveryReport:
    recipient_id: str
    delivered: bool
    error: Optional[str] = None


class NotificationDispatcher:
    def __init__(self):
        self._outbox: List[OutgoingEmail] = []

    @property
    def pending(self) -> int:
        return len(self._outbox)

    def notify(self, recipient_id: str, message: str, subject: str = None, email_body: str = None) -> Notification:
        """Stage an in-app notification and queue an email copy when possible."""
        row = Notification(
            id=new_id(),
            recipient_id=recipient_id,
            message=message,
            read=False,
            created_at=clock.now(),
        )
        db.session.add(row)
        if subject:
            self.email(recipient_id, subject, email_body or message)
        return row

    def email(self, recipient_id: str, subject: str, body: str) -> bool:
        """Queue an email for ``recipient_id``. Profiles without an address are skipped."""
        profile = db.session.get(Profile, recipient_id)
        if profile is None or not profile.email:
            return False
        greeting = f"Hello, {profile.title}!\n\n"
        signature = current_app.config.get("ORG_SIGNATURE", "")
        closing = f"\n\nBest regards,\n{signature}" if signature else ""
        self._outbox.append(OutgoingEmail(recipient_id, profile.email, subject, greeting + body + closing))
        return True

    def discard(self):
        self._outbox.clear()

    def flush(self) -> List[DeliveryReport]:
        """Send queued emails one by one. Call only after the primary commit."""
        reports = []
        outbox, self._outbox = self._outbox, []
        for item in outbox:
            try:
                sent, error = emailer.send_email(item.to_email, item.subject, item.body)
            except Exception as exc:
                sent, error = False, str(exc)
            if not sent:
                current_app.logger.warning(
                    "Email to %s (%s) not delivered: %s", item.recipient_id, item.subject, error
                )
            reports.append(DeliveryReport(item.recipient_id, sent, error))
        return reports


def list_for(recipient_id: str, unread_only: bool = False) -> list:
    q = Notification.query.filter_by(recipient_id=recipient_id)
    if unread_only:
        q = q.filter_by(read=False)
    return q.order_by(Notification.created_at.desc()).all()


def mark_read(notification_id: str, recipient_id: str) -> Notification:
    row = db.session.get(Notification, notification_id)
    if row is None:
        raise NotFound("Notification not found")
    if row.recipient_id != recipient_id:
        raise Forbidden()
    row.read = True
    db.session.commit()
    return row
