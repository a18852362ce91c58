"""
Weekly summaries for administrators.

Invoked by an external scheduler (``/cron/*`` endpoints or the
``weekly-report`` CLI command). Each run reads one Monday-Friday window and
fans out one in-app notification plus one email per elevated profile.
"""
from datetime import date

from flask import current_app

from models import db
from models.booking import SCHEDULED, COMPLETED
from models.user import Profile
from services.notifications import NotificationDispatcher
from services.reports import query_rows
from utils import clock
from utils.audit import log_event
from utils.roles import ELEVATED_ROLES


def _format_line(row) -> str:
    return (
        f"- {row.rank or ''} {row.display_name or ''} | "
        f"{row.scheduled_at.strftime('%a %d/%m %H:%M')} | {row.reason}"
    )


def _fan_out(action: str, message: str, subject: str, listing: str, count: int, dispatcher) -> dict:
    admins = Profile.query.filter(Profile.role.in_(ELEVATED_ROLES)).all()
    dispatcher = dispatcher or NotificationDispatcher()

    for admin in admins:
        dispatcher.notify(
            admin.id,
            message,
            subject=subject,
            email_body=f"{message}\n\n{listing}\n\nOpen the dashboard for more details.",
        )
    log_event(action, metadata={"count": count, "admins": len(admins)}, commit=False)
    db.session.commit()

    reports = dispatcher.flush()
    current_app.logger.info("%s: %d bookings, %d admins notified", action, count, len(admins))
    return {
        "count": count,
        "notified": len(admins),
        "emailed": sum(1 for r in reports if r.delivered),
    }


def future_week_summary(reference: date = None, dispatcher: NotificationDispatcher = None) -> dict:
    start, end = clock.next_work_week(reference or clock.today())
    rows = query_rows(SCHEDULED, start, end)

    message = f"FORECAST: There are {len(rows)} bookings scheduled for next week."
    if rows:
        message += "\nCheck the dashboard for the exchanges awaiting service."
    listing = "\n".join(_format_line(r) for r in rows)

    return _fan_out("SUMMARY_FUTURE_WEEK", message, "Report: Bookings for Next Week",
                    listing, len(rows), dispatcher)


def past_week_closure(reference: date = None, dispatcher: NotificationDispatcher = None) -> dict:
    start, end = clock.previous_work_week(reference or clock.today())
    rows = query_rows(COMPLETED, start, end)

    message = f"CLOSURE: {len(rows)} functional exchanges were completed last week."
    listing = "\n".join(_format_line(r) for r in rows) if rows else "No exchanges were completed during the week."

    return _fan_out("SUMMARY_PAST_WEEK", message, "Report: Last Week's Exchanges",
                    listing, len(rows), dispatcher)
