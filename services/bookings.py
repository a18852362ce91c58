"""
Booking Ledger.

Owns booking records: scheduled bookings on a free slot, walk-ins for the
current instant, owner cancellation and administrative completion.
"""
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError

from models import db
from models.booking import Booking, SCHEDULED, CANCELLED, COMPLETED
from models.user import Profile
from security.rbac import authorize
from services import slots
from services.errors import InvalidInput, InvalidReason, InvalidState, Forbidden, NotFound, SlotUnavailable
from services.notifications import NotificationDispatcher
from utils import clock
from utils.audit import log_event
from utils.protocol import scheduled_protocol, walk_in_protocol
from utils.roles import ELEVATED_ROLES, is_elevated

REASON_CATEGORIES = ("Promotion", "Loss", "Damage")

MIN_REASON_LENGTH = 3
MIN_WALK_IN_REASON_LENGTH = 2

# protocol ids are short, so a collision with an existing one gets a fresh draw
PROTOCOL_ATTEMPTS = 3


def _clean_reason(reason, min_length: int) -> str:
    reason = (reason or "").strip()
    if len(reason) < min_length:
        raise InvalidReason(f"Reason must have at least {min_length} characters")
    return reason[:120]


def _insert(booking: Booking, actor_id: str, new_protocol):
    for attempt in range(PROTOCOL_ATTEMPTS):
        db.session.add(booking)
        try:
            db.session.commit()
            return
        except IntegrityError:
            db.session.rollback()

        if db.session.query(Booking.id).filter(Booking.id == booking.id).scalar() is None:
            # uq_bookings_active_instant triggers here when a concurrent caller won the slot
            log_event(
                "BOOKING_FAIL_SLOT_TAKEN",
                actor_id=actor_id,
                entity="booking",
                metadata={"scheduled_at": booking.scheduled_at.isoformat()},
            )
            raise SlotUnavailable()

        current_app.logger.warning("Protocol %s already issued (attempt %d), drawing another",
                                   booking.id, attempt + 1)
        booking.id = new_protocol()

    raise InvalidState("Could not issue a unique protocol, try again")


def create_scheduled(requester_id: str, slot: datetime, reason: str, via_service_channel: bool = False,
                     dispatcher: NotificationDispatcher = None) -> Booking:
    authorize(requester_id)
    reason = _clean_reason(reason, MIN_REASON_LENGTH)
    if not clock.is_slot_boundary(slot):
        raise InvalidInput("Choose one of the listed time slots")

    # Re-validated here: the slot list the caller saw may be stale by now
    if not slots.is_available(slot):
        log_event(
            "BOOKING_FAIL_UNAVAILABLE",
            actor_id=requester_id,
            entity="booking",
            metadata={"scheduled_at": slot.isoformat()},
        )
        raise SlotUnavailable()

    booking = Booking(
        id=scheduled_protocol(),
        requester_id=requester_id,
        scheduled_at=slot,
        reason=reason,
        via_service_channel=bool(via_service_channel),
        status=SCHEDULED,
        created_at=clock.now(),
    )
    _insert(booking, requester_id, scheduled_protocol)

    log_event("BOOKING_CREATE", actor_id=requester_id, entity="booking", entity_id=booking.id,
              metadata={"scheduled_at": slot.isoformat()})

    dispatcher = dispatcher or NotificationDispatcher()
    dispatcher.email(
        requester_id,
        f"Booking Confirmed - Protocol {booking.id}",
        "Your booking has been confirmed!\n\n"
        f"Protocol: {booking.id}\n"
        f"Date and time: {slot.strftime('%A, %d/%m/%Y at %H:%M')}\n"
        f"Reason: {reason}\n\n"
        "Keep this protocol for reference.",
    )
    dispatcher.flush()
    return booking


def create_walk_in(requester_id: str, reason: str, via_service_channel: bool = False,
                   dispatcher: NotificationDispatcher = None) -> Booking:
    """
    Register an in-person booking for right now; slot and block rules do not apply.

    Walk-ins are outside slot capacity, so one may share its instant with a
    scheduled booking.
    """
    authorize(requester_id)
    reason = _clean_reason(reason, MIN_WALK_IN_REASON_LENGTH)

    now = clock.now()
    booking = Booking(
        id=walk_in_protocol(),
        requester_id=requester_id,
        scheduled_at=now,
        reason=reason,
        via_service_channel=bool(via_service_channel),
        status=SCHEDULED,
        created_at=now,
    )
    _insert(booking, requester_id, walk_in_protocol)

    log_event("WALK_IN_CREATE", actor_id=requester_id, entity="booking", entity_id=booking.id)

    dispatcher = dispatcher or NotificationDispatcher()
    dispatcher.email(
        requester_id,
        f"Walk-in Confirmed - Protocol {booking.id}",
        "Your walk-in has been registered!\n\n"
        f"Protocol: {booking.id}\n"
        f"Reason: {reason}\n\n"
        "Please come to the desk right away with your documents.",
    )
    dispatcher.flush()
    return booking


def cancel_own(booking_id: str, requester_id: str) -> Booking:
    authorize(requester_id)

    booking = db.session.get(Booking, booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    if booking.requester_id != requester_id:
        raise Forbidden("You can only cancel your own bookings")
    if booking.status != SCHEDULED:
        raise InvalidState("Only scheduled bookings can be cancelled")

    booking.status = CANCELLED
    booking.cancelled_at = clock.now()
    db.session.commit()

    log_event("BOOKING_CANCEL", actor_id=requester_id, entity="booking", entity_id=booking.id)
    return booking


def complete(booking_id: str, actor_id: str) -> Booking:
    """Administrative closure of an appointment that took place."""
    authorize(actor_id, *ELEVATED_ROLES)

    booking = db.session.get(Booking, booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    if booking.status != SCHEDULED:
        raise InvalidState("Only scheduled bookings can be completed")

    booking.status = COMPLETED
    booking.completed_at = clock.now()
    db.session.commit()

    log_event("BOOKING_COMPLETE", actor_id=actor_id, entity="booking", entity_id=booking.id)
    return booking


def list_for(actor_id: str) -> list:
    """
    Bookings visible to ``actor_id``, newest appointment first.

    Members see their own bookings. Elevated roles see every booking, each
    with the requester's profile summary attached.
    """
    profile = authorize(actor_id)

    if not is_elevated(profile.role):
        rows = (
            Booking.query
            .filter_by(requester_id=actor_id)
            .order_by(Booking.scheduled_at.desc())
            .all()
        )
        return [b.to_dict() for b in rows]

    rows = (
        db.session.query(Booking, Profile)
        .outerjoin(Profile, Booking.requester_id == Profile.id)
        .order_by(Booking.scheduled_at.desc())
        .all()
    )
    out = []
    for booking, owner in rows:
        item = booking.to_dict()
        item["requester"] = owner.summary() if owner else None
        out.append(item)
    current_app.logger.debug("Listed %d bookings for %s", len(out), actor_id)
    return out
