from flask import Blueprint, request, jsonify, g

from services import bookings, slots
from services.bookings import REASON_CATEGORIES
from services.errors import InvalidInput
from utils import clock
from utils.auth_context import login_required

booking_bp = Blueprint("booking", __name__)


def _parse_slot(value):
    try:
        return clock.parse_instant(value)
    except (TypeError, ValueError):
        raise InvalidInput("Invalid datetime format. Use ISO e.g. 2026-01-20T09:30:00")


# ---------- MEMBERS: view free slots ----------
@booking_bp.get("/slots")
@login_required
def list_slots():
    date_str = request.args.get("date")
    if not date_str:
        raise InvalidInput("date required")
    try:
        day = clock.parse_day(date_str)
    except ValueError:
        raise InvalidInput("Invalid date. Use YYYY-MM-DD")

    free = slots.available_slots(day)
    return jsonify(
        success=True,
        message=f"{len(free)} slots available",
        date=day.isoformat(),
        slots=[s.isoformat() for s in free],
        reasons=list(REASON_CATEGORIES),
    ), 200


# ---------- MEMBERS: book slot (DOUBLE-BOOKING SAFE) ----------
@booking_bp.post("/bookings")
@login_required
def create_booking():
    data = request.get_json(silent=True) or {}
    if not data.get("scheduled_at"):
        raise InvalidInput("scheduled_at required")

    booking = bookings.create_scheduled(
        g.actor_id,
        _parse_slot(data.get("scheduled_at")),
        data.get("reason"),
        via_service_channel=bool(data.get("via_service_channel")),
    )
    return jsonify(success=True, message="Booking confirmed!", protocol=booking.id,
                   booking=booking.to_dict()), 201


# ---------- MEMBERS: walk-in for right now ----------
@booking_bp.post("/bookings/walk-in")
@login_required
def create_walk_in():
    data = request.get_json(silent=True) or {}
    booking = bookings.create_walk_in(
        g.actor_id,
        data.get("reason"),
        via_service_channel=bool(data.get("via_service_channel")),
    )
    return jsonify(success=True, message="Walk-in registered!", protocol=booking.id,
                   booking=booking.to_dict()), 201


# ---------- MEMBERS: cancel own booking ----------
@booking_bp.post("/bookings/<booking_id>/cancel")
@login_required
def cancel_booking(booking_id: str):
    bookings.cancel_own(booking_id, g.actor_id)
    return jsonify(success=True, message="Booking cancelled"), 200


# ---------- MEMBERS see own, ADMINS see all ----------
@booking_bp.get("/bookings")
@login_required
def list_bookings():
    rows = bookings.list_for(g.actor_id)
    return jsonify(success=True, message=f"{len(rows)} bookings", bookings=rows), 200


# ---------- ADMINS: close an appointment that took place ----------
@booking_bp.post("/bookings/<booking_id>/complete")
@login_required
def complete_booking(booking_id: str):
    booking = bookings.complete(booking_id, g.actor_id)
    return jsonify(success=True, message="Booking completed", booking=booking.to_dict()), 200
