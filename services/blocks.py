"""
Block Manager.

Creating a block closes ``[start, end)`` to new scheduled bookings and
cancels every scheduled booking already inside it. The block insert, the
cancellations and the in-app notifications share one transaction; emails to
the affected requesters go out only after that transaction commits.
"""
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.block_period import BlockPeriod
from models.booking import Booking, SCHEDULED, CANCELLED
from security.rbac import authorize, has_role
from services.errors import InvalidRange, InvalidReason, NotFound
from services.notifications import NotificationDispatcher
from utils import clock
from utils.audit import log_event
from utils.protocol import new_id
from utils.roles import ELEVATED_ROLES


def cancellation_message(reason: str, protocol: str) -> str:
    return (
        f"We are sorry for the inconvenience, but due to unforeseen circumstances ({reason}), "
        f"your booking with protocol {protocol} has been cancelled. Please book a new date."
    )


def create_block(start: datetime, end: datetime, reason: str, actor_id: str,
                 dispatcher: NotificationDispatcher = None):
    """Returns ``(block, cancelled_count)``."""
    authorize(actor_id, *ELEVATED_ROLES)

    if start >= end:
        raise InvalidRange()
    reason = (reason or "").strip()
    if not reason:
        raise InvalidReason("Provide the reason for the block")

    dispatcher = dispatcher or NotificationDispatcher()
    now = clock.now()
    block = BlockPeriod(
        id=new_id(),
        start=start,
        end=end,
        reason=reason[:255],
        created_by_id=actor_id,
        created_at=now,
    )

    try:
        db.session.add(block)

        # single read of the affected set; bookings made after this point are not re-scanned
        affected = (
            Booking.query
            .filter(
                Booking.status == SCHEDULED,
                Booking.scheduled_at >= start,
                Booking.scheduled_at < end,
            )
            .order_by(Booking.scheduled_at.asc())
            .with_for_update()
            .all()
        )

        for booking in affected:
            booking.status = CANCELLED
            booking.cancelled_at = now
            dispatcher.notify(
                booking.requester_id,
                cancellation_message(reason, booking.id),
                subject=f"Booking Cancelled - Protocol {booking.id}",
            )

        log_event(
            "BLOCK_CREATE",
            actor_id=actor_id,
            entity="block",
            entity_id=block.id,
            metadata={"cancelled": [b.id for b in affected]},
            commit=False,
        )
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        dispatcher.discard()
        current_app.logger.exception("Block %s - %s rolled back; no booking was cancelled", start, end)
        raise

    current_app.logger.info("Block %s created, %d bookings cancelled", block.id, len(affected))
    dispatcher.flush()
    return block, len(affected)


def list_active(actor_id: str) -> list:
    if not has_role(actor_id, *ELEVATED_ROLES):
        return []
    return (
        BlockPeriod.query
        .filter(BlockPeriod.end > clock.now())
        .order_by(BlockPeriod.start.asc())
        .all()
    )


def remove(block_id: str, actor_id: str):
    """Delete a block. Bookings it cancelled stay cancelled."""
    authorize(actor_id, *ELEVATED_ROLES)

    block = db.session.get(BlockPeriod, block_id)
    if block is None:
        raise NotFound("Block not found")

    db.session.delete(block)
    db.session.commit()

    log_event("BLOCK_REMOVE", actor_id=actor_id, entity="block", entity_id=block_id)
