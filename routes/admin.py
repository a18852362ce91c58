from flask import Blueprint, jsonify, g, request

from services import blocks, profiles, reports
from services.errors import InvalidInput
from utils import clock
from utils.auth_context import login_required

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


def _required_instant(data, key):
    value = data.get(key)
    if not value:
        raise InvalidInput(f"{key} required")
    try:
        return clock.parse_instant(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"Invalid {key}. Use ISO e.g. 2026-01-20T08:00:00")


def _required_day(key):
    value = request.args.get(key)
    if not value:
        raise InvalidInput(f"{key} required")
    try:
        return clock.parse_day(value)
    except ValueError:
        raise InvalidInput(f"Invalid {key}. Use YYYY-MM-DD")


# ---------- block periods ----------
@admin_bp.post("/blocks")
@login_required
def create_block():
    data = request.get_json(silent=True) or {}
    start = _required_instant(data, "start")
    end = _required_instant(data, "end")

    block, cancelled = blocks.create_block(start, end, data.get("reason"), g.actor_id)
    return jsonify(
        success=True,
        message=f"Period blocked. {cancelled} bookings were cancelled.",
        block=block.to_dict(),
        cancelled_count=cancelled,
    ), 201


@admin_bp.get("/blocks")
@login_required
def list_blocks():
    rows = blocks.list_active(g.actor_id)
    return jsonify(success=True, message=f"{len(rows)} active blocks",
                   blocks=[b.to_dict() for b in rows]), 200


@admin_bp.delete("/blocks/<block_id>")
@login_required
def remove_block(block_id: str):
    blocks.remove(block_id, g.actor_id)
    return jsonify(success=True, message="Period unblocked"), 200


# ---------- reports ----------
@admin_bp.get("/reports")
@login_required
def report():
    rows = reports.generate(
        request.args.get("status"),
        _required_day("start"),
        _required_day("end"),
        g.actor_id,
    )
    return jsonify(success=True, message=f"{len(rows)} records", rows=[r.to_dict() for r in rows]), 200


# ---------- users & roles ----------
@admin_bp.get("/users")
@login_required
def list_users():
    rows = profiles.list_profiles(g.actor_id, request.args.get("service_number"))
    return jsonify(success=True, message=f"{len(rows)} users", users=[p.to_dict() for p in rows]), 200


@admin_bp.post("/users/<user_id>/role")
@login_required
def update_role(user_id: str):
    data = request.get_json(silent=True) or {}
    profile = profiles.update_role(user_id, data.get("role"), g.actor_id)
    return jsonify(success=True, message="Role updated", user=profile.to_dict()), 200
