from flask import Blueprint, jsonify, g, request

from services import notifications, profiles
from services.errors import NotFound
from utils.auth_context import login_required

profile_bp = Blueprint("profile", __name__)


@profile_bp.get("/profile")
@login_required
def get_profile():
    profile = profiles.profile_of(g.actor_id)
    if profile is None:
        raise NotFound("Profile not registered yet")
    return jsonify(success=True, message="Profile", profile=profile.to_dict()), 200


@profile_bp.put("/profile")
@login_required
def save_profile():
    data = request.get_json(silent=True) or {}
    profile = profiles.save_profile(g.actor_id, data)
    return jsonify(success=True, message="Profile saved", profile=profile.to_dict()), 200


@profile_bp.get("/notifications")
@login_required
def list_notifications():
    unread_only = request.args.get("unread", "").lower() in ("1", "true", "yes")
    rows = notifications.list_for(g.actor_id, unread_only=unread_only)
    return jsonify(success=True, message=f"{len(rows)} notifications",
                   notifications=[n.to_dict() for n in rows]), 200


@profile_bp.post("/notifications/<notification_id>/read")
@login_required
def mark_notification_read(notification_id: str):
    notifications.mark_read(notification_id, g.actor_id)
    return jsonify(success=True, message="Marked as read"), 200
