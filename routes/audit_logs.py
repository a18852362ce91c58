import json

from flask import Blueprint, jsonify, request
from models.audit_log import AuditLog
from security.rbac import require_roles
from utils.auth_context import login_required
from utils.roles import ELEVATED_ROLES

audit_bp = Blueprint("audit", __name__, url_prefix="/admin")


@audit_bp.get("/audit-logs")
@login_required
@require_roles(*ELEVATED_ROLES)
def list_audit_logs():
    limit = request.args.get("limit", type=int) or 200
    limit = max(1, min(limit, 500))

    action = request.args.get("action")
    actor_id = request.args.get("actor_id")
    entity_id = request.args.get("entity_id")

    q = AuditLog.query
    if action:
        q = q.filter(AuditLog.action == action.strip().upper())
    if actor_id:
        q = q.filter(AuditLog.actor_id == actor_id)
    if entity_id:
        q = q.filter(AuditLog.entity_id == entity_id)

    rows = q.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()
    return jsonify(
        success=True,
        message=f"{len(rows)} events",
        events=[
            {
                "id": r.id,
                "timestamp": r.timestamp.isoformat(),
                "actor_id": r.actor_id,
                "action": r.action,
                "entity": r.entity,
                "entity_id": r.entity_id,
                "ip": r.ip,
                "user_agent": r.user_agent,
                "metadata": json.loads(r.metadata_json) if r.metadata_json else None,
            }
            for r in rows
        ],
    ), 200
