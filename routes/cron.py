import hmac

from flask import Blueprint, jsonify, request, current_app

from services import summaries
from services.errors import Unauthorized

cron_bp = Blueprint("cron", __name__, url_prefix="/cron")

CRON_HEADER = "X-Cron-Secret"


def _require_cron_secret():
    expected = current_app.config.get("CRON_SECRET")
    provided = request.headers.get(CRON_HEADER) or ""
    if not expected or not hmac.compare_digest(provided, expected):
        raise Unauthorized("Invalid scheduler credentials")


@cron_bp.post("/future-week")
def future_week():
    _require_cron_secret()
    result = summaries.future_week_summary()
    return jsonify(success=True, message="Future-week summary generated.", **result), 200


@cron_bp.post("/past-week")
def past_week():
    _require_cron_secret()
    result = summaries.past_week_closure()
    return jsonify(success=True, message="Past-week closure generated.", **result), 200
