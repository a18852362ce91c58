from functools import wraps
from flask import g, request, current_app
from services.errors import Unauthorized


def load_current_actor():
    """Resolve the actor id forwarded by the identity gateway, if any."""
    header = current_app.config.get("ACTOR_HEADER", "X-Actor-Id")
    raw = (request.headers.get(header) or "").strip()
    g.actor_id = raw[:64] or None


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "actor_id", None) is None:
            raise Unauthorized()
        return fn(*args, **kwargs)
    return wrapper
