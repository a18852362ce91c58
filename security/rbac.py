from functools import wraps
from flask import g

from models import db
from models.user import Profile
from services.errors import Forbidden, Unauthorized


def authorize(actor_id, *role_names: str) -> Profile:
    """
    Single capability check for an operation entry point.

    Resolves ``actor_id`` to its profile straight from the store (never from a
    cached object) and, when ``role_names`` is given, requires the profile's
    role to be one of them.
    """
    if not actor_id:
        raise Unauthorized()

    profile = db.session.get(Profile, actor_id, populate_existing=True)
    if profile is None:
        raise Forbidden("Complete your profile first")

    if role_names and profile.role not in role_names:
        raise Forbidden()
    return profile


def has_role(actor_id, *role_names: str) -> bool:
    try:
        authorize(actor_id, *role_names)
    except (Unauthorized, Forbidden):
        return False
    return True


def require_roles(*role_names: str):
    """
    Usage: @require_roles(*ELEVATED_ROLES)
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            g.profile = authorize(getattr(g, "actor_id", None), *role_names)
            return fn(*args, **kwargs)
        return wrapper
    return decorator
