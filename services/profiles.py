"""
Role Directory.

Profiles are keyed by the id the identity provider assigns. Role checks in
the rest of the engine go through ``security.rbac.authorize``; this module
owns profile registration and role changes.
"""
import re

from flask import current_app
from sqlalchemy.exc import IntegrityError

from models import db
from models.user import Profile
from security.rbac import authorize
from services.errors import Forbidden, InvalidInput, InvalidState, NotFound
from utils import clock
from utils.audit import log_event
from utils.roles import ALL_ROLES, ELEVATED_ROLES, LEAD_ADMIN, MEMBER, normalize_role

RANKS = (
    "Cel PM", "Ten Cel PM", "Maj PM", "Cap PM",
    "1º Ten PM", "2º Ten PM", "Sub Ten PM",
    "1º Sgt PM", "2º Sgt PM", "3º Sgt PM",
    "Cb PM", "Sd PM",
)

UNITS = (
    "CPI-7", "ESSD", "7 BPM-I", "12 BPM-I", "14 BAEP", "22 BPM-I",
    "40 BPM-I", "50 BPM-I", "53 BPM-I", "54 BPM-I", "55 BPM-I",
)

SERVICE_NUMBER_RE = re.compile(r"^\d{6}$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

ROLE_SWAP_ATTEMPTS = 2


def profile_of(actor_id: str):
    if not actor_id:
        return None
    return db.session.get(Profile, actor_id, populate_existing=True)


def validate_profile(data: dict) -> dict:
    errors = {}

    service_number = (data.get("service_number") or "").strip()
    if not SERVICE_NUMBER_RE.match(service_number):
        errors["service_number"] = "Service number must have exactly 6 digits"

    email = (data.get("email") or "").strip().lower() or None
    if email and not EMAIL_RE.match(email):
        errors["email"] = "Invalid email"

    display_name = (data.get("display_name") or "").strip()
    if len(display_name) < 2:
        errors["display_name"] = "Required"

    rank = (data.get("rank") or "").strip()
    if rank not in RANKS:
        errors["rank"] = "Unknown rank"

    unit = (data.get("unit") or "").strip()
    if unit not in UNITS:
        errors["unit"] = "Unknown unit"

    document = (data.get("service_document_number") or "").strip()
    if len(document) < 3:
        errors["service_document_number"] = "Provide a valid document number"

    if errors:
        raise InvalidInput("Invalid data", fields=errors)

    return {
        "service_number": service_number,
        "email": email,
        "display_name": display_name[:120],
        "rank": rank,
        "unit": unit,
        "service_document_number": document[:120],
    }


def _is_first_profile() -> bool:
    return Profile.query.count() == 0


def save_profile(actor_id: str, data: dict) -> Profile:
    """Create or update the caller's own profile. The first profile ever saved becomes LEAD_ADMIN."""
    if not actor_id:
        raise Forbidden()
    fields = validate_profile(data)

    profile = db.session.get(Profile, actor_id)
    if profile is not None:
        for key, value in fields.items():
            setattr(profile, key, value)
        action = "PROFILE_UPDATE"
        db.session.commit()
    else:
        role = LEAD_ADMIN if _is_first_profile() else MEMBER
        profile = Profile(id=actor_id, role=role, created_at=clock.now(), **fields)
        db.session.add(profile)
        action = "PROFILE_CREATE"
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            if role != LEAD_ADMIN:
                raise
            # uq_user_profiles_single_lead: another first registration got there before us
            current_app.logger.warning("LEAD_ADMIN already taken, registering %s as MEMBER", actor_id)
            profile = Profile(id=actor_id, role=MEMBER, created_at=clock.now(), **fields)
            db.session.add(profile)
            db.session.commit()

    log_event(action, actor_id=actor_id, entity="profile", entity_id=actor_id)
    return profile


def list_profiles(actor_id: str, service_number: str = None) -> list:
    authorize(actor_id, *ELEVATED_ROLES)

    q = Profile.query
    if service_number:
        q = q.filter(Profile.service_number == service_number.strip())
    else:
        q = q.filter(Profile.role.in_(ELEVATED_ROLES))
    return q.order_by(Profile.display_name.asc()).all()


def assign_role(target: Profile, new_role: str) -> list:
    """Stage the role change in the current transaction; returns the ids demoted from LEAD_ADMIN."""
    demoted = []
    if new_role == LEAD_ADMIN:
        holders = (
            Profile.query
            .filter(Profile.role == LEAD_ADMIN, Profile.id != target.id)
            .with_for_update()
            .all()
        )
        for holder in holders:
            holder.role = MEMBER
            demoted.append(holder.id)
        # demotion must reach the database before the promotion or the unique lead index rejects it
        db.session.flush()
    target.role = new_role
    db.session.flush()
    return demoted


def update_role(target_id: str, new_role: str, actor_id: str) -> Profile:
    """
    Change ``target_id``'s role.

    Promoting to LEAD_ADMIN demotes the current holder in the same
    transaction. The ``uq_user_profiles_single_lead`` index rejects a second
    holder, so when two promotions race the loser rolls back and retries
    against the winner's commit.
    """
    authorize(actor_id, *ELEVATED_ROLES)

    new_role = normalize_role(new_role)
    if new_role not in ALL_ROLES:
        raise InvalidInput("Unknown role")

    for attempt in range(ROLE_SWAP_ATTEMPTS):
        target = db.session.get(Profile, target_id)
        if target is None:
            raise NotFound("User not found")

        if target.id == actor_id and new_role == MEMBER:
            raise Forbidden("Cannot remove your own administrative role")

        try:
            demoted = assign_role(target, new_role)
            log_event(
                "ROLE_UPDATE",
                actor_id=actor_id,
                entity="profile",
                entity_id=target.id,
                metadata={"role": new_role, "demoted": demoted},
                commit=False,
            )
            db.session.commit()
            return target
        except IntegrityError:
            db.session.rollback()
            current_app.logger.warning("Concurrent LEAD_ADMIN change for %s (attempt %d)", target_id, attempt + 1)

    raise InvalidState("Role change conflicted with another one, try again")
