MEMBER = "MEMBER"
LEAD_ADMIN = "LEAD_ADMIN"
CENTRAL_ADMIN = "CENTRAL_ADMIN"

ALL_ROLES = (MEMBER, LEAD_ADMIN, CENTRAL_ADMIN)
ELEVATED_ROLES = (LEAD_ADMIN, CENTRAL_ADMIN)


def normalize_role(value) -> str:
    return (value or "").strip().upper()


def is_elevated(role) -> bool:
    return normalize_role(role) in ELEVATED_ROLES
