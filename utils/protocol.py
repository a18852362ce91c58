import uuid

WALK_IN_PREFIX = "ENC-"


def scheduled_protocol() -> str:
    return uuid.uuid4().hex[:8].upper()


def walk_in_protocol() -> str:
    return WALK_IN_PREFIX + uuid.uuid4().hex[:6].upper()


def new_id() -> str:
    return uuid.uuid4().hex
