"""Small helpers shared by the service layer."""

import time
from uuid import uuid4

MILLIS_PER_DAY = 24 * 60 * 60 * 1000


def current_millis() -> int:
    """Current instant in milliseconds since the epoch."""
    return int(time.time() * 1000)


def new_id() -> str:
    return uuid4().hex
