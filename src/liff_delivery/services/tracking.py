"""Public tracking codes for delivery records."""

from __future__ import annotations

import re
import secrets

TRACKING_ID_PREFIX = "RET-"
TRACKING_ID_PATTERN = re.compile(r"^RET-[0-9A-F]{8}$")


def generate_tracking_id() -> str:
    """Return ``RET-`` followed by 8 uppercase hex characters.

    Uniqueness is probabilistic only (32 random bits); the store does not
    enforce it and no collision check is made.
    """
    return f"{TRACKING_ID_PREFIX}{secrets.token_hex(4).upper()}"


def is_tracking_id(value: str | None) -> bool:
    return bool(value) and TRACKING_ID_PATTERN.fullmatch(value) is not None
