# wastebin/core/identifier.py

import re
import secrets

DEFAULT_ID_LENGTH = 12
MIN_ID_LENGTH = 8  # 6 random bytes -> 48 bits
MAX_ID_LENGTH = 64

_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def generate_id(length: int = DEFAULT_ID_LENGTH) -> str:
    """
    Random URL-safe id. Every character carries 6 bits, so the default
    length gives 72 bits of entropy.
    """
    if length < MIN_ID_LENGTH or length > MAX_ID_LENGTH:
        raise ValueError(f"id length must be between {MIN_ID_LENGTH} and {MAX_ID_LENGTH}")

    # token_urlsafe(n) yields ceil(4n/3) chars
    return secrets.token_urlsafe(length)[:length]


def is_valid_id(value: str) -> bool:
    return isinstance(value, str) and bool(_ID_RE.match(value))
