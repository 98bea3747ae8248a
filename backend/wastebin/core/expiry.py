from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

BURN_SENTINEL = "burn"
MAX_EXPIRES_IN = 2 ** 32 - 1


@dataclass(frozen=True)
class ExpiryPolicy:
    expires_in: Optional[int] = None
    burn_after_read: bool = False

    def expires_at(self, now: datetime) -> Optional[datetime]:
        if not self.expires_in:
            return None
        try:
            return now + timedelta(seconds=self.expires_in)
        except OverflowError:
            # past the calendar's end: never expires
            return None


def parse_expires(value: Optional[str]) -> ExpiryPolicy:
    """
    Map the form's `expires` value to a policy: "burn" means burn after
    reading, a positive integer up to 2**32 - 1 is a lifetime in seconds,
    anything else means the paste never expires.
    """
    value = (value or "").strip()

    if value == BURN_SENTINEL:
        return ExpiryPolicy(burn_after_read=True)

    if not (value.isascii() and value.isdigit()):
        return ExpiryPolicy()

    seconds = int(value)
    if seconds > MAX_EXPIRES_IN:
        return ExpiryPolicy()
    return ExpiryPolicy(expires_in=seconds or None)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: Optional[datetime]) -> Optional[datetime]:
    # sqlite hands back naive datetimes; everything stored is UTC
    if moment is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def is_expired(expires_at: Optional[datetime], now: datetime) -> bool:
    if expires_at is None:
        return False
    return now >= as_utc(expires_at)
