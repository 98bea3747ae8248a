from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from wastebin.core.crypto import Content, Protected
from wastebin.core.expiry import is_expired


@dataclass(frozen=True)
class PasteRecord:
    id: str
    content: Content
    extension: Optional[str]
    created_at: datetime
    expires_at: Optional[datetime] = None
    burn_after_read: bool = False

    @property
    def has_password(self) -> bool:
        return isinstance(self.content, Protected)

    def is_expired(self, now: datetime) -> bool:
        return is_expired(self.expires_at, now)
