"""
Paste lifecycle: creation and retrieval on top of a PasteStore.

Creation encrypts (or seals, or passes through) the content, then inserts it
under a fresh random id, retrying a bounded number of times on collision.

Retrieval peeks at the record with `get`, enforces expiry and the password
against that copy, and only then, for burn-after-reading pastes, consumes the
record with the store's atomic `take`. Checking the password first means a
wrong guess never destroys a burn paste; taking before returning content means
at most one reader ever sees it.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Union

from wastebin.core import crypto
from wastebin.core.errors import (
    AuthenticationFailure,
    Conflict,
    IdSpaceExhausted,
    NotFound,
)
from wastebin.core.expiry import ExpiryPolicy, utcnow
from wastebin.core.identifier import DEFAULT_ID_LENGTH, generate_id, is_valid_id
from wastebin.core.record import PasteRecord
from wastebin.core.render import EscapedTextRenderer, Renderer
from wastebin.infra.store import PasteStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_ID_ATTEMPTS = 5


@dataclass(frozen=True)
class RawPaste:
    id: str
    data: bytes
    extension: Optional[str]
    burn_after_read: bool


@dataclass(frozen=True)
class RenderedPaste:
    id: str
    formatted: str
    extension: Optional[str]
    burn_after_read: bool


class PasteManager:
    def __init__(
        self,
        store: PasteStore,
        renderer: Optional[Renderer] = None,
        server_key: Optional[bytes] = None,
        kdf_params: crypto.ScryptParams = crypto.DEFAULT_PARAMS,
        clock: Callable[[], datetime] = utcnow,
        id_length: int = DEFAULT_ID_LENGTH,
        max_id_attempts: int = DEFAULT_MAX_ID_ATTEMPTS,
    ):
        self.store = store
        self.renderer = renderer or EscapedTextRenderer()
        self.server_key = crypto.check_server_key(server_key) if server_key else None
        self.kdf_params = kdf_params
        self.clock = clock
        self.id_length = id_length
        self.max_id_attempts = max_id_attempts

    # ---------- CREATE ----------

    def create(
        self,
        text: Union[str, bytes],
        extension: Optional[str] = None,
        password: Optional[str] = None,
        policy: ExpiryPolicy = ExpiryPolicy(),
    ) -> str:
        plaintext = text.encode("utf-8") if isinstance(text, str) else bytes(text)

        if password:
            content = crypto.protect(password, plaintext, self.kdf_params)
        elif self.server_key is not None:
            content = crypto.seal(self.server_key, plaintext)
        else:
            content = crypto.Unprotected(plaintext)

        now = self.clock()
        for attempt in range(1, self.max_id_attempts + 1):
            record = PasteRecord(
                id=generate_id(self.id_length),
                content=content,
                extension=extension or None,
                created_at=now,
                expires_at=policy.expires_at(now),
                burn_after_read=policy.burn_after_read,
            )
            try:
                self.store.put(record)
            except Conflict:
                logger.warning("Id collision on attempt %d/%d", attempt, self.max_id_attempts)
                continue

            logger.info(
                "Created paste %s (protected=%s, burn=%s, expires_at=%s)",
                record.id, record.has_password, record.burn_after_read, record.expires_at,
            )
            return record.id

        raise IdSpaceExhausted(f"no free id after {self.max_id_attempts} attempts")

    # ---------- READ ----------

    def read(self, paste_id: str, password: Optional[str] = None, extension: Optional[str] = None) -> RenderedPaste:
        """
        Fetch, decrypt and render a paste. `extension` overrides the stored
        syntax tag for rendering only.
        """
        raw = self.read_raw(paste_id, password)
        extension = extension or raw.extension
        text = raw.data.decode("utf-8", errors="replace")
        return RenderedPaste(
            id=raw.id,
            formatted=self.renderer.render(text, extension),
            extension=extension,
            burn_after_read=raw.burn_after_read,
        )

    def read_raw(self, paste_id: str, password: Optional[str] = None) -> RawPaste:
        if not is_valid_id(paste_id):
            self._miss(password)
            raise NotFound(paste_id)

        try:
            record = self.store.get(paste_id)
        except NotFound:
            self._miss(password)
            raise

        now = self.clock()
        if record.is_expired(now):
            self.store.delete(paste_id)
            raise NotFound(paste_id)

        data = self._open(record, password)

        if record.burn_after_read:
            # raises NotFound if another reader got there first
            taken = self.store.take(paste_id)
            if taken != record:
                logger.warning("Paste %s was replaced before it could be burned", paste_id)
                raise NotFound(paste_id)
            if taken.is_expired(self.clock()):
                raise NotFound(paste_id)
            logger.info("Burned paste %s", paste_id)

        return RawPaste(
            id=record.id,
            data=data,
            extension=record.extension,
            burn_after_read=record.burn_after_read,
        )

    def _open(self, record: PasteRecord, password: Optional[str]) -> bytes:
        content = record.content
        if isinstance(content, crypto.Protected):
            if not password:
                crypto.equalize_timing(self.kdf_params)
                raise AuthenticationFailure(record.id)
            return crypto.unprotect(content, password, self.kdf_params)
        if isinstance(content, crypto.Sealed):
            return crypto.unseal(content, self.server_key)
        return content.data

    def _miss(self, password: Optional[str]) -> None:
        if password:
            crypto.equalize_timing(self.kdf_params)

    # ---------- DELETE ----------

    def delete(self, paste_id: str) -> bool:
        if not is_valid_id(paste_id):
            return False
        removed = self.store.delete(paste_id)
        if removed:
            logger.info("Deleted paste %s", paste_id)
        return removed

    def sweep(self) -> int:
        return self.store.sweep(self.clock())
