"""
Paste storage.

`PasteStore` is the contract the lifecycle manager relies on. Every operation
is atomic on its own; `take` in particular must hand a record to exactly one
caller no matter how many race for it. `SqlPasteStore` gets that from the
database; there is no in-process lock.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from wastebin.core.crypto import content_from_columns, content_to_columns
from wastebin.core.errors import Conflict, NotFound, StorageUnavailable
from wastebin.core.expiry import as_utc
from wastebin.core.record import PasteRecord
from wastebin.infra.database import build_session_factory, db_session
from wastebin.models.paste import Paste

logger = logging.getLogger(__name__)

_pastes = Paste.__table__


class PasteStore(ABC):
    """Key-value store over paste ids. Records are never updated in place."""

    @abstractmethod
    def put(self, record: PasteRecord) -> None:
        """Insert a new record; raise Conflict if the id is taken."""

    @abstractmethod
    def get(self, paste_id: str) -> PasteRecord:
        """Return the record without side effects; raise NotFound."""

    @abstractmethod
    def take(self, paste_id: str) -> PasteRecord:
        """Atomically return and delete the record; raise NotFound."""

    @abstractmethod
    def delete(self, paste_id: str) -> bool:
        """Remove the record if present. Returns whether anything was removed."""

    @abstractmethod
    def sweep(self, now: datetime) -> int:
        """Remove every record whose expiry has passed. Returns the count."""


def _record_from_row(row) -> PasteRecord:
    return PasteRecord(
        id=row.id,
        content=content_from_columns(row.data, row.salt, row.nonce),
        extension=row.extension,
        created_at=as_utc(row.created_at),
        expires_at=as_utc(row.expires_at),
        burn_after_read=bool(row.burn_after_read),
    )


def _row_from_record(record: PasteRecord) -> Paste:
    data, salt, nonce = content_to_columns(record.content)
    return Paste(
        id=record.id,
        data=data,
        salt=salt,
        nonce=nonce,
        extension=record.extension,
        created_at=record.created_at,
        expires_at=record.expires_at,
        burn_after_read=record.burn_after_read,
    )


class SqlPasteStore(PasteStore):
    """
    SQLAlchemy-backed store.

    `take` is a single DELETE ... RETURNING when the dialect supports it.
    Otherwise it falls back to compare-and-delete: read the row, then delete
    it conditioned on its id and creation time; only the caller whose DELETE
    matched the row wins.
    """

    def __init__(self, engine: Engine, use_returning: Optional[bool] = None):
        self.engine = engine
        self._sessions = build_session_factory(engine)
        if use_returning is None:
            use_returning = bool(getattr(engine.dialect, "delete_returning", False))
        self.use_returning = use_returning

    def put(self, record: PasteRecord) -> None:
        try:
            with db_session(self._sessions) as session:
                session.add(_row_from_record(record))
        except IntegrityError as exc:
            raise Conflict(f"paste {record.id} already exists") from exc
        except SQLAlchemyError as exc:
            logger.error("put %s failed: %s", record.id, exc)
            raise StorageUnavailable("could not store paste") from exc

    def get(self, paste_id: str) -> PasteRecord:
        try:
            with db_session(self._sessions) as session:
                row = session.execute(
                    select(_pastes).where(_pastes.c.id == paste_id)
                ).first()
        except SQLAlchemyError as exc:
            logger.error("get %s failed: %s", paste_id, exc)
            raise StorageUnavailable("could not read paste") from exc

        if row is None:
            raise NotFound(paste_id)
        return _record_from_row(row)

    def take(self, paste_id: str) -> PasteRecord:
        try:
            with db_session(self._sessions) as session:
                if self.use_returning:
                    row = session.execute(
                        _pastes.delete()
                        .where(_pastes.c.id == paste_id)
                        .returning(*_pastes.c)
                    ).first()
                else:
                    row = self._compare_and_delete(session, paste_id)
        except SQLAlchemyError as exc:
            logger.error("take %s failed: %s", paste_id, exc)
            raise StorageUnavailable("could not consume paste") from exc

        if row is None:
            raise NotFound(paste_id)
        return _record_from_row(row)

    @staticmethod
    def _compare_and_delete(session, paste_id: str):
        row = session.execute(
            select(_pastes).where(_pastes.c.id == paste_id)
        ).first()
        if row is None:
            return None

        result = session.execute(
            _pastes.delete().where(
                _pastes.c.id == paste_id,
                _pastes.c.created_at == row.created_at,
            )
        )
        if result.rowcount != 1:
            # someone else consumed it between our read and delete
            return None
        return row

    def delete(self, paste_id: str) -> bool:
        try:
            with db_session(self._sessions) as session:
                result = session.execute(
                    _pastes.delete().where(_pastes.c.id == paste_id)
                )
        except SQLAlchemyError as exc:
            logger.error("delete %s failed: %s", paste_id, exc)
            raise StorageUnavailable("could not delete paste") from exc

        return result.rowcount > 0

    def sweep(self, now: datetime) -> int:
        try:
            with db_session(self._sessions) as session:
                result = session.execute(
                    _pastes.delete().where(
                        _pastes.c.expires_at.is_not(None),
                        _pastes.c.expires_at <= now,
                    )
                )
        except SQLAlchemyError as exc:
            logger.error("sweep failed: %s", exc)
            raise StorageUnavailable("could not sweep expired pastes") from exc

        removed = result.rowcount or 0
        if removed:
            logger.info("Swept %d expired pastes", removed)
        return removed
