from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import ContextManager, Iterable, Iterator, Protocol

from sqlalchemy import delete, select, text
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from slotguard.core.config import Settings, get_settings
from slotguard.core.exceptions import (
    AppError,
    RaceLossError,
    ResourceNotFoundError,
    StoreTimeoutError,
    StoreUnavailableError,
)
from slotguard.models.schedule_entry import ScheduleEntry
from slotguard.models.schedule_slot_claim import ScheduleSlotClaim
from slotguard.services.conflict_rules import Assigned, ScheduleSlot, resource_keys
from slotguard.services.intervals import format_minutes
from slotguard.services.locks import Deadline

logger = logging.getLogger(__name__)

_TIMEOUT_MARKERS = ("statement timeout", "canceling statement", "lock timeout", "timed out", "database is locked")


class ScheduleStore(Protocol):
    def query(self, semester: str, day_of_week: int) -> list[ScheduleEntry]: ...

    def get(self, entry_id: str) -> ScheduleEntry | None: ...

    def insert(self, slot: ScheduleSlot) -> ScheduleEntry: ...

    def update(self, entry_id: str, slot: ScheduleSlot) -> ScheduleEntry: ...

    def delete(self, entry_id: str) -> None: ...

    def transaction(self, deadline: Deadline | None = None) -> ContextManager["ScheduleStore"]: ...

    def lock_resources(self, keys: Iterable[str]) -> None: ...


def _translate(exc: SQLAlchemyError) -> AppError:
    if isinstance(exc, IntegrityError):
        detail = str(exc.orig if exc.orig is not None else exc)
        if "schedule_slot_claims" in detail or "uq_schedule_slot_claims_slot" in detail:
            return RaceLossError()
        return StoreUnavailableError()
    if isinstance(exc, PoolTimeoutError):
        return StoreTimeoutError()
    detail = str(getattr(exc, "orig", None) or exc).lower()
    if any(marker in detail for marker in _TIMEOUT_MARKERS):
        return StoreTimeoutError()
    return StoreUnavailableError()


@contextmanager
def translate_store_errors(operation: str) -> Iterator[None]:
    """Map SQLAlchemy failures onto the service's error taxonomy without leaking driver details."""
    try:
        yield
    except (DBAPIError, PoolTimeoutError) as exc:
        translated = _translate(exc)
        if isinstance(translated, RaceLossError):
            logger.warning("Slot claim rejected during %s", operation)
        else:
            logger.exception("Schedule store failure during %s", operation)
        raise translated from exc


class SqlScheduleStore:
    def __init__(self, db: Session, settings: Settings | None = None) -> None:
        self.db = db
        self.settings = settings or get_settings()

    @property
    def _is_postgres(self) -> bool:
        return self.db.get_bind().dialect.name == "postgresql"

    def query(self, semester: str, day_of_week: int) -> list[ScheduleEntry]:
        stmt = (
            select(ScheduleEntry)
            .where(ScheduleEntry.semester == semester, ScheduleEntry.day_of_week == day_of_week)
            .order_by(ScheduleEntry.start_time, ScheduleEntry.id)
        )
        with translate_store_errors("query"):
            return list(self.db.execute(stmt).scalars())

    def get(self, entry_id: str) -> ScheduleEntry | None:
        with translate_store_errors("get"):
            return self.db.get(ScheduleEntry, entry_id)

    def insert(self, slot: ScheduleSlot) -> ScheduleEntry:
        record = ScheduleEntry()
        _apply_slot(record, slot)
        with translate_store_errors("insert"):
            self.db.add(record)
            self.db.flush()
            self._write_claims(record.id, slot)
        return record

    def update(self, entry_id: str, slot: ScheduleSlot) -> ScheduleEntry:
        with translate_store_errors("update"):
            record = self.db.get(ScheduleEntry, entry_id)
            if record is None:
                raise ResourceNotFoundError("Schedule entry", entry_id)
            _apply_slot(record, slot)
            self.db.execute(delete(ScheduleSlotClaim).where(ScheduleSlotClaim.entry_id == entry_id))
            self.db.flush()
            self._write_claims(entry_id, slot)
        return record

    def delete(self, entry_id: str) -> None:
        with translate_store_errors("delete"):
            self.db.execute(delete(ScheduleSlotClaim).where(ScheduleSlotClaim.entry_id == entry_id))
            self.db.execute(delete(ScheduleEntry).where(ScheduleEntry.id == entry_id))

    @contextmanager
    def transaction(self, deadline: Deadline | None = None) -> Iterator["SqlScheduleStore"]:
        try:
            with translate_store_errors("transaction"):
                remaining = deadline.remaining() if deadline is not None else None
                if remaining is not None and self._is_postgres:
                    timeout_ms = max(1, int(remaining * 1000))
                    self.db.execute(text(f"SET LOCAL statement_timeout = {timeout_ms}"))
            yield self
            with translate_store_errors("commit"):
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def lock_resources(self, keys: Iterable[str]) -> None:
        if not (self.settings.advisory_locks and self._is_postgres):
            return
        with translate_store_errors("advisory lock"):
            for key in sorted(set(keys)):
                self.db.execute(text("SELECT pg_advisory_xact_lock(hashtextextended(:key, 0))"), {"key": key})

    def _write_claims(self, entry_id: str, slot: ScheduleSlot) -> None:
        if not self.settings.enable_slot_claims:
            return
        claims = [
            ScheduleSlotClaim(
                entry_id=entry_id,
                resource_key=key,
                semester=slot.semester,
                day_of_week=slot.day_of_week,
                minute=minute,
            )
            for key in resource_keys(slot)
            for minute in range(slot.start, slot.end)
        ]
        self.db.add_all(claims)
        self.db.flush()


def _apply_slot(record: ScheduleEntry, slot: ScheduleSlot) -> None:
    record.section_id = slot.section_id
    record.semester = slot.semester
    record.day_of_week = slot.day_of_week
    record.start_time = format_minutes(slot.start)
    record.end_time = format_minutes(slot.end)
    record.room_id = slot.room.id if isinstance(slot.room, Assigned) else None
    record.faculty_id = slot.faculty.id if isinstance(slot.faculty, Assigned) else None
