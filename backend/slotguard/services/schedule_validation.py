from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
import logging
from typing import Any

from slotguard.core.config import Settings, get_settings
from slotguard.core.exceptions import (
    ConflictError,
    RaceLossError,
    ResourceNotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from slotguard.models.schedule_entry import ScheduleEntry
from slotguard.services.conflict_query import ConflictQuery
from slotguard.services.conflict_rules import (
    ConflictReport,
    RawLabels,
    ResourceLabels,
    ScheduleSlot,
    detect_conflicts,
    resource_ref,
)
from slotguard.services.intervals import parse_time_to_minutes
from slotguard.services.locks import Deadline, ResourceLockManager, get_lock_manager, lock_keys
from slotguard.services.schedule_store import ScheduleStore

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("section_id", "semester", "day_of_week", "start_time", "end_time")
UPDATABLE_FIELDS = ("day_of_week", "start_time", "end_time", "room_id", "faculty_id")

FIELD_NAMES = {
    "id": "id",
    "section_id": "sectionId",
    "semester": "semester",
    "day_of_week": "dayOfWeek",
    "start_time": "startTime",
    "end_time": "endTime",
    "room_id": "roomId",
    "faculty_id": "facultyId",
}


class ValidationMode(str, Enum):
    create = "create"
    update = "update"


@dataclass(frozen=True)
class ProposedEntry:
    """Raw, not yet validated schedule entry as submitted by a caller."""

    section_id: str | None = None
    semester: str | None = None
    day_of_week: int | None = None
    start_time: str | None = None
    end_time: str | None = None
    room_id: str | None = None
    faculty_id: str | None = None
    id: str | None = None

    @classmethod
    def from_record(cls, record: ScheduleEntry) -> "ProposedEntry":
        return cls(
            id=record.id,
            section_id=record.section_id,
            semester=record.semester,
            day_of_week=record.day_of_week,
            start_time=record.start_time,
            end_time=record.end_time,
            room_id=record.room_id,
            faculty_id=record.faculty_id,
        )

    def merged(self, changes: dict[str, Any]) -> "ProposedEntry":
        unknown = sorted(set(changes) - set(UPDATABLE_FIELDS))
        if unknown:
            raise ValidationError(
                "Invalid schedule entry",
                [{"field": FIELD_NAMES.get(name, name), "message": "Field cannot be updated"} for name in unknown],
            )
        return replace(self, **changes)


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_time(value: Any, field: str, errors: list[dict]) -> int | None:
    if _blank(value):
        return None
    try:
        return parse_time_to_minutes(value)
    except ValueError as exc:
        errors.append({"field": FIELD_NAMES[field], "message": str(exc)})
        return None


def check_structure(
    proposed: ProposedEntry,
    required: tuple[str, ...] = REQUIRED_FIELDS,
) -> ScheduleSlot:
    """Structural checks that run before any store access. Raises ValidationError with every problem found."""
    errors: list[dict] = []
    for name in required:
        if _blank(getattr(proposed, name)):
            errors.append({"field": FIELD_NAMES[name], "message": "Field is required"})

    day = proposed.day_of_week
    if day is not None and (isinstance(day, bool) or not isinstance(day, int) or not 1 <= day <= 7):
        errors.append(
            {"field": "dayOfWeek", "message": "Day of week must be between 1 (Monday) and 7 (Sunday)"}
        )

    start = _parse_time(proposed.start_time, "start_time", errors)
    end = _parse_time(proposed.end_time, "end_time", errors)
    if start is not None and end is not None and start >= end:
        errors.append({"field": "endTime", "message": "End time must be after start time"})

    if errors:
        raise ValidationError("Invalid schedule entry", errors)

    return ScheduleSlot(
        entry_id=proposed.id,
        section_id=None if _blank(proposed.section_id) else proposed.section_id.strip(),
        semester=proposed.semester.strip(),
        day_of_week=day,
        start=start,
        end=end,
        room=resource_ref(proposed.room_id),
        faculty=resource_ref(proposed.faculty_id),
    )


class ScheduleValidator:
    """Validates proposed entries against persisted state and writes the ones that fit."""

    def __init__(
        self,
        store: ScheduleStore,
        *,
        labels: ResourceLabels | None = None,
        locks: ResourceLockManager | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.store = store
        self.query = ConflictQuery(store)
        self.labels = labels or RawLabels()
        self.locks = locks or get_lock_manager()
        self.settings = settings or get_settings()

    def _prepare(self, proposed: ProposedEntry, mode: ValidationMode) -> ScheduleSlot:
        slot = check_structure(proposed)
        if mode is ValidationMode.create:
            return replace(slot, entry_id=None)
        if _blank(slot.entry_id):
            raise ValidationError("Invalid schedule entry", [{"field": "id", "message": "Field is required"}])
        return slot

    def _report(self, slot: ScheduleSlot, mode: ValidationMode) -> ConflictReport:
        exclude_id = slot.entry_id if mode is ValidationMode.update else None
        candidates = self.query.find_candidates(slot.semester, slot.day_of_week, exclude_id)
        return detect_conflicts(slot, candidates, self.labels)

    def _rejection(self, slot: ScheduleSlot, mode: ValidationMode, report: ConflictReport) -> ConflictError:
        logger.warning(
            "Rejected %s of section %s on %s (%s): %s",
            mode.value,
            slot.section_id,
            slot.window,
            slot.semester,
            ", ".join(report.types),
        )
        return ConflictError(report)

    def _deadline(self, timeout: float | None) -> Deadline:
        return Deadline(self.settings.store_timeout_seconds if timeout is None else timeout)

    def validate(
        self,
        proposed: ProposedEntry,
        mode: ValidationMode = ValidationMode.create,
        *,
        timeout: float | None = None,
    ) -> ConflictReport:
        slot = self._prepare(proposed, mode)
        deadline = self._deadline(timeout)
        with self.store.transaction(deadline):
            report = self._report(slot, mode)
            deadline.check("conflict report")
        return report

    def commit(
        self,
        proposed: ProposedEntry,
        mode: ValidationMode = ValidationMode.create,
        *,
        timeout: float | None = None,
    ) -> ScheduleEntry:
        slot = self._prepare(proposed, mode)
        return self._commit(slot, mode, self._deadline(timeout))

    def _commit(self, slot: ScheduleSlot, mode: ValidationMode, deadline: Deadline) -> ScheduleEntry:
        keys = lock_keys(slot)

        try:
            with self.locks.hold(keys, deadline, self.settings.lock_timeout_seconds):
                with self.store.transaction(deadline):
                    self.store.lock_resources(keys)
                    report = self._report(slot, mode)
                    if report.has_conflicts:
                        raise self._rejection(slot, mode, report)
                    deadline.check("write")
                    if mode is ValidationMode.create:
                        record = self.store.insert(slot)
                    else:
                        record = self.store.update(slot.entry_id, slot)
        except RaceLossError as exc:
            # Another writer claimed the slot between our read and our write.
            report = self._report(slot, mode)
            if report.has_conflicts:
                raise self._rejection(slot, mode, report) from exc
            raise StoreUnavailableError("Schedule changed concurrently, try again") from exc

        logger.info(
            "Committed schedule entry %s (%s) for section %s on %s",
            record.id,
            mode.value,
            slot.section_id,
            slot.window,
        )
        return record

    def get(self, entry_id: str) -> ScheduleEntry:
        record = self.store.get(entry_id)
        if record is None:
            raise ResourceNotFoundError("Schedule entry", entry_id)
        return record

    def update(self, entry_id: str, changes: dict[str, Any], *, timeout: float | None = None) -> ScheduleEntry:
        """Merge partial changes onto the stored entry and commit; omitted fields keep stored values.

        One deadline covers both the read of the stored entry and the commit.
        """
        deadline = self._deadline(timeout)
        with self.store.transaction(deadline):
            current = ProposedEntry.from_record(self.get(entry_id))
        deadline.check("update")
        slot = self._prepare(current.merged(changes), ValidationMode.update)
        return self._commit(slot, ValidationMode.update, deadline)

    def delete(self, entry_id: str) -> None:
        with self.store.transaction():
            if self.store.get(entry_id) is None:
                raise ResourceNotFoundError("Schedule entry", entry_id)
            self.store.delete(entry_id)
        logger.info("Deleted schedule entry %s", entry_id)
