"""Classification of why two time-overlapping schedule entries cannot coexist.

Pure functions over frozen dataclasses; no database or framework imports, so
server validation and the preview endpoint run exactly the same code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Protocol, Union

from slotguard.services.intervals import day_name, format_minutes, overlaps


class ConflictType(str, Enum):
    room = "room"
    faculty = "faculty"
    section = "section"


@dataclass(frozen=True)
class Assigned:
    id: str


class Unassigned:
    """Marker for an optional resource that is not set. Never equal to anything but itself."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "UNASSIGNED"


UNASSIGNED = Unassigned()

ResourceRef = Union[Assigned, Unassigned]


def resource_ref(value: str | None) -> ResourceRef:
    if value is None:
        return UNASSIGNED
    cleaned = str(value).strip()
    return Assigned(cleaned) if cleaned else UNASSIGNED


def shared_resource(a: ResourceRef, b: ResourceRef) -> str | None:
    """Id of the resource both sides hold, or None. Two unassigned sides share nothing."""
    if isinstance(a, Assigned) and isinstance(b, Assigned) and a.id == b.id:
        return a.id
    return None


@dataclass(frozen=True)
class ScheduleSlot:
    entry_id: str | None
    section_id: str | None
    semester: str
    day_of_week: int
    start: int
    end: int
    room: ResourceRef = UNASSIGNED
    faculty: ResourceRef = UNASSIGNED

    @property
    def window(self) -> str:
        return f"{day_name(self.day_of_week)} {format_minutes(self.start)}-{format_minutes(self.end)}"


def resource_keys(slot: ScheduleSlot) -> list[str]:
    """Keys of every resource the slot occupies, e.g. ``room:R1``."""
    keys: list[str] = []
    if isinstance(slot.room, Assigned):
        keys.append(f"room:{slot.room.id}")
    if isinstance(slot.faculty, Assigned):
        keys.append(f"faculty:{slot.faculty.id}")
    if slot.section_id is not None:
        keys.append(f"section:{slot.section_id}")
    return keys


@dataclass(frozen=True)
class ConflictReason:
    type: ConflictType
    conflicting_entry_id: str
    message: str

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "conflictingEntryId": self.conflicting_entry_id,
            "message": self.message,
        }


@dataclass(frozen=True)
class ConflictReport:
    reasons: tuple[ConflictReason, ...] = field(default_factory=tuple)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.reasons)

    @property
    def types(self) -> list[str]:
        return [reason.type.value for reason in self.reasons]

    def to_dict(self) -> dict:
        return {
            "conflicts": [reason.to_dict() for reason in self.reasons],
            "hasConflicts": self.has_conflicts,
        }


class ResourceLabels(Protocol):
    def room_name(self, room_id: str) -> str: ...

    def faculty_name(self, faculty_id: str) -> str: ...

    def section_code(self, section_id: str) -> str: ...


class RawLabels:
    """Falls back to bare ids when no reference data is at hand."""

    def room_name(self, room_id: str) -> str:
        return room_id

    def faculty_name(self, faculty_id: str) -> str:
        return faculty_id

    def section_code(self, section_id: str) -> str:
        return section_id


def classify(
    proposed: ScheduleSlot,
    candidate: ScheduleSlot,
    labels: ResourceLabels | None = None,
) -> list[ConflictReason]:
    """Reasons a candidate already overlapping in day and time conflicts with the proposal.

    Order is fixed (room, faculty, section) so rendered errors are reproducible.
    """
    labels = labels or RawLabels()
    candidate_id = candidate.entry_id or ""
    reasons: list[ConflictReason] = []

    room_id = shared_resource(proposed.room, candidate.room)
    if room_id is not None:
        reasons.append(
            ConflictReason(
                type=ConflictType.room,
                conflicting_entry_id=candidate_id,
                message=f"Room {labels.room_name(room_id)} is already booked on {candidate.window}",
            )
        )

    faculty_id = shared_resource(proposed.faculty, candidate.faculty)
    if faculty_id is not None:
        reasons.append(
            ConflictReason(
                type=ConflictType.faculty,
                conflicting_entry_id=candidate_id,
                message=f"Instructor {labels.faculty_name(faculty_id)} is already assigned on {candidate.window}",
            )
        )

    if proposed.section_id is not None and proposed.section_id == candidate.section_id:
        reasons.append(
            ConflictReason(
                type=ConflictType.section,
                conflicting_entry_id=candidate_id,
                message=f"Section {labels.section_code(proposed.section_id)} already meets on {candidate.window}",
            )
        )

    return reasons


def detect_conflicts(
    proposed: ScheduleSlot,
    candidates: Iterable[ScheduleSlot],
    labels: ResourceLabels | None = None,
) -> ConflictReport:
    reasons: list[ConflictReason] = []
    for candidate in candidates:
        if candidate.semester != proposed.semester or candidate.day_of_week != proposed.day_of_week:
            continue
        if not overlaps(proposed.start, proposed.end, candidate.start, candidate.end):
            continue
        reasons.extend(classify(proposed, candidate, labels))
    return ConflictReport(reasons=tuple(reasons))
