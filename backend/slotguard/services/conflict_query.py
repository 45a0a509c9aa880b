from __future__ import annotations

from slotguard.core.exceptions import StoreUnavailableError
from slotguard.models.schedule_entry import ScheduleEntry
from slotguard.services.conflict_rules import ScheduleSlot, resource_ref
from slotguard.services.intervals import parse_time_to_minutes
from slotguard.services.schedule_store import ScheduleStore


def slot_from_record(record: ScheduleEntry) -> ScheduleSlot:
    return ScheduleSlot(
        entry_id=record.id,
        section_id=record.section_id,
        semester=record.semester,
        day_of_week=record.day_of_week,
        start=parse_time_to_minutes(record.start_time),
        end=parse_time_to_minutes(record.end_time),
        room=resource_ref(record.room_id),
        faculty=resource_ref(record.faculty_id),
    )


class ConflictQuery:
    """Fetches every persisted entry that could collide with a proposal.

    Narrowing by time is left to the caller; the store only filters by
    semester and day so it does not need portable range predicates.
    """

    def __init__(self, store: ScheduleStore) -> None:
        self.store = store

    def find_candidates(
        self,
        semester: str,
        day_of_week: int,
        exclude_id: str | None = None,
    ) -> list[ScheduleSlot]:
        records = self.store.query(semester, day_of_week)
        if records is None:
            # An empty answer must mean "nothing stored", never "could not look".
            raise StoreUnavailableError()
        return [
            slot_from_record(record)
            for record in records
            if exclude_id is None or record.id != exclude_id
        ]
