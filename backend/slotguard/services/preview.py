"""Advisory conflict preview for forms that are still being edited.

Runs the same overlap and classification code as the authoritative commit
path, without locks or writes. A clean preview is no promise: only
``ScheduleValidator.commit`` decides.
"""

from __future__ import annotations

from dataclasses import replace

from slotguard.services.conflict_query import ConflictQuery
from slotguard.services.conflict_rules import ConflictReport, ResourceLabels, detect_conflicts
from slotguard.services.locks import Deadline
from slotguard.services.schedule_store import ScheduleStore
from slotguard.services.schedule_validation import ProposedEntry, check_structure

PREVIEW_REQUIRED_FIELDS = ("semester", "day_of_week", "start_time", "end_time")


def preview_conflicts(
    store: ScheduleStore,
    proposed: ProposedEntry,
    labels: ResourceLabels | None = None,
    *,
    timeout: float | None = None,
) -> ConflictReport:
    # proposed.id doubles as the entry to leave out when previewing an edit.
    slot = check_structure(proposed, required=PREVIEW_REQUIRED_FIELDS)
    deadline = Deadline(timeout)
    with store.transaction(deadline):
        candidates = ConflictQuery(store).find_candidates(slot.semester, slot.day_of_week, exclude_id=proposed.id)
        report = detect_conflicts(replace(slot, entry_id=None), candidates, labels)
        deadline.check("conflict preview")
    return report
