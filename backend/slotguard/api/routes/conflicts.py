from fastapi import APIRouter, Depends, Query

from slotguard.api.deps import get_reference_lookup, get_schedule_store
from slotguard.core.config import get_settings
from slotguard.schemas.conflict import ConflictReportOut
from slotguard.services.preview import preview_conflicts
from slotguard.services.reference_lookup import ReferenceLookup
from slotguard.services.schedule_store import SqlScheduleStore
from slotguard.services.schedule_validation import ProposedEntry

router = APIRouter()


@router.get("/preview", response_model=ConflictReportOut)
def preview(
    semester: str = Query(min_length=1, max_length=50),
    day_of_week: int = Query(alias="dayOfWeek"),
    start_time: str = Query(alias="startTime"),
    end_time: str = Query(alias="endTime"),
    room_id: str | None = Query(default=None, alias="roomId"),
    faculty_id: str | None = Query(default=None, alias="facultyId"),
    section_id: str | None = Query(default=None, alias="sectionId"),
    exclude_id: str | None = Query(default=None, alias="excludeId"),
    store: SqlScheduleStore = Depends(get_schedule_store),
    labels: ReferenceLookup = Depends(get_reference_lookup),
) -> ConflictReportOut:
    proposed = ProposedEntry(
        id=exclude_id,
        section_id=section_id,
        semester=semester,
        day_of_week=day_of_week,
        start_time=start_time,
        end_time=end_time,
        room_id=room_id,
        faculty_id=faculty_id,
    )
    report = preview_conflicts(store, proposed, labels, timeout=get_settings().store_timeout_seconds)
    return ConflictReportOut.model_validate({**report.to_dict(), "advisory": True})
