from fastapi import APIRouter, Depends, status

from slotguard.api.deps import get_schedule_validator
from slotguard.schemas.schedule import ScheduleEntryCreate, ScheduleEntryOut, ScheduleEntryUpdate
from slotguard.services.schedule_validation import ProposedEntry, ScheduleValidator, ValidationMode

router = APIRouter()


@router.post("", response_model=ScheduleEntryOut, status_code=status.HTTP_201_CREATED)
def create_schedule(
    payload: ScheduleEntryCreate,
    validator: ScheduleValidator = Depends(get_schedule_validator),
) -> ScheduleEntryOut:
    proposed = ProposedEntry(**payload.model_dump())
    return validator.commit(proposed, ValidationMode.create)


@router.get("/{entry_id}", response_model=ScheduleEntryOut)
def get_schedule(
    entry_id: str,
    validator: ScheduleValidator = Depends(get_schedule_validator),
) -> ScheduleEntryOut:
    return validator.get(entry_id)


@router.put("/{entry_id}", response_model=ScheduleEntryOut)
def update_schedule(
    entry_id: str,
    payload: ScheduleEntryUpdate,
    validator: ScheduleValidator = Depends(get_schedule_validator),
) -> ScheduleEntryOut:
    return validator.update(entry_id, payload.model_dump(exclude_unset=True))


@router.delete("/{entry_id}")
def delete_schedule(
    entry_id: str,
    validator: ScheduleValidator = Depends(get_schedule_validator),
) -> dict:
    validator.delete(entry_id)
    return {"success": True}
