from slotguard.models.reference import Faculty, Room, Section  # noqa: F401
from slotguard.models.schedule_entry import ScheduleEntry  # noqa: F401
from slotguard.models.schedule_slot_claim import ScheduleSlotClaim  # noqa: F401
