import uuid

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from slotguard.db.base import Base


class ScheduleSlotClaim(Base):
    """One occupied minute of one resource; the unique key backs the in-process conflict check."""

    __tablename__ = "schedule_slot_claims"
    __table_args__ = (
        UniqueConstraint("resource_key", "semester", "day_of_week", "minute", name="uq_schedule_slot_claims_slot"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    entry_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("schedule_entries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    resource_key: Mapped[str] = mapped_column(String(80), nullable=False)
    semester: Mapped[str] = mapped_column(String(50), nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    minute: Mapped[int] = mapped_column(Integer, nullable=False)
