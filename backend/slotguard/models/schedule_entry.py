import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from slotguard.db.base import Base


class ScheduleEntry(Base):
    __tablename__ = "schedule_entries"
    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 1 AND 7", name="ck_schedule_entries_day_of_week"),
        CheckConstraint("start_time < end_time", name="ck_schedule_entries_time_order"),
        Index("ix_schedule_entries_semester_day", "semester", "day_of_week"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    section_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    semester: Mapped[str] = mapped_column(String(50), nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    # "HH:MM", zero padded, so string order is chronological order.
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    room_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    faculty_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
