from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ScheduleEntryCreate(BaseModel):
    # Presence and range checks live in the validator so they answer 400 with the same shape.
    model_config = ConfigDict(populate_by_name=True)

    section_id: str | None = Field(default=None, alias="sectionId", max_length=36)
    semester: str | None = Field(default=None, max_length=50)
    day_of_week: int | None = Field(default=None, alias="dayOfWeek")
    start_time: str | None = Field(default=None, alias="startTime", max_length=5)
    end_time: str | None = Field(default=None, alias="endTime", max_length=5)
    room_id: str | None = Field(default=None, alias="roomId", max_length=36)
    faculty_id: str | None = Field(default=None, alias="facultyId", max_length=36)


class ScheduleEntryUpdate(BaseModel):
    # Section and semester are fixed once created.
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    day_of_week: int | None = Field(default=None, alias="dayOfWeek")
    start_time: str | None = Field(default=None, alias="startTime", max_length=5)
    end_time: str | None = Field(default=None, alias="endTime", max_length=5)
    room_id: str | None = Field(default=None, alias="roomId", max_length=36)
    faculty_id: str | None = Field(default=None, alias="facultyId", max_length=36)


class ScheduleEntryOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    section_id: str = Field(alias="sectionId")
    semester: str
    day_of_week: int = Field(alias="dayOfWeek")
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    room_id: str | None = Field(default=None, alias="roomId")
    faculty_id: str | None = Field(default=None, alias="facultyId")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
