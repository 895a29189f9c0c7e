from __future__ import annotations

import re
from datetime import date, time
from typing import Literal

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from app.schemas.reference import TeacherOut

TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):[0-5]\d:[0-5]\d$")


def parse_clock_time(value: str) -> time:
    """Parse an ``HH:MM:SS`` wall-clock string; single-digit hours are accepted."""
    stripped = value.strip()
    if not TIME_PATTERN.match(stripped):
        raise ValueError("Time must be in HH:MM:SS format")
    hours, minutes, seconds = (int(part) for part in stripped.split(":"))
    return time(hours, minutes, seconds)


class ScheduleWrite(BaseModel):
    teacher_id: str = Field(min_length=1, max_length=36)
    subject_id: str = Field(min_length=1, max_length=36)
    classroom_id: str = Field(min_length=1, max_length=36)
    class_id: str = Field(min_length=1, max_length=36)
    section_id: str | None = Field(default=None, min_length=1, max_length=36)
    academic_year: str = Field(min_length=1, max_length=20)
    day_of_week: int = Field(ge=1, le=7)
    start_time: time
    end_time: time

    @field_validator("academic_year")
    @classmethod
    def strip_academic_year(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Academic year is required")
        return stripped

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def validate_time_format(cls, value: object) -> object:
        if isinstance(value, time):
            return value
        if not isinstance(value, str):
            raise ValueError("Time must be in HH:MM:SS format")
        return parse_clock_time(value)

    @field_validator("end_time")
    @classmethod
    def validate_time_order(cls, value: time, info: ValidationInfo) -> time:
        start = info.data.get("start_time")
        if start is not None and value <= start:
            raise ValueError("Start time must be before end time")
        return value


class ScheduleOut(BaseModel):
    id: str
    teacher_id: str
    subject_id: str
    classroom_id: str
    class_id: str
    section_id: str | None = None
    academic_year: str
    day_of_week: int
    start_time: time
    end_time: time
    is_active: bool = True

    teacher_name: str | None = None
    subject_name: str | None = None
    subject_code: str | None = None
    subject_color: str | None = None
    room_number: str | None = None
    building: str | None = None
    floor: int | None = None
    class_name: str | None = None
    section_name: str | None = None


class ScheduleListOut(BaseModel):
    schedules: list[ScheduleOut]
    count: int


class TeacherTimetableOut(BaseModel):
    teacher: TeacherOut
    schedule: list[ScheduleOut]


class ScheduleStatusOut(ScheduleOut):
    status: Literal["current", "upcoming", "past"]


class MyTimetableOut(BaseModel):
    current_class: ScheduleStatusOut | None = None
    upcoming_classes: list[ScheduleStatusOut] = Field(default_factory=list)
    full_schedule: list[ScheduleStatusOut] = Field(default_factory=list)


class WeeklyScheduleOut(BaseModel):
    teacher_id: str
    week_start: date
    schedule: dict[str, list[ScheduleOut]]
