from datetime import time
from typing import Literal, Optional, List

from pydantic import BaseModel

ConflictType = Literal["TEACHER_CONFLICT", "CLASSROOM_CONFLICT", "WORKLOAD", "CAPACITY"]


class ScheduleConflict(BaseModel):
    """A violation derived from the current schedule entries; never stored."""
    type: ConflictType
    schedule_a: str
    schedule_b: Optional[str] = None
    day_of_week: int
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    schedule_b_start_time: Optional[time] = None
    schedule_b_end_time: Optional[time] = None
    teacher_id: Optional[str] = None
    classroom_id: Optional[str] = None
    total_hours: Optional[float] = None
    enrolled: Optional[int] = None
    capacity: Optional[int] = None


class ConflictingSchedule(BaseModel):
    id: str
    teacher_id: str
    subject_id: str
    classroom_id: str
    day_of_week: int
    start_time: time
    end_time: time

    model_config = {"from_attributes": True}


class ConflictGroup(BaseModel):
    type: Literal["TEACHER_CONFLICT", "CLASSROOM_CONFLICT"]
    message: str
    conflicts: List[ConflictingSchedule]


class ConflictReport(BaseModel):
    conflicts: List[ScheduleConflict]
    count: int
