from __future__ import annotations

from collections import defaultdict
from datetime import time
from typing import Iterable, Protocol

from sqlalchemy import func, select, text
from sqlalchemy.orm import Session

from app.models.classroom import Classroom
from app.models.schedule import Schedule
from app.models.student import Student

SLOT_FIELDS = ("teacher_id", "classroom_id")


class ScheduleStore(Protocol):
    """Read access to persisted schedule entries, plus the write-slot lock."""

    def find_overlapping(
        self,
        *,
        field: str,
        value: str,
        day_of_week: int,
        start_time: time,
        end_time: time,
        academic_year: str | None = None,
        exclude_id: str | None = None,
    ) -> list[Schedule]: ...

    def list_all(self) -> list[Schedule]: ...

    def enrollment_counts(self) -> dict[tuple[str, str | None], int]: ...

    def classroom_capacities(self) -> dict[str, int]: ...

    def lock_slots(self, keys: Iterable[str]) -> None: ...


def slot_lock_keys(teacher_id: str, classroom_id: str, day_of_week: int) -> list[str]:
    return [f"teacher:{teacher_id}:{day_of_week}", f"classroom:{classroom_id}:{day_of_week}"]


class SqlScheduleStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_overlapping(
        self,
        *,
        field: str,
        value: str,
        day_of_week: int,
        start_time: time,
        end_time: time,
        academic_year: str | None = None,
        exclude_id: str | None = None,
    ) -> list[Schedule]:
        if field not in SLOT_FIELDS:
            raise ValueError(f"Unsupported slot field: {field}")
        statement = select(Schedule).where(
            getattr(Schedule, field) == value,
            Schedule.day_of_week == day_of_week,
            Schedule.is_active.is_(True),
            Schedule.start_time < end_time,
            Schedule.end_time > start_time,
        )
        if academic_year is not None:
            statement = statement.where(Schedule.academic_year == academic_year)
        if exclude_id is not None:
            statement = statement.where(Schedule.id != exclude_id)
        statement = statement.order_by(Schedule.start_time, Schedule.id)
        return list(self.db.execute(statement).scalars())

    def list_all(self) -> list[Schedule]:
        statement = (
            select(Schedule)
            .where(Schedule.is_active.is_(True))
            .order_by(Schedule.day_of_week, Schedule.start_time, Schedule.id)
        )
        return list(self.db.execute(statement).scalars())

    def enrollment_counts(self) -> dict[tuple[str, str | None], int]:
        # (class, None) counts the whole class; (class, section) only that section.
        rows = self.db.execute(
            select(Student.class_id, Student.section_id, func.count(Student.id))
            .where(Student.is_active.is_(True))
            .group_by(Student.class_id, Student.section_id)
        ).all()
        counts: dict[tuple[str, str | None], int] = defaultdict(int)
        for class_id, section_id, total in rows:
            counts[(class_id, None)] += total
            if section_id is not None:
                counts[(class_id, section_id)] += total
        return dict(counts)

    def classroom_capacities(self) -> dict[str, int]:
        rows = self.db.execute(select(Classroom.id, Classroom.capacity)).all()
        return {classroom_id: capacity for classroom_id, capacity in rows}

    def lock_slots(self, keys: Iterable[str]) -> None:
        """Take transaction-scoped advisory locks so concurrent writers for the
        same teacher/day or classroom/day run check-then-insert one at a time.

        Keys are locked in sorted order to avoid deadlocks. Only PostgreSQL
        closes the race; on other dialects this is a no-op and concurrent
        writers can both pass the guard.
        """
        if self.db.get_bind().dialect.name != "postgresql":
            return
        for key in sorted(set(keys)):
            self.db.execute(text("SELECT pg_advisory_xact_lock(hashtext(:key))"), {"key": key})
