"""Schedule conflict detection.

Every check here works on weekly recurring entries: anything exposing
``id``, ``teacher_id``, ``classroom_id``, ``day_of_week``, ``start_time``,
``end_time`` and ``academic_year`` attributes (ORM ``Schedule`` rows in
production, plain objects in tests). Conflicts are always recomputed from
the entries passed in.
"""
from __future__ import annotations

from datetime import time
from typing import Any, Iterable, Sequence

from app.schemas.conflict import ConflictGroup, ConflictingSchedule, ScheduleConflict
from app.services.schedule_store import ScheduleStore
from app.services.workload import compute_workload_conflicts

TEACHER_CONFLICT = "TEACHER_CONFLICT"
CLASSROOM_CONFLICT = "CLASSROOM_CONFLICT"
CAPACITY = "CAPACITY"

TEACHER_CONFLICT_MESSAGE = "Teacher is already scheduled during this time"
CLASSROOM_CONFLICT_MESSAGE = "Classroom is already booked during this time"


def overlaps(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    # Half-open ranges: a session ending at 09:00 does not collide with one starting at 09:00.
    return start_a < end_b and start_b < end_a


def classify_pair(a: Any, b: Any) -> list[ScheduleConflict]:
    """Conflicts between two entries already known to share a day and overlap.

    Teacher comes before classroom; a pair matching on both yields both.
    """
    conflicts: list[ScheduleConflict] = []
    if a.teacher_id == b.teacher_id:
        conflicts.append(_pair_conflict(TEACHER_CONFLICT, a, b))
    if a.classroom_id == b.classroom_id:
        conflicts.append(_pair_conflict(CLASSROOM_CONFLICT, a, b))
    return conflicts


def _pair_conflict(conflict_type: str, a: Any, b: Any) -> ScheduleConflict:
    return ScheduleConflict(
        type=conflict_type,
        schedule_a=a.id,
        schedule_b=b.id,
        day_of_week=a.day_of_week,
        start_time=a.start_time,
        end_time=a.end_time,
        schedule_b_start_time=b.start_time,
        schedule_b_end_time=b.end_time,
        teacher_id=a.teacher_id if conflict_type == TEACHER_CONFLICT else None,
        classroom_id=a.classroom_id if conflict_type == CLASSROOM_CONFLICT else None,
    )


def compute_all_conflicts(entries: Sequence[Any], *, scope_by_academic_year: bool = True) -> list[ScheduleConflict]:
    # O(n^2) is fine for a single institution's weekly timetable.
    conflicts: list[ScheduleConflict] = []
    n = len(entries)
    for i in range(n):
        a = entries[i]
        for j in range(i + 1, n):
            b = entries[j]
            if a.day_of_week != b.day_of_week:
                continue
            if scope_by_academic_year and a.academic_year != b.academic_year:
                continue
            if not overlaps(a.start_time, a.end_time, b.start_time, b.end_time):
                continue
            conflicts.extend(classify_pair(a, b))
    return conflicts


def compute_capacity_conflicts(
    entries: Iterable[Any],
    enrolled_counts: dict[tuple[str, str | None], int],
    capacities: dict[str, int],
) -> list[ScheduleConflict]:
    conflicts: list[ScheduleConflict] = []
    for entry in entries:
        capacity = capacities.get(entry.classroom_id)
        enrolled = enrolled_counts.get((entry.class_id, entry.section_id))
        if capacity is None or enrolled is None:
            continue
        if enrolled > capacity:
            conflicts.append(
                ScheduleConflict(
                    type=CAPACITY,
                    schedule_a=entry.id,
                    day_of_week=entry.day_of_week,
                    start_time=entry.start_time,
                    end_time=entry.end_time,
                    classroom_id=entry.classroom_id,
                    enrolled=enrolled,
                    capacity=capacity,
                )
            )
    return conflicts


def build_conflict_report(
    store: ScheduleStore,
    *,
    extended: bool = False,
    scope_by_academic_year: bool = True,
    workload_threshold_hours: float = 6.0,
) -> list[ScheduleConflict]:
    """Pairwise conflicts over the whole timetable.

    With ``extended`` the workload and capacity checks are appended after the
    pairwise ones. The lists are unioned as-is: a pair that is both a teacher
    conflict and part of an overloaded day shows up in both sections.
    """
    entries = store.list_all()
    conflicts = compute_all_conflicts(entries, scope_by_academic_year=scope_by_academic_year)
    if extended:
        conflicts.extend(
            compute_workload_conflicts(
                entries,
                threshold_hours=workload_threshold_hours,
                scope_by_academic_year=scope_by_academic_year,
            )
        )
        conflicts.extend(
            compute_capacity_conflicts(entries, store.enrollment_counts(), store.classroom_capacities())
        )
    return conflicts


def check_conflicts(
    store: ScheduleStore,
    *,
    teacher_id: str,
    classroom_id: str,
    day_of_week: int,
    start_time: time,
    end_time: time,
    academic_year: str | None = None,
    exclude_id: str | None = None,
) -> list[ConflictGroup]:
    """Existing entries a proposed schedule would collide with.

    Teacher and classroom are scanned independently, so the same existing
    entry can appear in both groups. Read-only: the caller decides whether
    to abort the write. Store errors propagate untouched.
    """
    groups: list[ConflictGroup] = []
    scans = (
        ("teacher_id", teacher_id, TEACHER_CONFLICT, TEACHER_CONFLICT_MESSAGE),
        ("classroom_id", classroom_id, CLASSROOM_CONFLICT, CLASSROOM_CONFLICT_MESSAGE),
    )
    for field, value, conflict_type, message in scans:
        candidates = store.find_overlapping(
            field=field,
            value=value,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
            academic_year=academic_year,
            exclude_id=exclude_id,
        )
        hits = [
            entry
            for entry in candidates
            if entry.id != exclude_id and overlaps(start_time, end_time, entry.start_time, entry.end_time)
        ]
        if hits:
            groups.append(
                ConflictGroup(
                    type=conflict_type,
                    message=message,
                    conflicts=[ConflictingSchedule.model_validate(entry) for entry in hits],
                )
            )
    return groups
