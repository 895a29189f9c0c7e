from __future__ import annotations

from datetime import datetime, time
from typing import Any, Iterable

from app.schemas.conflict import ScheduleConflict

WORKLOAD = "WORKLOAD"
DEFAULT_DAILY_HOURS_LIMIT = 6.0


def session_seconds(start_time: time, end_time: time) -> int:
    anchor = datetime.min
    delta = datetime.combine(anchor, end_time) - datetime.combine(anchor, start_time)
    return max(0, int(delta.total_seconds()))


def teacher_daily_seconds(
    entries: Iterable[Any],
    *,
    scope_by_academic_year: bool = True,
) -> dict[tuple, dict[str, Any]]:
    """Teaching seconds per teacher and day, keyed in first-seen order.

    With year scoping the academic year is part of the key, since entries of
    different years never run in the same week.
    """
    totals: dict[tuple, dict[str, Any]] = {}
    for entry in entries:
        if scope_by_academic_year:
            key = (entry.teacher_id, entry.academic_year, entry.day_of_week)
        else:
            key = (entry.teacher_id, entry.day_of_week)
        bucket = totals.get(key)
        if bucket is None:
            bucket = {"first_entry": entry, "seconds": 0}
            totals[key] = bucket
        bucket["seconds"] += session_seconds(entry.start_time, entry.end_time)
    return totals


def compute_workload_conflicts(
    entries: Iterable[Any],
    *,
    threshold_hours: float = DEFAULT_DAILY_HOURS_LIMIT,
    scope_by_academic_year: bool = True,
) -> list[ScheduleConflict]:
    # Totals stay in whole seconds so 4 x 1.5h lands exactly on a 6h limit.
    limit_seconds = threshold_hours * 3600
    conflicts: list[ScheduleConflict] = []
    for bucket in teacher_daily_seconds(entries, scope_by_academic_year=scope_by_academic_year).values():
        if bucket["seconds"] <= limit_seconds:
            continue
        first = bucket["first_entry"]
        conflicts.append(
            ScheduleConflict(
                type=WORKLOAD,
                schedule_a=first.id,
                day_of_week=first.day_of_week,
                teacher_id=first.teacher_id,
                total_hours=round(bucket["seconds"] / 3600, 2),
            )
        )
    return conflicts
