from datetime import time
from types import SimpleNamespace

from app.services.workload import WORKLOAD, compute_workload_conflicts, session_seconds


def session(entry_id, teacher_id, day, start, end, year="2026-27"):
    return SimpleNamespace(
        id=entry_id,
        teacher_id=teacher_id,
        academic_year=year,
        day_of_week=day,
        start_time=time.fromisoformat(start),
        end_time=time.fromisoformat(end),
    )


def full_day(teacher_id="t1", day=1):
    return [
        session("s1", teacher_id, day, "08:00", "09:30"),
        session("s2", teacher_id, day, "09:30", "11:00"),
        session("s3", teacher_id, day, "11:00", "12:30"),
        session("s4", teacher_id, day, "13:00", "14:30"),
    ]


def test_session_seconds():
    assert session_seconds(time(9, 0), time(10, 30)) == 5400
    assert session_seconds(time(10, 0), time(9, 0)) == 0


def test_exactly_six_hours_is_not_overloaded():
    assert compute_workload_conflicts(full_day()) == []


def test_one_more_short_session_tips_the_day_over():
    entries = full_day() + [session("s5", "t1", 1, "15:00", "15:06")]

    conflicts = compute_workload_conflicts(entries)

    assert len(conflicts) == 1
    conflict = conflicts[0]
    assert conflict.type == WORKLOAD
    assert conflict.total_hours == 6.1
    assert conflict.teacher_id == "t1"
    assert conflict.day_of_week == 1
    assert conflict.schedule_a == "s1"


def test_hours_are_not_summed_across_days():
    entries = full_day(day=1) + [session("s5", "t1", 2, "08:00", "12:00")]

    assert compute_workload_conflicts(entries) == []


def test_threshold_is_configurable():
    conflicts = compute_workload_conflicts(full_day(), threshold_hours=5.5)

    assert len(conflicts) == 1
    assert conflicts[0].total_hours == 6.0


def test_workload_follows_first_appearance_order():
    entries = [
        session("b1", "t2", 3, "08:00", "15:00"),
        session("a1", "t1", 1, "08:00", "15:00"),
    ]

    conflicts = compute_workload_conflicts(entries)

    assert [item.teacher_id for item in conflicts] == ["t2", "t1"]


def test_academic_year_scoping_splits_workload():
    entries = [
        session("s1", "t1", 1, "08:00", "12:00", year="2025-26"),
        session("s2", "t1", 1, "12:00", "16:00", year="2026-27"),
    ]

    assert compute_workload_conflicts(entries) == []

    unscoped = compute_workload_conflicts(entries, scope_by_academic_year=False)
    assert len(unscoped) == 1
    assert unscoped[0].total_hours == 8.0
