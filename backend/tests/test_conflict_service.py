from datetime import time
from types import SimpleNamespace

import pytest

from app.services.conflict_service import (
    CAPACITY,
    CLASSROOM_CONFLICT,
    TEACHER_CONFLICT,
    build_conflict_report,
    classify_pair,
    compute_all_conflicts,
    compute_capacity_conflicts,
    overlaps,
)
from app.services.workload import WORKLOAD


def t(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def entry(entry_id, teacher_id, classroom_id, day, start, end, *, year="2026-27", class_id="c1", section_id=None):
    return SimpleNamespace(
        id=entry_id,
        teacher_id=teacher_id,
        subject_id="math",
        classroom_id=classroom_id,
        class_id=class_id,
        section_id=section_id,
        academic_year=year,
        day_of_week=day,
        start_time=t(start),
        end_time=t(end),
    )


class ListStore:
    def __init__(self, entries, enrolled=None, capacities=None):
        self.entries = entries
        self.enrolled = enrolled or {}
        self.capacities = capacities or {}

    def list_all(self):
        return list(self.entries)

    def enrollment_counts(self):
        return self.enrolled

    def classroom_capacities(self):
        return self.capacities


@pytest.mark.parametrize(
    "a, b, expected",
    [
        (("09:00", "10:00"), ("09:30", "10:30"), True),
        (("09:00", "10:00"), ("10:00", "11:00"), False),
        (("09:00", "12:00"), ("10:00", "11:00"), True),
        (("09:00", "10:00"), ("09:00", "10:00"), True),
        (("08:00", "09:00"), ("11:00", "12:00"), False),
    ],
)
def test_overlap_is_symmetric(a, b, expected):
    assert overlaps(t(a[0]), t(a[1]), t(b[0]), t(b[1])) is expected
    assert overlaps(t(b[0]), t(b[1]), t(a[0]), t(a[1])) is expected


def test_touching_sessions_do_not_overlap():
    assert overlaps(t("09:00"), t("10:00"), t("10:00"), t("11:00")) is False


def test_classify_pair_emits_teacher_before_classroom():
    a = entry("s1", "t1", "r1", 1, "09:00", "10:00")
    b = entry("s2", "t1", "r1", 1, "09:30", "10:30")

    conflicts = classify_pair(a, b)

    assert [item.type for item in conflicts] == [TEACHER_CONFLICT, CLASSROOM_CONFLICT]
    assert conflicts[0].teacher_id == "t1"
    assert conflicts[0].classroom_id is None
    assert conflicts[1].classroom_id == "r1"
    assert conflicts[1].teacher_id is None


def test_classify_pair_without_shared_resources_is_empty():
    a = entry("s1", "t1", "r1", 1, "09:00", "10:00")
    b = entry("s2", "t2", "r2", 1, "09:00", "10:00")

    assert classify_pair(a, b) == []


def test_report_lists_both_conflicts_for_a_double_booked_pair():
    entries = [
        entry("s1", "t1", "r1", 1, "09:00", "10:00"),
        entry("s2", "t1", "r1", 1, "09:30", "10:30"),
        entry("s3", "t1", "r1", 2, "09:00", "10:00"),
    ]

    conflicts = compute_all_conflicts(entries)

    assert len(conflicts) == 2
    assert [item.type for item in conflicts] == [TEACHER_CONFLICT, CLASSROOM_CONFLICT]
    for conflict in conflicts:
        assert conflict.schedule_a == "s1"
        assert conflict.schedule_b == "s2"
        assert conflict.day_of_week == 1
        assert conflict.start_time == t("09:00")
        assert conflict.end_time == t("10:00")
        assert conflict.schedule_b_start_time == t("09:30")
        assert conflict.schedule_b_end_time == t("10:30")


def test_report_orders_pairs_by_input_position():
    entries = [
        entry("a", "t1", "r1", 3, "09:00", "11:00"),
        entry("b", "t1", "r2", 3, "09:30", "10:30"),
        entry("c", "t1", "r3", 3, "10:00", "12:00"),
    ]

    conflicts = compute_all_conflicts(entries)

    assert [(item.schedule_a, item.schedule_b) for item in conflicts] == [("a", "b"), ("a", "c"), ("b", "c")]
    assert {item.type for item in conflicts} == {TEACHER_CONFLICT}


def test_report_is_idempotent_and_leaves_input_untouched():
    entries = [
        entry("s1", "t1", "r1", 1, "09:00", "10:00"),
        entry("s2", "t2", "r1", 1, "09:15", "09:45"),
    ]
    snapshot = [vars(item).copy() for item in entries]

    first = compute_all_conflicts(entries)
    second = compute_all_conflicts(entries)

    assert first == second
    assert [vars(item) for item in entries] == snapshot


def test_back_to_back_sessions_are_not_reported():
    entries = [
        entry("s1", "t1", "r1", 1, "09:00", "10:00"),
        entry("s2", "t1", "r1", 1, "10:00", "11:00"),
    ]

    assert compute_all_conflicts(entries) == []


def test_entries_in_different_academic_years_are_separate_by_default():
    entries = [
        entry("s1", "t1", "r1", 1, "09:00", "10:00", year="2025-26"),
        entry("s2", "t1", "r2", 1, "09:00", "10:00", year="2026-27"),
    ]

    assert compute_all_conflicts(entries) == []

    unscoped = compute_all_conflicts(entries, scope_by_academic_year=False)
    assert len(unscoped) == 1
    assert unscoped[0].type == TEACHER_CONFLICT


def test_capacity_conflict_when_enrollment_exceeds_room():
    entries = [
        entry("s1", "t1", "r1", 1, "09:00", "10:00", class_id="c1", section_id="sa"),
        entry("s2", "t2", "r2", 1, "09:00", "10:00", class_id="c1"),
        entry("s3", "t3", "r3", 1, "09:00", "10:00", class_id="c2"),
    ]
    enrolled = {("c1", "sa"): 45, ("c1", None): 60}
    capacities = {"r1": 40, "r2": 60}

    conflicts = compute_capacity_conflicts(entries, enrolled, capacities)

    assert len(conflicts) == 1
    assert conflicts[0].type == CAPACITY
    assert conflicts[0].schedule_a == "s1"
    assert conflicts[0].enrolled == 45
    assert conflicts[0].capacity == 40
    assert conflicts[0].schedule_b is None
    assert conflicts[0].schedule_b_start_time is None


def test_extended_report_appends_workload_then_capacity():
    entries = [
        entry("s1", "t1", "r1", 1, "08:00", "12:00", section_id="sa"),
        entry("s2", "t1", "r1", 1, "11:00", "15:00"),
    ]
    store = ListStore(entries, enrolled={("c1", "sa"): 50}, capacities={"r1": 30})

    basic = build_conflict_report(store)
    extended = build_conflict_report(store, extended=True)

    assert [item.type for item in basic] == [TEACHER_CONFLICT, CLASSROOM_CONFLICT]
    assert [item.type for item in extended] == [TEACHER_CONFLICT, CLASSROOM_CONFLICT, WORKLOAD, CAPACITY]
    assert extended[2].total_hours == 8.0
