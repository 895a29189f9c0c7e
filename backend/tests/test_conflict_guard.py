from datetime import time
from types import SimpleNamespace

import pytest

from app.services.conflict_service import (
    CLASSROOM_CONFLICT,
    CLASSROOM_CONFLICT_MESSAGE,
    TEACHER_CONFLICT,
    TEACHER_CONFLICT_MESSAGE,
    check_conflicts,
    overlaps,
)


class FakeScheduleStore:
    def __init__(self, entries=None):
        self.entries = list(entries or [])
        self.locked: list[str] = []

    def find_overlapping(self, *, field, value, day_of_week, start_time, end_time, academic_year=None, exclude_id=None):
        return [
            item
            for item in self.entries
            if getattr(item, field) == value
            and item.day_of_week == day_of_week
            and (academic_year is None or item.academic_year == academic_year)
            and item.id != exclude_id
            and overlaps(start_time, end_time, item.start_time, item.end_time)
        ]

    def list_all(self):
        return list(self.entries)

    def enrollment_counts(self):
        return {}

    def classroom_capacities(self):
        return {}

    def lock_slots(self, keys):
        self.locked.extend(sorted(keys))


class BrokenStore(FakeScheduleStore):
    def find_overlapping(self, **kwargs):
        raise RuntimeError("database unavailable")


def existing(entry_id="s1", teacher_id="t1", classroom_id="r1", day=1, start=time(9), end=time(10), year="2026-27"):
    return SimpleNamespace(
        id=entry_id,
        teacher_id=teacher_id,
        subject_id="math",
        classroom_id=classroom_id,
        academic_year=year,
        day_of_week=day,
        start_time=start,
        end_time=end,
    )


def propose(store, **overrides):
    request = {
        "teacher_id": "t1",
        "classroom_id": "r1",
        "day_of_week": 1,
        "start_time": time(9, 30),
        "end_time": time(10, 30),
        "academic_year": "2026-27",
    }
    request.update(overrides)
    return check_conflicts(store, **request)


def test_disjoint_slot_is_accepted():
    store = FakeScheduleStore([existing()])

    assert propose(store, start_time=time(10), end_time=time(11)) == []
    assert propose(store, day_of_week=2) == []


def test_teacher_double_booking_is_reported():
    store = FakeScheduleStore([existing()])

    groups = propose(store, classroom_id="r2")

    assert len(groups) == 1
    assert groups[0].type == TEACHER_CONFLICT
    assert groups[0].message == TEACHER_CONFLICT_MESSAGE
    assert [item.id for item in groups[0].conflicts] == ["s1"]


def test_classroom_double_booking_is_reported():
    store = FakeScheduleStore([existing()])

    groups = propose(store, teacher_id="t2")

    assert len(groups) == 1
    assert groups[0].type == CLASSROOM_CONFLICT
    assert groups[0].message == CLASSROOM_CONFLICT_MESSAGE


def test_same_entry_can_appear_in_both_groups():
    store = FakeScheduleStore([existing()])

    groups = propose(store)

    assert [group.type for group in groups] == [TEACHER_CONFLICT, CLASSROOM_CONFLICT]
    assert all(group.conflicts[0].id == "s1" for group in groups)


def test_updating_an_entry_does_not_conflict_with_itself():
    store = FakeScheduleStore([existing()])

    assert propose(store, start_time=time(9), end_time=time(10), exclude_id="s1") == []


def test_other_academic_years_are_ignored_when_scoped():
    store = FakeScheduleStore([existing(year="2025-26")])

    assert propose(store) == []
    assert len(propose(store, academic_year=None)) == 2


def test_guard_does_not_write_to_the_store():
    store = FakeScheduleStore([existing()])

    propose(store)

    assert [item.id for item in store.entries] == ["s1"]
    assert store.locked == []


def test_store_failures_propagate():
    with pytest.raises(RuntimeError, match="database unavailable"):
        propose(BrokenStore())
