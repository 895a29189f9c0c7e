from datetime import date, datetime, time
from types import SimpleNamespace

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.core.config import Settings
from app.core.exceptions import ScheduleConflictError
from app.models.schedule import Schedule
from app.models.user import User
from app.schemas.conflict import ConflictGroup
from app.schemas.schedule import ScheduleWrite
from app.services import schedule_service


def write_payload(seeded, **overrides):
    values = {
        "teacher_id": seeded.teacher_a_id,
        "subject_id": seeded.subject_id,
        "classroom_id": seeded.room_a_id,
        "class_id": seeded.class_id,
        "academic_year": seeded.academic_year,
        "day_of_week": 1,
        "start_time": "09:00:00",
        "end_time": "10:00:00",
    }
    values.update(overrides)
    return ScheduleWrite(**values)


def fail_commit():
    raise IntegrityError("INSERT INTO schedules", {}, Exception("ex_schedules_teacher_overlap"))


def test_create_schedule_records_creator(db, seeded):
    actor = db.get(User, seeded.principal_id)

    schedule = schedule_service.create_schedule(db, write_payload(seeded), actor=actor, settings=Settings())

    assert schedule.created_by == seeded.principal_id
    assert schedule.start_time == time(9)


def test_conflict_rolls_back_without_writing(db, seeded):
    actor = db.get(User, seeded.principal_id)
    settings = Settings()
    schedule_service.create_schedule(db, write_payload(seeded), actor=actor, settings=settings)

    with pytest.raises(ScheduleConflictError) as excinfo:
        schedule_service.create_schedule(db, write_payload(seeded), actor=actor, settings=settings)

    assert excinfo.value.status_code == 409
    assert [group["type"] for group in excinfo.value.conflicts] == ["TEACHER_CONFLICT", "CLASSROOM_CONFLICT"]
    assert len(db.execute(select(Schedule)).scalars().all()) == 1


def test_year_scoping_can_be_disabled(db, seeded):
    actor = db.get(User, seeded.principal_id)
    schedule_service.create_schedule(db, write_payload(seeded), actor=actor, settings=Settings())
    next_year = write_payload(seeded, academic_year="2027-28")

    schedule_service.create_schedule(db, next_year, actor=actor, settings=Settings())
    with pytest.raises(ScheduleConflictError):
        schedule_service.create_schedule(
            db,
            next_year,
            actor=actor,
            settings=Settings(conflict_scope_by_academic_year=False),
        )


def test_constraint_violation_becomes_schedule_conflict(db, seeded, monkeypatch):
    actor = db.get(User, seeded.principal_id)
    group = ConflictGroup(type="TEACHER_CONFLICT", message="Teacher is already scheduled during this time", conflicts=[])
    results = iter([[], [group]])
    monkeypatch.setattr(schedule_service, "_guard", lambda *args: next(results))
    monkeypatch.setattr(db, "commit", fail_commit)

    with pytest.raises(ScheduleConflictError) as excinfo:
        schedule_service.create_schedule(db, write_payload(seeded), actor=actor, settings=Settings())

    assert excinfo.value.conflicts[0]["type"] == "TEACHER_CONFLICT"
    assert db.execute(select(Schedule)).scalars().all() == []


def test_unrelated_integrity_errors_propagate(db, seeded, monkeypatch):
    actor = db.get(User, seeded.principal_id)
    monkeypatch.setattr(schedule_service, "_guard", lambda *args: [])
    monkeypatch.setattr(db, "commit", fail_commit)

    with pytest.raises(IntegrityError):
        schedule_service.create_schedule(db, write_payload(seeded), actor=actor, settings=Settings())


def slot(day, start, end):
    return SimpleNamespace(day_of_week=day, start_time=start, end_time=end)


@pytest.mark.parametrize(
    "entry, expected",
    [
        (slot(3, time(9), time(10)), "current"),
        (slot(3, time(10), time(11)), "upcoming"),
        (slot(3, time(8), time(9)), "past"),
        (slot(4, time(8), time(9)), "upcoming"),
        (slot(2, time(15), time(16)), "past"),
    ],
)
def test_session_status(entry, expected):
    wednesday_morning = datetime(2026, 10, 21, 9, 30)

    assert schedule_service.session_status(entry, wednesday_morning) == expected


def test_week_start_is_monday():
    assert schedule_service.week_start_for(date(2026, 10, 25)) == date(2026, 10, 19)
    assert schedule_service.week_start_for(date(2026, 10, 19)) == date(2026, 10, 19)
