from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timedelta
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.exceptions import ResourceNotFoundError, ScheduleConflictError
from app.models.classroom import Classroom
from app.models.schedule import Schedule
from app.models.school_class import SchoolClass, Section
from app.models.subject import Subject
from app.models.user import User, UserRole
from app.schemas.conflict import ConflictGroup
from app.schemas.schedule import ScheduleOut, ScheduleStatusOut, ScheduleWrite
from app.services.conflict_service import check_conflicts
from app.services.schedule_store import SqlScheduleStore, slot_lock_keys

logger = logging.getLogger(__name__)

UPCOMING_LIMIT = 5


def to_schedule_out(schedule: Schedule) -> ScheduleOut:
    return ScheduleOut(
        id=schedule.id,
        teacher_id=schedule.teacher_id,
        subject_id=schedule.subject_id,
        classroom_id=schedule.classroom_id,
        class_id=schedule.class_id,
        section_id=schedule.section_id,
        academic_year=schedule.academic_year,
        day_of_week=schedule.day_of_week,
        start_time=schedule.start_time,
        end_time=schedule.end_time,
        is_active=schedule.is_active,
        teacher_name=schedule.teacher.name if schedule.teacher else None,
        subject_name=schedule.subject.name if schedule.subject else None,
        subject_code=schedule.subject.code if schedule.subject else None,
        subject_color=schedule.subject.color if schedule.subject else None,
        room_number=schedule.classroom.room_number if schedule.classroom else None,
        building=schedule.classroom.building if schedule.classroom else None,
        floor=schedule.classroom.floor if schedule.classroom else None,
        class_name=schedule.school_class.name if schedule.school_class else None,
        section_name=schedule.section.name if schedule.section else None,
    )


def get_teacher(db: Session, teacher_id: str) -> User:
    teacher = db.get(User, teacher_id)
    if teacher is None or teacher.role != UserRole.teacher:
        raise ResourceNotFoundError("Teacher", teacher_id)
    return teacher


def get_schedule(db: Session, schedule_id: str) -> Schedule:
    schedule = db.get(Schedule, schedule_id)
    if schedule is None:
        raise ResourceNotFoundError("Schedule", schedule_id)
    return schedule


def ensure_references_exist(db: Session, payload: ScheduleWrite) -> None:
    get_teacher(db, payload.teacher_id)
    if db.get(Subject, payload.subject_id) is None:
        raise ResourceNotFoundError("Subject", payload.subject_id)
    if db.get(Classroom, payload.classroom_id) is None:
        raise ResourceNotFoundError("Classroom", payload.classroom_id)
    if db.get(SchoolClass, payload.class_id) is None:
        raise ResourceNotFoundError("Class", payload.class_id)
    if payload.section_id is not None:
        section = db.get(Section, payload.section_id)
        if section is None or section.class_id != payload.class_id:
            raise ResourceNotFoundError("Section", payload.section_id)


def _guard(
    store: SqlScheduleStore,
    payload: ScheduleWrite,
    settings: Settings,
    exclude_id: str | None,
) -> list[ConflictGroup]:
    return check_conflicts(
        store,
        teacher_id=payload.teacher_id,
        classroom_id=payload.classroom_id,
        day_of_week=payload.day_of_week,
        start_time=payload.start_time,
        end_time=payload.end_time,
        academic_year=payload.academic_year if settings.conflict_scope_by_academic_year else None,
        exclude_id=exclude_id,
    )


def _serialize_groups(groups: list[ConflictGroup]) -> list[dict]:
    return [group.model_dump(mode="json") for group in groups]


def _validate_slot(db: Session, payload: ScheduleWrite, settings: Settings, exclude_id: str | None) -> SqlScheduleStore:
    store = SqlScheduleStore(db)
    store.lock_slots(slot_lock_keys(payload.teacher_id, payload.classroom_id, payload.day_of_week))
    groups = _guard(store, payload, settings, exclude_id)
    if groups:
        db.rollback()
        logger.info(
            "Rejected schedule write for teacher %s / classroom %s on day %s: %d conflict group(s)",
            payload.teacher_id,
            payload.classroom_id,
            payload.day_of_week,
            len(groups),
        )
        raise ScheduleConflictError(_serialize_groups(groups))
    return store


def _commit_slot(
    db: Session,
    store: SqlScheduleStore,
    payload: ScheduleWrite,
    settings: Settings,
    exclude_id: str | None,
) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        # The PostgreSQL exclusion constraints catch writers that raced past the guard.
        db.rollback()
        groups = _guard(store, payload, settings, exclude_id)
        if groups:
            logger.warning("Exclusion constraint rejected a concurrent schedule write for teacher %s", payload.teacher_id)
            raise ScheduleConflictError(_serialize_groups(groups)) from exc
        raise


def create_schedule(db: Session, payload: ScheduleWrite, *, actor: User, settings: Settings) -> Schedule:
    ensure_references_exist(db, payload)
    store = _validate_slot(db, payload, settings, exclude_id=None)
    schedule = Schedule(**payload.model_dump(), created_by=actor.id)
    db.add(schedule)
    _commit_slot(db, store, payload, settings, exclude_id=None)
    db.refresh(schedule)
    logger.info("Schedule %s created by %s", schedule.id, actor.id)
    return schedule


def update_schedule(db: Session, schedule_id: str, payload: ScheduleWrite, *, settings: Settings) -> Schedule:
    schedule = get_schedule(db, schedule_id)
    ensure_references_exist(db, payload)
    store = _validate_slot(db, payload, settings, exclude_id=schedule_id)
    for key, value in payload.model_dump().items():
        setattr(schedule, key, value)
    _commit_slot(db, store, payload, settings, exclude_id=schedule_id)
    db.refresh(schedule)
    logger.info("Schedule %s updated", schedule.id)
    return schedule


def delete_schedule(db: Session, schedule_id: str) -> None:
    schedule = get_schedule(db, schedule_id)
    db.delete(schedule)
    db.commit()
    logger.info("Schedule %s deleted", schedule_id)


def list_schedules(
    db: Session,
    *,
    day: int | None = None,
    teacher_id: str | None = None,
    classroom_id: str | None = None,
    subject_id: str | None = None,
) -> list[Schedule]:
    statement = select(Schedule)
    if day is not None:
        statement = statement.where(Schedule.day_of_week == day)
    if teacher_id:
        statement = statement.where(Schedule.teacher_id == teacher_id)
    if classroom_id:
        statement = statement.where(Schedule.classroom_id == classroom_id)
    if subject_id:
        statement = statement.where(Schedule.subject_id == subject_id)
    statement = statement.order_by(Schedule.day_of_week, Schedule.start_time, Schedule.id)
    return list(db.execute(statement).scalars())


def session_status(schedule: Schedule, now: datetime) -> str:
    current_day = now.isoweekday()
    current_time = now.time().replace(microsecond=0)
    if schedule.day_of_week == current_day:
        if schedule.start_time <= current_time < schedule.end_time:
            return "current"
        if schedule.start_time > current_time:
            return "upcoming"
        return "past"
    if schedule.day_of_week > current_day:
        return "upcoming"
    return "past"


def teacher_day_overview(schedules: list[Schedule], now: datetime) -> dict:
    tagged = [
        ScheduleStatusOut(**to_schedule_out(item).model_dump(), status=session_status(item, now))
        for item in schedules
    ]
    current = next((item for item in tagged if item.status == "current"), None)
    upcoming = [item for item in tagged if item.status == "upcoming"]
    return {
        "current_class": current,
        "upcoming_classes": upcoming[:UPCOMING_LIMIT],
        "full_schedule": tagged,
    }


def week_start_for(day: date) -> date:
    return day - timedelta(days=day.isoweekday() - 1)


def group_by_weekday(schedules: list[Schedule]) -> dict[str, list[ScheduleOut]]:
    grouped: dict[str, list[ScheduleOut]] = defaultdict(list)
    for schedule in schedules:
        grouped[str(schedule.day_of_week)].append(to_schedule_out(schedule))
    return {str(day): grouped.get(str(day), []) for day in range(1, 8)}
