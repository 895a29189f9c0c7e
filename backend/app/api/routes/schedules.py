from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_capability
from app.core.config import Settings, get_settings
from app.core.permissions import Capability, has_capability
from app.models.user import User
from app.schemas.conflict import ConflictReport
from app.schemas.reference import TeacherOut
from app.schemas.schedule import (
    MyTimetableOut,
    ScheduleListOut,
    ScheduleOut,
    ScheduleWrite,
    TeacherTimetableOut,
    WeeklyScheduleOut,
)
from app.services.conflict_service import build_conflict_report
from app.services.schedule_service import (
    create_schedule,
    delete_schedule,
    get_schedule,
    get_teacher,
    group_by_weekday,
    list_schedules,
    teacher_day_overview,
    to_schedule_out,
    update_schedule,
    week_start_for,
)
from app.services.schedule_store import SqlScheduleStore

router = APIRouter()


@router.post("", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
@router.post("/assign", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
def assign_schedule(
    payload: ScheduleWrite,
    current_user: User = Depends(require_capability(Capability.manage_schedules)),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ScheduleOut:
    schedule = create_schedule(db, payload, actor=current_user, settings=settings)
    return to_schedule_out(schedule)


@router.get("/conflicts", response_model=ConflictReport)
def get_conflicts(
    extended: bool = Query(default=False, description="Include workload and capacity checks"),
    current_user: User = Depends(require_capability(Capability.view_conflict_report)),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ConflictReport:
    conflicts = build_conflict_report(
        SqlScheduleStore(db),
        extended=extended,
        scope_by_academic_year=settings.conflict_scope_by_academic_year,
        workload_threshold_hours=settings.workload_threshold_hours,
    )
    return ConflictReport(conflicts=conflicts, count=len(conflicts))


@router.get("/all", response_model=ScheduleListOut)
def get_all_schedules(
    day: int | None = Query(default=None, ge=1, le=7),
    teacher_id: str | None = Query(default=None),
    classroom_id: str | None = Query(default=None),
    subject_id: str | None = Query(default=None),
    current_user: User = Depends(require_capability(Capability.view_all_schedules)),
    db: Session = Depends(get_db),
) -> ScheduleListOut:
    schedules = list_schedules(
        db,
        day=day,
        teacher_id=teacher_id,
        classroom_id=classroom_id,
        subject_id=subject_id,
    )
    return ScheduleListOut(schedules=[to_schedule_out(item) for item in schedules], count=len(schedules))


@router.get("/my", response_model=MyTimetableOut)
def get_my_timetable(
    current_user: User = Depends(require_capability(Capability.view_own_schedule)),
    db: Session = Depends(get_db),
) -> MyTimetableOut:
    schedules = list_schedules(db, teacher_id=current_user.id)
    return MyTimetableOut(**teacher_day_overview(schedules, datetime.now()))


@router.get("/weekly", response_model=WeeklyScheduleOut)
def get_weekly_schedule(
    teacher_id: str | None = Query(default=None),
    week_start: date | None = Query(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> WeeklyScheduleOut:
    if has_capability(current_user.role, Capability.view_own_schedule):
        target_id = current_user.id
    elif has_capability(current_user.role, Capability.view_all_schedules):
        if not teacher_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Teacher ID is required")
        target_id = get_teacher(db, teacher_id).id
    else:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")

    schedules = list_schedules(db, teacher_id=target_id)
    return WeeklyScheduleOut(
        teacher_id=target_id,
        week_start=week_start_for(week_start or date.today()),
        schedule=group_by_weekday(schedules),
    )


@router.get("/teacher/{teacher_id}", response_model=TeacherTimetableOut)
def get_teacher_timetable(
    teacher_id: str,
    current_user: User = Depends(require_capability(Capability.view_all_schedules)),
    db: Session = Depends(get_db),
) -> TeacherTimetableOut:
    teacher = get_teacher(db, teacher_id)
    schedules = list_schedules(db, teacher_id=teacher.id)
    return TeacherTimetableOut(
        teacher=TeacherOut.model_validate(teacher),
        schedule=[to_schedule_out(item) for item in schedules],
    )


@router.get("/{schedule_id}", response_model=ScheduleOut)
def get_schedule_detail(
    schedule_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ScheduleOut:
    schedule = get_schedule(db, schedule_id)
    if not has_capability(current_user.role, Capability.view_all_schedules) and schedule.teacher_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied to other teachers' data")
    return to_schedule_out(schedule)


@router.put("/{schedule_id}", response_model=ScheduleOut)
def edit_schedule(
    schedule_id: str,
    payload: ScheduleWrite,
    current_user: User = Depends(require_capability(Capability.manage_schedules)),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ScheduleOut:
    schedule = update_schedule(db, schedule_id, payload, settings=settings)
    return to_schedule_out(schedule)


@router.delete("/{schedule_id}")
def remove_schedule(
    schedule_id: str,
    current_user: User = Depends(require_capability(Capability.manage_schedules)),
    db: Session = Depends(get_db),
) -> dict:
    delete_schedule(db, schedule_id)
    return {"success": True}
