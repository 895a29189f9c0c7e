from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_capability
from app.core.exceptions import ResourceNotFoundError
from app.core.permissions import Capability
from app.models.school_class import SchoolClass, Section
from app.models.student import Student
from app.models.user import User
from app.schemas.reference import StudentCreate, StudentOut

router = APIRouter()


@router.get("/students", response_model=list[StudentOut])
def list_students(
    class_id: str | None = Query(default=None),
    section_id: str | None = Query(default=None),
    current_user: User = Depends(require_capability(Capability.view_all_schedules)),
    db: Session = Depends(get_db),
) -> list[StudentOut]:
    statement = select(Student)
    if class_id:
        statement = statement.where(Student.class_id == class_id)
    if section_id:
        statement = statement.where(Student.section_id == section_id)
    return list(db.execute(statement.order_by(Student.roll_number.asc())).scalars())


@router.post("/students", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def create_student(
    payload: StudentCreate,
    current_user: User = Depends(require_capability(Capability.manage_reference_data)),
    db: Session = Depends(get_db),
) -> StudentOut:
    if db.get(SchoolClass, payload.class_id) is None:
        raise ResourceNotFoundError("Class", payload.class_id)
    if payload.section_id is not None:
        section = db.get(Section, payload.section_id)
        if section is None or section.class_id != payload.class_id:
            raise ResourceNotFoundError("Section", payload.section_id)
    existing = db.execute(select(Student).where(Student.roll_number == payload.roll_number)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Roll number already exists")
    student = Student(**payload.model_dump())
    db.add(student)
    db.commit()
    db.refresh(student)
    return student
