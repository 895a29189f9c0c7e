import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_capability
from app.core.exceptions import ResourceNotFoundError
from app.core.permissions import Capability
from app.models.classroom import Classroom
from app.models.schedule import Schedule
from app.models.user import User
from app.schemas.classroom import ClassroomCreate, ClassroomOut, ClassroomUpdate

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=list[ClassroomOut])
def list_classrooms(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[ClassroomOut]:
    return list(db.execute(select(Classroom).order_by(Classroom.room_number)).scalars())


@router.get("/{classroom_id}", response_model=ClassroomOut)
def get_classroom(
    classroom_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ClassroomOut:
    classroom = db.get(Classroom, classroom_id)
    if classroom is None:
        raise ResourceNotFoundError("Classroom", classroom_id)
    return classroom


@router.post("", response_model=ClassroomOut, status_code=status.HTTP_201_CREATED)
def create_classroom(
    payload: ClassroomCreate,
    current_user: User = Depends(require_capability(Capability.manage_reference_data)),
    db: Session = Depends(get_db),
) -> ClassroomOut:
    existing = db.execute(select(Classroom).where(Classroom.room_number == payload.room_number)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Classroom name already exists")
    classroom = Classroom(**payload.model_dump())
    db.add(classroom)
    db.commit()
    db.refresh(classroom)
    logger.info("Classroom %s added by %s", classroom.room_number, current_user.id)
    return classroom


@router.put("/{classroom_id}", response_model=ClassroomOut)
def update_classroom(
    classroom_id: str,
    payload: ClassroomUpdate,
    current_user: User = Depends(require_capability(Capability.manage_reference_data)),
    db: Session = Depends(get_db),
) -> ClassroomOut:
    classroom = db.get(Classroom, classroom_id)
    if classroom is None:
        raise ResourceNotFoundError("Classroom", classroom_id)

    data = payload.model_dump(exclude_unset=True)
    if "room_number" in data:
        existing = db.execute(
            select(Classroom).where(Classroom.room_number == data["room_number"], Classroom.id != classroom_id)
        ).scalar_one_or_none()
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Classroom name already exists")

    for key, value in data.items():
        setattr(classroom, key, value)
    db.commit()
    db.refresh(classroom)
    return classroom


@router.delete("/{classroom_id}")
def delete_classroom(
    classroom_id: str,
    current_user: User = Depends(require_capability(Capability.manage_reference_data)),
    db: Session = Depends(get_db),
) -> dict:
    classroom = db.get(Classroom, classroom_id)
    if classroom is None:
        raise ResourceNotFoundError("Classroom", classroom_id)
    in_use = db.execute(select(Schedule.id).where(Schedule.classroom_id == classroom_id).limit(1)).first()
    if in_use is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Classroom is referenced by schedules")
    db.delete(classroom)
    db.commit()
    logger.info("Classroom %s deleted by %s", classroom.room_number, current_user.id)
    return {"success": True}
