from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_capability
from app.core.exceptions import ResourceNotFoundError
from app.core.permissions import Capability
from app.models.schedule import Schedule
from app.models.subject import Subject
from app.models.user import User
from app.schemas.reference import SubjectCreate, SubjectOut

router = APIRouter()


@router.get("", response_model=list[SubjectOut])
def list_subjects(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[SubjectOut]:
    return list(db.execute(select(Subject).order_by(Subject.code)).scalars())


@router.post("", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
def create_subject(
    payload: SubjectCreate,
    current_user: User = Depends(require_capability(Capability.manage_reference_data)),
    db: Session = Depends(get_db),
) -> SubjectOut:
    existing = db.execute(select(Subject).where(Subject.code == payload.code)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Subject code already exists")
    subject = Subject(**payload.model_dump())
    db.add(subject)
    db.commit()
    db.refresh(subject)
    return subject


@router.delete("/{subject_id}")
def delete_subject(
    subject_id: str,
    current_user: User = Depends(require_capability(Capability.manage_reference_data)),
    db: Session = Depends(get_db),
) -> dict:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise ResourceNotFoundError("Subject", subject_id)
    in_use = db.execute(select(Schedule.id).where(Schedule.subject_id == subject_id).limit(1)).first()
    if in_use is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Subject is referenced by schedules")
    db.delete(subject)
    db.commit()
    return {"success": True}
