from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_capability
from app.core.permissions import Capability
from app.models.user import User, UserRole
from app.schemas.reference import TeacherOut

router = APIRouter()


@router.get("/teachers", response_model=list[TeacherOut])
def list_teachers(
    current_user: User = Depends(require_capability(Capability.view_all_schedules)),
    db: Session = Depends(get_db),
) -> list[TeacherOut]:
    teachers = (
        db.execute(select(User).where(User.role == UserRole.teacher).order_by(User.name.asc()))
        .scalars()
        .all()
    )
    return list(teachers)
