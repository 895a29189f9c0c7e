from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_capability
from app.core.exceptions import ResourceNotFoundError
from app.core.permissions import Capability
from app.models.school_class import SchoolClass, Section
from app.models.user import User
from app.schemas.reference import SchoolClassCreate, SchoolClassOut, SectionCreate, SectionOut

router = APIRouter()


def _get_class_or_404(db: Session, class_id: str) -> SchoolClass:
    school_class = db.get(SchoolClass, class_id)
    if school_class is None:
        raise ResourceNotFoundError("Class", class_id)
    return school_class


@router.get("", response_model=list[SchoolClassOut])
def list_classes(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[SchoolClassOut]:
    return list(db.execute(select(SchoolClass).order_by(SchoolClass.name)).scalars())


@router.post("", response_model=SchoolClassOut, status_code=status.HTTP_201_CREATED)
def create_class(
    payload: SchoolClassCreate,
    current_user: User = Depends(require_capability(Capability.manage_reference_data)),
    db: Session = Depends(get_db),
) -> SchoolClassOut:
    existing = db.execute(select(SchoolClass).where(SchoolClass.name == payload.name)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Class name already exists")
    school_class = SchoolClass(**payload.model_dump())
    db.add(school_class)
    db.commit()
    db.refresh(school_class)
    return school_class


@router.get("/{class_id}/sections", response_model=list[SectionOut])
def list_sections(
    class_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[SectionOut]:
    _get_class_or_404(db, class_id)
    return list(db.execute(select(Section).where(Section.class_id == class_id).order_by(Section.name)).scalars())


@router.post("/{class_id}/sections", response_model=SectionOut, status_code=status.HTTP_201_CREATED)
def create_section(
    class_id: str,
    payload: SectionCreate,
    current_user: User = Depends(require_capability(Capability.manage_reference_data)),
    db: Session = Depends(get_db),
) -> SectionOut:
    _get_class_or_404(db, class_id)
    existing = db.execute(
        select(Section).where(Section.class_id == class_id, Section.name == payload.name)
    ).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Section already exists")
    section = Section(class_id=class_id, name=payload.name)
    db.add(section)
    db.commit()
    db.refresh(section)
    return section
