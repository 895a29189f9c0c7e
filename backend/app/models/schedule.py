import uuid
from datetime import datetime, time

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.base import Base
from app.models.classroom import Classroom
from app.models.school_class import SchoolClass, Section
from app.models.subject import Subject
from app.models.user import User


class Schedule(Base):
    """One weekly recurring class session."""

    __tablename__ = "schedules"
    __table_args__ = (
        CheckConstraint("day_of_week >= 1 AND day_of_week <= 7", name="ck_schedules_day_of_week"),
        CheckConstraint("start_time < end_time", name="ck_schedules_valid_time"),
        Index("ix_schedules_teacher_day", "teacher_id", "day_of_week"),
        Index("ix_schedules_classroom_day", "classroom_id", "day_of_week"),
        Index("ix_schedules_day_start", "day_of_week", "start_time"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    teacher_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    subject_id: Mapped[str] = mapped_column(String(36), ForeignKey("subjects.id"), nullable=False)
    classroom_id: Mapped[str] = mapped_column(String(36), ForeignKey("classrooms.id"), nullable=False)
    class_id: Mapped[str] = mapped_column(String(36), ForeignKey("classes.id"), nullable=False)
    section_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("sections.id"), nullable=True)
    academic_year: Mapped[str] = mapped_column(String(20), nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    teacher: Mapped[User] = relationship(User, foreign_keys=[teacher_id], lazy="joined")
    subject: Mapped[Subject] = relationship(Subject, lazy="joined")
    classroom: Mapped[Classroom] = relationship(Classroom, lazy="joined")
    school_class: Mapped[SchoolClass] = relationship(SchoolClass, lazy="joined")
    section: Mapped[Section | None] = relationship(Section, lazy="joined")
