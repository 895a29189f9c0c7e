from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.core.security import create_access_token
from app.db.base import Base
from app.main import app
from app.models.classroom import Classroom
from app.models.school_class import SchoolClass, Section
from app.models.subject import Subject
from app.models.user import User, UserRole


@pytest.fixture()
def session_factory():
    # One in-memory database shared by the test session and the app's requests.
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers():
    def build(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return build


@pytest.fixture()
def seeded(db):
    """A principal, two teachers, one subject, two rooms and a class with section A."""
    principal = User(name="Meera Iyer", email="principal@example.com", role=UserRole.principal)
    admin = User(name="Root Admin", email="admin@example.com", role=UserRole.super_admin)
    teacher_a = User(name="Asha Rao", email="asha@example.com", role=UserRole.teacher)
    teacher_b = User(name="Ben Okafor", email="ben@example.com", role=UserRole.teacher)
    subject = Subject(name="Mathematics", code="MATH101", color="#10B981")
    room_a = Classroom(room_number="A-101", capacity=40, building="Main", floor=1)
    room_b = Classroom(room_number="B-201", capacity=2, building="Annex", floor=2)
    school_class = SchoolClass(name="Grade 10", academic_year="2026-27")
    db.add_all([principal, admin, teacher_a, teacher_b, subject, room_a, room_b, school_class])
    db.flush()
    section = Section(class_id=school_class.id, name="A")
    db.add(section)
    db.flush()

    ids = SimpleNamespace(
        principal_id=principal.id,
        admin_id=admin.id,
        teacher_a_id=teacher_a.id,
        teacher_b_id=teacher_b.id,
        subject_id=subject.id,
        room_a_id=room_a.id,
        room_b_id=room_b.id,
        class_id=school_class.id,
        section_id=section.id,
        academic_year="2026-27",
    )
    db.commit()
    return ids
