import os
from datetime import date

# Must be set before the app settings are loaded
os.environ.setdefault("ENABLE_SCHEDULER", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  registers every table on Base.metadata
from app.core.database import Base, get_db
from app.core.security import create_access_token, hash_password
from app.main import app
from app.models.staff import Department, Designation, Staff, StaffType
from app.models.student import Gender, Grade, Student, StudentStatus
from app.models.user import User, UserRole
from app.schemas.settings import AcademicYearUpdate
from app.services.fee import default_fee_payments
from app.services.settings import SettingsService

ACADEMIC_YEAR = "2025-2026"


@pytest.fixture()
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(test_engine)
    yield test_engine
    Base.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(
        bind=engine,
        class_=Session,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest.fixture()
def db(session_factory):
    """Session for arranging data and calling services directly."""
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, username, role=UserRole.TEACHER, password="secret-pass", **kwargs) -> User:
    user = User(
        name=kwargs.pop("name", username.title()),
        username=username,
        password_hash=hash_password(password),
        role=role,
        is_active=kwargs.pop("is_active", True),
        reminder_lead_days=kwargs.pop("reminder_lead_days", 1),
    )
    db.add(user)
    db.commit()
    return user


def make_student(db, name, grade=Grade.V, roll_no=1, **kwargs) -> Student:
    student = Student(
        name=name,
        grade=grade,
        roll_no=roll_no,
        status=kwargs.pop("status", StudentStatus.ACTIVE),
        fee_payments=kwargs.pop("fee_payments", default_fee_payments().model_dump()),
        **kwargs,
    )
    db.add(student)
    db.commit()
    return student


def make_staff(db, employee_id, first_name="Lalhmangaihi", **kwargs) -> Staff:
    staff = Staff(
        employee_id=employee_id,
        first_name=first_name,
        last_name=kwargs.pop("last_name", "Ralte"),
        staff_type=kwargs.pop("staff_type", StaffType.TEACHING),
        gender=kwargs.pop("gender", Gender.FEMALE),
        date_of_joining=kwargs.pop("date_of_joining", date(2020, 6, 1)),
        department=kwargs.pop("department", Department.LANGUAGES),
        designation=kwargs.pop("designation", Designation.TEACHER),
        **kwargs,
    )
    db.add(staff)
    db.commit()
    return staff


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(user.id, user.username, user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def admin(db):
    return make_user(db, "admin", role=UserRole.ADMIN, name="System Administrator")


@pytest.fixture()
def teacher(db):
    return make_user(db, "teacher", role=UserRole.TEACHER, name="Class Teacher")


@pytest.fixture()
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture()
def teacher_headers(teacher):
    return auth_headers(teacher)


@pytest.fixture()
def academic_year(db):
    SettingsService(db).set_academic_year(AcademicYearUpdate(academic_year=ACADEMIC_YEAR))
    db.commit()
    return ACADEMIC_YEAR
