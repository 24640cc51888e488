"""School settings endpoints."""

from fastapi import APIRouter

from app.core.database import DbSession
from app.core.dependencies import AdminUser, CurrentUser
from app.models.student import Grade
from app.schemas.settings import (
    AcademicYearUpdate,
    ClassTeacherAssignment,
    GradeDefinition,
    SchoolConfig,
)
from app.services.settings import SettingsService

router = APIRouter()


@router.get("", response_model=SchoolConfig)
def get_settings(
    current_user: CurrentUser,
    db: DbSession,
):
    """Get the academic year and the subject configuration of every grade."""
    service = SettingsService(db)
    return service.get_config()


@router.put("/academic-year", response_model=SchoolConfig)
def set_academic_year(
    request: AcademicYearUpdate,
    admin: AdminUser,
    db: DbSession,
):
    """Start a new academic session."""
    service = SettingsService(db)
    service.set_academic_year(request)
    return service.get_config()


@router.get("/grades/{grade}", response_model=GradeDefinition)
def get_grade_definition(
    grade: Grade,
    current_user: CurrentUser,
    db: DbSession,
):
    """Get the subjects of a grade."""
    service = SettingsService(db)
    return service.get_grade_definition(grade)


@router.put("/grades/{grade}", response_model=GradeDefinition)
def update_grade_definition(
    grade: Grade,
    request: GradeDefinition,
    admin: AdminUser,
    db: DbSession,
):
    """Replace the subjects of a grade."""
    service = SettingsService(db)
    return service.update_grade_definition(grade, request)


@router.put("/class-teachers", response_model=SchoolConfig)
def assign_class_teacher(
    request: ClassTeacherAssignment,
    admin: AdminUser,
    db: DbSession,
):
    """Make a teacher the class teacher of a grade, or unassign them."""
    service = SettingsService(db)
    service.assign_class_teacher(request.user_id, request.grade)
    return service.get_config()
