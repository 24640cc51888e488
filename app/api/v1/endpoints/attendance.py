"""Student class registers and the daily staff register."""

from datetime import date

from fastapi import APIRouter, Query
from sqlalchemy.orm import Session

from app.core.database import DbSession
from app.core.dependencies import AdminUser, CurrentUser
from app.core.exceptions import PermissionDeniedError
from app.core.timeutils import local_today
from app.models.student import Grade
from app.models.user import User
from app.schemas.attendance import (
    AttendanceSummary,
    BulkAttendanceCreate,
    BulkAttendanceResponse,
    ClassRegister,
    StaffAttendanceMark,
    StaffAttendanceResponse,
    StaffRegister,
    StudentAttendanceResponse,
)
from app.services.attendance import AttendanceService
from app.services.settings import SettingsService

router = APIRouter()


def _ensure_can_take_attendance(db: Session, user: User, grade: Grade) -> None:
    """Registers are taken by admins or the class teacher of the grade."""
    if user.is_admin:
        return
    definition = SettingsService(db).get_grade_definition(grade)
    if definition.class_teacher_id != user.id:
        raise PermissionDeniedError(f"Only the class teacher of {grade.value} can take attendance")


@router.get("/classes/{grade}", response_model=ClassRegister)
def get_class_register(
    grade: Grade,
    current_user: CurrentUser,
    db: DbSession,
    attendance_date: date | None = Query(None, description="Defaults to today"),
):
    return AttendanceService(db).get_class_register(grade, attendance_date or local_today())


@router.put("/classes/{grade}", response_model=BulkAttendanceResponse)
def save_class_attendance(
    grade: Grade,
    request: BulkAttendanceCreate,
    current_user: CurrentUser,
    db: DbSession,
):
    """
    Save the register of a grade for one day.

    Existing entries for the day are overwritten. If any listed student is
    not an active member of the grade, nothing is saved and the errors are
    returned.
    """
    _ensure_can_take_attendance(db, current_user, grade)
    return AttendanceService(db).save_class_attendance(grade, request)


@router.get("/summary", response_model=AttendanceSummary)
def get_attendance_summary(
    current_user: CurrentUser,
    db: DbSession,
    date_from: date,
    date_to: date,
    grade: Grade | None = None,
    student_id: int | None = None,
):
    return AttendanceService(db).get_summary(date_from, date_to, grade, student_id)


@router.get("/students/{student_id}", response_model=list[StudentAttendanceResponse])
def get_student_attendance(
    student_id: int,
    current_user: CurrentUser,
    db: DbSession,
    date_from: date | None = None,
    date_to: date | None = None,
):
    return AttendanceService(db).get_student_history(student_id, date_from, date_to)


@router.post("/staff/me", response_model=StaffAttendanceResponse)
def mark_my_attendance(current_user: CurrentUser, db: DbSession):
    """Mark the signed-in staff member present for today."""
    return AttendanceService(db).mark_own_attendance(current_user)


@router.put("/staff", response_model=StaffAttendanceResponse)
def mark_staff_attendance(request: StaffAttendanceMark, admin: AdminUser, db: DbSession):
    return AttendanceService(db).mark_staff(request, admin)


@router.get("/staff", response_model=StaffRegister)
def get_staff_register(
    admin: AdminUser,
    db: DbSession,
    attendance_date: date | None = Query(None, description="Defaults to today"),
):
    return AttendanceService(db).get_staff_register(attendance_date or local_today())
