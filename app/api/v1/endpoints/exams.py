"""Exam marks and result endpoints."""

from fastapi import APIRouter
from sqlalchemy.orm import Session

from app.api.v1.files import xlsx_response
from app.core.constants import TERMINAL_EXAMS
from app.core.database import DbSession
from app.core.dependencies import CurrentUser
from app.core.exceptions import PermissionDeniedError
from app.models.student import Grade
from app.models.user import User
from app.schemas.exam import (
    ClassMarksResult,
    ClassMarksUpdate,
    ClassMarkStatement,
    ReportCard,
    StudentMarksUpdate,
)
from app.services.exam import ExamService
from app.services.settings import SettingsService

router = APIRouter()


def _ensure_can_enter_marks(db: Session, user: User, grade: Grade) -> None:
    """Marks are entered by admins or the class teacher of the grade."""
    if user.is_admin:
        return
    definition = SettingsService(db).get_grade_definition(grade)
    if definition.class_teacher_id != user.id:
        raise PermissionDeniedError(f"Only the class teacher of {grade.value} can enter marks")


@router.get("")
def list_exams(current_user: CurrentUser):
    """List the terminal exams of an academic year."""
    return TERMINAL_EXAMS


@router.put("/students/{student_id}/marks", response_model=ReportCard)
def save_student_marks(
    student_id: int,
    request: StudentMarksUpdate,
    current_user: CurrentUser,
    db: DbSession,
):
    """Replace a student's marks for one exam.

    Subjects left blank are removed; marks above the subject's full marks
    are rejected.
    """
    service = ExamService(db)
    student = service._get_student(student_id)
    _ensure_can_enter_marks(db, current_user, student.grade)
    return service.save_student_marks(student_id, request)


@router.put("/classes/{grade}/marks", response_model=ClassMarksResult)
def save_class_marks(
    grade: Grade,
    request: ClassMarksUpdate,
    current_user: CurrentUser,
    db: DbSession,
):
    """Replace marks for several students of a grade as one batch."""
    _ensure_can_enter_marks(db, current_user, grade)
    service = ExamService(db)
    return service.save_class_marks(grade, request)


@router.get("/students/{student_id}/report-card/{exam_id}", response_model=ReportCard)
def get_report_card(
    student_id: int,
    exam_id: str,
    current_user: CurrentUser,
    db: DbSession,
):
    """Get a student's report card for an exam."""
    service = ExamService(db)
    return service.get_report_card(student_id, exam_id)


@router.get("/classes/{grade}/statement/{exam_id}", response_model=ClassMarkStatement)
def get_class_mark_statement(
    grade: Grade,
    exam_id: str,
    current_user: CurrentUser,
    db: DbSession,
):
    """Get the mark statement of a grade for an exam."""
    service = ExamService(db)
    return service.class_mark_statement(grade, exam_id)


@router.get("/classes/{grade}/statement/{exam_id}/export")
def export_class_mark_statement(
    grade: Grade,
    exam_id: str,
    current_user: CurrentUser,
    db: DbSession,
):
    """Download the mark statement of a grade as Excel."""
    service = ExamService(db)
    content = service.export_class_mark_statement(grade, exam_id)
    filename = f"mark_statement_{grade.code}_{exam_id}.xlsx"
    return xlsx_response(content, filename)
