"""Fee tracking endpoints."""

from fastapi import APIRouter

from app.core.database import DbSession
from app.core.dependencies import AdminUser, CurrentUser
from app.models.student import Grade
from app.schemas.fee import FeePayments, GradeFeeSummary, StudentFeeResponse
from app.services.fee import FeeService

router = APIRouter()


@router.get("/students/{student_id}", response_model=StudentFeeResponse)
def get_student_fees(
    student_id: int,
    current_user: CurrentUser,
    db: DbSession,
):
    """Get a student's fee payments and outstanding dues."""
    service = FeeService(db)
    return service.get_student_fees(student_id)


@router.put("/students/{student_id}", response_model=StudentFeeResponse)
def update_student_fees(
    student_id: int,
    request: FeePayments,
    admin: AdminUser,
    db: DbSession,
):
    """Replace a student's fee payment flags."""
    service = FeeService(db)
    return service.update_fee_payments(student_id, request)


@router.get("/grades/{grade}", response_model=GradeFeeSummary)
def get_grade_fees(
    grade: Grade,
    current_user: CurrentUser,
    db: DbSession,
    only_dues: bool = False,
):
    """Fee status of the active students of a grade."""
    service = FeeService(db)
    return service.grade_summary(grade, only_dues)
