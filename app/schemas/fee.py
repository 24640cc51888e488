"""Fee schemas."""

from pydantic import Field, field_validator

from app.core.constants import ACADEMIC_MONTHS
from app.models.student import Grade
from app.schemas.common import BaseSchema


class ExamFeesPaid(BaseSchema):
    """Exam fee flags, one per terminal exam."""

    terminal1: bool = False
    terminal2: bool = False
    terminal3: bool = False


class FeePayments(BaseSchema):
    """Fee payment state of a student for the current session."""

    admission_fee_paid: bool = False
    tuition_fees_paid: dict[str, bool] = Field(
        default_factory=lambda: {month: False for month in ACADEMIC_MONTHS}
    )
    exam_fees_paid: ExamFeesPaid = Field(default_factory=ExamFeesPaid)

    @field_validator("tuition_fees_paid")
    @classmethod
    def validate_months(cls, v: dict[str, bool]) -> dict[str, bool]:
        unknown = set(v) - set(ACADEMIC_MONTHS)
        if unknown:
            raise ValueError(f"Unknown months: {', '.join(sorted(unknown))}")
        return {month: bool(v.get(month, False)) for month in ACADEMIC_MONTHS}


class FeeStructure(BaseSchema):
    """Fee amounts applicable to a grade."""

    admission_fee: int
    tuition_fee: int
    exam_fee: int


class StudentFeeResponse(BaseSchema):
    """A student's fee payments with computed dues."""

    student_id: int
    student_name: str
    roll_no: int
    grade: Grade
    fee_payments: FeePayments
    fee_structure: FeeStructure
    dues: list[str]
    amount_due: int


class GradeFeeSummary(BaseSchema):
    """Fee status of all active students of a grade."""

    grade: Grade
    total_students: int
    students_with_dues: int
    total_amount_due: int
    students: list[StudentFeeResponse]
