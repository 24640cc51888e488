"""Fee tracking service."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.constants import (
    ACADEMIC_MONTHS,
    FEE_SET1_GRADES,
    FEE_SET2_GRADES,
    FEE_STRUCTURE,
)
from app.core.exceptions import NotFoundError
from app.models.student import Grade, Student, StudentStatus
from app.schemas.fee import (
    ExamFeesPaid,
    FeePayments,
    FeeStructure,
    GradeFeeSummary,
    StudentFeeResponse,
)

EXAM_TERM_LABELS = {"terminal1": "Term 1", "terminal2": "Term 2", "terminal3": "Term 3"}


def fee_structure_for(grade: Grade) -> FeeStructure:
    """Fee amounts for the band the grade belongs to."""
    if grade in FEE_SET1_GRADES:
        return FeeStructure(**FEE_STRUCTURE["set1"])
    if grade in FEE_SET2_GRADES:
        return FeeStructure(**FEE_STRUCTURE["set2"])
    return FeeStructure(**FEE_STRUCTURE["set3"])


def default_fee_payments() -> FeePayments:
    """Fee state at the start of a session: admission paid, nothing else."""
    return FeePayments(
        admission_fee_paid=True,
        tuition_fees_paid={month: False for month in ACADEMIC_MONTHS},
        exam_fees_paid=ExamFeesPaid(),
    )


def load_fee_payments(raw: dict | None) -> FeePayments:
    """Parse stored fee payments; a missing record means nothing is paid."""
    if not raw:
        return FeePayments()
    return FeePayments.model_validate(raw)


def calculate_dues(fee_payments: FeePayments) -> list[str]:
    """Human readable list of outstanding fees."""
    dues: list[str] = []

    if not fee_payments.admission_fee_paid:
        dues.append("Admission Fee")

    unpaid_months = [m for m in ACADEMIC_MONTHS if not fee_payments.tuition_fees_paid.get(m)]
    if unpaid_months:
        dues.append(f"Tuition Fee: {len(unpaid_months)} month(s) pending")

    exam_fees = fee_payments.exam_fees_paid.model_dump()
    unpaid_exams = [label for key, label in EXAM_TERM_LABELS.items() if not exam_fees[key]]
    if unpaid_exams:
        dues.append(f"Exam Fee: {', '.join(unpaid_exams)}")

    return dues


def calculate_amount_due(fee_payments: FeePayments, structure: FeeStructure) -> int:
    """Total outstanding amount."""
    amount = 0
    if not fee_payments.admission_fee_paid:
        amount += structure.admission_fee
    amount += structure.tuition_fee * sum(
        1 for m in ACADEMIC_MONTHS if not fee_payments.tuition_fees_paid.get(m)
    )
    amount += structure.exam_fee * sum(
        1 for paid in fee_payments.exam_fees_paid.model_dump().values() if not paid
    )
    return amount


class FeeService:
    """Fee payment management service."""

    def __init__(self, db: Session):
        self.db = db

    def _get_student(self, student_id: int) -> Student:
        result = self.db.execute(select(Student).where(Student.id == student_id))
        student = result.scalar_one_or_none()
        if not student:
            raise NotFoundError("Student", str(student_id))
        return student

    def _to_response(self, student: Student) -> StudentFeeResponse:
        payments = load_fee_payments(student.fee_payments)
        structure = fee_structure_for(student.grade)
        return StudentFeeResponse(
            student_id=student.id,
            student_name=student.name,
            roll_no=student.roll_no,
            grade=student.grade,
            fee_payments=payments,
            fee_structure=structure,
            dues=calculate_dues(payments),
            amount_due=calculate_amount_due(payments, structure),
        )

    def get_student_fees(self, student_id: int) -> StudentFeeResponse:
        return self._to_response(self._get_student(student_id))

    def update_fee_payments(self, student_id: int, payments: FeePayments) -> StudentFeeResponse:
        """Replace a student's fee payment flags."""
        student = self._get_student(student_id)
        student.fee_payments = payments.model_dump()
        self.db.flush()
        return self._to_response(student)

    def grade_summary(self, grade: Grade, only_dues: bool = False) -> GradeFeeSummary:
        """Fee status of the active students of a grade."""
        result = self.db.execute(
            select(Student)
            .where(Student.grade == grade, Student.status == StudentStatus.ACTIVE)
            .order_by(Student.roll_no, Student.name)
        )
        rows = [self._to_response(s) for s in result.scalars().all()]
        with_dues = [r for r in rows if r.dues]

        return GradeFeeSummary(
            grade=grade,
            total_students=len(rows),
            students_with_dues=len(with_dues),
            total_amount_due=sum(r.amount_due for r in rows),
            students=with_dues if only_dues else rows,
        )
