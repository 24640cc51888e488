"""Transfer certificate service."""

import logging
from datetime import date

from sqlalchemy import String, cast, delete, func, or_, select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.timeutils import local_today
from app.models.hostel import HostelResident
from app.models.student import Student, StudentStatus
from app.models.transfer import TransferCertificate
from app.schemas.transfer import (
    PaginatedTransferCertificateResponse,
    TransferCertificateCreate,
    TransferCertificateResponse,
    TransferCertificateUpdate,
    TransferStudentDetails,
)
from app.services.fee import calculate_dues, load_fee_payments
from app.services.settings import SettingsService
from app.services.student import format_student_id

logger = logging.getLogger(__name__)

_ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]
_ORDINALS = {
    1: "First", 2: "Second", 3: "Third", 4: "Fourth", 5: "Fifth", 6: "Sixth",
    7: "Seventh", 8: "Eighth", 9: "Ninth", 10: "Tenth", 11: "Eleventh",
    12: "Twelfth", 13: "Thirteenth", 14: "Fourteenth", 15: "Fifteenth",
    16: "Sixteenth", 17: "Seventeenth", 18: "Eighteenth", 19: "Nineteenth",
    20: "Twentieth", 30: "Thirtieth",
}


def _number_in_words(n: int) -> str:
    if n < 20:
        return _ONES[n]
    if n < 100:
        return " ".join(w for w in (_TENS[n // 10], _ONES[n % 10]) if w)
    if n < 1000:
        rest = _number_in_words(n % 100)
        return " ".join(w for w in (_ONES[n // 100], "Hundred", rest) if w)
    rest = _number_in_words(n % 1000)
    return " ".join(w for w in (_number_in_words(n // 1000), "Thousand", rest) if w)


def _day_in_words(day: int) -> str:
    if day in _ORDINALS:
        return _ORDINALS[day]
    return f"{_TENS[day // 10]} {_ORDINALS[day % 10]}"


def date_in_words(value: date) -> str:
    """Date as written on certificates, e.g. ``Twentieth of May Two Thousand Fourteen``."""
    return f"{_day_in_words(value.day)} of {value.strftime('%B')} {_number_in_words(value.year)}"


def dues_summary(student: Student) -> str:
    dues = calculate_dues(load_fee_payments(student.fee_payments))
    return "; ".join(dues) + " due." if dues else "None"


class TransferService:
    """Transfer certificate registration and lookup."""

    def __init__(self, db: Session):
        self.db = db
        self.settings = SettingsService(db)

    def _to_response(self, certificate: TransferCertificate) -> TransferCertificateResponse:
        return TransferCertificateResponse.model_validate(certificate)

    def register(self, request: TransferCertificateCreate) -> TransferCertificateResponse:
        """Issue a certificate and mark the student as transferred."""
        academic_year = self.settings.require_academic_year()

        result = self.db.execute(select(Student).where(Student.id == request.student_id))
        student = result.scalar_one_or_none()
        if not student:
            raise NotFoundError("Student", str(request.student_id))
        if student.status != StudentStatus.ACTIVE:
            raise ValidationError(
                f"{student.name} is not an active student",
                details={"student_id": student.id, "status": student.status.value},
            )

        today = local_today()
        issue_date = request.issue_date or today
        ref_no = request.ref_no or f"{settings.SCHOOL_CODE}/TC/{issue_date.year}/{student.id}"
        if self._find_by_ref(ref_no):
            raise ConflictError(
                f"Transfer certificate {ref_no} already exists",
                details={"ref_no": ref_no},
            )

        details = TransferStudentDetails(
            student_id=format_student_id(student, academic_year),
            student_numeric_id=student.id,
            roll_no=student.roll_no,
            name=student.name,
            gender=student.gender,
            father_name=student.father_name,
            mother_name=student.mother_name,
            current_class=student.grade,
            date_of_birth=student.date_of_birth,
            category=student.category,
            religion=student.religion,
        )

        dob_in_words = request.date_of_birth_in_words
        if dob_in_words is None and student.date_of_birth:
            dob_in_words = date_in_words(student.date_of_birth)

        certificate = TransferCertificate(
            ref_no=ref_no,
            student_id=student.id,
            student_details=details.model_dump(mode="json"),
            date_of_birth_in_words=dob_in_words,
            school_dues=request.school_dues or dues_summary(student),
            qualified_for_promotion=request.qualified_for_promotion,
            last_attendance_date=request.last_attendance_date,
            application_date=request.application_date or today,
            issue_date=issue_date,
            reason_for_leaving=request.reason_for_leaving,
            general_conduct=request.general_conduct,
            remarks=request.remarks,
        )
        self.db.add(certificate)

        student.status = StudentStatus.TRANSFERRED
        student.exit_date = issue_date
        # the hostel bed is released with the transfer
        self.db.execute(delete(HostelResident).where(HostelResident.student_id == student.id))

        self.db.flush()
        self.db.refresh(certificate)
        logger.info(f"Transfer certificate {ref_no} issued for student {student.id}")
        return self._to_response(certificate)

    def _find_by_ref(self, ref_no: str) -> TransferCertificate | None:
        result = self.db.execute(
            select(TransferCertificate).where(
                func.lower(TransferCertificate.ref_no) == ref_no.strip().lower()
            )
        )
        return result.scalar_one_or_none()

    def get_certificate(self, certificate_id: int) -> TransferCertificate:
        result = self.db.execute(
            select(TransferCertificate).where(TransferCertificate.id == certificate_id)
        )
        certificate = result.scalar_one_or_none()
        if not certificate:
            raise NotFoundError("Transfer certificate", str(certificate_id))
        return certificate

    def get_response(self, certificate_id: int) -> TransferCertificateResponse:
        return self._to_response(self.get_certificate(certificate_id))

    def get_by_ref(self, ref_no: str) -> TransferCertificateResponse:
        """Look up a certificate by reference number (case-insensitive)."""
        certificate = self._find_by_ref(ref_no)
        if not certificate:
            raise NotFoundError("Transfer certificate", ref_no)
        return self._to_response(certificate)

    def update(
        self,
        certificate_id: int,
        request: TransferCertificateUpdate,
    ) -> TransferCertificateResponse:
        """Edit certificate fields; the student snapshot is left untouched."""
        certificate = self.get_certificate(certificate_id)
        update_data = request.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(certificate, field, value)

        if "issue_date" in update_data and certificate.issue_date is None:
            raise ValidationError("issue_date cannot be cleared")
        if "issue_date" in update_data:
            certificate.student.exit_date = certificate.issue_date

        self.db.flush()
        self.db.refresh(certificate)
        return self._to_response(certificate)

    def list_certificates(
        self,
        search: str | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> PaginatedTransferCertificateResponse:
        """List certificates, newest first, optionally searching ref no or student name."""
        query = select(TransferCertificate)
        if search:
            term = f"%{search}%"
            query = query.where(
                or_(
                    TransferCertificate.ref_no.ilike(term),
                    cast(TransferCertificate.student_details, String).ilike(term),
                )
            )

        total = self.db.execute(select(func.count()).select_from(query.subquery())).scalar() or 0

        query = (
            query
            .order_by(TransferCertificate.issue_date.desc(), TransferCertificate.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        certificates = self.db.execute(query).scalars().all()

        return PaginatedTransferCertificateResponse.build(
            [self._to_response(c) for c in certificates],
            total,
            page,
            page_size,
        )
