"""Transfer certificate schemas."""

from datetime import date, datetime

from pydantic import Field, field_validator

from app.models.student import Category, Gender, Grade
from app.schemas.common import BaseSchema, PaginatedResponse, reject_null


class TransferStudentDetails(BaseSchema):
    """Student data frozen on the certificate at registration."""

    student_id: str
    student_numeric_id: int
    roll_no: int
    name: str
    gender: Gender | None = None
    father_name: str | None = None
    mother_name: str | None = None
    current_class: Grade
    date_of_birth: date | None = None
    category: Category | None = None
    religion: str | None = None


class TransferCertificateBase(BaseSchema):
    """Certificate fields editable after registration."""

    date_of_birth_in_words: str | None = Field(None, max_length=255)
    school_dues: str | None = Field(None, max_length=255)
    qualified_for_promotion: bool = True
    last_attendance_date: date | None = None
    application_date: date | None = None
    issue_date: date | None = None
    reason_for_leaving: str | None = "Unavoidable change of residence"
    general_conduct: str | None = Field("Good", max_length=100)
    remarks: str | None = None


class TransferCertificateCreate(TransferCertificateBase):
    """Register a transfer certificate for an active student.

    Omitted ``ref_no``, ``school_dues``, ``date_of_birth_in_words`` and
    dates are filled in from the student record.
    """

    student_id: int
    ref_no: str | None = Field(None, min_length=1, max_length=100)


class TransferCertificateUpdate(BaseSchema):
    """Transfer certificate update schema."""

    date_of_birth_in_words: str | None = Field(None, max_length=255)
    school_dues: str | None = Field(None, max_length=255)
    qualified_for_promotion: bool | None = None
    last_attendance_date: date | None = None
    application_date: date | None = None
    issue_date: date | None = None
    reason_for_leaving: str | None = None
    general_conduct: str | None = Field(None, max_length=100)
    remarks: str | None = None

    _required = field_validator("qualified_for_promotion", "issue_date")(reject_null)


class TransferCertificateResponse(TransferCertificateBase):
    """Transfer certificate response schema."""

    id: int
    ref_no: str
    student_id: int
    issue_date: date
    student_details: TransferStudentDetails
    created_at: datetime
    updated_at: datetime


class PaginatedTransferCertificateResponse(PaginatedResponse):
    """Paginated transfer certificate list."""

    items: list[TransferCertificateResponse]
