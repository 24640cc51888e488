"""Student schemas."""

from datetime import date, datetime

from pydantic import Field, field_validator

from app.models.student import Category, Gender, Grade, StudentStatus
from app.schemas.common import BaseSchema, PaginatedResponse, reject_null


class StudentBase(BaseSchema):
    """Base student schema."""

    name: str = Field(..., min_length=2, max_length=255)
    grade: Grade
    roll_no: int = Field(0, ge=0)
    contact: str | None = Field(None, max_length=50)
    photograph_url: str | None = None
    date_of_birth: date | None = None
    gender: Gender | None = None
    address: str | None = None
    aadhaar_number: str | None = Field(None, max_length=20)
    pen: str | None = Field(None, max_length=50)
    category: Category | None = None
    religion: str | None = Field(None, max_length=100)
    father_name: str | None = Field(None, max_length=255)
    mother_name: str | None = Field(None, max_length=255)
    guardian_name: str | None = Field(None, max_length=255)


class StudentCreate(StudentBase):
    """Student creation schema."""

    pass


class StudentUpdate(BaseSchema):
    """Student update schema."""

    name: str | None = Field(None, min_length=2, max_length=255)
    grade: Grade | None = None
    roll_no: int | None = Field(None, ge=0)
    contact: str | None = Field(None, max_length=50)
    photograph_url: str | None = None
    date_of_birth: date | None = None
    gender: Gender | None = None
    address: str | None = None
    aadhaar_number: str | None = Field(None, max_length=20)
    pen: str | None = Field(None, max_length=50)
    category: Category | None = None
    religion: str | None = Field(None, max_length=100)
    father_name: str | None = Field(None, max_length=255)
    mother_name: str | None = Field(None, max_length=255)
    guardian_name: str | None = Field(None, max_length=255)

    _required = field_validator("name", "grade", "roll_no")(reject_null)


class StudentResponse(StudentBase):
    """Student response schema."""

    id: int
    student_id: str | None = None
    status: StudentStatus
    exit_date: date | None = None
    created_at: datetime
    updated_at: datetime


class StudentBulkUploadResult(BaseSchema):
    """Result of bulk student upload."""

    total_rows: int
    successful_rows: int
    failed_rows: int
    errors: list[dict] = []
    message: str


class StudentFilter(BaseSchema):
    """Student filter options."""

    grade: Grade | None = None
    status: StudentStatus | None = None
    search: str | None = None  # Search by name or parent name


class PaginatedStudentResponse(PaginatedResponse):
    """Paginated student list."""

    items: list[StudentResponse]
