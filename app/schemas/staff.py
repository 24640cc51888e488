"""Staff record schemas."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import Field, field_validator

from app.models.staff import (
    BloodGroup,
    Department,
    Designation,
    EmployeeType,
    EmploymentStatus,
    MaritalStatus,
    Qualification,
    StaffType,
)
from app.models.student import Gender
from app.schemas.common import BaseSchema, PaginatedResponse, reject_null


class StaffBase(BaseSchema):
    """Base staff schema."""

    staff_type: StaffType
    employee_id: str = Field(..., min_length=1, max_length=50)
    user_id: int | None = Field(None, description="Account the staff member signs in with")

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field("", max_length=100)
    gender: Gender
    date_of_birth: date | None = None
    nationality: str | None = Field("Indian", max_length=100)
    marital_status: MaritalStatus | None = None
    photograph_url: str | None = None
    blood_group: BloodGroup | None = None
    aadhaar_number: str | None = Field(None, max_length=20)

    contact_number: str | None = Field(None, max_length=50)
    email_address: str | None = Field(None, max_length=255)
    permanent_address: str | None = None
    current_address: str | None = None

    educational_qualification: Qualification | None = None
    specialization: str | None = Field(None, max_length=255)
    years_of_experience: int = Field(0, ge=0)
    previous_experience: str | None = None

    date_of_joining: date
    department: Department
    designation: Designation
    employee_type: EmployeeType = EmployeeType.FULL_TIME
    status: EmploymentStatus = EmploymentStatus.ACTIVE
    subjects_taught: list[str] = []
    teacher_license_number: str | None = Field(None, max_length=100)

    salary_grade: str | None = Field(None, max_length=50)
    basic_salary: Decimal | None = Field(None, ge=0)
    bank_account_number: str | None = Field(None, max_length=50)
    bank_name: str | None = Field(None, max_length=255)
    pan_number: str | None = Field(None, max_length=20)

    emergency_contact_name: str | None = Field(None, max_length=255)
    emergency_contact_relationship: str | None = Field(None, max_length=100)
    emergency_contact_number: str | None = Field(None, max_length=50)
    medical_conditions: str | None = None

    @field_validator("subjects_taught", mode="before")
    @classmethod
    def default_subjects(cls, v):
        return v or []


class StaffCreate(StaffBase):
    """Staff creation schema."""

    pass


class StaffUpdate(BaseSchema):
    """Staff update schema; omitted fields keep their value."""

    staff_type: StaffType | None = None
    employee_id: str | None = Field(None, min_length=1, max_length=50)
    user_id: int | None = None

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    gender: Gender | None = None
    date_of_birth: date | None = None
    nationality: str | None = Field(None, max_length=100)
    marital_status: MaritalStatus | None = None
    photograph_url: str | None = None
    blood_group: BloodGroup | None = None
    aadhaar_number: str | None = Field(None, max_length=20)

    contact_number: str | None = Field(None, max_length=50)
    email_address: str | None = Field(None, max_length=255)
    permanent_address: str | None = None
    current_address: str | None = None

    educational_qualification: Qualification | None = None
    specialization: str | None = Field(None, max_length=255)
    years_of_experience: int | None = Field(None, ge=0)
    previous_experience: str | None = None

    date_of_joining: date | None = None
    department: Department | None = None
    designation: Designation | None = None
    employee_type: EmployeeType | None = None
    status: EmploymentStatus | None = None
    subjects_taught: list[str] | None = None
    teacher_license_number: str | None = Field(None, max_length=100)

    salary_grade: str | None = Field(None, max_length=50)
    basic_salary: Decimal | None = Field(None, ge=0)
    bank_account_number: str | None = Field(None, max_length=50)
    bank_name: str | None = Field(None, max_length=255)
    pan_number: str | None = Field(None, max_length=20)

    emergency_contact_name: str | None = Field(None, max_length=255)
    emergency_contact_relationship: str | None = Field(None, max_length=100)
    emergency_contact_number: str | None = Field(None, max_length=50)
    medical_conditions: str | None = None

    _required = field_validator(
        "staff_type",
        "employee_id",
        "first_name",
        "last_name",
        "gender",
        "years_of_experience",
        "date_of_joining",
        "department",
        "designation",
        "employee_type",
        "status",
    )(reject_null)


class StaffResponse(StaffBase):
    """Staff response schema."""

    id: int
    full_name: str
    created_at: datetime
    updated_at: datetime


class StaffFilter(BaseSchema):
    """Staff filter options."""

    staff_type: StaffType | None = None
    department: Department | None = None
    status: EmploymentStatus | None = None
    search: str | None = None  # Name or employee ID


class PaginatedStaffResponse(PaginatedResponse):
    """Paginated staff list."""

    items: list[StaffResponse]
