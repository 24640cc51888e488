"""Staff records: teaching and non-teaching employees."""

import enum
from datetime import date
from decimal import Decimal

from sqlalchemy import DECIMAL, BigInteger, Date, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.models.base import IDMixin, JSONType, TimestampMixin
from app.models.student import Gender


class StaffType(str, enum.Enum):
    TEACHING = "Teaching"
    NON_TEACHING = "Non-Teaching"


class MaritalStatus(str, enum.Enum):
    SINGLE = "Single"
    MARRIED = "Married"
    DIVORCED = "Divorced"
    WIDOWED = "Widowed"


class BloodGroup(str, enum.Enum):
    A_POSITIVE = "A+"
    A_NEGATIVE = "A-"
    B_POSITIVE = "B+"
    B_NEGATIVE = "B-"
    AB_POSITIVE = "AB+"
    AB_NEGATIVE = "AB-"
    O_POSITIVE = "O+"
    O_NEGATIVE = "O-"


class Qualification(str, enum.Enum):
    SSLC = "SSLC"
    HSLC = "HSLC"
    HSSLC = "HSSLC"
    GRADUATE = "Graduate"
    POST_GRADUATE = "Post-Graduate"
    B_ED = "B.Ed"
    M_ED = "M.Ed"
    PHD = "Ph.D."
    DIPLOMA = "Diploma"
    OTHER = "Other"


class Department(str, enum.Enum):
    ADMINISTRATION = "Administration"
    SCIENCE = "Science"
    MATHEMATICS = "Mathematics"
    SOCIAL_STUDIES = "Social Studies"
    LANGUAGES = "Languages"
    COMPUTER_SCIENCE = "Computer Science"
    ARTS = "Arts"
    SPORTS = "Sports"
    SUPPORT_STAFF = "Support Staff"


class Designation(str, enum.Enum):
    PRINCIPAL = "Principal"
    HEAD_OF_DEPARTMENT = "Head of Department"
    TEACHER = "Teacher"
    SPORTS_TEACHER = "Sports Teacher"
    LAB_ASSISTANT = "Lab Assistant"
    LIBRARIAN = "Librarian"
    CLERK = "Clerk"


class EmployeeType(str, enum.Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"


class EmploymentStatus(str, enum.Enum):
    """Whether a staff member is currently working at the school."""

    ACTIVE = "Active"
    ON_LEAVE = "On Leave"
    RESIGNED = "Resigned"
    RETIRED = "Retired"


class Staff(Base, IDMixin, TimestampMixin):
    """Employee record, optionally linked to the account the employee signs in with."""

    __tablename__ = "staff"

    staff_type: Mapped[StaffType] = mapped_column(Enum(StaffType), nullable=False, index=True)
    employee_id: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    user_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="SET NULL"),
        unique=True,
        nullable=True,
    )

    # Personal details
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    gender: Mapped[Gender] = mapped_column(Enum(Gender), nullable=False)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    nationality: Mapped[str | None] = mapped_column(String(100), nullable=True)
    marital_status: Mapped[MaritalStatus | None] = mapped_column(Enum(MaritalStatus), nullable=True)
    photograph_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    blood_group: Mapped[BloodGroup | None] = mapped_column(Enum(BloodGroup), nullable=True)
    aadhaar_number: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Contact
    contact_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email_address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    permanent_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    current_address: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Qualifications
    educational_qualification: Mapped[Qualification | None] = mapped_column(
        Enum(Qualification), nullable=True
    )
    specialization: Mapped[str | None] = mapped_column(String(255), nullable=True)
    years_of_experience: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    previous_experience: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Professional details
    date_of_joining: Mapped[date] = mapped_column(Date, nullable=False)
    department: Mapped[Department] = mapped_column(Enum(Department), nullable=False, index=True)
    designation: Mapped[Designation] = mapped_column(Enum(Designation), nullable=False)
    employee_type: Mapped[EmployeeType] = mapped_column(
        Enum(EmployeeType), default=EmployeeType.FULL_TIME, nullable=False
    )
    status: Mapped[EmploymentStatus] = mapped_column(
        Enum(EmploymentStatus),
        default=EmploymentStatus.ACTIVE,
        nullable=False,
        index=True,
    )
    subjects_taught: Mapped[list[str] | None] = mapped_column(JSONType, nullable=True)
    teacher_license_number: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Payroll
    salary_grade: Mapped[str | None] = mapped_column(String(50), nullable=True)
    basic_salary: Mapped[Decimal | None] = mapped_column(DECIMAL(12, 2), nullable=True)
    bank_account_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    bank_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pan_number: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Emergency contact
    emergency_contact_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    emergency_contact_relationship: Mapped[str | None] = mapped_column(String(100), nullable=True)
    emergency_contact_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    medical_conditions: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_active(self) -> bool:
        return self.status == EmploymentStatus.ACTIVE

    def __repr__(self) -> str:
        return f"<Staff(id={self.id}, employee_id={self.employee_id}, name={self.full_name})>"
