"""Student model and academic grade levels."""

import enum
from datetime import date
from typing import Any

from sqlalchemy import Date, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.base import IDMixin, JSONType, TimestampMixin


class Grade(str, enum.Enum):
    """Academic grade levels in school order."""

    NURSERY = "Nursery"
    KINDERGARTEN = "Kindergarten"
    I = "Class I"
    II = "Class II"
    III = "Class III"
    IV = "Class IV"
    V = "Class V"
    VI = "Class VI"
    VII = "Class VII"
    VIII = "Class VIII"
    IX = "Class IX"
    X = "Class X"

    @classmethod
    def ordered(cls) -> list["Grade"]:
        return list(cls)

    @classmethod
    def terminal(cls) -> "Grade":
        """Last grade offered by the school; passing it means graduating."""
        return cls.ordered()[-1]

    @property
    def is_terminal(self) -> bool:
        return self is Grade.terminal()

    def next_grade(self) -> "Grade | None":
        grades = Grade.ordered()
        index = grades.index(self)
        if index >= len(grades) - 1:
            return None
        return grades[index + 1]

    @property
    def code(self) -> str:
        """Two character code used in formatted student IDs."""
        if self is Grade.NURSERY:
            return "NU"
        if self is Grade.KINDERGARTEN:
            return "KG"
        return f"{Grade.ordered().index(self) - 1:02d}"


class Gender(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class Category(str, enum.Enum):
    GENERAL = "General"
    SC = "SC"
    ST = "ST"
    OBC = "OBC"


class StudentStatus(str, enum.Enum):
    """Enrollment status of a student."""

    ACTIVE = "Active"
    TRANSFERRED = "Transferred"


class Student(Base, IDMixin, TimestampMixin):
    """Student model for managing student records."""

    __tablename__ = "students"

    roll_no: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    grade: Mapped[Grade] = mapped_column(Enum(Grade), nullable=False, index=True)
    contact: Mapped[str | None] = mapped_column(String(50), nullable=True)
    photograph_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Biodata
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[Gender | None] = mapped_column(Enum(Gender), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    aadhaar_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    pen: Mapped[str | None] = mapped_column(String(50), nullable=True)
    category: Mapped[Category | None] = mapped_column(Enum(Category), nullable=True)
    religion: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Parents
    father_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    mother_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    guardian_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Status for transfer management
    status: Mapped[StudentStatus] = mapped_column(
        Enum(StudentStatus),
        default=StudentStatus.ACTIVE,
        nullable=False,
        index=True,
    )
    exit_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Fee payment flags, see app.services.fee for the shape
    fee_payments: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)

    # Relationships
    exam_results: Mapped[list["ExamResult"]] = relationship(
        "ExamResult",
        back_populates="student",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    @property
    def is_active(self) -> bool:
        return self.status == StudentStatus.ACTIVE

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, name={self.name}, grade={self.grade})>"
