"""Exam result model."""

from decimal import Decimal

from sqlalchemy import DECIMAL, BigInteger, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.base import IDMixin, TimestampMixin


class ExamResult(Base, IDMixin, TimestampMixin):
    """Marks of one student in one subject of one terminal exam.

    Exactly one of the mark shapes is filled depending on the grade's subject
    configuration: ``marks`` for single-mark grades, ``exam_marks`` and
    ``activity_marks`` for split-mark grades, ``grade`` for subjects graded
    on the qualitative scale.
    """

    __tablename__ = "exam_results"

    student_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    exam_id: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    subject: Mapped[str] = mapped_column(String(100), nullable=False)
    marks: Mapped[Decimal | None] = mapped_column(DECIMAL(6, 2), nullable=True)
    exam_marks: Mapped[Decimal | None] = mapped_column(DECIMAL(6, 2), nullable=True)
    activity_marks: Mapped[Decimal | None] = mapped_column(DECIMAL(6, 2), nullable=True)
    grade: Mapped[str | None] = mapped_column(String(2), nullable=True)

    # Relationships
    student: Mapped["Student"] = relationship(
        "Student",
        back_populates="exam_results",
    )

    __table_args__ = (
        UniqueConstraint(
            "student_id", "exam_id", "subject",
            name="uq_exam_result_student_subject",
        ),
    )

    def __repr__(self) -> str:
        return f"<ExamResult(student_id={self.student_id}, exam={self.exam_id}, subject={self.subject})>"


# Import to avoid circular imports
from app.models.student import Student
