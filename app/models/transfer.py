"""Transfer certificate model."""

from datetime import date
from typing import Any

from sqlalchemy import BigInteger, Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.base import IDMixin, JSONType, TimestampMixin


class TransferCertificate(Base, IDMixin, TimestampMixin):
    """Issued transfer certificate (TC).

    ``student_details`` is a snapshot of the student taken when the
    certificate was registered so reprints do not change after later edits.
    """

    __tablename__ = "transfer_certificates"

    ref_no: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    student_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_details: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)

    date_of_birth_in_words: Mapped[str | None] = mapped_column(String(255), nullable=True)
    school_dues: Mapped[str | None] = mapped_column(String(255), nullable=True)
    qualified_for_promotion: Mapped[bool] = mapped_column(default=True, nullable=False)
    last_attendance_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    application_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    reason_for_leaving: Mapped[str | None] = mapped_column(Text, nullable=True)
    general_conduct: Mapped[str | None] = mapped_column(String(100), nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    student: Mapped["Student"] = relationship("Student", lazy="selectin")

    def __repr__(self) -> str:
        return f"<TransferCertificate(ref_no={self.ref_no}, student_id={self.student_id})>"


# Import to avoid circular imports
from app.models.student import Student
