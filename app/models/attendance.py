"""Daily attendance of students and staff."""

import enum
from datetime import date

from sqlalchemy import BigInteger, Date, Enum, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.models.base import IDMixin, TimestampMixin
from app.models.student import Grade


class AttendanceStatus(str, enum.Enum):
    """Attendance status of a student for one day."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"
    EXCUSED = "Excused"


class StaffAttendanceStatus(str, enum.Enum):
    """Attendance status of a staff member for one day."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LEAVE = "Leave"


class StudentAttendance(Base, IDMixin, TimestampMixin):
    """One student's attendance on one day.

    ``grade`` is the grade the student was in when the register was taken, so
    past registers survive promotion.
    """

    __tablename__ = "student_attendance"

    student_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    grade: Mapped[Grade] = mapped_column(Enum(Grade), nullable=False, index=True)
    attendance_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[AttendanceStatus] = mapped_column(Enum(AttendanceStatus), nullable=False)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "student_id", "attendance_date",
            name="uq_student_attendance_student_date",
        ),
    )

    def __repr__(self) -> str:
        return f"<StudentAttendance(student_id={self.student_id}, date={self.attendance_date}, status={self.status})>"


class StaffAttendance(Base, IDMixin, TimestampMixin):
    """One staff member's attendance on one day."""

    __tablename__ = "staff_attendance"

    staff_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("staff.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    attendance_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[StaffAttendanceStatus] = mapped_column(Enum(StaffAttendanceStatus), nullable=False)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    marked_by_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    __table_args__ = (
        UniqueConstraint(
            "staff_id", "attendance_date",
            name="uq_staff_attendance_staff_date",
        ),
    )

    def __repr__(self) -> str:
        return f"<StaffAttendance(staff_id={self.staff_id}, date={self.attendance_date}, status={self.status})>"
