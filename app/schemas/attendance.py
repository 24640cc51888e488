"""Attendance schemas."""

from datetime import date, datetime

from pydantic import Field

from app.models.attendance import AttendanceStatus, StaffAttendanceStatus
from app.models.student import Grade
from app.schemas.common import BaseSchema


# ==========================================
# Student attendance
# ==========================================

class StudentAttendanceResponse(BaseSchema):
    """Saved attendance of one student on one day."""

    id: int
    student_id: int
    grade: Grade
    attendance_date: date
    status: AttendanceStatus
    remarks: str | None
    created_at: datetime
    updated_at: datetime


class ClassRegisterEntry(BaseSchema):
    """One line of a class register.

    ``recorded`` is false when nothing was saved for the student yet; the
    status then shows the default, present.
    """

    student_id: int
    roll_no: int
    name: str
    status: AttendanceStatus
    remarks: str | None = None
    recorded: bool


class ClassRegister(BaseSchema):
    """Attendance of every active student of a grade on one day."""

    grade: Grade
    attendance_date: date
    students: list[ClassRegisterEntry]
    total_students: int
    present_count: int
    absent_count: int
    late_count: int
    excused_count: int
    is_recorded: bool


class SingleAttendanceInput(BaseSchema):
    """Single student attendance entry for bulk operations."""

    student_id: int
    status: AttendanceStatus = AttendanceStatus.PRESENT
    remarks: str | None = None


class BulkAttendanceCreate(BaseSchema):
    """Attendance of a class on a specific date."""

    attendance_date: date
    records: list[SingleAttendanceInput] = Field(..., min_length=1)
    mark_all_present: bool = Field(
        False,
        description="Ignore the given statuses and mark every listed student present",
    )


class BulkAttendanceResponse(BaseSchema):
    """Response for bulk attendance operations."""

    total_records: int
    successful: int
    failed: int
    errors: list[dict] = []
    message: str


class AttendanceSummary(BaseSchema):
    """Attendance summary for a date range."""

    total_records: int
    present_count: int
    absent_count: int
    late_count: int
    excused_count: int
    attendance_percent: float
    date_from: date
    date_to: date


# ==========================================
# Staff attendance
# ==========================================

class StaffAttendanceMark(BaseSchema):
    """Admin entry of a staff member's attendance."""

    staff_id: int
    attendance_date: date | None = Field(None, description="Defaults to today")
    status: StaffAttendanceStatus
    remarks: str | None = None


class StaffAttendanceResponse(BaseSchema):
    """Saved attendance of one staff member on one day."""

    id: int
    staff_id: int
    attendance_date: date
    status: StaffAttendanceStatus
    remarks: str | None
    marked_by_id: int | None
    created_at: datetime
    updated_at: datetime


class StaffRegisterEntry(BaseSchema):
    """One line of the daily staff register; ``status`` is None until marked."""

    staff_id: int
    employee_id: str
    name: str
    status: StaffAttendanceStatus | None = None
    remarks: str | None = None


class StaffRegister(BaseSchema):
    """Attendance of every active staff member on one day."""

    attendance_date: date
    staff: list[StaffRegisterEntry]
    total_staff: int
    present_count: int
    absent_count: int
    leave_count: int
    unmarked_count: int
