"""Daily attendance of students and staff."""

import logging
from datetime import date

from sqlalchemy import Integer, func, select
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.timeutils import local_today
from app.models.attendance import (
    AttendanceStatus,
    StaffAttendance,
    StaffAttendanceStatus,
    StudentAttendance,
)
from app.models.staff import EmploymentStatus, Staff
from app.models.student import Grade, Student, StudentStatus
from app.models.user import User
from app.schemas.attendance import (
    AttendanceSummary,
    BulkAttendanceCreate,
    BulkAttendanceResponse,
    ClassRegister,
    ClassRegisterEntry,
    StaffAttendanceMark,
    StaffAttendanceResponse,
    StaffRegister,
    StaffRegisterEntry,
    StudentAttendanceResponse,
)
from app.services.staff import StaffService

logger = logging.getLogger(__name__)


def attendance_percent(attended: int, total: int) -> float:
    """Share of recorded days attended, late arrivals included."""
    if total <= 0:
        return 0.0
    return round(attended * 100 / total, 2)


class AttendanceService:
    """Class registers, attendance summaries and the daily staff register."""

    def __init__(self, db: Session):
        self.db = db

    def _get_students_by_grade(self, grade: Grade) -> list[Student]:
        result = self.db.execute(
            select(Student)
            .where(Student.grade == grade, Student.status == StudentStatus.ACTIVE)
            .order_by(Student.roll_no, Student.name, Student.id)
        )
        return list(result.scalars().all())

    def _records_for(self, student_ids: list[int], attendance_date: date) -> dict[int, StudentAttendance]:
        if not student_ids:
            return {}
        result = self.db.execute(
            select(StudentAttendance).where(
                StudentAttendance.attendance_date == attendance_date,
                StudentAttendance.student_id.in_(student_ids),
            )
        )
        return {r.student_id: r for r in result.scalars().all()}

    # ==========================================
    # Student attendance
    # ==========================================

    def get_class_register(self, grade: Grade, attendance_date: date) -> ClassRegister:
        """Every active student of a grade in roll order with their status for the day.

        Students without a saved record are shown present.
        """
        students = self._get_students_by_grade(grade)
        records = self._records_for([s.id for s in students], attendance_date)

        entries = []
        counts = {status: 0 for status in AttendanceStatus}
        for student in students:
            record = records.get(student.id)
            status = record.status if record else AttendanceStatus.PRESENT
            counts[status] += 1
            entries.append(
                ClassRegisterEntry(
                    student_id=student.id,
                    roll_no=student.roll_no,
                    name=student.name,
                    status=status,
                    remarks=record.remarks if record else None,
                    recorded=record is not None,
                )
            )

        return ClassRegister(
            grade=grade,
            attendance_date=attendance_date,
            students=entries,
            total_students=len(students),
            present_count=counts[AttendanceStatus.PRESENT],
            absent_count=counts[AttendanceStatus.ABSENT],
            late_count=counts[AttendanceStatus.LATE],
            excused_count=counts[AttendanceStatus.EXCUSED],
            is_recorded=bool(records),
        )

    def save_class_attendance(self, grade: Grade, request: BulkAttendanceCreate) -> BulkAttendanceResponse:
        """Create or update the attendance of a grade for one day.

        Every entry is checked first; if any student is not an active member
        of the grade, or appears twice, nothing is saved.
        """
        if request.attendance_date > local_today():
            raise ValidationError("Attendance cannot be recorded for a future date")

        student_ids = {s.id for s in self._get_students_by_grade(grade)}
        errors = []
        seen: set[int] = set()
        for record in request.records:
            if record.student_id not in student_ids:
                errors.append({
                    "student_id": record.student_id,
                    "message": f"Student ID {record.student_id} is not an active student of {grade.value}",
                })
            elif record.student_id in seen:
                errors.append({
                    "student_id": record.student_id,
                    "message": f"Student ID {record.student_id} is listed more than once",
                })
            seen.add(record.student_id)

        if errors:
            return BulkAttendanceResponse(
                total_records=len(request.records),
                successful=0,
                failed=len(errors),
                errors=errors,
                message="Validation failed. No records were saved.",
            )

        existing = self._records_for(list(seen), request.attendance_date)
        for record in request.records:
            status = AttendanceStatus.PRESENT if request.mark_all_present else record.status
            current = existing.get(record.student_id)
            if current:
                current.status = status
                current.remarks = record.remarks
                current.grade = grade
            else:
                self.db.add(
                    StudentAttendance(
                        student_id=record.student_id,
                        grade=grade,
                        attendance_date=request.attendance_date,
                        status=status,
                        remarks=record.remarks,
                    )
                )
        self.db.flush()

        saved = len(request.records)
        logger.info(f"Attendance saved for {grade.value} on {request.attendance_date}: {saved} records")
        return BulkAttendanceResponse(
            total_records=saved,
            successful=saved,
            failed=0,
            message=f"Successfully saved {saved} attendance records.",
        )

    def get_student_history(
        self,
        student_id: int,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[StudentAttendanceResponse]:
        if self.db.get(Student, student_id) is None:
            raise NotFoundError("Student", str(student_id))
        query = select(StudentAttendance).where(StudentAttendance.student_id == student_id)
        if date_from:
            query = query.where(StudentAttendance.attendance_date >= date_from)
        if date_to:
            query = query.where(StudentAttendance.attendance_date <= date_to)
        query = query.order_by(StudentAttendance.attendance_date)
        return [StudentAttendanceResponse.model_validate(r) for r in self.db.execute(query).scalars()]

    def get_summary(
        self,
        date_from: date,
        date_to: date,
        grade: Grade | None = None,
        student_id: int | None = None,
    ) -> AttendanceSummary:
        """Attendance counts over a date range, for the school, a grade or one student."""
        if date_to < date_from:
            raise ValidationError("date_to cannot be before date_from")

        def count(status: AttendanceStatus):
            return func.sum(func.cast(StudentAttendance.status == status, Integer))

        query = select(
            func.count().label("total"),
            count(AttendanceStatus.PRESENT).label("present"),
            count(AttendanceStatus.ABSENT).label("absent"),
            count(AttendanceStatus.LATE).label("late"),
            count(AttendanceStatus.EXCUSED).label("excused"),
        ).where(
            StudentAttendance.attendance_date >= date_from,
            StudentAttendance.attendance_date <= date_to,
        )
        if grade:
            query = query.where(StudentAttendance.grade == grade)
        if student_id:
            query = query.where(StudentAttendance.student_id == student_id)

        row = self.db.execute(query).one()
        total = row.total or 0
        present = row.present or 0
        late = row.late or 0
        return AttendanceSummary(
            total_records=total,
            present_count=present,
            absent_count=row.absent or 0,
            late_count=late,
            excused_count=row.excused or 0,
            attendance_percent=attendance_percent(present + late, total),
            date_from=date_from,
            date_to=date_to,
        )

    # ==========================================
    # Staff attendance
    # ==========================================

    def _upsert_staff_attendance(
        self,
        staff: Staff,
        attendance_date: date,
        status: StaffAttendanceStatus,
        remarks: str | None,
        marked_by: User,
    ) -> StaffAttendance:
        record = self.db.execute(
            select(StaffAttendance).where(
                StaffAttendance.staff_id == staff.id,
                StaffAttendance.attendance_date == attendance_date,
            )
        ).scalar_one_or_none()
        if record is None:
            record = StaffAttendance(staff_id=staff.id, attendance_date=attendance_date)
            self.db.add(record)
        record.status = status
        record.remarks = remarks
        record.marked_by_id = marked_by.id
        self.db.flush()
        self.db.refresh(record)
        return record

    def mark_staff(self, request: StaffAttendanceMark, marked_by: User) -> StaffAttendanceResponse:
        """Admin entry of a staff member's attendance, replacing any earlier entry for the day."""
        attendance_date = request.attendance_date or local_today()
        if attendance_date > local_today():
            raise ValidationError("Attendance cannot be recorded for a future date")
        staff = StaffService(self.db).get_staff(request.staff_id)
        record = self._upsert_staff_attendance(
            staff, attendance_date, request.status, request.remarks, marked_by
        )
        return StaffAttendanceResponse.model_validate(record)

    def mark_own_attendance(self, user: User) -> StaffAttendanceResponse:
        """Mark the signed-in staff member present for today.

        Marking twice is harmless. A day an admin already recorded as
        absent or leave is not overwritten.
        """
        staff = StaffService(self.db).get_staff_for_user(user)
        if staff.status != EmploymentStatus.ACTIVE:
            raise ValidationError(f"Staff member is {staff.status.value}")

        today = local_today()
        existing = self.db.execute(
            select(StaffAttendance).where(
                StaffAttendance.staff_id == staff.id,
                StaffAttendance.attendance_date == today,
            )
        ).scalar_one_or_none()
        if existing is not None:
            if existing.status != StaffAttendanceStatus.PRESENT:
                raise ConflictError(
                    f"Attendance for today is already recorded as {existing.status.value}",
                )
            return StaffAttendanceResponse.model_validate(existing)

        record = self._upsert_staff_attendance(staff, today, StaffAttendanceStatus.PRESENT, None, user)
        logger.info(f"Staff {staff.employee_id} marked present for {today}")
        return StaffAttendanceResponse.model_validate(record)

    def get_staff_register(self, attendance_date: date) -> StaffRegister:
        """Every active staff member with their status for the day, unmarked ones included."""
        staff = self.db.execute(
            select(Staff)
            .where(Staff.status == EmploymentStatus.ACTIVE)
            .order_by(Staff.first_name, Staff.last_name, Staff.id)
        ).scalars().all()
        result = self.db.execute(
            select(StaffAttendance).where(StaffAttendance.attendance_date == attendance_date)
        )
        records = {r.staff_id: r for r in result.scalars().all()}

        entries = []
        counts = {status: 0 for status in StaffAttendanceStatus}
        for member in staff:
            record = records.get(member.id)
            if record:
                counts[record.status] += 1
            entries.append(
                StaffRegisterEntry(
                    staff_id=member.id,
                    employee_id=member.employee_id,
                    name=member.full_name,
                    status=record.status if record else None,
                    remarks=record.remarks if record else None,
                )
            )

        marked = sum(counts.values())
        return StaffRegister(
            attendance_date=attendance_date,
            staff=entries,
            total_staff=len(entries),
            present_count=counts[StaffAttendanceStatus.PRESENT],
            absent_count=counts[StaffAttendanceStatus.ABSENT],
            leave_count=counts[StaffAttendanceStatus.LEAVE],
            unmarked_count=len(entries) - marked,
        )
