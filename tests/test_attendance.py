from datetime import date, timedelta

import pytest

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.timeutils import local_today
from app.models.attendance import AttendanceStatus, StaffAttendance, StaffAttendanceStatus
from app.models.staff import EmploymentStatus
from app.models.student import Grade, StudentStatus
from app.schemas.attendance import BulkAttendanceCreate, SingleAttendanceInput, StaffAttendanceMark
from app.services.attendance import AttendanceService, attendance_percent
from app.services.settings import SettingsService
from tests.conftest import auth_headers, make_staff, make_student, make_user

DAY = date(2025, 7, 14)


def register(student_ids, statuses=None, attendance_date=DAY, **kwargs) -> BulkAttendanceCreate:
    statuses = statuses or {}
    return BulkAttendanceCreate(
        attendance_date=attendance_date,
        records=[
            SingleAttendanceInput(student_id=sid, status=statuses.get(sid, AttendanceStatus.PRESENT))
            for sid in student_ids
        ],
        **kwargs,
    )


@pytest.fixture()
def class_v(db):
    return [
        make_student(db, "Lalthansangi", grade=Grade.V, roll_no=2),
        make_student(db, "Biakchungnunga", grade=Grade.V, roll_no=1),
        make_student(db, "Malsawmtluangi", grade=Grade.V, roll_no=3),
    ]


@pytest.mark.parametrize(
    "attended,total,expected",
    [(0, 0, 0.0), (3, 4, 75.0), (2, 3, 66.67)],
)
def test_attendance_percent(attended, total, expected):
    assert attendance_percent(attended, total) == expected


class TestClassRegister:
    def test_unrecorded_day_defaults_to_present(self, db, class_v):
        make_student(db, "Gone", grade=Grade.V, roll_no=4, status=StudentStatus.TRANSFERRED)
        make_student(db, "Elsewhere", grade=Grade.VI, roll_no=1)

        result = AttendanceService(db).get_class_register(Grade.V, DAY)

        assert [e.roll_no for e in result.students] == [1, 2, 3]
        assert all(e.status is AttendanceStatus.PRESENT and not e.recorded for e in result.students)
        assert result.present_count == 3
        assert result.is_recorded is False

    def test_save_then_overwrite(self, db, class_v):
        service = AttendanceService(db)
        first, second, third = class_v

        result = service.save_class_attendance(
            Grade.V,
            register([s.id for s in class_v], {second.id: AttendanceStatus.ABSENT}),
        )
        assert result.successful == 3
        assert result.message == "Successfully saved 3 attendance records."

        service.save_class_attendance(
            Grade.V,
            register([second.id], {second.id: AttendanceStatus.LATE}),
        )

        day = service.get_class_register(Grade.V, DAY)
        by_id = {e.student_id: e for e in day.students}
        assert by_id[second.id].status is AttendanceStatus.LATE
        assert by_id[first.id].recorded and by_id[third.id].recorded
        assert (day.present_count, day.absent_count, day.late_count) == (2, 0, 1)

    def test_nothing_saved_when_a_student_is_not_in_the_grade(self, db, class_v):
        outsider = make_student(db, "Outsider", grade=Grade.VI, roll_no=1)
        service = AttendanceService(db)

        result = service.save_class_attendance(
            Grade.V,
            register([class_v[0].id, outsider.id, class_v[0].id]),
        )

        assert result.successful == 0
        assert result.failed == 2
        assert result.message == "Validation failed. No records were saved."
        assert service.get_class_register(Grade.V, DAY).is_recorded is False

    def test_mark_all_present_overrides_statuses(self, db, class_v):
        service = AttendanceService(db)
        service.save_class_attendance(
            Grade.V,
            register(
                [s.id for s in class_v],
                {s.id: AttendanceStatus.ABSENT for s in class_v},
                mark_all_present=True,
            ),
        )
        assert service.get_class_register(Grade.V, DAY).present_count == 3

    def test_future_dates_rejected(self, db, class_v):
        with pytest.raises(ValidationError):
            AttendanceService(db).save_class_attendance(
                Grade.V,
                register([class_v[0].id], attendance_date=local_today() + timedelta(days=1)),
            )


class TestSummaryAndHistory:
    def test_summary_by_grade_and_student(self, db, class_v):
        service = AttendanceService(db)
        first, second, _ = class_v
        service.save_class_attendance(Grade.V, register([first.id, second.id], {second.id: AttendanceStatus.ABSENT}))
        service.save_class_attendance(
            Grade.V,
            register([first.id, second.id], {first.id: AttendanceStatus.LATE}, attendance_date=DAY + timedelta(days=1)),
        )

        summary = service.get_summary(DAY, DAY + timedelta(days=6), grade=Grade.V)
        assert (summary.total_records, summary.present_count, summary.absent_count, summary.late_count) == (4, 2, 1, 1)
        assert summary.attendance_percent == 75.0

        mine = service.get_summary(DAY, DAY + timedelta(days=6), student_id=second.id)
        assert mine.attendance_percent == 50.0

        assert service.get_summary(DAY, DAY, grade=Grade.VI).total_records == 0

    def test_summary_rejects_inverted_range(self, db):
        with pytest.raises(ValidationError):
            AttendanceService(db).get_summary(DAY, DAY - timedelta(days=1))

    def test_history_keeps_grade_after_promotion(self, db, class_v):
        student = class_v[0]
        service = AttendanceService(db)
        service.save_class_attendance(Grade.V, register([student.id]))
        student.grade = Grade.VI
        db.commit()

        history = service.get_student_history(student.id)
        assert [(r.attendance_date, r.grade) for r in history] == [(DAY, Grade.V)]

        with pytest.raises(NotFoundError):
            service.get_student_history(9999)


class TestStaffAttendance:
    def test_self_marking_is_idempotent(self, db, teacher):
        staff = make_staff(db, "EMP-100", user_id=teacher.id)
        service = AttendanceService(db)

        first = service.mark_own_attendance(teacher)
        second = service.mark_own_attendance(teacher)

        assert first.id == second.id
        assert first.status is StaffAttendanceStatus.PRESENT
        assert first.attendance_date == local_today()
        assert db.query(StaffAttendance).filter_by(staff_id=staff.id).count() == 1

    def test_self_marking_keeps_recorded_leave(self, db, teacher, admin):
        staff = make_staff(db, "EMP-101", user_id=teacher.id)
        service = AttendanceService(db)
        service.mark_staff(StaffAttendanceMark(staff_id=staff.id, status=StaffAttendanceStatus.LEAVE), admin)

        with pytest.raises(ConflictError):
            service.mark_own_attendance(teacher)

    def test_inactive_staff_cannot_mark(self, db, teacher):
        make_staff(db, "EMP-102", user_id=teacher.id, status=EmploymentStatus.RESIGNED)
        with pytest.raises(ValidationError):
            AttendanceService(db).mark_own_attendance(teacher)

    def test_register_counts_unmarked(self, db, admin):
        present = make_staff(db, "EMP-103", first_name="Andrew")
        make_staff(db, "EMP-104", first_name="Beatrice")
        make_staff(db, "EMP-105", first_name="Retired", status=EmploymentStatus.RETIRED)
        service = AttendanceService(db)
        service.mark_staff(
            StaffAttendanceMark(staff_id=present.id, attendance_date=DAY, status=StaffAttendanceStatus.PRESENT),
            admin,
        )

        result = service.get_staff_register(DAY)

        assert [e.employee_id for e in result.staff] == ["EMP-103", "EMP-104"]
        assert (result.present_count, result.unmarked_count, result.total_staff) == (1, 1, 2)
        assert result.staff[1].status is None


class TestAttendanceEndpoints:
    def test_class_teacher_takes_register(self, client, db, teacher, teacher_headers, class_v):
        payload = {
            "attendance_date": DAY.isoformat(),
            "records": [{"student_id": s.id, "status": "Absent"} for s in class_v],
        }

        response = client.put("/api/v1/attendance/classes/Class V", json=payload, headers=teacher_headers)
        assert response.status_code == 403

        SettingsService(db).assign_class_teacher(teacher.id, Grade.V)
        db.commit()

        response = client.put("/api/v1/attendance/classes/Class V", json=payload, headers=teacher_headers)
        assert response.status_code == 200
        assert response.json()["successful"] == 3

        response = client.get(
            "/api/v1/attendance/classes/Class V",
            params={"attendance_date": DAY.isoformat()},
            headers=teacher_headers,
        )
        assert response.json()["absent_count"] == 3

        response = client.get(
            "/api/v1/attendance/summary",
            params={"date_from": DAY.isoformat(), "date_to": DAY.isoformat(), "grade": "Class V"},
            headers=teacher_headers,
        )
        assert response.json()["attendance_percent"] == 0.0

    def test_empty_register_rejected(self, client, admin_headers):
        response = client.put(
            "/api/v1/attendance/classes/Class V",
            json={"attendance_date": DAY.isoformat(), "records": []},
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_staff_mark_and_register(self, client, db, admin_headers):
        user = make_user(db, "librarian")
        staff = make_staff(db, "EMP-110", user_id=user.id)

        response = client.post("/api/v1/attendance/staff/me", headers=auth_headers(user))
        assert response.status_code == 200
        assert response.json()["status"] == "Present"

        response = client.get("/api/v1/attendance/staff", headers=auth_headers(user))
        assert response.status_code == 403

        response = client.put(
            "/api/v1/attendance/staff",
            json={"staff_id": staff.id, "status": "Leave", "remarks": "Medical"},
            headers=admin_headers,
        )
        assert response.status_code == 200

        response = client.get("/api/v1/attendance/staff", headers=admin_headers)
        assert response.json()["leave_count"] == 1
        assert response.json()["staff"][0]["remarks"] == "Medical"
