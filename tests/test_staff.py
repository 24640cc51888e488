import pytest

from app.core.exceptions import ConflictError, NotFoundError
from app.models.staff import Department, EmploymentStatus, StaffType
from app.schemas.staff import StaffFilter, StaffUpdate
from app.services.staff import StaffService
from tests.conftest import auth_headers, make_staff, make_user

NEW_TEACHER = {
    "staff_type": "Teaching",
    "employee_id": "EMP-014",
    "first_name": "Zothanpuii",
    "last_name": "Hmar",
    "gender": "Female",
    "date_of_joining": "2024-06-03",
    "department": "Science",
    "designation": "Teacher",
    "educational_qualification": "Post-Graduate",
    "subjects_taught": ["Physics", "Chemistry"],
    "basic_salary": "32000.00",
}


class TestStaffService:
    def test_employee_id_is_unique_ignoring_case(self, db):
        make_staff(db, "EMP-001")
        service = StaffService(db)
        with pytest.raises(ConflictError):
            service.update_staff(make_staff(db, "EMP-002").id, StaffUpdate(employee_id="emp-001"))

    def test_non_teaching_staff_carry_no_subjects(self, db):
        staff = make_staff(db, "EMP-003", subjects_taught=["English"])

        response = StaffService(db).update_staff(
            staff.id,
            StaffUpdate(staff_type=StaffType.NON_TEACHING, department=Department.SUPPORT_STAFF),
        )

        assert response.subjects_taught == []
        assert response.department is Department.SUPPORT_STAFF

    def test_one_record_per_account(self, db, teacher):
        make_staff(db, "EMP-004", user_id=teacher.id)
        other = make_staff(db, "EMP-005")

        with pytest.raises(ConflictError):
            StaffService(db).update_staff(other.id, StaffUpdate(user_id=teacher.id))

    def test_profile_lookup_by_account(self, db, teacher, admin):
        staff = make_staff(db, "EMP-006", user_id=teacher.id)
        service = StaffService(db)

        assert service.get_staff_for_user(teacher).id == staff.id
        with pytest.raises(NotFoundError):
            service.get_staff_for_user(admin)

    def test_list_filters_and_search(self, db):
        make_staff(db, "EMP-010", first_name="Lalrinpuii")
        make_staff(db, "EMP-011", first_name="Vanlalhruaia", department=Department.MATHEMATICS)
        make_staff(db, "EMP-012", first_name="Rohmingliana", status=EmploymentStatus.RETIRED)

        service = StaffService(db)
        active = service.list_staff(StaffFilter(status=EmploymentStatus.ACTIVE))
        assert [s.employee_id for s in active.items] == ["EMP-010", "EMP-011"]

        maths = service.list_staff(StaffFilter(department=Department.MATHEMATICS))
        assert maths.total == 1

        by_id = service.list_staff(StaffFilter(search="emp-012"))
        assert by_id.items[0].full_name == "Rohmingliana Ralte"


class TestStaffEndpoints:
    def test_admin_creates_and_updates(self, client, admin_headers):
        response = client.post("/api/v1/staff", json=NEW_TEACHER, headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["full_name"] == "Zothanpuii Hmar"
        assert data["subjects_taught"] == ["Physics", "Chemistry"]
        assert data["status"] == "Active"

        response = client.patch(
            f"/api/v1/staff/{data['id']}",
            json={"status": "On Leave"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "On Leave"

        response = client.post("/api/v1/staff", json=NEW_TEACHER, headers=admin_headers)
        assert response.status_code == 409

    def test_update_cannot_null_required_field(self, client, db, admin_headers):
        staff = make_staff(db, "EMP-020")

        response = client.patch(
            f"/api/v1/staff/{staff.id}",
            json={"date_of_joining": None},
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_teacher_cannot_list_but_sees_own_record(self, client, db, teacher, teacher_headers):
        make_staff(db, "EMP-021", user_id=teacher.id)

        response = client.get("/api/v1/staff", headers=teacher_headers)
        assert response.status_code == 403

        response = client.get("/api/v1/staff/me", headers=teacher_headers)
        assert response.status_code == 200
        assert response.json()["employee_id"] == "EMP-021"

    def test_own_record_missing(self, client, db):
        user = make_user(db, "unlinked")
        response = client.get("/api/v1/staff/me", headers=auth_headers(user))
        assert response.status_code == 404

    def test_delete(self, client, db, admin_headers):
        staff = make_staff(db, "EMP-022")

        response = client.delete(f"/api/v1/staff/{staff.id}", headers=admin_headers)
        assert response.status_code == 200

        response = client.get(f"/api/v1/staff/{staff.id}", headers=admin_headers)
        assert response.status_code == 404
