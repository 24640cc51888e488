from datetime import date

import pytest

from app.core.exceptions import AcademicYearNotSetError, ConflictError, ValidationError
from app.models.student import Grade, StudentStatus
from app.schemas.transfer import TransferCertificateCreate, TransferCertificateUpdate
from app.services.transfer import TransferService, date_in_words
from tests.conftest import make_student


@pytest.mark.parametrize(
    "value, expected",
    [
        (date(2014, 5, 20), "Twentieth of May Two Thousand Fourteen"),
        (date(2009, 11, 1), "First of November Two Thousand Nine"),
        (date(1999, 1, 23), "Twenty Third of January One Thousand Nine Hundred Ninety Nine"),
        (date(2012, 8, 31), "Thirty First of August Two Thousand Twelve"),
    ],
)
def test_date_in_words(value, expected):
    assert date_in_words(value) == expected


class TestTransferService:
    def test_register_marks_student_transferred(self, db, academic_year):
        student = make_student(
            db, "Lalhmingmawii", grade=Grade.VII, roll_no=3,
            date_of_birth=date(2013, 2, 14), father_name="Zonunmawia",
        )

        certificate = TransferService(db).register(
            TransferCertificateCreate(student_id=student.id, issue_date=date(2025, 11, 3))
        )
        db.commit()

        assert certificate.ref_no == f"BMS/TC/2025/{student.id}"
        assert certificate.student_details.student_id == "BMS250703"
        assert certificate.student_details.current_class == Grade.VII
        assert certificate.date_of_birth_in_words == "Fourteenth of February Two Thousand Thirteen"
        assert certificate.school_dues.endswith("due.")
        assert student.status == StudentStatus.TRANSFERRED
        assert student.exit_date == date(2025, 11, 3)

    def test_only_active_students(self, db, academic_year):
        student = make_student(db, "Already Gone", status=StudentStatus.TRANSFERRED)
        with pytest.raises(ValidationError):
            TransferService(db).register(TransferCertificateCreate(student_id=student.id))

    def test_requires_academic_year(self, db):
        student = make_student(db, "Someone")
        with pytest.raises(AcademicYearNotSetError):
            TransferService(db).register(TransferCertificateCreate(student_id=student.id))

    def test_duplicate_ref_rejected(self, db, academic_year):
        first = make_student(db, "First", roll_no=1)
        second = make_student(db, "Second", roll_no=2)
        service = TransferService(db)
        service.register(TransferCertificateCreate(student_id=first.id, ref_no="TC-001"))

        with pytest.raises(ConflictError):
            service.register(TransferCertificateCreate(student_id=second.id, ref_no="tc-001"))

    def test_update_issue_date_moves_exit_date(self, db, academic_year):
        student = make_student(db, "Mover")
        service = TransferService(db)
        certificate = service.register(
            TransferCertificateCreate(student_id=student.id, issue_date=date(2025, 6, 1))
        )

        updated = service.update(
            certificate.id,
            TransferCertificateUpdate(issue_date=date(2025, 6, 15), general_conduct="Excellent"),
        )
        db.commit()

        assert updated.general_conduct == "Excellent"
        assert student.exit_date == date(2025, 6, 15)


class TestTransferEndpoints:
    def test_register_and_lookup(self, client, db, admin_headers, teacher_headers, academic_year):
        student = make_student(db, "Rinawmi", grade=Grade.II, roll_no=9)

        response = client.post(
            "/api/v1/transfer-certificates",
            json={"student_id": student.id, "ref_no": "BMS/TC/2025/77", "school_dues": "None"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        certificate_id = response.json()["id"]

        response = client.get(
            "/api/v1/transfer-certificates/by-ref",
            params={"ref_no": "bms/tc/2025/77"},
            headers=teacher_headers,
        )
        assert response.json()["id"] == certificate_id

        response = client.get(
            "/api/v1/transfer-certificates",
            params={"search": "Rinawmi"},
            headers=teacher_headers,
        )
        assert response.json()["total"] == 1

        response = client.get("/api/v1/notifications/stats", headers=admin_headers)
        assert response.json() == {"total": 1, "unread": 1, "read": 0}

    def test_update_cannot_null_issue_date(self, client, db, admin_headers, academic_year):
        student = make_student(db, "Zosangi", grade=Grade.III, roll_no=2)
        response = client.post(
            "/api/v1/transfer-certificates",
            json={"student_id": student.id, "ref_no": "BMS/TC/2025/78"},
            headers=admin_headers,
        )
        certificate_id = response.json()["id"]

        response = client.patch(
            f"/api/v1/transfer-certificates/{certificate_id}",
            json={"issue_date": None},
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_unknown_ref(self, client, teacher_headers):
        response = client.get(
            "/api/v1/transfer-certificates/by-ref",
            params={"ref_no": "nope"},
            headers=teacher_headers,
        )
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"
