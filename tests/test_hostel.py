from datetime import date

import pytest

from app.core.exceptions import ConflictError, ValidationError
from app.models.hostel import HostelBlock, HostelResident, RoomType
from app.models.student import Grade, StudentStatus
from app.schemas.hostel import (
    HostelResidentCreate,
    HostelResidentUpdate,
    HostelRoomCreate,
    HostelRoomUpdate,
    OccupancyStatus,
)
from app.schemas.transfer import TransferCertificateCreate
from app.services.hostel import HostelService, next_registration_id, occupancy_status
from app.services.transfer import TransferService
from tests.conftest import make_student


def make_room(db, room_number=101, capacity=2, block=HostelBlock.A):
    room = HostelService(db).create_room(
        HostelRoomCreate(
            block=block,
            room_number=room_number,
            room_type=RoomType.DOUBLE if capacity == 2 else RoomType.DORMITORY,
            capacity=capacity,
            facilities=["Fan"],
        )
    )
    db.commit()
    return room


class TestRegistrationId:
    def test_first_id(self):
        assert next_registration_id([], school_code="BMS") == "BMS-H-001"

    def test_follows_highest_in_use(self):
        existing = ["BMS-H-001", "bms-h-007", "MANUAL-12", "BMS-H-003"]
        assert next_registration_id(existing, school_code="BMS") == "BMS-H-008"


@pytest.mark.parametrize(
    "occupied,capacity,expected",
    [(0, 4, OccupancyStatus.VACANT), (2, 4, OccupancyStatus.PARTIAL), (4, 4, OccupancyStatus.FULL)],
)
def test_occupancy_status(occupied, capacity, expected):
    assert occupancy_status(occupied, capacity) is expected


class TestHostelService:
    def test_admit_until_full(self, db):
        room = make_room(db, capacity=2)
        service = HostelService(db)
        students = [make_student(db, f"Boarder {i}", roll_no=i) for i in range(1, 4)]

        first = service.admit_resident(HostelResidentCreate(student_id=students[0].id, room_id=room.id))
        service.admit_resident(HostelResidentCreate(student_id=students[1].id, room_id=room.id))

        assert first.registration_id == "BMS-H-001"
        details = service.room_response(service.get_room(room.id))
        assert details.occupancy_status is OccupancyStatus.FULL
        assert [o.name for o in details.occupants] == ["Boarder 1", "Boarder 2"]

        with pytest.raises(ConflictError):
            service.admit_resident(HostelResidentCreate(student_id=students[2].id, room_id=room.id))

    def test_student_admitted_once(self, db):
        room = make_room(db, capacity=4)
        student = make_student(db, "Twice")
        service = HostelService(db)
        service.admit_resident(HostelResidentCreate(student_id=student.id, room_id=room.id))

        with pytest.raises(ConflictError):
            service.admit_resident(HostelResidentCreate(student_id=student.id, room_id=room.id))

    def test_only_active_students(self, db):
        room = make_room(db)
        student = make_student(db, "Left", status=StudentStatus.TRANSFERRED)

        with pytest.raises(ValidationError):
            HostelService(db).admit_resident(HostelResidentCreate(student_id=student.id, room_id=room.id))

    def test_move_between_rooms(self, db):
        small = make_room(db, room_number=101, capacity=1)
        large = make_room(db, room_number=102, capacity=4)
        service = HostelService(db)
        resident = service.admit_resident(
            HostelResidentCreate(student_id=make_student(db, "Mover").id, room_id=small.id)
        )

        moved = service.update_resident(resident.id, HostelResidentUpdate(room_id=large.id))

        assert moved.room_number == 102
        assert service.room_response(service.get_room(small.id)).occupied == 0
        assert service.room_response(service.get_room(large.id)).occupied == 1

    def test_capacity_cannot_drop_below_occupancy(self, db):
        room = make_room(db, capacity=4)
        service = HostelService(db)
        for i in range(1, 4):
            service.admit_resident(
                HostelResidentCreate(student_id=make_student(db, f"S{i}", roll_no=i).id, room_id=room.id)
            )

        with pytest.raises(ValidationError):
            service.update_room(room.id, HostelRoomUpdate(capacity=2))
        assert service.update_room(room.id, HostelRoomUpdate(capacity=3)).occupancy_status is OccupancyStatus.FULL

    def test_occupied_room_cannot_be_deleted(self, db):
        room = make_room(db)
        service = HostelService(db)
        resident = service.admit_resident(
            HostelResidentCreate(student_id=make_student(db, "Stayer").id, room_id=room.id)
        )

        with pytest.raises(ConflictError):
            service.delete_room(room.id)

        service.remove_resident(resident.id)
        service.delete_room(room.id)

    def test_duplicate_room_number_in_block(self, db):
        make_room(db, room_number=101, block=HostelBlock.A)
        make_room(db, room_number=101, block=HostelBlock.C)
        with pytest.raises(ConflictError):
            make_room(db, room_number=101, block=HostelBlock.A)

    def test_transfer_releases_bed(self, db, academic_year):
        room = make_room(db)
        student = make_student(db, "Leaver", grade=Grade.VII, roll_no=5)
        HostelService(db).admit_resident(HostelResidentCreate(student_id=student.id, room_id=room.id))
        db.commit()

        TransferService(db).register(
            TransferCertificateCreate(student_id=student.id, issue_date=date(2025, 11, 3))
        )

        assert db.query(HostelResident).count() == 0


class TestHostelEndpoints:
    def test_admin_manages_rooms_and_residents(self, client, db, admin_headers, teacher_headers):
        response = client.post(
            "/api/v1/hostel/rooms",
            json={"block": "C Block (Girls)", "room_number": 101, "room_type": "Double Occupancy", "capacity": 2},
            headers=admin_headers,
        )
        assert response.status_code == 200
        room_id = response.json()["id"]
        assert response.json()["occupancy_status"] == "Vacant"

        student = make_student(db, "Lalnunmawii", grade=Grade.VIII, roll_no=4)
        response = client.post(
            "/api/v1/hostel/residents",
            json={"student_id": student.id, "room_id": room_id, "registration_id": "BMS-H-050"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["block"] == "C Block (Girls)"

        response = client.get("/api/v1/hostel/residents", params={"search": "lalnun"}, headers=teacher_headers)
        assert [r["registration_id"] for r in response.json()] == ["BMS-H-050"]

        response = client.get("/api/v1/hostel/rooms", params={"available_only": True}, headers=teacher_headers)
        assert response.json()[0]["available"] == 1

    def test_teacher_cannot_admit(self, client, db, teacher_headers):
        room = make_room(db)
        student = make_student(db, "Hopeful")
        response = client.post(
            "/api/v1/hostel/residents",
            json={"student_id": student.id, "room_id": room.id},
            headers=teacher_headers,
        )
        assert response.status_code == 403

    def test_hostel_staff(self, client, admin_headers):
        response = client.post(
            "/api/v1/hostel/staff",
            json={
                "name": "Mr. John Doe",
                "gender": "Male",
                "role": "Warden",
                "date_of_joining": "2020-01-01",
                "assigned_block": "A Block",
                "salary": "25000",
                "payment_status": "Paid",
            },
            headers=admin_headers,
        )
        assert response.status_code == 200
        staff_id = response.json()["id"]

        response = client.patch(
            f"/api/v1/hostel/staff/{staff_id}",
            json={"payment_status": None},
            headers=admin_headers,
        )
        assert response.status_code == 422

        response = client.get("/api/v1/hostel/staff", params={"role": "Warden"}, headers=admin_headers)
        assert [s["name"] for s in response.json()] == ["Mr. John Doe"]
