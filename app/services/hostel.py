"""Hostel rooms, residents and hostel staff."""

import logging
import re

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.timeutils import local_today
from app.models.hostel import HostelBlock, HostelResident, HostelRoom, HostelStaff, HostelStaffRole
from app.models.student import Student, StudentStatus
from app.schemas.hostel import (
    HostelResidentCreate,
    HostelResidentResponse,
    HostelResidentUpdate,
    HostelRoomCreate,
    HostelRoomResponse,
    HostelRoomUpdate,
    HostelStaffCreate,
    HostelStaffResponse,
    HostelStaffUpdate,
    OccupancyStatus,
    RoomOccupant,
)

logger = logging.getLogger(__name__)


def occupancy_status(occupied: int, capacity: int) -> OccupancyStatus:
    if occupied <= 0:
        return OccupancyStatus.VACANT
    if occupied >= capacity:
        return OccupancyStatus.FULL
    return OccupancyStatus.PARTIAL


def next_registration_id(existing: list[str], school_code: str | None = None) -> str:
    """Next hostel registration ID after the highest one in use, e.g. ``BMS-H-004``."""
    prefix = f"{school_code or settings.SCHOOL_CODE}-H-"
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$", re.IGNORECASE)
    numbers = [int(m.group(1)) for m in map(pattern.match, existing) if m]
    return f"{prefix}{max(numbers, default=0) + 1:03d}"


class HostelService:
    """Hostel rooms, residents and hostel staff."""

    def __init__(self, db: Session):
        self.db = db

    # ==========================================
    # Rooms
    # ==========================================

    def room_response(self, room: HostelRoom) -> HostelRoomResponse:
        occupants = [
            RoomOccupant(
                resident_id=r.id,
                student_id=r.student_id,
                name=r.student.name,
                grade=r.student.grade,
            )
            for r in sorted(room.residents, key=lambda r: r.registration_id)
        ]
        return HostelRoomResponse(
            id=room.id,
            block=room.block,
            room_number=room.room_number,
            room_type=room.room_type,
            capacity=room.capacity,
            facilities=room.facilities or [],
            occupants=occupants,
            occupied=len(occupants),
            available=max(room.capacity - len(occupants), 0),
            occupancy_status=occupancy_status(len(occupants), room.capacity),
            created_at=room.created_at,
            updated_at=room.updated_at,
        )

    def _check_room_unique(self, block: HostelBlock, room_number: int, room_id: int | None = None) -> None:
        query = select(HostelRoom).where(
            HostelRoom.block == block,
            HostelRoom.room_number == room_number,
        )
        if room_id is not None:
            query = query.where(HostelRoom.id != room_id)
        if self.db.execute(query).scalar_one_or_none():
            raise ConflictError(
                f"Room {room_number} already exists in {block.value}",
                details={"block": block.value, "room_number": room_number},
            )

    def create_room(self, request: HostelRoomCreate) -> HostelRoomResponse:
        self._check_room_unique(request.block, request.room_number)
        room = HostelRoom(**request.model_dump())
        self.db.add(room)
        self.db.flush()
        self.db.refresh(room)
        logger.info(f"Hostel room created: {room.block.value} {room.room_number}")
        return self.room_response(room)

    def get_room(self, room_id: int) -> HostelRoom:
        room = self.db.get(HostelRoom, room_id)
        if room is None:
            raise NotFoundError("Hostel room", str(room_id))
        return room

    def update_room(self, room_id: int, request: HostelRoomUpdate) -> HostelRoomResponse:
        """Edit a room; capacity cannot drop below the number of residents."""
        room = self.get_room(room_id)
        update_data = request.model_dump(exclude_unset=True)
        if "block" in update_data or "room_number" in update_data:
            self._check_room_unique(
                update_data.get("block", room.block),
                update_data.get("room_number", room.room_number),
                room_id=room.id,
            )
        capacity = update_data.get("capacity", room.capacity)
        if capacity < len(room.residents):
            raise ValidationError(
                f"Room has {len(room.residents)} residents, capacity cannot be {capacity}",
                details={"occupied": len(room.residents)},
            )
        for field, value in update_data.items():
            setattr(room, field, value)
        self.db.flush()
        self.db.refresh(room)
        return self.room_response(room)

    def delete_room(self, room_id: int) -> None:
        room = self.get_room(room_id)
        if room.residents:
            raise ConflictError("Room still has residents; move them out first")
        self.db.delete(room)
        self.db.flush()

    def list_rooms(
        self,
        block: HostelBlock | None = None,
        available_only: bool = False,
    ) -> list[HostelRoomResponse]:
        query = select(HostelRoom).order_by(HostelRoom.block, HostelRoom.room_number)
        if block:
            query = query.where(HostelRoom.block == block)
        rooms = [self.room_response(r) for r in self.db.execute(query).scalars()]
        if available_only:
            rooms = [r for r in rooms if r.available > 0]
        return rooms

    def _ensure_space(self, room: HostelRoom) -> None:
        if len(room.residents) >= room.capacity:
            raise ConflictError(
                f"Room {room.room_number} in {room.block.value} is full",
                details={"room_id": room.id, "capacity": room.capacity},
            )

    # ==========================================
    # Residents
    # ==========================================

    def resident_response(self, resident: HostelResident) -> HostelResidentResponse:
        return HostelResidentResponse(
            id=resident.id,
            registration_id=resident.registration_id,
            student_id=resident.student_id,
            student_name=resident.student.name,
            grade=resident.student.grade,
            room_id=resident.room_id,
            block=resident.room.block,
            room_number=resident.room.room_number,
            date_of_joining=resident.date_of_joining,
            created_at=resident.created_at,
            updated_at=resident.updated_at,
        )

    def _check_registration_unique(self, registration_id: str, resident_id: int | None = None) -> None:
        query = select(HostelResident).where(
            func.lower(HostelResident.registration_id) == registration_id.lower()
        )
        if resident_id is not None:
            query = query.where(HostelResident.id != resident_id)
        if self.db.execute(query).scalar_one_or_none():
            raise ConflictError(
                "Hostel registration ID already in use",
                details={"registration_id": registration_id},
            )

    def admit_resident(self, request: HostelResidentCreate) -> HostelResidentResponse:
        """Give an active student a bed in a room with space left."""
        student = self.db.get(Student, request.student_id)
        if student is None:
            raise NotFoundError("Student", str(request.student_id))
        if student.status != StudentStatus.ACTIVE:
            raise ValidationError(f"{student.name} is not an active student")

        existing = self.db.execute(
            select(HostelResident).where(HostelResident.student_id == student.id)
        ).scalar_one_or_none()
        if existing:
            raise ConflictError(
                f"{student.name} already lives in the hostel",
                details={"registration_id": existing.registration_id},
            )

        room = self.get_room(request.room_id)
        self._ensure_space(room)

        registration_id = request.registration_id
        if registration_id:
            self._check_registration_unique(registration_id)
        else:
            used = self.db.execute(select(HostelResident.registration_id)).scalars().all()
            registration_id = next_registration_id(list(used))

        resident = HostelResident(
            student_id=student.id,
            room_id=room.id,
            registration_id=registration_id,
            date_of_joining=request.date_of_joining or local_today(),
        )
        self.db.add(resident)
        self.db.flush()
        self.db.refresh(resident)
        self.db.refresh(room)
        logger.info(f"Hostel resident admitted: {registration_id} ({student.name})")
        return self.resident_response(resident)

    def get_resident(self, resident_id: int) -> HostelResident:
        resident = self.db.get(HostelResident, resident_id)
        if resident is None:
            raise NotFoundError("Hostel resident", str(resident_id))
        return resident

    def update_resident(self, resident_id: int, request: HostelResidentUpdate) -> HostelResidentResponse:
        """Move a resident to another room or correct their registration details."""
        resident = self.get_resident(resident_id)
        update_data = request.model_dump(exclude_unset=True)

        if "registration_id" in update_data:
            self._check_registration_unique(update_data["registration_id"], resident_id=resident.id)
        new_room_id = update_data.get("room_id")
        if new_room_id is not None and new_room_id != resident.room_id:
            self._ensure_space(self.get_room(new_room_id))

        old_room = resident.room
        for field, value in update_data.items():
            setattr(resident, field, value)
        self.db.flush()
        # room collections are loaded eagerly and go stale when a resident moves
        self.db.expire(old_room)
        if new_room_id is not None:
            self.db.expire(self.get_room(new_room_id))
        self.db.refresh(resident)
        return self.resident_response(resident)

    def remove_resident(self, resident_id: int) -> None:
        resident = self.get_resident(resident_id)
        room = resident.room
        self.db.delete(resident)
        self.db.flush()
        self.db.expire(room)
        logger.info(f"Hostel resident removed: {resident.registration_id}")

    def list_residents(
        self,
        block: HostelBlock | None = None,
        room_id: int | None = None,
        search: str | None = None,
    ) -> list[HostelResidentResponse]:
        query = (
            select(HostelResident)
            .join(HostelRoom, HostelResident.room_id == HostelRoom.id)
            .join(Student, HostelResident.student_id == Student.id)
        )
        if block:
            query = query.where(HostelRoom.block == block)
        if room_id:
            query = query.where(HostelResident.room_id == room_id)
        if search:
            search_term = f"%{search}%"
            query = query.where(
                or_(
                    Student.name.ilike(search_term),
                    HostelResident.registration_id.ilike(search_term),
                )
            )
        query = query.order_by(HostelResident.registration_id)
        return [self.resident_response(r) for r in self.db.execute(query).scalars().unique()]

    # ==========================================
    # Hostel staff
    # ==========================================

    def create_staff(self, request: HostelStaffCreate) -> HostelStaffResponse:
        member = HostelStaff(**request.model_dump())
        self.db.add(member)
        self.db.flush()
        self.db.refresh(member)
        return HostelStaffResponse.model_validate(member)

    def get_staff(self, staff_id: int) -> HostelStaff:
        member = self.db.get(HostelStaff, staff_id)
        if member is None:
            raise NotFoundError("Hostel staff", str(staff_id))
        return member

    def update_staff(self, staff_id: int, request: HostelStaffUpdate) -> HostelStaffResponse:
        member = self.get_staff(staff_id)
        for field, value in request.model_dump(exclude_unset=True).items():
            setattr(member, field, value)
        self.db.flush()
        self.db.refresh(member)
        return HostelStaffResponse.model_validate(member)

    def delete_staff(self, staff_id: int) -> None:
        member = self.get_staff(staff_id)
        self.db.delete(member)
        self.db.flush()

    def list_staff(
        self,
        role: HostelStaffRole | None = None,
        block: HostelBlock | None = None,
    ) -> list[HostelStaffResponse]:
        query = select(HostelStaff).order_by(HostelStaff.role, HostelStaff.name)
        if role:
            query = query.where(HostelStaff.role == role)
        if block:
            query = query.where(HostelStaff.assigned_block == block)
        return [HostelStaffResponse.model_validate(m) for m in self.db.execute(query).scalars()]
