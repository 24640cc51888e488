"""Hostel rooms, residents and hostel staff."""

from fastapi import APIRouter, Query

from app.core.database import DbSession
from app.core.dependencies import AdminUser, CurrentUser
from app.models.hostel import HostelBlock, HostelStaffRole
from app.schemas.common import MessageResponse
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
)
from app.services.hostel import HostelService

router = APIRouter()


# ==========================================
# Rooms
# ==========================================

@router.get("/rooms", response_model=list[HostelRoomResponse])
def list_rooms(
    current_user: CurrentUser,
    db: DbSession,
    block: HostelBlock | None = None,
    available_only: bool = Query(False, description="Only rooms with a free bed"),
):
    return HostelService(db).list_rooms(block, available_only)


@router.post("/rooms", response_model=HostelRoomResponse)
def create_room(request: HostelRoomCreate, admin: AdminUser, db: DbSession):
    return HostelService(db).create_room(request)


@router.get("/rooms/{room_id}", response_model=HostelRoomResponse)
def get_room(room_id: int, current_user: CurrentUser, db: DbSession):
    service = HostelService(db)
    return service.room_response(service.get_room(room_id))


@router.patch("/rooms/{room_id}", response_model=HostelRoomResponse)
def update_room(room_id: int, request: HostelRoomUpdate, admin: AdminUser, db: DbSession):
    return HostelService(db).update_room(room_id, request)


@router.delete("/rooms/{room_id}", response_model=MessageResponse)
def delete_room(room_id: int, admin: AdminUser, db: DbSession):
    HostelService(db).delete_room(room_id)
    return MessageResponse(message="Room deleted successfully")


# ==========================================
# Residents
# ==========================================

@router.get("/residents", response_model=list[HostelResidentResponse])
def list_residents(
    current_user: CurrentUser,
    db: DbSession,
    block: HostelBlock | None = None,
    room_id: int | None = None,
    search: str | None = Query(None, description="Matches student name or registration ID"),
):
    return HostelService(db).list_residents(block, room_id, search)


@router.post("/residents", response_model=HostelResidentResponse)
def admit_resident(request: HostelResidentCreate, admin: AdminUser, db: DbSession):
    """Admit an active student to a room that has a free bed."""
    return HostelService(db).admit_resident(request)


@router.get("/residents/{resident_id}", response_model=HostelResidentResponse)
def get_resident(resident_id: int, current_user: CurrentUser, db: DbSession):
    service = HostelService(db)
    return service.resident_response(service.get_resident(resident_id))


@router.patch("/residents/{resident_id}", response_model=HostelResidentResponse)
def update_resident(resident_id: int, request: HostelResidentUpdate, admin: AdminUser, db: DbSession):
    return HostelService(db).update_resident(resident_id, request)


@router.delete("/residents/{resident_id}", response_model=MessageResponse)
def remove_resident(resident_id: int, admin: AdminUser, db: DbSession):
    HostelService(db).remove_resident(resident_id)
    return MessageResponse(message="Resident removed from the hostel")


# ==========================================
# Hostel staff
# ==========================================

@router.get("/staff", response_model=list[HostelStaffResponse])
def list_hostel_staff(
    admin: AdminUser,
    db: DbSession,
    role: HostelStaffRole | None = None,
    block: HostelBlock | None = None,
):
    return HostelService(db).list_staff(role, block)


@router.post("/staff", response_model=HostelStaffResponse)
def create_hostel_staff(request: HostelStaffCreate, admin: AdminUser, db: DbSession):
    return HostelService(db).create_staff(request)


@router.patch("/staff/{staff_id}", response_model=HostelStaffResponse)
def update_hostel_staff(staff_id: int, request: HostelStaffUpdate, admin: AdminUser, db: DbSession):
    return HostelService(db).update_staff(staff_id, request)


@router.delete("/staff/{staff_id}", response_model=MessageResponse)
def delete_hostel_staff(staff_id: int, admin: AdminUser, db: DbSession):
    HostelService(db).delete_staff(staff_id)
    return MessageResponse(message="Hostel staff member deleted successfully")
