"""Hostel schemas."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import Field, field_validator

from app.models.hostel import HostelBlock, HostelStaffRole, PaymentStatus, RoomType
from app.models.student import Gender, Grade
from app.schemas.common import BaseSchema, reject_null


class OccupancyStatus(str, Enum):
    VACANT = "Vacant"
    PARTIAL = "Partially Occupied"
    FULL = "Full"


# ==========================================
# Rooms
# ==========================================

class HostelRoomBase(BaseSchema):
    block: HostelBlock
    room_number: int = Field(..., ge=1)
    room_type: RoomType
    capacity: int = Field(..., ge=1, le=50)
    facilities: list[str] = []

    @field_validator("facilities", mode="before")
    @classmethod
    def default_facilities(cls, v):
        return v or []


class HostelRoomCreate(HostelRoomBase):
    pass


class HostelRoomUpdate(BaseSchema):
    block: HostelBlock | None = None
    room_number: int | None = Field(None, ge=1)
    room_type: RoomType | None = None
    capacity: int | None = Field(None, ge=1, le=50)
    facilities: list[str] | None = None

    _required = field_validator("block", "room_number", "room_type", "capacity")(reject_null)


class RoomOccupant(BaseSchema):
    resident_id: int
    student_id: int
    name: str
    grade: Grade


class HostelRoomResponse(HostelRoomBase):
    """A room with the students living in it."""

    id: int
    occupants: list[RoomOccupant] = []
    occupied: int = 0
    available: int = 0
    occupancy_status: OccupancyStatus = OccupancyStatus.VACANT
    created_at: datetime
    updated_at: datetime


# ==========================================
# Residents
# ==========================================

class HostelResidentCreate(BaseSchema):
    """Admit a student to a room.

    ``registration_id`` defaults to the next free ``<SCHOOL_CODE>-H-NNN``.
    """

    student_id: int
    room_id: int
    registration_id: str | None = Field(None, min_length=1, max_length=50)
    date_of_joining: date | None = Field(None, description="Defaults to today")


class HostelResidentUpdate(BaseSchema):
    room_id: int | None = None
    registration_id: str | None = Field(None, min_length=1, max_length=50)
    date_of_joining: date | None = None

    _required = field_validator("room_id", "registration_id", "date_of_joining")(reject_null)


class HostelResidentResponse(BaseSchema):
    id: int
    registration_id: str
    student_id: int
    student_name: str
    grade: Grade
    room_id: int
    block: HostelBlock
    room_number: int
    date_of_joining: date
    created_at: datetime
    updated_at: datetime


# ==========================================
# Hostel staff
# ==========================================

class HostelStaffBase(BaseSchema):
    name: str = Field(..., min_length=2, max_length=255)
    gender: Gender
    role: HostelStaffRole
    photograph_url: str | None = Field(None, max_length=500)
    contact_number: str | None = Field(None, max_length=50)
    date_of_joining: date
    duty_shift: str | None = Field(None, max_length=100)
    assigned_block: HostelBlock | None = None
    salary: Decimal = Field(Decimal("0"), ge=0)
    payment_status: PaymentStatus = PaymentStatus.PENDING


class HostelStaffCreate(HostelStaffBase):
    pass


class HostelStaffUpdate(BaseSchema):
    name: str | None = Field(None, min_length=2, max_length=255)
    gender: Gender | None = None
    role: HostelStaffRole | None = None
    photograph_url: str | None = Field(None, max_length=500)
    contact_number: str | None = Field(None, max_length=50)
    date_of_joining: date | None = None
    duty_shift: str | None = Field(None, max_length=100)
    assigned_block: HostelBlock | None = None
    salary: Decimal | None = Field(None, ge=0)
    payment_status: PaymentStatus | None = None

    _required = field_validator(
        "name", "gender", "role", "date_of_joining", "salary", "payment_status"
    )(reject_null)


class HostelStaffResponse(HostelStaffBase):
    id: int
    created_at: datetime
    updated_at: datetime
