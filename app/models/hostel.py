"""Hostel rooms, residents and hostel staff."""

import enum
from datetime import date
from decimal import Decimal

from sqlalchemy import DECIMAL, BigInteger, Date, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.base import IDMixin, JSONType, TimestampMixin
from app.models.student import Gender


class HostelBlock(str, enum.Enum):
    A = "A Block"
    B = "B Block"
    C = "C Block (Girls)"


class RoomType(str, enum.Enum):
    SINGLE = "Single Occupancy"
    DOUBLE = "Double Occupancy"
    DORMITORY = "Dormitory (4-person)"


class HostelStaffRole(str, enum.Enum):
    WARDEN = "Warden"
    MESS_MANAGER = "Mess Manager"
    MESS_COOK = "Mess Cook"
    MESS_HELPER = "Mess Helper"
    SECURITY = "Security"
    CLEANING_STAFF = "Cleaning Staff"


class PaymentStatus(str, enum.Enum):
    PAID = "Paid"
    PENDING = "Pending"


class HostelRoom(Base, IDMixin, TimestampMixin):
    """A room in a hostel block."""

    __tablename__ = "hostel_rooms"

    block: Mapped[HostelBlock] = mapped_column(Enum(HostelBlock), nullable=False, index=True)
    room_number: Mapped[int] = mapped_column(Integer, nullable=False)
    room_type: Mapped[RoomType] = mapped_column(Enum(RoomType), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    facilities: Mapped[list[str] | None] = mapped_column(JSONType, nullable=True)

    # Relationships
    residents: Mapped[list["HostelResident"]] = relationship(
        "HostelResident",
        back_populates="room",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("block", "room_number", name="uq_hostel_room_block_number"),
    )

    def __repr__(self) -> str:
        return f"<HostelRoom(block={self.block}, room_number={self.room_number})>"


class HostelResident(Base, IDMixin, TimestampMixin):
    """A student living in the hostel; a student holds at most one room."""

    __tablename__ = "hostel_residents"

    student_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("students.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    registration_id: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    room_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("hostel_rooms.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    date_of_joining: Mapped[date] = mapped_column(Date, nullable=False)

    # Relationships
    room: Mapped["HostelRoom"] = relationship("HostelRoom", back_populates="residents")
    student: Mapped["Student"] = relationship("Student", lazy="joined")

    def __repr__(self) -> str:
        return f"<HostelResident(registration_id={self.registration_id}, room_id={self.room_id})>"


class HostelStaff(Base, IDMixin, TimestampMixin):
    """Warden, mess or support worker employed by the hostel."""

    __tablename__ = "hostel_staff"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    gender: Mapped[Gender] = mapped_column(Enum(Gender), nullable=False)
    role: Mapped[HostelStaffRole] = mapped_column(Enum(HostelStaffRole), nullable=False, index=True)
    photograph_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    contact_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    date_of_joining: Mapped[date] = mapped_column(Date, nullable=False)
    duty_shift: Mapped[str | None] = mapped_column(String(100), nullable=True)
    assigned_block: Mapped[HostelBlock | None] = mapped_column(Enum(HostelBlock), nullable=True)
    salary: Mapped[Decimal] = mapped_column(DECIMAL(12, 2), default=0, nullable=False)
    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False
    )

    def __repr__(self) -> str:
        return f"<HostelStaff(id={self.id}, name={self.name}, role={self.role})>"
