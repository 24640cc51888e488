"""Database models package."""

from app.models.attendance import (
    AttendanceStatus,
    StaffAttendance,
    StaffAttendanceStatus,
    StudentAttendance,
)
from app.models.calendar import CalendarEvent, CalendarEventType, EventAnnouncement
from app.models.exam import ExamResult
from app.models.hostel import (
    HostelBlock,
    HostelResident,
    HostelRoom,
    HostelStaff,
    HostelStaffRole,
    PaymentStatus,
    RoomType,
)
from app.models.notification import Notification
from app.models.settings import SchoolSetting
from app.models.staff import (
    Department,
    Designation,
    EmployeeType,
    EmploymentStatus,
    Staff,
    StaffType,
)
from app.models.student import Category, Gender, Grade, Student, StudentStatus
from app.models.transfer import TransferCertificate
from app.models.user import User, UserRole

__all__ = [
    # User
    "User",
    "UserRole",
    # Student
    "Student",
    "StudentStatus",
    "Grade",
    "Gender",
    "Category",
    # Exam
    "ExamResult",
    # Settings
    "SchoolSetting",
    # Calendar
    "CalendarEvent",
    "CalendarEventType",
    "EventAnnouncement",
    # Transfer certificates
    "TransferCertificate",
    # Notification
    "Notification",
    # Staff
    "Staff",
    "StaffType",
    "Department",
    "Designation",
    "EmployeeType",
    "EmploymentStatus",
    # Attendance
    "StudentAttendance",
    "StaffAttendance",
    "AttendanceStatus",
    "StaffAttendanceStatus",
    # Hostel
    "HostelRoom",
    "HostelResident",
    "HostelStaff",
    "HostelBlock",
    "RoomType",
    "HostelStaffRole",
    "PaymentStatus",
]
