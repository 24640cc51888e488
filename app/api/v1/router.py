"""Version 1 API: every feature router under its URL prefix."""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    attendance,
    auth,
    calendar_events,
    exams,
    fees,
    hostel,
    notifications,
    promotion,
    settings,
    staff,
    students,
    transfers,
)

api_router = APIRouter()

for module, prefix, tag in (
    (auth, "/auth", "Authentication"),
    (settings, "/settings", "Settings"),
    (students, "/students", "Students"),
    (exams, "/exams", "Exams"),
    (fees, "/fees", "Fees"),
    (promotion, "/promotion", "Promotion"),
    (transfers, "/transfer-certificates", "Transfer Certificates"),
    (calendar_events, "/calendar", "Calendar"),
    (notifications, "/notifications", "Notifications"),
    (staff, "/staff", "Staff"),
    (attendance, "/attendance", "Attendance"),
    (hostel, "/hostel", "Hostel"),
):
    api_router.include_router(module.router, prefix=prefix, tags=[tag])
