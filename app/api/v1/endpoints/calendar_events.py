"""Calendar and event reminder endpoints."""

from datetime import date

from fastapi import APIRouter

from app.core.database import DbSession
from app.core.dependencies import AdminUser, CurrentUser
from app.core.timeutils import local_today
from app.schemas.calendar import (
    CalendarEntry,
    CalendarEventCreate,
    CalendarEventResponse,
    CalendarEventUpdate,
    ReminderCheckResponse,
)
from app.schemas.common import MessageResponse
from app.services.calendar import CalendarService
from app.services.reminder import ReminderService

router = APIRouter()


@router.get("", response_model=list[CalendarEntry])
def list_calendar(
    current_user: CurrentUser,
    db: DbSession,
    start: date | None = None,
    end: date | None = None,
    include_holidays: bool = True,
):
    """List school events, merged with public holidays, in a date range."""
    service = CalendarService(db)
    return service.list_entries(start, end, include_holidays)


@router.post("/events", response_model=CalendarEventResponse)
def create_event(
    request: CalendarEventCreate,
    admin: AdminUser,
    db: DbSession,
):
    """Create a calendar event."""
    service = CalendarService(db)
    return service.create_event(request)


@router.get("/events/{event_id}", response_model=CalendarEventResponse)
def get_event(
    event_id: int,
    current_user: CurrentUser,
    db: DbSession,
):
    """Get a calendar event."""
    service = CalendarService(db)
    return CalendarEventResponse.model_validate(service.get_event(event_id))


@router.patch("/events/{event_id}", response_model=CalendarEventResponse)
def update_event(
    event_id: int,
    request: CalendarEventUpdate,
    admin: AdminUser,
    db: DbSession,
):
    """Update a calendar event."""
    service = CalendarService(db)
    return service.update_event(event_id, request)


@router.delete("/events/{event_id}", response_model=MessageResponse)
def delete_event(
    event_id: int,
    admin: AdminUser,
    db: DbSession,
):
    """Delete a calendar event."""
    service = CalendarService(db)
    service.delete_event(event_id)
    return MessageResponse(message="Event deleted successfully")


@router.post("/reminders/check", response_model=ReminderCheckResponse)
def check_reminders(
    current_user: CurrentUser,
    db: DbSession,
):
    """
    Announce events due for the current user today.

    Each event is announced at most once per day; reminders stay active for
    a few seconds after they are emitted. The daily job announces due events
    just after midnight, so a later check lists them under ``announced``
    rather than ``emitted``.
    """
    service = ReminderService(db)
    return service.check(current_user)


@router.post("/reminders/run", response_model=MessageResponse)
def run_reminder_job(
    admin: AdminUser,
    db: DbSession,
):
    """
    Run the daily reminder pass for all users now instead of waiting for the scheduler.
    """
    today = local_today()
    service = ReminderService(db)
    service.purge_expired_announcements(today)
    count = service.run_for_all_users(today)
    return MessageResponse(message=f"Event reminder job completed: {count} reminders sent")
