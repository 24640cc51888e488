"""Calendar and reminder schemas."""

from datetime import date, datetime

from pydantic import Field, field_validator, model_validator

from app.models.calendar import CalendarEventType
from app.schemas.common import BaseSchema, reject_null


class CalendarEventBase(BaseSchema):
    """Base calendar event schema."""

    title: str = Field(..., min_length=1, max_length=255)
    event_date: date
    end_date: date | None = None
    event_type: CalendarEventType = CalendarEventType.EVENT
    description: str | None = None

    @model_validator(mode="after")
    def validate_range(self):
        if self.end_date is not None and self.end_date < self.event_date:
            raise ValueError("end_date cannot be before event_date")
        return self


class CalendarEventCreate(CalendarEventBase):
    """Calendar event creation schema."""

    pass


class CalendarEventUpdate(BaseSchema):
    """Calendar event update schema."""

    title: str | None = Field(None, min_length=1, max_length=255)
    event_date: date | None = None
    end_date: date | None = None
    event_type: CalendarEventType | None = None
    description: str | None = None

    _required = field_validator("title", "event_date", "event_type")(reject_null)


class CalendarEventResponse(CalendarEventBase):
    """Calendar event response schema."""

    id: int
    created_at: datetime
    updated_at: datetime


class CalendarEntry(BaseSchema):
    """School event or public holiday as shown on the calendar.

    ``key`` identifies the entry for reminders: ``event-<id>`` for school
    events and ``gov-<date>`` for public holidays.
    """

    key: str
    title: str
    event_date: date
    end_date: date | None = None
    event_type: CalendarEventType
    event_id: int | None = None
    is_public_holiday: bool = False


class Reminder(BaseSchema):
    """A calendar entry due to be announced today."""

    key: str
    title: str
    event_date: date
    event_type: CalendarEventType
    days_until: int
    message: str


class ActiveReminder(Reminder):
    """A reminder currently on screen."""

    shown_at: datetime
    expires_at: datetime


class ReminderCheckResponse(BaseSchema):
    """Result of a reminder check for the current user.

    ``emitted`` holds what this call announced. ``announced`` holds every
    reminder announced to the user today, including those the daily job
    emitted before the user signed in.
    """

    lead_days: int
    emitted: list[Reminder]
    active: list[ActiveReminder]
    announced: list[Reminder] = []


class ReminderPreferenceUpdate(BaseSchema):
    """Lead time for event reminders; negative disables them."""

    reminder_lead_days: int = Field(..., ge=-1, le=365)
