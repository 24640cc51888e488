"""Calendar event service."""

from datetime import date

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.core.constants import PUBLIC_HOLIDAYS
from app.core.exceptions import NotFoundError, ValidationError
from app.models.calendar import CalendarEvent, CalendarEventType
from app.schemas.calendar import (
    CalendarEntry,
    CalendarEventCreate,
    CalendarEventResponse,
    CalendarEventUpdate,
)


def holiday_key(day: date) -> str:
    """Identifier of a public holiday; embeds the date so each year is distinct."""
    return f"gov-{day.isoformat()}"


def public_holidays(start: date | None = None, end: date | None = None) -> list[CalendarEntry]:
    """Fixed public holiday list, optionally limited to a date range."""
    return [
        CalendarEntry(
            key=holiday_key(day),
            title=title,
            event_date=day,
            event_type=CalendarEventType.HOLIDAY,
            is_public_holiday=True,
        )
        for day, title in PUBLIC_HOLIDAYS
        if (start is None or day >= start) and (end is None or day <= end)
    ]


def event_entry(event: CalendarEvent) -> CalendarEntry:
    return CalendarEntry(
        key=event.event_key,
        title=event.title,
        event_date=event.event_date,
        end_date=event.end_date,
        event_type=event.event_type,
        event_id=event.id,
    )


class CalendarService:
    """School calendar management service."""

    def __init__(self, db: Session):
        self.db = db

    def create_event(self, request: CalendarEventCreate) -> CalendarEventResponse:
        """Create a new calendar event."""
        event = CalendarEvent(
            title=request.title,
            event_date=request.event_date,
            end_date=request.end_date,
            event_type=request.event_type,
            description=request.description,
        )
        self.db.add(event)
        self.db.flush()
        self.db.refresh(event)
        return CalendarEventResponse.model_validate(event)

    def get_event(self, event_id: int) -> CalendarEvent:
        """Get calendar event by ID."""
        result = self.db.execute(select(CalendarEvent).where(CalendarEvent.id == event_id))
        event = result.scalar_one_or_none()
        if not event:
            raise NotFoundError("Calendar event", str(event_id))
        return event

    def update_event(self, event_id: int, request: CalendarEventUpdate) -> CalendarEventResponse:
        """Update a calendar event."""
        event = self.get_event(event_id)
        update_data = request.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(event, field, value)
        if event.end_date is not None and event.end_date < event.event_date:
            raise ValidationError("end_date cannot be before event_date")
        self.db.flush()
        self.db.refresh(event)
        return CalendarEventResponse.model_validate(event)

    def delete_event(self, event_id: int) -> None:
        """Delete a calendar event."""
        event = self.get_event(event_id)
        self.db.delete(event)
        self.db.flush()

    def list_events(
        self,
        start: date | None = None,
        end: date | None = None,
    ) -> list[CalendarEvent]:
        """School events overlapping the given date range."""
        query = select(CalendarEvent)
        if start:
            query = query.where(
                or_(
                    CalendarEvent.event_date >= start,
                    CalendarEvent.end_date >= start,
                )
            )
        if end:
            query = query.where(CalendarEvent.event_date <= end)
        result = self.db.execute(query.order_by(CalendarEvent.event_date, CalendarEvent.id))
        return list(result.scalars().all())

    def list_entries(
        self,
        start: date | None = None,
        end: date | None = None,
        include_holidays: bool = True,
    ) -> list[CalendarEntry]:
        """School events merged with public holidays, sorted by date."""
        entries = [event_entry(e) for e in self.list_events(start, end)]
        if include_holidays:
            entries.extend(public_holidays(start, end))
        return sorted(entries, key=lambda e: (e.event_date, e.key))
