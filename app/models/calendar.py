"""Calendar event and announcement ledger models."""

import enum
from datetime import date

from sqlalchemy import BigInteger, Date, Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.models.base import IDMixin, TimestampMixin


class CalendarEventType(str, enum.Enum):
    """Calendar event type enumeration."""

    HOLIDAY = "Holiday"
    EXAM = "Exam"
    EVENT = "Event"
    MEETING = "Meeting"


class CalendarEvent(Base, IDMixin, TimestampMixin):
    """School-defined calendar event."""

    __tablename__ = "calendar_events"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    event_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    event_type: Mapped[CalendarEventType] = mapped_column(
        Enum(CalendarEventType),
        default=CalendarEventType.EVENT,
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def event_key(self) -> str:
        return f"event-{self.id}"

    def __repr__(self) -> str:
        return f"<CalendarEvent(id={self.id}, title={self.title}, date={self.event_date})>"


class EventAnnouncement(Base, IDMixin):
    """An event key already announced to a user on a given calendar day.

    Rows for days before today are expired by the daily purge job.
    """

    __tablename__ = "event_announcements"

    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    event_key: Mapped[str] = mapped_column(String(100), nullable=False)
    announced_on: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint(
            "user_id", "event_key", "announced_on",
            name="uq_announcement_user_event_day",
        ),
    )

    def __repr__(self) -> str:
        return f"<EventAnnouncement(user_id={self.user_id}, key={self.event_key}, on={self.announced_on})>"
