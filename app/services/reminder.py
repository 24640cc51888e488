"""Event reminder scheduling.

The planning functions are pure: given today's date, the calendar entries,
the lead time and the keys already announced today they decide which
reminders to emit. ``ReminderService`` wires them to the database, where
announced keys are kept per user and per day in ``event_announcements``.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.timeutils import local_today
from app.models.calendar import CalendarEvent, EventAnnouncement
from app.models.notification import Notification
from app.models.user import User
from app.schemas.calendar import ActiveReminder, CalendarEntry, Reminder, ReminderCheckResponse
from app.schemas.notification import NotificationCreate, NotificationType
from app.services.calendar import CalendarService, event_entry, public_holidays
from app.services.notification import NotificationService

logger = logging.getLogger(__name__)


def as_day(value: date | datetime) -> date:
    """Truncate a timestamp to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive timestamps
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class AnnouncementLedger:
    """Event keys already announced on ``day``."""

    day: date
    keys: frozenset[str] = field(default_factory=frozenset)

    def __contains__(self, key: str) -> bool:
        return key in self.keys

    def for_day(self, day: date) -> "AnnouncementLedger":
        """The ledger to use on ``day``; announcements expire when the day changes."""
        if day == self.day:
            return self
        return AnnouncementLedger(day=day)

    def record(self, keys: Iterable[str]) -> "AnnouncementLedger":
        return AnnouncementLedger(day=self.day, keys=self.keys | frozenset(keys))


def collect_events(
    school_events: Iterable[CalendarEvent],
    holidays: Iterable[CalendarEntry],
) -> list[CalendarEntry]:
    """School events and public holidays as one date-ordered list."""
    entries = [event_entry(e) for e in school_events]
    entries.extend(holidays)
    return sorted(entries, key=lambda e: (e.event_date, e.key))


def format_display_date(day: date) -> str:
    return day.strftime("%d/%m/%Y")


def reminder_message(title: str, days_until: int, event_date: date) -> str:
    """Reminder text for an event ``days_until`` days away."""
    if days_until == 0:
        when = "today"
    elif days_until == 1:
        when = "tomorrow"
    else:
        when = f"in {days_until} days"
    return f"Upcoming: {title} is {when} ({format_display_date(event_date)})."


def find_due_events(
    today: date | datetime,
    events: Sequence[CalendarEntry],
    lead_days: int,
    ledger: AnnouncementLedger | None = None,
) -> list[Reminder]:
    """Reminders to emit today.

    An entry is due when it falls exactly ``lead_days`` days from ``today``
    and its key has not yet been announced today. A negative lead time
    disables reminders. Past entries are never announced.
    """
    if lead_days < 0 or not events:
        return []

    today = as_day(today)
    ledger = (ledger or AnnouncementLedger(day=today)).for_day(today)

    due: list[Reminder] = []
    seen: set[str] = set()
    for event in events:
        days_until = (event.event_date - today).days
        if days_until < 0 or days_until != lead_days:
            continue
        if event.key in ledger or event.key in seen:
            continue
        seen.add(event.key)
        due.append(
            Reminder(
                key=event.key,
                title=event.title,
                event_date=event.event_date,
                event_type=event.event_type,
                days_until=days_until,
                message=reminder_message(event.title, days_until, event.event_date),
            )
        )
    return due


def merge_active(
    active: Sequence[ActiveReminder],
    emitted: Iterable[Reminder],
    now: datetime,
    display_seconds: int | None = None,
) -> list[ActiveReminder]:
    """Add newly emitted reminders to the on-screen list, one entry per key."""
    display_seconds = settings.REMINDER_DISPLAY_SECONDS if display_seconds is None else display_seconds
    merged = list(active)
    keys = {r.key for r in merged}
    for reminder in emitted:
        if reminder.key in keys:
            continue
        keys.add(reminder.key)
        merged.append(
            ActiveReminder(
                **reminder.model_dump(),
                shown_at=now,
                expires_at=now + timedelta(seconds=display_seconds),
            )
        )
    return merged


def prune_expired(
    active: Iterable[ActiveReminder],
    now: datetime,
    display_seconds: int | None = None,
) -> list[ActiveReminder]:
    """Drop reminders shown for longer than the display timeout."""
    display_seconds = settings.REMINDER_DISPLAY_SECONDS if display_seconds is None else display_seconds
    timeout = timedelta(seconds=display_seconds)
    return [r for r in active if _aware(now) - _aware(r.shown_at) < timeout]


def reminder_from_notification(notification: Notification) -> Reminder:
    """Rebuild a reminder from the ``event_reminder`` notification that announced it."""
    data = notification.action_data or {}
    return Reminder(
        key=data["event_key"],
        title=data["title"],
        event_date=date.fromisoformat(data["event_date"]),
        event_type=data["event_type"],
        days_until=data["days_until"],
        message=notification.message,
    )


class ReminderService:
    """Daily event reminders for users."""

    def __init__(self, db: Session):
        self.db = db
        self.calendar = CalendarService(db)
        self.notifications = NotificationService(db)

    def _load_ledger(self, user_id: int, today: date) -> AnnouncementLedger:
        result = self.db.execute(
            select(EventAnnouncement.event_key).where(
                EventAnnouncement.user_id == user_id,
                EventAnnouncement.announced_on == today,
            )
        )
        return AnnouncementLedger(day=today, keys=frozenset(result.scalars().all()))

    def _reminder_notifications(self, user_id: int, since: datetime) -> list[Notification]:
        result = self.db.execute(
            select(Notification)
            .where(
                Notification.user_id == user_id,
                Notification.notification_type == NotificationType.EVENT_REMINDER.value,
                Notification.created_at >= since,
            )
            .order_by(Notification.created_at, Notification.id)
        )
        return list(result.scalars().all())

    def _active_reminders(self, user_id: int, now: datetime) -> list[ActiveReminder]:
        since = now - timedelta(seconds=settings.REMINDER_DISPLAY_SECONDS)
        active = []
        for notification in self._reminder_notifications(user_id, since):
            shown_at = _aware(notification.created_at)
            active.append(
                ActiveReminder(
                    **reminder_from_notification(notification).model_dump(),
                    shown_at=shown_at,
                    expires_at=shown_at + timedelta(seconds=settings.REMINDER_DISPLAY_SECONDS),
                )
            )
        return prune_expired(active, now)

    def _announced_today(self, user_id: int, today: date, now: datetime) -> list[Reminder]:
        """Reminders whose keys are in today's ledger, newest notification per key."""
        ledger = self._load_ledger(user_id, today)
        if not ledger.keys:
            return []
        # notification timestamps are UTC, the ledger day is school-local
        since = now - timedelta(days=2)
        latest: dict[str, Reminder] = {}
        for notification in self._reminder_notifications(user_id, since):
            reminder = reminder_from_notification(notification)
            if reminder.key in ledger:
                latest[reminder.key] = reminder
        return sorted(latest.values(), key=lambda r: (r.event_date, r.key))

    def check(
        self,
        user: User,
        today: date | None = None,
        now: datetime | None = None,
    ) -> ReminderCheckResponse:
        """Emit the reminders due for ``user`` today and record them.

        The daily job runs this for every user shortly after midnight, so a
        user who checks later the same day usually gets nothing new in
        ``emitted``, and ``active`` only covers the last few seconds. Those
        reminders are still listed in ``announced`` for the rest of the day.
        """
        today = today or local_today()
        now = now or datetime.now(timezone.utc)
        lead_days = user.reminder_lead_days

        emitted: list[Reminder] = []
        if lead_days >= 0:
            target = today + timedelta(days=lead_days)
            events = collect_events(
                self.calendar.list_events(start=target, end=target),
                public_holidays(target, target),
            )
            emitted = find_due_events(today, events, lead_days, self._load_ledger(user.id, today))

        for reminder in emitted:
            self.db.add(
                EventAnnouncement(user_id=user.id, event_key=reminder.key, announced_on=today)
            )
            self.notifications.create_notification(
                NotificationCreate(
                    user_id=user.id,
                    title="Event Reminder",
                    message=reminder.message,
                    notification_type=NotificationType.EVENT_REMINDER,
                    action_data={
                        "event_key": reminder.key,
                        "title": reminder.title,
                        "event_date": reminder.event_date.isoformat(),
                        "event_type": reminder.event_type.value,
                        "days_until": reminder.days_until,
                    },
                )
            )
        self.db.flush()

        active = merge_active(self._active_reminders(user.id, now), emitted, now)
        return ReminderCheckResponse(
            lead_days=lead_days,
            emitted=emitted,
            active=active,
            announced=self._announced_today(user.id, today, now),
        )

    def run_for_all_users(self, today: date | None = None) -> int:
        """Run the reminder check for every active user. Returns reminders emitted."""
        today = today or local_today()
        result = self.db.execute(select(User).where(User.is_active == True).order_by(User.id))
        count = 0
        for user in result.scalars().all():
            count += len(self.check(user, today=today).emitted)
        logger.info(f"Emitted {count} event reminders for {today.isoformat()}")
        return count

    def purge_expired_announcements(self, today: date | None = None) -> int:
        """Delete announcement rows from days before ``today``."""
        today = today or local_today()
        result = self.db.execute(
            delete(EventAnnouncement).where(EventAnnouncement.announced_on < today)
        )
        self.db.flush()
        if result.rowcount:
            logger.info(f"Purged {result.rowcount} expired event announcements")
        return result.rowcount
