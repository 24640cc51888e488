"""School-local date and time helpers."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from app.core.config import settings


def local_now() -> datetime:
    """Current time in the school's timezone."""
    return datetime.now(ZoneInfo(settings.TIMEZONE))


def local_today() -> date:
    """Current calendar day in the school's timezone."""
    return local_now().date()
