"""Background scheduler for the daily event reminder run."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from app.core.config import settings
from app.core.database import session_scope
from app.core.timeutils import local_today
from app.services.reminder import ReminderService

logger = logging.getLogger(__name__)

REMINDER_JOB_ID = "send_event_reminders"

scheduler: AsyncIOScheduler | None = None


def send_event_reminders_job() -> int:
    """Drop stale announcement keys, then announce today's due events to every active user.

    Returns the number of reminders emitted. Failures are logged and leave
    the database untouched; the next run starts from a clean slate.
    """
    today = local_today()
    logger.info(f"Running event reminders for {today.isoformat()}")
    try:
        with session_scope() as db:
            service = ReminderService(db)
            purged = service.purge_expired_announcements(today)
            count = service.run_for_all_users(today)
    except Exception:
        logger.exception("Event reminder job failed")
        return 0

    logger.info(f"Event reminder job finished: {count} sent, {purged} stale keys dropped")
    return count


def init_scheduler() -> AsyncIOScheduler:
    global scheduler

    scheduler = AsyncIOScheduler(
        timezone=settings.TIMEZONE,
        job_defaults={
            "coalesce": True,
            "max_instances": 1,
            "misfire_grace_time": 3600,
        },
    )
    scheduler.add_job(
        send_event_reminders_job,
        trigger=CronTrigger(
            hour=settings.REMINDER_JOB_HOUR,
            minute=settings.REMINDER_JOB_MINUTE,
        ),
        id=REMINDER_JOB_ID,
        name="Send event reminders",
        replace_existing=True,
    )
    logger.info(
        f"Reminder job scheduled daily at "
        f"{settings.REMINDER_JOB_HOUR:02d}:{settings.REMINDER_JOB_MINUTE:02d} {settings.TIMEZONE}"
    )
    return scheduler


def start_scheduler() -> None:
    global scheduler
    if scheduler is None:
        scheduler = init_scheduler()
    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started")


def stop_scheduler() -> None:
    if scheduler and scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Scheduler stopped")
