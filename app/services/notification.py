"""Notification centre: per-user messages raised by the other services."""

from sqlalchemy import case, func, select, update
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models.base import utcnow
from app.models.notification import Notification
from app.schemas.notification import (
    NotificationCreate,
    NotificationResponse,
    NotificationStats,
    NotificationType,
    PaginatedNotificationResponse,
)


class NotificationService:
    def __init__(self, db: Session):
        self.db = db

    def create_notification(self, request: NotificationCreate) -> Notification:
        notification = Notification(
            user_id=request.user_id,
            title=request.title,
            message=request.message,
            notification_type=request.notification_type.value,
            action_url=request.action_url,
            action_data=request.action_data,
        )
        self.db.add(notification)
        self.db.flush()
        return notification

    def get_notification(self, notification_id: int, user_id: int) -> Notification:
        """Fetch one notification owned by ``user_id``; other users' rows read as missing."""
        notification = self.db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            )
        ).scalar_one_or_none()
        if notification is None:
            raise NotFoundError("Notification", str(notification_id))
        return notification

    def list_notifications(
        self,
        user_id: int,
        is_read: bool | None = None,
        notification_type: NotificationType | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> PaginatedNotificationResponse:
        """Newest first."""
        query = select(Notification).where(Notification.user_id == user_id)
        if is_read is not None:
            query = query.where(Notification.is_read == is_read)
        if notification_type is not None:
            query = query.where(Notification.notification_type == notification_type.value)

        total = self.db.execute(select(func.count()).select_from(query.subquery())).scalar() or 0
        rows = self.db.execute(
            query.order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        ).scalars().all()

        return PaginatedNotificationResponse.build(
            [NotificationResponse.model_validate(n) for n in rows],
            total,
            page,
            page_size,
        )

    def mark_as_read(self, user_id: int, notification_ids: list[int] | None = None) -> int:
        """Mark the given notifications, or every unread one, as read.

        Returns how many rows changed; already-read rows keep their ``read_at``.
        """
        conditions = [Notification.user_id == user_id, Notification.is_read.is_(False)]
        if notification_ids is not None:
            conditions.append(Notification.id.in_(notification_ids))

        result = self.db.execute(
            update(Notification)
            .where(*conditions)
            .values(is_read=True, read_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self.db.flush()
        return result.rowcount

    def get_stats(self, user_id: int) -> NotificationStats:
        row = self.db.execute(
            select(
                func.count().label("total"),
                func.sum(case((Notification.is_read.is_(False), 1), else_=0)).label("unread"),
            ).where(Notification.user_id == user_id)
        ).one()

        total = row.total or 0
        unread = row.unread or 0
        return NotificationStats(total=total, unread=unread, read=total - unread)

    def delete_notification(self, notification_id: int, user_id: int) -> None:
        self.db.delete(self.get_notification(notification_id, user_id))
        self.db.flush()


def notify_student_transferred(db: Session, user_id: int, student_name: str, ref_no: str) -> None:
    NotificationService(db).create_notification(
        NotificationCreate(
            user_id=user_id,
            title="Transfer Certificate Issued",
            message=f"Transfer certificate {ref_no} was issued for {student_name}.",
            notification_type=NotificationType.STUDENT_TRANSFERRED,
            action_data={"ref_no": ref_no},
        )
    )


def notify_session_concluded(db: Session, user_id: int, academic_year: str) -> None:
    NotificationService(db).create_notification(
        NotificationCreate(
            user_id=user_id,
            title="Session Concluded",
            message=f"Session {academic_year} was concluded. Set the new academic year to continue.",
            notification_type=NotificationType.SESSION_CONCLUDED,
        )
    )
