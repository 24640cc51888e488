"""Notification centre endpoints. Every route is scoped to the caller's own notifications."""

from fastapi import APIRouter, Query

from app.core.database import DbSession
from app.core.dependencies import CurrentUser
from app.schemas.common import MessageResponse
from app.schemas.notification import (
    NotificationMarkRead,
    NotificationStats,
    NotificationType,
    PaginatedNotificationResponse,
)
from app.services.notification import NotificationService

router = APIRouter()


@router.get("", response_model=PaginatedNotificationResponse)
def list_notifications(
    current_user: CurrentUser,
    db: DbSession,
    is_read: bool | None = None,
    notification_type: NotificationType | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    return NotificationService(db).list_notifications(
        current_user.id,
        is_read=is_read,
        notification_type=notification_type,
        page=page,
        page_size=page_size,
    )


@router.get("/stats", response_model=NotificationStats)
def get_notification_stats(current_user: CurrentUser, db: DbSession):
    return NotificationService(db).get_stats(current_user.id)


def _marked(count: int) -> MessageResponse:
    return MessageResponse(message=f"Marked {count} notifications as read")


@router.post("/mark-read", response_model=MessageResponse)
def mark_notifications_read(request: NotificationMarkRead, current_user: CurrentUser, db: DbSession):
    return _marked(NotificationService(db).mark_as_read(current_user.id, request.notification_ids))


@router.post("/mark-all-read", response_model=MessageResponse)
def mark_all_notifications_read(current_user: CurrentUser, db: DbSession):
    return _marked(NotificationService(db).mark_as_read(current_user.id))


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification(notification_id: int, current_user: CurrentUser, db: DbSession):
    NotificationService(db).delete_notification(notification_id, current_user.id)
    return MessageResponse(message="Notification deleted successfully")
