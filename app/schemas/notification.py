"""In-app notification schemas."""

import enum
from datetime import datetime
from typing import Any

from pydantic import Field

from app.schemas.common import BaseSchema, PaginatedResponse


class NotificationType(str, enum.Enum):
    """What a notification is about."""

    EVENT_REMINDER = "event_reminder"
    STUDENT_TRANSFERRED = "student_transferred"
    SESSION_CONCLUDED = "session_concluded"


class NotificationCreate(BaseSchema):
    """Internal: a notification raised by a service."""

    user_id: int
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    notification_type: NotificationType
    action_url: str | None = None
    action_data: dict[str, Any] | None = None


class NotificationResponse(BaseSchema):
    id: int
    title: str
    message: str
    notification_type: NotificationType
    is_read: bool
    read_at: datetime | None
    action_url: str | None
    action_data: dict[str, Any] | None
    created_at: datetime


class PaginatedNotificationResponse(PaginatedResponse):
    items: list[NotificationResponse]


class NotificationMarkRead(BaseSchema):
    """Notifications to mark as read."""

    notification_ids: list[int] = Field(..., min_length=1)


class NotificationStats(BaseSchema):
    total: int
    unread: int
    read: int
