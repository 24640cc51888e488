from app.models.notification import Notification
from app.schemas.notification import NotificationCreate, NotificationType
from app.services.notification import (
    NotificationService,
    notify_session_concluded,
    notify_student_transferred,
)
from tests.conftest import auth_headers, make_user


def _notify(db, user_id, notification_type=NotificationType.EVENT_REMINDER, title="Hello"):
    return NotificationService(db).create_notification(
        NotificationCreate(
            user_id=user_id,
            title=title,
            message=f"{title} message",
            notification_type=notification_type,
        )
    )


class TestNotificationService:
    def test_mark_selected_then_all(self, db, teacher):
        service = NotificationService(db)
        first = _notify(db, teacher.id, title="First")
        _notify(db, teacher.id, title="Second")
        _notify(db, teacher.id, title="Third")

        assert service.mark_as_read(teacher.id, [first.id]) == 1
        assert service.mark_as_read(teacher.id, [first.id]) == 0
        assert service.mark_as_read(teacher.id) == 2

        stats = service.get_stats(teacher.id)
        assert (stats.total, stats.unread, stats.read) == (3, 0, 3)

    def test_other_users_rows_are_untouched(self, db, teacher, admin):
        mine = _notify(db, teacher.id)
        theirs = _notify(db, admin.id)

        assert NotificationService(db).mark_as_read(teacher.id, [mine.id, theirs.id]) == 1
        db.expire_all()
        assert db.get(Notification, theirs.id).is_read is False

    def test_list_filters_and_paginates(self, db, teacher):
        notify_student_transferred(db, teacher.id, "Asha", "TC-9")
        notify_session_concluded(db, teacher.id, "2025-2026")
        for i in range(3):
            _notify(db, teacher.id, title=f"Reminder {i}")

        page = NotificationService(db).list_notifications(
            teacher.id,
            notification_type=NotificationType.EVENT_REMINDER,
            page=1,
            page_size=2,
        )
        assert page.total == 3
        assert page.total_pages == 2
        assert len(page.items) == 2
        assert all(n.notification_type is NotificationType.EVENT_REMINDER for n in page.items)

        transferred = NotificationService(db).list_notifications(
            teacher.id, notification_type=NotificationType.STUDENT_TRANSFERRED
        )
        assert transferred.items[0].action_data == {"ref_no": "TC-9"}


class TestNotificationEndpoints:
    def test_unread_filter_and_mark_all(self, client, db, teacher, teacher_headers):
        _notify(db, teacher.id, title="One")
        _notify(db, teacher.id, title="Two")
        db.commit()

        response = client.get(
            "/api/v1/notifications",
            params={"is_read": False},
            headers=teacher_headers,
        )
        assert response.status_code == 200
        assert response.json()["total"] == 2

        response = client.post("/api/v1/notifications/mark-all-read", headers=teacher_headers)
        assert response.json()["message"] == "Marked 2 notifications as read"

        response = client.get("/api/v1/notifications/stats", headers=teacher_headers)
        assert response.json() == {"total": 2, "unread": 0, "read": 2}

    def test_mark_read_requires_ids(self, client, teacher_headers):
        response = client.post(
            "/api/v1/notifications/mark-read",
            json={"notification_ids": []},
            headers=teacher_headers,
        )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_cannot_delete_someone_elses(self, client, db, admin, teacher_headers):
        notification = _notify(db, admin.id)
        db.commit()

        response = client.delete(f"/api/v1/notifications/{notification.id}", headers=teacher_headers)
        assert response.status_code == 404

        response = client.delete(
            f"/api/v1/notifications/{notification.id}",
            headers=auth_headers(admin),
        )
        assert response.status_code == 200

    def test_unknown_type_filter_rejected(self, client, db, teacher_headers):
        response = client.get(
            "/api/v1/notifications",
            params={"notification_type": "gossip"},
            headers=teacher_headers,
        )
        assert response.status_code == 422

    def test_request_id_is_echoed(self, client, db):
        user = make_user(db, "echo")
        response = client.get(
            "/api/v1/notifications/stats",
            headers={**auth_headers(user), "X-Request-ID": "abc123"},
        )
        assert response.headers["X-Request-ID"] == "abc123"

    def test_malformed_authorization_header(self, client):
        response = client.get("/api/v1/notifications", headers={"Authorization": "Token abc"})
        assert response.status_code == 401
