from datetime import date

import pytest

from app.core.exceptions import NotFoundError, ValidationError
from app.models.calendar import CalendarEventType
from app.schemas.calendar import CalendarEventCreate, CalendarEventUpdate
from app.services.calendar import CalendarService, public_holidays


def test_public_holidays_in_range():
    holidays = public_holidays(date(2025, 12, 1), date(2025, 12, 31))
    assert [h.key for h in holidays] == ["gov-2025-12-24", "gov-2025-12-25", "gov-2025-12-31"]
    assert all(h.is_public_holiday and h.event_type == CalendarEventType.HOLIDAY for h in holidays)


class TestCalendarService:
    def test_entries_merge_events_and_holidays(self, db):
        service = CalendarService(db)
        event = service.create_event(
            CalendarEventCreate(title="Christmas Concert", event_date=date(2025, 12, 20))
        )

        entries = service.list_entries(date(2025, 12, 15), date(2025, 12, 25))

        assert [e.key for e in entries] == [f"event-{event.id}", "gov-2025-12-24", "gov-2025-12-25"]
        assert service.list_entries(date(2025, 12, 15), date(2025, 12, 25), include_holidays=False)[0].event_id == event.id

    def test_multi_day_event_overlaps_range(self, db):
        service = CalendarService(db)
        service.create_event(
            CalendarEventCreate(
                title="Exam Week",
                event_date=date(2025, 9, 1),
                end_date=date(2025, 9, 6),
                event_type=CalendarEventType.EXAM,
            )
        )
        assert len(service.list_events(date(2025, 9, 4), date(2025, 9, 5))) == 1
        assert service.list_events(date(2025, 9, 7), date(2025, 9, 30)) == []

    def test_update_rejects_inverted_range(self, db):
        service = CalendarService(db)
        event = service.create_event(CalendarEventCreate(title="Trip", event_date=date(2025, 10, 10)))
        with pytest.raises(ValidationError):
            service.update_event(event.id, CalendarEventUpdate(end_date=date(2025, 10, 1)))

    def test_delete(self, db):
        service = CalendarService(db)
        event = service.create_event(CalendarEventCreate(title="Trip", event_date=date(2025, 10, 10)))
        service.delete_event(event.id)
        with pytest.raises(NotFoundError):
            service.get_event(event.id)


class TestCalendarEndpoints:
    def test_admin_manages_events(self, client, admin_headers, teacher_headers):
        response = client.post(
            "/api/v1/calendar/events",
            json={"title": "Parent Teacher Meeting", "event_date": "2026-02-10", "event_type": "Meeting"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        event_id = response.json()["id"]

        response = client.get(
            "/api/v1/calendar",
            params={"start": "2026-02-01", "end": "2026-02-28"},
            headers=teacher_headers,
        )
        keys = [e["key"] for e in response.json()]
        assert keys == [f"event-{event_id}", "gov-2026-02-20"]

        response = client.patch(
            f"/api/v1/calendar/events/{event_id}",
            json={"title": "PTM"},
            headers=admin_headers,
        )
        assert response.json()["title"] == "PTM"

    def test_teacher_cannot_create(self, client, teacher_headers):
        response = client.post(
            "/api/v1/calendar/events",
            json={"title": "Picnic", "event_date": "2026-02-10"},
            headers=teacher_headers,
        )
        assert response.status_code == 403

    def test_inverted_range_rejected(self, client, admin_headers):
        response = client.post(
            "/api/v1/calendar/events",
            json={"title": "Camp", "event_date": "2026-02-10", "end_date": "2026-02-01"},
            headers=admin_headers,
        )
        assert response.status_code == 422

    @pytest.mark.parametrize("field", ["title", "event_date", "event_type"])
    def test_update_cannot_null_required_field(self, client, admin_headers, field):
        response = client.post(
            "/api/v1/calendar/events",
            json={"title": "Sports Week", "event_date": "2026-05-01", "end_date": "2026-05-03"},
            headers=admin_headers,
        )
        event_id = response.json()["id"]

        response = client.patch(
            f"/api/v1/calendar/events/{event_id}",
            json={field: None},
            headers=admin_headers,
        )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

        response = client.patch(
            f"/api/v1/calendar/events/{event_id}",
            json={"end_date": None, "description": None},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["event_date"] == "2026-05-01"
        assert response.json()["end_date"] is None
