"""
Integration tests for calendar listing and creation against mocked Google endpoints.
"""

import json
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from app.models.domain.settings_domain import UserSettings
from app.services.calendar.calendar_service import CalendarOperationsService
from app.services.calendar.google_client import (
    CALENDAR_API_BASE_URL,
    GoogleCalendarError,
    GoogleCalendarService,
)
from app.services.errors import AuthRequiredError, IntegrationError, ValidationError

CALENDAR_LIST_URL = f"{CALENDAR_API_BASE_URL}/users/me/calendarList"
CALENDARS_URL = f"{CALENDAR_API_BASE_URL}/calendars"

CALENDAR_ITEMS = {
    "items": [
        {"id": "primary@example.com", "summary": "Me", "accessRole": "owner", "primary": True},
        {"id": "holidays@group.v.calendar.google.com", "summary": "Holidays", "accessRole": "reader"},
    ]
}


@pytest_asyncio.fixture
async def calendar_client():
    service = GoogleCalendarService(backoff_factor=0)
    yield service
    await service.close()


def _settings(calendar_id: str | None) -> UserSettings:
    now = datetime.now(UTC)
    return UserSettings(user_id="user-123", calendar_id=calendar_id, created_at=now, updated_at=now)


@pytest.mark.asyncio
async def test_list_calendars(httpx_mock, calendar_client):
    httpx_mock.add_response(method="GET", url=CALENDAR_LIST_URL, json=CALENDAR_ITEMS)

    calendars = await calendar_client.list_calendars("token-abc")

    assert [calendar.id for calendar in calendars] == [
        "primary@example.com",
        "holidays@group.v.calendar.google.com",
    ]
    assert calendars[0].can_create_events() is True
    assert calendars[1].can_create_events() is False


@pytest.mark.asyncio
async def test_list_calendars_retries_server_errors(httpx_mock, calendar_client):
    httpx_mock.add_response(method="GET", url=CALENDAR_LIST_URL, status_code=503)
    httpx_mock.add_response(method="GET", url=CALENDAR_LIST_URL, json=CALENDAR_ITEMS)

    calendars = await calendar_client.list_calendars("token-abc")

    assert len(calendars) == 2
    assert len(httpx_mock.get_requests()) == 2


@pytest.mark.asyncio
async def test_list_calendars_gives_up_after_retries(httpx_mock, calendar_client):
    for _ in range(3):
        httpx_mock.add_response(method="GET", url=CALENDAR_LIST_URL, status_code=503)

    with pytest.raises(GoogleCalendarError) as exc_info:
        await calendar_client.list_calendars("token-abc")

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_create_calendar_is_not_retried(httpx_mock, calendar_client):
    httpx_mock.add_response(method="POST", url=CALENDARS_URL, status_code=503)

    with pytest.raises(GoogleCalendarError):
        await calendar_client.create_calendar("token-abc", "School")

    assert len(httpx_mock.get_requests()) == 1


@pytest.mark.asyncio
async def test_create_calendar_body(httpx_mock, calendar_client):
    httpx_mock.add_response(
        method="POST",
        url=CALENDARS_URL,
        json={"id": "new@group.calendar.google.com", "summary": "School", "timeZone": "Europe/Paris"},
    )

    calendar = await calendar_client.create_calendar(
        "token-abc", "School", timezone="Europe/Paris", description="Kids"
    )

    assert calendar.id == "new@group.calendar.google.com"
    assert json.loads(httpx_mock.get_request().content) == {
        "summary": "School",
        "timeZone": "Europe/Paris",
        "description": "Kids",
    }


@pytest.mark.asyncio
async def test_get_calendar_missing_returns_none(httpx_mock, calendar_client):
    httpx_mock.add_response(method="GET", url=f"{CALENDARS_URL}/gone", status_code=404)

    assert await calendar_client.get_calendar("token-abc", "gone") is None


@pytest.mark.asyncio
async def test_operations_flag_missing_selected_calendar(httpx_mock, calendar_client, credentials):
    httpx_mock.add_response(method="GET", url=CALENDAR_LIST_URL, json=CALENDAR_ITEMS)
    settings_svc = AsyncMock()
    settings_svc.get_settings.return_value = _settings("deleted@group.calendar.google.com")
    service = CalendarOperationsService(calendar_client, credentials, settings_svc)

    calendars, selected_missing = await service.list_calendars("user-123")

    assert len(calendars) == 2
    assert selected_missing is True


@pytest.mark.asyncio
async def test_operations_selected_calendar_present(httpx_mock, calendar_client, credentials):
    httpx_mock.add_response(method="GET", url=CALENDAR_LIST_URL, json=CALENDAR_ITEMS)
    settings_svc = AsyncMock()
    settings_svc.get_settings.return_value = _settings("primary@example.com")
    service = CalendarOperationsService(calendar_client, credentials, settings_svc)

    _, selected_missing = await service.list_calendars("user-123")

    assert selected_missing is False


@pytest.mark.asyncio
async def test_operations_create_and_select(httpx_mock, calendar_client, credentials):
    httpx_mock.add_response(
        method="POST",
        url=CALENDARS_URL,
        json={"id": "new@group.calendar.google.com", "summary": "School"},
    )
    settings_svc = AsyncMock()
    settings_svc.update_calendar.return_value = _settings("new@group.calendar.google.com")
    service = CalendarOperationsService(calendar_client, credentials, settings_svc)

    calendar, updated = await service.create_calendar("user-123", " School ", select=True)

    assert calendar.id == "new@group.calendar.google.com"
    assert updated.calendar_id == "new@group.calendar.google.com"
    settings_svc.update_calendar.assert_awaited_once_with(
        "user-123", "new@group.calendar.google.com", "School"
    )


@pytest.mark.asyncio
async def test_operations_create_failure_is_integration_error(httpx_mock, calendar_client, credentials):
    httpx_mock.add_response(
        method="POST",
        url=CALENDARS_URL,
        status_code=403,
        json={"error": {"code": 403, "message": "Insufficient Permission"}},
    )
    service = CalendarOperationsService(calendar_client, credentials, AsyncMock())

    with pytest.raises(IntegrationError) as exc_info:
        await service.create_calendar("user-123", "School")

    assert exc_info.value.message.startswith("Google Calendar integration failed")


@pytest.mark.asyncio
async def test_operations_require_credential(calendar_client, credentials):
    credentials.token = None
    service = CalendarOperationsService(calendar_client, credentials, AsyncMock())

    with pytest.raises(AuthRequiredError):
        await service.list_calendars("user-123")


@pytest.mark.asyncio
async def test_operations_reject_blank_name(calendar_client, credentials):
    service = CalendarOperationsService(calendar_client, credentials, AsyncMock())

    with pytest.raises(ValidationError) as exc_info:
        await service.create_calendar("user-123", "   ")

    assert exc_info.value.field == "calendar_name"
