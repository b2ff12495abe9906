"""
Google Calendar API client for listing and creating calendars.
Low-level Calendar API client. Idempotent reads are retried with backoff;
calendar creation is sent once.
"""

import asyncio
from urllib.parse import quote

import httpx

from app.config import settings
from app.infrastructure.observability.logging import get_logger
from app.models.domain.calendar_domain import Calendar, CalendarInfo
from app.services.infrastructure.google_api_client import GoogleAPIClient, GoogleAPIError

logger = get_logger(__name__)

# Google Calendar API configuration
CALENDAR_API_BASE_URL = "https://www.googleapis.com/calendar/v3"

# Retry configuration for reads
MAX_RETRIES = 3
BACKOFF_FACTOR = 2
RETRY_STATUS_CODES = {429, 500, 502, 503, 504}


class GoogleCalendarError(GoogleAPIError):
    """Custom exception for Google Calendar API errors."""


class GoogleCalendarService(GoogleAPIClient):
    """
    Service for Google Calendar API operations.

    Handles calendar list retrieval and calendar creation with proper
    error handling and retry logic for reads.
    """

    api_name = "Calendar"
    error_class = GoogleCalendarError

    def __init__(self, backoff_factor: float = BACKOFF_FACTOR):
        super().__init__()
        self._backoff_factor = backoff_factor

    async def _request_with_retry(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request with retry and backoff."""
        for attempt in range(1, MAX_RETRIES + 1):
            try:
                response = await self.client.request(method, url, **kwargs)
                if response.status_code in RETRY_STATUS_CODES and attempt < MAX_RETRIES:
                    backoff = self._backoff_factor * (2 ** (attempt - 1))
                    logger.debug(
                        "Calendar API retrying request",
                        attempt=attempt,
                        status_code=response.status_code,
                        backoff_seconds=backoff,
                    )
                    await asyncio.sleep(backoff)
                    continue
                return response
            except httpx.RequestError as e:
                if attempt >= MAX_RETRIES:
                    raise GoogleCalendarError(f"Calendar API unreachable: {e}") from e
                backoff = self._backoff_factor * (2 ** (attempt - 1))
                logger.debug(
                    "Calendar API request error, retrying",
                    attempt=attempt,
                    error=str(e),
                    backoff_seconds=backoff,
                )
                await asyncio.sleep(backoff)
        raise RuntimeError("Calendar API retry loop exhausted")

    async def list_calendars(self, access_token: str) -> list[CalendarInfo]:
        """
        List all calendars accessible to the user.

        Args:
            access_token: Valid OAuth access token

        Returns:
            List[CalendarInfo]: List of accessible calendars

        Raises:
            GoogleCalendarError: If listing calendars fails
        """
        try:
            url = f"{CALENDAR_API_BASE_URL}/users/me/calendarList"
            headers = self._get_auth_headers(access_token)

            logger.info("Listing user calendars")

            response = await self._request_with_retry("GET", url, headers=headers)
            data = self._handle_api_response(response, "list_calendars")

            calendars = [CalendarInfo(item) for item in data.get("items", [])]

            logger.info("Calendars listed successfully", calendar_count=len(calendars))
            return calendars

        except GoogleCalendarError:
            raise
        except Exception as e:
            logger.error("Unexpected error listing calendars", error=str(e))
            raise GoogleCalendarError(f"Failed to list calendars: {e}") from e

    async def get_calendar(self, access_token: str, calendar_id: str) -> Calendar | None:
        """
        Get a calendar by id.

        Returns:
            Calendar, or None if it no longer exists

        Raises:
            GoogleCalendarError: For any failure other than 404
        """
        try:
            url = f"{CALENDAR_API_BASE_URL}/calendars/{quote(calendar_id, safe='')}"
            headers = self._get_auth_headers(access_token)

            response = await self._request_with_retry("GET", url, headers=headers)
            if response.status_code == 404:
                logger.info("Calendar not found", calendar_id=calendar_id)
                return None

            data = self._handle_api_response(response, "get_calendar")
            return Calendar(data)

        except GoogleCalendarError:
            raise
        except Exception as e:
            logger.error("Unexpected error getting calendar", calendar_id=calendar_id, error=str(e))
            raise GoogleCalendarError(f"Failed to get calendar: {e}") from e

    async def create_calendar(
        self,
        access_token: str,
        name: str,
        timezone: str | None = None,
        description: str | None = None,
        location: str | None = None,
    ) -> Calendar:
        """
        Create a new secondary calendar.

        Args:
            access_token: Valid OAuth access token
            name: Calendar title (``summary``)
            timezone: IANA timezone, defaults to DEFAULT_CALENDAR_TIMEZONE
            description: Optional description
            location: Optional location

        Returns:
            Calendar: Created calendar

        Raises:
            GoogleCalendarError: If creating the calendar fails
        """
        try:
            url = f"{CALENDAR_API_BASE_URL}/calendars"
            headers = self._get_auth_headers(access_token)

            calendar_data = {
                "summary": name,
                "timeZone": timezone or settings.DEFAULT_CALENDAR_TIMEZONE,
            }
            if description:
                calendar_data["description"] = description
            if location:
                calendar_data["location"] = location

            logger.info("Creating calendar", summary=name, timezone=calendar_data["timeZone"])

            response = await self._request("POST", url, headers=headers, json=calendar_data)
            data = self._handle_api_response(response, "create_calendar")

            calendar = Calendar(data)
            logger.info("Calendar created successfully", calendar_id=calendar.id, summary=name)
            return calendar

        except GoogleCalendarError:
            raise
        except Exception as e:
            logger.error("Unexpected error creating calendar", summary=name, error=str(e))
            raise GoogleCalendarError(f"Failed to create calendar: {e}") from e


# Singleton instance for application use
google_calendar_service = GoogleCalendarService()

