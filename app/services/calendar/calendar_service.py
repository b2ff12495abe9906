"""
Calendar operations service.
Lists and creates Google calendars for a user and ties the selection to settings.
"""

from app.infrastructure.observability.logging import get_logger
from app.models.domain.calendar_domain import Calendar, CalendarInfo
from app.models.domain.settings_domain import UserSettings
from app.services.calendar.google_client import (
    GoogleCalendarError,
    GoogleCalendarService,
    google_calendar_service,
)
from app.services.core.credential_provider import CredentialProvider, credential_provider
from app.services.errors import AuthRequiredError, IntegrationError, ValidationError
from app.services.settings.settings_service import SettingsService, settings_service

logger = get_logger(__name__)

MAX_CALENDAR_NAME_LENGTH = 255


class CalendarOperationsService:
    """Orchestrates calendar list/create calls for the HTTP layer."""

    def __init__(
        self,
        calendar_client: GoogleCalendarService = google_calendar_service,
        credentials: CredentialProvider = credential_provider,
        settings_svc: SettingsService = settings_service,
    ):
        self._calendar = calendar_client
        self._credentials = credentials
        self._settings = settings_svc

    async def _require_token(self, user_id: str, provider_token: str | None) -> str:
        access_token = await self._credentials.get_google_access_token(user_id, provider_token)
        if not access_token:
            raise AuthRequiredError(
                "Google authentication required. Please sign in with Google to access calendars",
                user_id=user_id,
            )
        return access_token

    async def list_calendars(
        self, user_id: str, provider_token: str | None = None
    ) -> tuple[list[CalendarInfo], bool]:
        """
        List the user's calendars.

        Returns:
            (calendars, selected_calendar_missing): the flag is True when a
            calendar is selected in settings but absent from the list
        """
        access_token = await self._require_token(user_id, provider_token)

        try:
            calendars = await self._calendar.list_calendars(access_token)
        except GoogleCalendarError as e:
            logger.error("Calendar list failed", user_id=user_id, error=str(e))
            raise IntegrationError(
                str(e), stage="list_calendars", user_id=user_id, provider="Google Calendar"
            ) from e

        current = await self._settings.get_settings(user_id)
        selected_missing = bool(
            current
            and current.calendar_id
            and all(calendar.id != current.calendar_id for calendar in calendars)
        )
        if selected_missing:
            logger.info(
                "Selected calendar no longer exists", user_id=user_id, calendar_id=current.calendar_id
            )

        return calendars, selected_missing

    async def create_calendar(
        self,
        user_id: str,
        name: str | None,
        timezone: str | None = None,
        description: str | None = None,
        location: str | None = None,
        select: bool = False,
        provider_token: str | None = None,
    ) -> tuple[Calendar, UserSettings | None]:
        """
        Create a calendar and optionally make it the selected one.

        Returns:
            (calendar, settings): settings is None unless ``select`` is set
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("calendar_name is required", field="calendar_name", user_id=user_id)
        if len(name) > MAX_CALENDAR_NAME_LENGTH:
            raise ValidationError(
                f"calendar_name must be at most {MAX_CALENDAR_NAME_LENGTH} characters",
                field="calendar_name",
                user_id=user_id,
            )

        access_token = await self._require_token(user_id, provider_token)

        try:
            calendar = await self._calendar.create_calendar(
                access_token, name, timezone=timezone, description=description, location=location
            )
        except GoogleCalendarError as e:
            logger.error("Calendar creation failed", user_id=user_id, error=str(e))
            raise IntegrationError(
                str(e), stage="create_calendar", user_id=user_id, provider="Google Calendar"
            ) from e

        updated_settings = None
        if select:
            updated_settings = await self._settings.update_calendar(
                user_id, calendar.id, calendar.summary or name
            )

        logger.info(
            "Calendar created for user", user_id=user_id, calendar_id=calendar.id, selected=select
        )
        return calendar, updated_settings


# Singleton instance for application use
calendar_operations_service = CalendarOperationsService()
