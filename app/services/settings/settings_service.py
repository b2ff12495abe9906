"""
Settings service: language, calendar selection and the automation switch.
"""

from datetime import UTC, datetime
from typing import Any

from app.infrastructure.observability.logging import get_logger
from app.models.domain.settings_domain import SUPPORTED_LANGUAGES, SettingsUpdate, UserSettings
from app.repositories.child_repository import ChildRepository
from app.repositories.settings_repository import SettingsRepository
from app.services.automation.webhook_trigger import AutomationEvent, build_payload
from app.services.core.credential_provider import CredentialProvider, credential_provider
from app.services.errors import ValidationError

logger = get_logger(__name__)


class SettingsService:
    """Reads and updates a user's settings row."""

    def __init__(
        self,
        repository=SettingsRepository,
        children=ChildRepository,
        credentials: CredentialProvider = credential_provider,
    ):
        self._repo = repository
        self._children = children
        self._credentials = credentials

    def _validate_language(self, language: str | None, user_id: str) -> str:
        language = (language or "").strip()
        if not language:
            raise ValidationError(
                "preferred_language is required", field="preferred_language", user_id=user_id
            )
        if language not in SUPPORTED_LANGUAGES:
            raise ValidationError(
                f"Unsupported language: {language}", field="preferred_language", user_id=user_id
            )
        return language

    async def _check_start_requirements(self, user_id: str, calendar_id: str | None) -> None:
        missing = []
        if await self._children.count(user_id) < 1:
            missing.append("add at least one child")
        if not calendar_id:
            missing.append("select a calendar")

        if missing:
            raise ValidationError(
                f"Cannot start service: {', '.join(missing)}",
                field="automation_enabled",
                user_id=user_id,
            )

    async def get_settings(self, user_id: str) -> UserSettings | None:
        return await self._repo.get(user_id)

    async def update_settings(self, user_id: str, update: SettingsUpdate) -> UserSettings:
        """
        Merge the provided fields into the user's settings.

        Enabling automation here is held to the same requirements as
        ``set_service_enabled`` but does not fire the webhook.
        """
        changes = update.changes()

        if "preferred_language" in changes:
            changes["preferred_language"] = self._validate_language(
                changes["preferred_language"], user_id
            )

        if changes.get("automation_enabled"):
            calendar_id = changes.get("calendar_id")
            if "calendar_id" not in changes:
                current = await self._repo.get(user_id)
                calendar_id = current.calendar_id if current else None
            await self._check_start_requirements(user_id, calendar_id)

        # NOT NULL columns fall back to their defaults when cleared
        for column, default in (("automation_enabled", False), ("calendar_name", "")):
            if column in changes and changes[column] is None:
                changes[column] = default

        return await self._repo.upsert(user_id, changes)

    async def update_calendar(
        self, user_id: str, calendar_id: str | None, calendar_name: str | None = None
    ) -> UserSettings:
        """Select a calendar. Fields left as None are not changed."""
        changes: dict[str, Any] = {}
        if calendar_id is not None:
            changes["calendar_id"] = calendar_id.strip() or None
        if calendar_name is not None:
            changes["calendar_name"] = calendar_name.strip()

        logger.info("Updating calendar selection", user_id=user_id, calendar_id=changes.get("calendar_id"))
        return await self._repo.upsert(user_id, changes)

    async def update_language(self, user_id: str, language: str | None) -> UserSettings:
        language = self._validate_language(language, user_id)
        return await self._repo.upsert(user_id, {"preferred_language": language})

    async def set_service_enabled(self, user_id: str, enabled: bool) -> tuple[UserSettings, bool]:
        """
        Start or stop the automation service.

        Returns:
            (settings, changed): changed is True when the switch actually flipped

        Raises:
            ValidationError: starting without a child or a selected calendar
        """
        current = await self._repo.get(user_id)
        was_enabled = bool(current and current.automation_enabled)

        now = datetime.now(UTC)
        if enabled:
            await self._check_start_requirements(user_id, current.calendar_id if current else None)
            changes = {"automation_enabled": True, "last_started_at": now}
        else:
            changes = {"automation_enabled": False, "last_stopped_at": now}

        updated = await self._repo.upsert(user_id, changes)
        changed = was_enabled != enabled

        logger.info(
            "Automation service toggled",
            user_id=user_id,
            automation_enabled=enabled,
            changed=changed,
        )
        return updated, changed

    async def build_automation_event(
        self,
        event: AutomationEvent,
        user_id: str,
        email: str | None,
        user_settings: UserSettings,
        provider_token: str | None = None,
    ) -> dict[str, Any]:
        """Assemble the webhook payload for a start/stop event."""
        children = await self._children.list_for_user(user_id)
        access_token = await self._credentials.get_google_access_token(user_id, provider_token)
        if not access_token:
            logger.warning("Automation event without Google token", user_id=user_id, event=event)

        return build_payload(event, user_id, email, user_settings, children, access_token)


# Singleton instance for application use
settings_service = SettingsService()
