# app/models/domain/settings_domain.py
"""
Settings Domain Models
Per-user preferences: language, selected calendar and the automation switch.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

SUPPORTED_LANGUAGES = ("auto", "en", "es", "fr", "de", "it", "pt", "ru", "zh", "ja", "ko")
DEFAULT_LANGUAGE = "en"


class UserSettings(BaseModel):
    """Domain model for a stored settings row."""

    user_id: str
    preferred_language: str = DEFAULT_LANGUAGE
    automation_enabled: bool = False
    last_started_at: datetime | None = None
    last_stopped_at: datetime | None = None
    calendar_id: str | None = None
    calendar_name: str = ""
    last_gmail_history_id: str | None = None
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class SettingsUpdate(BaseModel):
    """
    Explicit partial update for settings.

    Only fields the caller set are merged (see ``changes()``); anything
    not declared here is rejected.
    """

    model_config = ConfigDict(extra="forbid")

    preferred_language: str | None = None
    automation_enabled: bool | None = None
    last_started_at: datetime | None = None
    last_stopped_at: datetime | None = None
    calendar_id: str | None = None
    calendar_name: str | None = None
    last_gmail_history_id: str | None = None

    def changes(self) -> dict[str, Any]:
        """Fields explicitly provided by the caller."""
        return self.model_dump(exclude_unset=True)
