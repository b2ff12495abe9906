# app/models/api/settings_response.py
"""
Settings API response models.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class SettingsResponse(BaseModel):
    """Stored settings row."""

    user_id: str
    preferred_language: str
    automation_enabled: bool
    last_started_at: datetime | None = None
    last_stopped_at: datetime | None = None
    calendar_id: str | None = None
    calendar_name: str = ""
    last_gmail_history_id: str | None = None
    created_at: datetime
    updated_at: datetime


class SettingsEnvelope(BaseModel):
    """``settings`` is null when the user has never saved any."""

    settings: SettingsResponse | None = Field(None, description="User settings")


class ServiceToggleResponse(SettingsEnvelope):
    webhook_scheduled: bool = Field(
        default=False, description="Whether a start/stop event was sent to the automation workflow"
    )
