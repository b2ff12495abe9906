# app/models/api/settings_request.py
"""
Settings API request models.
The full partial update is the domain SettingsUpdate; these cover the
single-purpose endpoints.
"""

from pydantic import BaseModel, Field


class UpdateCalendarRequest(BaseModel):
    """Select a calendar. Omitted fields are left unchanged."""

    calendar_id: str | None = Field(default=None, description="Google calendar id")
    calendar_name: str | None = Field(default=None, description="Calendar display name")


class UpdateLanguageRequest(BaseModel):
    preferred_language: str | None = Field(default=None, description="Language code or 'auto'")


class UpdateServiceRequest(BaseModel):
    """Start or stop the automation service. Timestamps are set server-side."""

    automation_enabled: bool = Field(..., description="True to start, False to stop")
