# app/models/api/calendar_response.py
"""
Calendar API response models.
Used by routes for output formatting.
"""

from pydantic import BaseModel, Field

from app.models.api.settings_response import SettingsResponse


class CalendarInfoResponse(BaseModel):
    """Response model for calendar information."""

    id: str = Field(..., description="Calendar ID")
    summary: str = Field(..., description="Calendar name")
    description: str = Field(default="", description="Calendar description")
    timezone: str = Field(..., description="Calendar timezone")
    access_role: str = Field(..., description="User's access role")
    primary: bool = Field(..., description="Is this the primary calendar")
    can_create_events: bool = Field(..., description="Can user create events in this calendar")
    background_color: str | None = Field(None, description="Calendar background color")


class CalendarsListResponse(BaseModel):
    """Response for listing calendars."""

    calendars: list[CalendarInfoResponse] = Field(..., description="Accessible calendars")
    selected_calendar_missing: bool = Field(
        default=False, description="Selected calendar no longer exists in Google"
    )


class CreatedCalendarResponse(BaseModel):
    id: str
    summary: str
    description: str | None = None
    location: str | None = None
    timezone: str


class CreateCalendarResponse(BaseModel):
    """Response for calendar creation."""

    calendar: CreatedCalendarResponse
    settings: SettingsResponse | None = Field(
        None, description="Updated settings when the calendar was selected"
    )
