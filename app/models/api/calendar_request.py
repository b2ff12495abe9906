# app/models/api/calendar_request.py
"""
Calendar API request models.
Used by routes for input validation.
"""

from pydantic import BaseModel, Field


class CreateCalendarRequest(BaseModel):
    """Request for creating a secondary calendar."""

    calendar_name: str | None = Field(default=None, description="Calendar title")
    timezone: str | None = Field(default=None, description="IANA timezone (server default if omitted)")
    description: str | None = Field(default=None, max_length=1000, description="Calendar description")
    location: str | None = Field(default=None, max_length=500, description="Calendar location")
    select: bool = Field(default=True, description="Make the new calendar the selected one")
