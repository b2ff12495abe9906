# app/models/domain/calendar_domain.py
"""
Calendar Domain Models
Domain models for calendar list entries and newly created calendars.
"""

from typing import Any


class CalendarInfo:
    """Domain model for a calendarList entry with permission helpers."""

    def __init__(self, data: dict):
        self.id = data.get("id")
        self.summary = data.get("summary", "")
        self.description = data.get("description", "")
        self.timezone = data.get("timeZone", "UTC")
        self.access_role = data.get("accessRole", "reader")
        self.primary = data.get("primary", False)
        self.selected = data.get("selected", True)
        self.background_color = data.get("backgroundColor")
        self.raw_data = data

    def can_create_events(self) -> bool:
        """Check if we can create events in this calendar."""
        return self.access_role in ["owner", "writer"]


class Calendar:
    """Domain model for a calendar resource returned by calendars.insert."""

    def __init__(self, data: dict):
        self.id = data.get("id")
        self.summary = data.get("summary", "")
        self.description = data.get("description")
        self.location = data.get("location")
        self.timezone = data.get("timeZone", "UTC")
        self.raw_data = data

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "summary": self.summary,
            "description": self.description,
            "location": self.location,
            "timezone": self.timezone,
        }
