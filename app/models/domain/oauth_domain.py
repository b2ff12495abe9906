# models/domain/oauth_domain.py
"""
Google connection domain model.
Holds the decrypted provider tokens captured from the Supabase session.
"""

from datetime import UTC, datetime, timedelta
from typing import Literal

from pydantic import BaseModel


class GoogleConnection(BaseModel):
    """Domain model for a stored Google connection (tokens decrypted)."""

    user_id: str
    provider: Literal["google"] = "google"
    access_token: str  # decrypted
    refresh_token: str | None = None  # decrypted
    scope: str = ""
    token_type: str = "Bearer"
    expires_at: datetime | None = None
    updated_at: datetime

    def is_expired(self, buffer_seconds: int = 60) -> bool:
        """Check if access token is expired, with a small safety buffer."""
        if not self.expires_at:
            return False
        return datetime.now(UTC) + timedelta(seconds=buffer_seconds) >= self.expires_at

    def has_gmail_access(self) -> bool:
        """Check if the granted scopes allow label/filter management."""
        gmail_indicators = ["gmail.labels", "gmail.settings.basic", "gmail.modify"]
        return any(indicator in self.scope for indicator in gmail_indicators)

    def has_calendar_access(self) -> bool:
        calendar_indicators = ["calendar.readonly", "calendar.events", "calendar"]
        return any(indicator in self.scope for indicator in calendar_indicators)

    def get_scopes(self) -> list[str]:
        return self.scope.split() if self.scope else []
