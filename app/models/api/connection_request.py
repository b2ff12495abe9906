# app/models/api/connection_request.py
"""
Google connection API models.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class StoreGoogleConnectionRequest(BaseModel):
    """Provider tokens from the Supabase session after Google sign-in."""

    provider_token: str = Field(..., min_length=1, description="Google access token")
    provider_refresh_token: str | None = Field(default=None, description="Google refresh token")
    scope: str = Field(default="", description="Granted scopes, space separated")
    expires_at: datetime | None = Field(default=None, description="Access token expiry")
    expires_in: int | None = Field(
        default=None, ge=0, description="Seconds until expiry, used when expires_at is absent"
    )


class GoogleConnectionResponse(BaseModel):
    connected: bool
    scope: str
    expires_at: datetime | None = None
    has_refresh_token: bool
    has_gmail_access: bool
    has_calendar_access: bool


class InternalAccessTokenResponse(BaseModel):
    """Token handed to the automation engine."""

    access_token: str
    expires_at: int | None = Field(None, description="Unix timestamp (seconds)")
