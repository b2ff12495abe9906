"""
Resolves the Google access token used for Gmail and Calendar calls.

Order:
    1. provider token forwarded by the client (X-Google-Access-Token)
    2. stored, unexpired Google connection
    3. None
Token refresh is out of scope here; an expired stored token yields None.
"""

from app.infrastructure.observability.logging import get_logger
from app.services.core.connection_service import (
    ConnectionService,
    ConnectionServiceError,
    connection_service,
)

logger = get_logger(__name__)


class CredentialProvider:
    """Looks up a usable Google access token for a user."""

    def __init__(self, connections: ConnectionService = connection_service):
        self._connections = connections

    async def get_google_access_token(
        self, user_id: str, provider_token: str | None = None
    ) -> str | None:
        if provider_token and provider_token.strip():
            return provider_token.strip()

        try:
            connection = await self._connections.get_connection(user_id)
        except ConnectionServiceError as e:
            logger.warning("Stored Google connection unreadable", user_id=user_id, error=str(e))
            return None

        if connection is None:
            logger.debug("No Google credential available", user_id=user_id)
            return None

        if connection.is_expired():
            logger.info(
                "Stored Google token expired",
                user_id=user_id,
                expires_at=connection.expires_at.isoformat() if connection.expires_at else None,
            )
            return None

        return connection.access_token


# Singleton instance for application use
credential_provider = CredentialProvider()
