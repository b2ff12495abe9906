"""
Google connection storage.
Persists the provider tokens captured from the Supabase session, Fernet-encrypted at rest.
"""

from datetime import datetime

from app.db.helpers import DatabaseError, fetch_one, with_db_retry
from app.infrastructure.observability.logging import get_logger
from app.models.domain.oauth_domain import GoogleConnection
from app.services.infrastructure.encryption_service import (
    EncryptionError,
    decrypt_connection_tokens,
    encrypt_connection_tokens,
)

logger = get_logger(__name__)

GOOGLE_PROVIDER = "google"


class ConnectionServiceError(Exception):
    """Custom exception for connection storage operations."""

    def __init__(self, message: str, user_id: str | None = None, recoverable: bool = True):
        super().__init__(message)
        self.user_id = user_id
        self.recoverable = recoverable


class ConnectionService:
    """Store and load a user's Google connection."""

    @with_db_retry(max_retries=3, base_delay=0.1)
    async def store_connection(
        self,
        user_id: str,
        access_token: str,
        refresh_token: str | None = None,
        scope: str = "",
        expires_at: datetime | None = None,
        token_type: str = "Bearer",
    ) -> GoogleConnection:
        """
        Upsert the user's Google tokens.

        A missing refresh_token keeps the previously stored one; Google only
        returns it on first consent.

        Raises:
            ConnectionServiceError: If encryption or storage fails
        """
        try:
            encrypted_access, encrypted_refresh = encrypt_connection_tokens(
                access_token=access_token, refresh_token=refresh_token
            )

            query = """
            INSERT INTO connections (
                user_id, provider, access_token, refresh_token,
                scope, token_type, expires_at, updated_at
            ) VALUES (
                %s, %s, %s, %s, %s, %s, %s, NOW()
            )
            ON CONFLICT (user_id, provider)
            DO UPDATE SET
                access_token = EXCLUDED.access_token,
                refresh_token = COALESCE(EXCLUDED.refresh_token, connections.refresh_token),
                scope = EXCLUDED.scope,
                token_type = EXCLUDED.token_type,
                expires_at = EXCLUDED.expires_at,
                updated_at = NOW()
            RETURNING updated_at
            """

            row = await fetch_one(
                query,
                (
                    user_id,
                    GOOGLE_PROVIDER,
                    encrypted_access,
                    encrypted_refresh,
                    scope,
                    token_type,
                    expires_at,
                ),
            )
            if not row:
                raise ConnectionServiceError("Connection upsert returned no row", user_id=user_id)

            logger.info(
                "Google connection stored",
                user_id=user_id,
                has_refresh_token=bool(refresh_token),
                expires_at=expires_at.isoformat() if expires_at else None,
            )

            return GoogleConnection(
                user_id=user_id,
                access_token=access_token,
                refresh_token=refresh_token,
                scope=scope,
                token_type=token_type,
                expires_at=expires_at,
                updated_at=row["updated_at"],
            )

        except EncryptionError as e:
            logger.error("Token encryption failed", user_id=user_id, error=str(e))
            raise ConnectionServiceError(f"Token encryption failed: {e}", user_id=user_id) from e

        except DatabaseError:
            # with_db_retry decides on retries
            raise

    @with_db_retry(max_retries=3, base_delay=0.1)
    async def get_connection(self, user_id: str) -> GoogleConnection | None:
        """
        Load and decrypt the user's Google connection.

        Raises:
            ConnectionServiceError: If stored tokens cannot be decrypted
        """
        query = """
        SELECT access_token, refresh_token, scope, token_type, expires_at, updated_at
        FROM connections
        WHERE user_id = %s AND provider = %s
        """

        row = await fetch_one(query, (user_id, GOOGLE_PROVIDER))
        if not row:
            logger.debug("No Google connection for user", user_id=user_id)
            return None

        try:
            access_token, refresh_token = decrypt_connection_tokens(
                encrypted_access=row["access_token"], encrypted_refresh=row.get("refresh_token")
            )
        except EncryptionError as e:
            logger.error("Token decryption failed", user_id=user_id, error=str(e))
            raise ConnectionServiceError(f"Token decryption failed: {e}", user_id=user_id) from e

        return GoogleConnection(
            user_id=user_id,
            access_token=access_token,
            refresh_token=refresh_token,
            scope=row.get("scope") or "",
            token_type=row.get("token_type") or "Bearer",
            expires_at=row.get("expires_at"),
            updated_at=row["updated_at"],
        )


# Singleton instance for application use
connection_service = ConnectionService()
