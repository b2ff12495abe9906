"""
Google connection routes.
The client posts the Supabase session's provider tokens after Google sign-in.
"""

from datetime import UTC, datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, status

from app.auth.verify import auth_dependency, require_user_id
from app.db.helpers import DatabaseError
from app.infrastructure.observability.logging import get_logger
from app.models.api.connection_request import GoogleConnectionResponse, StoreGoogleConnectionRequest
from app.services.core.connection_service import ConnectionServiceError, connection_service

logger = get_logger(__name__)

router = APIRouter(prefix="/connections", tags=["connections"])


@router.put("/google", response_model=GoogleConnectionResponse)
async def store_google_connection(
    request: StoreGoogleConnectionRequest, claims: dict = Depends(auth_dependency)
):
    user_id = require_user_id(claims)

    expires_at = request.expires_at
    if expires_at is None and request.expires_in is not None:
        expires_at = datetime.now(UTC) + timedelta(seconds=request.expires_in)

    try:
        connection = await connection_service.store_connection(
            user_id,
            access_token=request.provider_token,
            refresh_token=request.provider_refresh_token,
            scope=request.scope,
            expires_at=expires_at,
        )
    except (ConnectionServiceError, DatabaseError) as e:
        logger.error("Failed to store Google connection", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store Google connection",
        )

    return GoogleConnectionResponse(
        connected=True,
        scope=connection.scope,
        expires_at=connection.expires_at,
        has_refresh_token=bool(connection.refresh_token),
        has_gmail_access=connection.has_gmail_access(),
        has_calendar_access=connection.has_calendar_access(),
    )
