"""
Internal routes for the automation engine.
Authenticated with the shared INTERNAL_API_KEY header, not a user JWT.
"""

import hmac

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status

from app.config import settings
from app.db.helpers import DatabaseError
from app.infrastructure.observability.logging import get_logger
from app.models.api.connection_request import InternalAccessTokenResponse
from app.services.core.connection_service import ConnectionServiceError, connection_service

logger = get_logger(__name__)

router = APIRouter(prefix="/internal", tags=["internal"])


def verify_internal_api_key(x_internal_api_key: str | None = Header(default=None)) -> None:
    expected = settings.INTERNAL_API_KEY
    if not expected:
        logger.error("INTERNAL_API_KEY not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal API not configured"
        )

    if not x_internal_api_key or not hmac.compare_digest(x_internal_api_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized - Invalid API key"
        )


@router.get(
    "/google/access-token",
    response_model=InternalAccessTokenResponse,
    dependencies=[Depends(verify_internal_api_key)],
)
async def get_google_access_token(user_id: str | None = Query(default=None)):
    """
    Stored Google access token for a user.

    Tokens are not refreshed here; an expired token is reported as 401
    so the caller can ask the user to sign in again.
    """
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="user_id parameter is required"
        )

    try:
        connection = await connection_service.get_connection(user_id)
    except (ConnectionServiceError, DatabaseError) as e:
        logger.error("Failed to load Google connection", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
        )

    if connection is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="no_connection")

    if connection.is_expired():
        logger.info("Internal token request for expired connection", user_id=user_id)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="token_expired")

    return InternalAccessTokenResponse(
        access_token=connection.access_token,
        expires_at=int(connection.expires_at.timestamp()) if connection.expires_at else None,
    )
