"""
Calendar API Routes
List the user's Google calendars and create new ones.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from app.auth.verify import auth_dependency, google_provider_token, require_user_id
from app.db.helpers import DatabaseError
from app.infrastructure.observability.logging import get_logger
from app.models.api.calendar_request import CreateCalendarRequest
from app.models.api.calendar_response import (
    CalendarInfoResponse,
    CalendarsListResponse,
    CreateCalendarResponse,
    CreatedCalendarResponse,
)
from app.routes.errors import to_http_exception
from app.services.calendar.calendar_service import calendar_operations_service
from app.services.errors import ServiceError

logger = get_logger(__name__)

router = APIRouter(prefix="/calendars", tags=["calendars"])


@router.get("", response_model=CalendarsListResponse)
async def list_user_calendars(
    claims: dict = Depends(auth_dependency),
    provider_token: str | None = Depends(google_provider_token),
):
    """List calendars accessible to user."""
    user_id = require_user_id(claims)

    try:
        calendars, selected_missing = await calendar_operations_service.list_calendars(
            user_id, provider_token=provider_token
        )

        calendar_responses = [
            CalendarInfoResponse(
                id=cal.id,
                summary=cal.summary,
                description=cal.description or "",
                timezone=cal.timezone,
                access_role=cal.access_role,
                primary=cal.primary,
                can_create_events=cal.can_create_events(),
                background_color=cal.background_color,
            )
            for cal in calendars
        ]

        return CalendarsListResponse(
            calendars=calendar_responses, selected_calendar_missing=selected_missing
        )

    except ServiceError as e:
        raise to_http_exception(e) from e
    except DatabaseError as e:
        logger.error("Database error listing calendars", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to list calendars"
        )


@router.post("", response_model=CreateCalendarResponse, status_code=status.HTTP_201_CREATED)
async def create_user_calendar(
    request: CreateCalendarRequest,
    claims: dict = Depends(auth_dependency),
    provider_token: str | None = Depends(google_provider_token),
):
    """Create a calendar; selects it in settings unless ``select`` is false."""
    user_id = require_user_id(claims)

    try:
        calendar, updated_settings = await calendar_operations_service.create_calendar(
            user_id,
            request.calendar_name,
            timezone=request.timezone,
            description=request.description,
            location=request.location,
            select=request.select,
            provider_token=provider_token,
        )

        return CreateCalendarResponse(
            calendar=CreatedCalendarResponse(**calendar.to_dict()),
            settings=updated_settings.to_dict() if updated_settings else None,
        )

    except ServiceError as e:
        raise to_http_exception(e) from e
    except DatabaseError as e:
        logger.error("Database error creating calendar", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create calendar"
        )
