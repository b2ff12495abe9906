"""
Settings API Routes
Read and update per-user settings; the service switch also notifies the automation workflow.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status

from app.auth.verify import auth_dependency, google_provider_token, require_user_id
from app.db.helpers import DatabaseError
from app.infrastructure.observability.logging import get_logger
from app.models.api.settings_request import (
    UpdateCalendarRequest,
    UpdateLanguageRequest,
    UpdateServiceRequest,
)
from app.models.api.settings_response import ServiceToggleResponse, SettingsEnvelope
from app.models.domain.settings_domain import SettingsUpdate, UserSettings
from app.routes.errors import to_http_exception
from app.services.automation.webhook_trigger import send_automation_webhook
from app.services.errors import ServiceError
from app.services.settings.settings_service import settings_service

logger = get_logger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


def _envelope(user_settings: UserSettings | None) -> SettingsEnvelope:
    return SettingsEnvelope(settings=user_settings.to_dict() if user_settings else None)


def _database_failure(operation: str, user_id: str, error: DatabaseError) -> HTTPException:
    logger.error(f"Database error during {operation}", user_id=user_id, error=str(error))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to {operation}"
    )


@router.get("", response_model=SettingsEnvelope)
async def get_settings(claims: dict = Depends(auth_dependency)):
    """Current settings, or ``{"settings": null}`` if none were saved yet."""
    user_id = require_user_id(claims)

    try:
        return _envelope(await settings_service.get_settings(user_id))
    except DatabaseError as e:
        raise _database_failure("fetch settings", user_id, e)


@router.put("", response_model=SettingsEnvelope)
async def update_settings(request: SettingsUpdate, claims: dict = Depends(auth_dependency)):
    """Partial update; only fields present in the body are changed."""
    user_id = require_user_id(claims)

    try:
        return _envelope(await settings_service.update_settings(user_id, request))
    except ServiceError as e:
        raise to_http_exception(e) from e
    except DatabaseError as e:
        raise _database_failure("update settings", user_id, e)


@router.put("/calendar", response_model=SettingsEnvelope)
async def update_calendar_settings(
    request: UpdateCalendarRequest, claims: dict = Depends(auth_dependency)
):
    user_id = require_user_id(claims)

    try:
        updated = await settings_service.update_calendar(
            user_id, request.calendar_id, request.calendar_name
        )
        return _envelope(updated)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except DatabaseError as e:
        raise _database_failure("update calendar settings", user_id, e)


@router.put("/language", response_model=SettingsEnvelope)
async def update_language_settings(
    request: UpdateLanguageRequest, claims: dict = Depends(auth_dependency)
):
    user_id = require_user_id(claims)

    try:
        return _envelope(await settings_service.update_language(user_id, request.preferred_language))
    except ServiceError as e:
        raise to_http_exception(e) from e
    except DatabaseError as e:
        raise _database_failure("update language settings", user_id, e)


async def _notify_automation(
    event: str, user_id: str, email: str | None, updated: UserSettings, provider_token: str | None
) -> None:
    # Runs after the response is sent; failures are logged only
    try:
        payload = await settings_service.build_automation_event(
            event, user_id, email, updated, provider_token=provider_token
        )
        await send_automation_webhook(payload)
    except Exception as e:
        logger.error(
            "Automation event not sent",
            event=event,
            user_id=user_id,
            error=str(e),
            error_type=type(e).__name__,
        )


@router.put("/service", response_model=ServiceToggleResponse)
async def update_service_settings(
    request: UpdateServiceRequest,
    background_tasks: BackgroundTasks,
    claims: dict = Depends(auth_dependency),
    provider_token: str | None = Depends(google_provider_token),
):
    """
    Start or stop the automation service.

    When the switch actually flips, a ``service_started``/``service_stopped``
    event is assembled and posted to the automation webhook after the
    response is sent.
    """
    user_id = require_user_id(claims)

    try:
        updated, changed = await settings_service.set_service_enabled(
            user_id, request.automation_enabled
        )
    except ServiceError as e:
        raise to_http_exception(e) from e
    except DatabaseError as e:
        raise _database_failure("update service settings", user_id, e)

    if changed:
        event = "service_started" if request.automation_enabled else "service_stopped"
        background_tasks.add_task(
            _notify_automation, event, user_id, claims.get("email"), updated, provider_token
        )

    return ServiceToggleResponse(settings=updated.to_dict(), webhook_scheduled=changed)
