"""
Outbound webhook to the external automation workflow.

Fired when the automation switch flips. Delivery is fire-and-forget: it
runs as a background task and every failure is logged, never raised.
"""

import hashlib
import hmac
import json
from datetime import UTC, datetime
from typing import Any, Literal

import httpx

from app.config import settings
from app.infrastructure.observability.logging import get_logger
from app.models.domain.child_domain import Child
from app.models.domain.settings_domain import UserSettings

logger = get_logger(__name__)

AutomationEvent = Literal["service_started", "service_stopped"]

SIGNATURE_HEADER = "X-Webhook-Signature"


def build_payload(
    event: AutomationEvent,
    user_id: str,
    email: str | None,
    user_settings: UserSettings,
    children: list[Child],
    google_access_token: str | None,
) -> dict[str, Any]:
    return {
        "event": event,
        "user_id": user_id,
        "email": email,
        "settings": user_settings.to_dict(),
        "children": [child.to_dict() for child in children],
        "google_access_token": google_access_token,
        "triggered_at": datetime.now(UTC).isoformat(),
    }


def sign_body(secret: str, body: bytes) -> str:
    """Hex HMAC-SHA256 of the raw request body."""
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


async def send_automation_webhook(payload: dict[str, Any]) -> bool:
    """
    POST the payload to AUTOMATION_WEBHOOK_URL.

    Returns:
        bool: True if the workflow accepted it. False when skipped or failed.
    """
    webhook_url = settings.AUTOMATION_WEBHOOK_URL
    event = payload.get("event")
    user_id = payload.get("user_id")

    if not webhook_url:
        logger.warning("Automation webhook URL not configured, skipping", event=event, user_id=user_id)
        return False

    body = json.dumps(payload).encode("utf-8")
    headers = {"Content-Type": "application/json"}
    if settings.AUTOMATION_WEBHOOK_SECRET:
        headers[SIGNATURE_HEADER] = sign_body(settings.AUTOMATION_WEBHOOK_SECRET, body)

    try:
        async with httpx.AsyncClient(timeout=settings.AUTOMATION_WEBHOOK_TIMEOUT) as client:
            response = await client.post(webhook_url, content=body, headers=headers)
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error(
            "Automation webhook rejected",
            event=event,
            user_id=user_id,
            status_code=e.response.status_code,
        )
        return False
    except Exception as e:
        logger.error(
            "Automation webhook delivery failed",
            event=event,
            user_id=user_id,
            error=str(e),
            error_type=type(e).__name__,
        )
        return False

    logger.info("Automation webhook delivered", event=event, user_id=user_id)
    return True
