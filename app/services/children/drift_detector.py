"""
Drift detection for children.

Probes Gmail for each child's label and filter and reports missing ones as
``sync_status``. Read-only: stored ids are never corrected here.
"""

import asyncio
from collections.abc import Awaitable, Callable

from app.infrastructure.observability.logging import get_logger
from app.models.domain.child_domain import Child, SyncStatus
from app.services.core.credential_provider import CredentialProvider, credential_provider
from app.services.gmail.google_client import GoogleGmailClient, google_gmail_client

logger = get_logger(__name__)


class DriftDetector:
    """Annotates children whose Gmail label or filter has disappeared."""

    def __init__(
        self,
        gmail_client: GoogleGmailClient = google_gmail_client,
        credentials: CredentialProvider = credential_provider,
    ):
        self._gmail = gmail_client
        self._credentials = credentials

    async def annotate(
        self, user_id: str, children: list[Child], provider_token: str | None = None
    ) -> list[Child]:
        """
        Return the children with ``sync_status`` set where drift was found.

        Without a Google credential the pass is skipped and children are
        returned as stored.
        """
        if not children:
            return children

        access_token = await self._credentials.get_google_access_token(user_id, provider_token)
        if not access_token:
            logger.info("Skipping drift detection, no Google credential", user_id=user_id)
            return children

        annotated = await asyncio.gather(
            *(self._check_child(access_token, child) for child in children)
        )

        drifted = sum(1 for child in annotated if child.sync_status is not None)
        if drifted:
            logger.info("Drift detected", user_id=user_id, drifted_children=drifted)

        return list(annotated)

    async def _check_child(self, access_token: str, child: Child) -> Child:
        label_probe = (
            self._exists(self._gmail.get_label, access_token, child.label_id, "label", child.id)
            if child.label_id
            else _present()
        )
        filter_probe = (
            self._exists(self._gmail.get_filter, access_token, child.filter_id, "filter", child.id)
            if child.filter_id
            else _present()
        )

        label_exists, filter_exists = await asyncio.gather(label_probe, filter_probe)

        status = SyncStatus(
            label_deleted=True if not label_exists else None,
            filter_deleted=True if not filter_exists else None,
        )
        return child.with_sync_status(status)

    async def _exists(
        self,
        fetch: Callable[[str, str], Awaitable[object | None]],
        access_token: str,
        resource_id: str,
        kind: str,
        child_id: str,
    ) -> bool:
        # Any probe failure counts as missing
        try:
            return await fetch(access_token, resource_id) is not None
        except Exception as e:
            logger.warning(
                f"Gmail {kind} probe failed, reporting as deleted",
                child_id=child_id,
                resource_id=resource_id,
                error=str(e),
            )
            return False


async def _present() -> bool:
    return True


# Singleton instance for application use
drift_detector = DriftDetector()
