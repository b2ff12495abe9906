"""
Child sync service.

Keeps each child's Gmail label and filter in step with its stored record.
There is no cross-system transaction: every operation is an ordered
sequence of remote calls followed by one local write, and no step is
compensated. Secondary cleanup failures are logged and ignored.

    create:  label -> filter -> insert
    update:  [probe label] -> [delete old label] -> [create label]
             -> delete old filter -> create filter -> update
    delete:  delete filter -> delete label -> delete record
"""

from app.infrastructure.observability.logging import get_logger
from app.models.domain.child_domain import Child, ChildFields
from app.repositories.child_repository import ChildRepository
from app.services.children.drift_detector import DriftDetector, drift_detector
from app.services.children.validation import validate_child_fields
from app.services.core.credential_provider import CredentialProvider, credential_provider
from app.services.errors import AuthRequiredError, IntegrationError, NotFoundError
from app.services.gmail.google_client import (
    GoogleGmailClient,
    GoogleGmailError,
    google_gmail_client,
)

logger = get_logger(__name__)


class ChildSyncService:
    """Create, update, delete and list children with their Gmail resources."""

    def __init__(
        self,
        repository=ChildRepository,
        gmail_client: GoogleGmailClient = google_gmail_client,
        credentials: CredentialProvider = credential_provider,
        detector: DriftDetector = drift_detector,
    ):
        self._repo = repository
        self._gmail = gmail_client
        self._credentials = credentials
        self._detector = detector

    async def _require_token(self, user_id: str, provider_token: str | None) -> str:
        access_token = await self._credentials.get_google_access_token(user_id, provider_token)
        if not access_token:
            raise AuthRequiredError(user_id=user_id)
        return access_token

    async def _get_owned(self, user_id: str, child_id: str) -> Child:
        child = await self._repo.get(user_id, child_id)
        if child is None:
            raise NotFoundError("Child not found", user_id=user_id)
        return child

    async def _create_label(self, user_id: str, access_token: str, label_name: str) -> str:
        try:
            label = await self._gmail.create_label(access_token, label_name)
        except GoogleGmailError as e:
            logger.error(
                "Gmail label creation failed",
                user_id=user_id,
                label_name=label_name,
                stage="create_label",
                error=str(e),
            )
            raise IntegrationError(str(e), stage="create_label", user_id=user_id) from e
        return label.id

    async def _create_filter(
        self, user_id: str, access_token: str, fields: ChildFields, label_id: str
    ) -> str:
        try:
            gmail_filter = await self._gmail.create_filter(
                access_token, fields.name, fields.expected_senders, fields.keywords, label_id
            )
        except GoogleGmailError as e:
            logger.error(
                "Gmail filter creation failed",
                user_id=user_id,
                label_id=label_id,
                stage="create_filter",
                error=str(e),
            )
            raise IntegrationError(str(e), stage="create_filter", user_id=user_id) from e
        return gmail_filter.id

    async def _label_exists(self, user_id: str, access_token: str, label_id: str) -> bool:
        # Probe failures other than 404 are treated as missing
        try:
            return await self._gmail.get_label(access_token, label_id) is not None
        except GoogleGmailError as e:
            logger.warning(
                "Gmail label probe failed, treating as missing",
                user_id=user_id,
                label_id=label_id,
                error=str(e),
            )
            return False

    async def _delete_label_quietly(self, user_id: str, access_token: str, label_id: str) -> None:
        try:
            await self._gmail.delete_label(access_token, label_id)
        except GoogleGmailError as e:
            logger.warning(
                "Ignoring Gmail label delete failure", user_id=user_id, label_id=label_id, error=str(e)
            )

    async def _delete_filter_quietly(self, user_id: str, access_token: str, filter_id: str) -> None:
        try:
            await self._gmail.delete_filter(access_token, filter_id)
        except GoogleGmailError as e:
            logger.warning(
                "Ignoring Gmail filter delete failure",
                user_id=user_id,
                filter_id=filter_id,
                error=str(e),
            )

    async def list_children(self, user_id: str, provider_token: str | None = None) -> list[Child]:
        """Children oldest first, annotated with drift where Gmail resources are gone."""
        children = await self._repo.list_for_user(user_id)
        return await self._detector.annotate(user_id, children, provider_token)

    async def create_child(
        self,
        user_id: str,
        name: str | None,
        label_name: str | None,
        expected_senders: list[str] | None = None,
        keywords: list[str] | None = None,
        provider_token: str | None = None,
    ) -> Child:
        """
        Provision a label and filter, then store the child.

        Raises:
            ValidationError: invalid fields, nothing sent to Gmail
            AuthRequiredError: no Google credential, nothing sent to Gmail
            IntegrationError: label or filter creation failed, nothing stored.
                A label created before a filter failure is left behind.
        """
        fields = validate_child_fields(name, label_name, expected_senders, keywords, user_id=user_id)
        access_token = await self._require_token(user_id, provider_token)

        label_id = await self._create_label(user_id, access_token, fields.label_name)

        try:
            filter_id = await self._create_filter(user_id, access_token, fields, label_id)
        except IntegrationError:
            logger.warning("Orphaned Gmail label left behind", user_id=user_id, label_id=label_id)
            raise

        child = await self._repo.insert(user_id, fields, label_id, filter_id)

        logger.info(
            "Child created",
            user_id=user_id,
            child_id=child.id,
            label_id=label_id,
            filter_id=filter_id,
        )
        return child

    async def update_child(
        self,
        user_id: str,
        child_id: str,
        name: str | None,
        label_name: str | None,
        expected_senders: list[str] | None = None,
        keywords: list[str] | None = None,
        provider_token: str | None = None,
    ) -> Child:
        """
        Apply new fields, replacing the label when needed and always the filter.

        The label is replaced when there is no stored label id, the stored
        label no longer exists, or the label name changed.

        Raises:
            NotFoundError: child absent or owned by someone else
            ValidationError, AuthRequiredError: as for create
            IntegrationError: label or filter creation failed, record unchanged
        """
        existing = await self._get_owned(user_id, child_id)
        fields = validate_child_fields(name, label_name, expected_senders, keywords, user_id=user_id)
        access_token = await self._require_token(user_id, provider_token)

        label_id = existing.label_id
        label_exists = False
        if label_id:
            label_exists = await self._label_exists(user_id, access_token, label_id)

        needs_new_label = (
            label_id is None or not label_exists or fields.label_name != existing.label_name
        )

        if needs_new_label:
            if label_exists:
                await self._delete_label_quietly(user_id, access_token, label_id)
            label_id = await self._create_label(user_id, access_token, fields.label_name)
            logger.info(
                "Gmail label replaced",
                user_id=user_id,
                child_id=child_id,
                old_label_id=existing.label_id,
                label_id=label_id,
            )

        if existing.filter_id:
            await self._delete_filter_quietly(user_id, access_token, existing.filter_id)

        filter_id = None
        if label_id:
            filter_id = await self._create_filter(user_id, access_token, fields, label_id)

        child = await self._repo.update(user_id, child_id, fields, label_id, filter_id)
        if child is None:
            # Deleted concurrently; the new Gmail resources are left behind
            logger.warning(
                "Child vanished during update",
                user_id=user_id,
                child_id=child_id,
                label_id=label_id,
                filter_id=filter_id,
            )
            raise NotFoundError("Child not found", user_id=user_id)

        logger.info(
            "Child updated",
            user_id=user_id,
            child_id=child_id,
            label_id=label_id,
            filter_id=filter_id,
        )
        return child

    async def delete_child(
        self, user_id: str, child_id: str, provider_token: str | None = None
    ) -> None:
        """
        Remove the filter and label (best effort), then the record.

        The record is always deleted once found, even when Gmail cleanup
        fails or no credential is available.

        Raises:
            NotFoundError: child absent or owned by someone else
        """
        child = await self._get_owned(user_id, child_id)
        access_token = await self._credentials.get_google_access_token(user_id, provider_token)

        if access_token:
            if child.filter_id:
                await self._delete_filter_quietly(user_id, access_token, child.filter_id)
            if child.label_id:
                await self._delete_label_quietly(user_id, access_token, child.label_id)
        elif child.label_id or child.filter_id:
            logger.warning(
                "No Google credential, leaving Gmail resources in place",
                user_id=user_id,
                child_id=child_id,
                label_id=child.label_id,
                filter_id=child.filter_id,
            )

        if not await self._repo.delete(user_id, child_id):
            raise NotFoundError("Child not found", user_id=user_id)

        logger.info("Child deleted", user_id=user_id, child_id=child_id)


# Singleton instance for application use
child_sync_service = ChildSyncService()
