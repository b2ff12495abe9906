"""
Google Gmail API client for label and filter management.
Low-level client: one HTTP call per method, no retries. Callers decide
whether a failure is fatal or best-effort.
"""

from app.infrastructure.observability.logging import get_logger
from app.models.domain.gmail_domain import GmailFilter, GmailLabel
from app.services.gmail.filter_query import build_filter_query
from app.services.infrastructure.google_api_client import GoogleAPIClient, GoogleAPIError

logger = get_logger(__name__)

# Google Gmail API configuration
GMAIL_API_BASE_URL = "https://gmail.googleapis.com/gmail/v1"
GMAIL_USER_ID = "me"  # authenticated user


class GoogleGmailError(GoogleAPIError):
    """Custom exception for Google Gmail API errors."""


class GoogleGmailClient(GoogleAPIClient):
    """
    Client for Gmail labels and settings/filters.

    Read methods (``get_label``/``get_filter``) return None on 404 so the
    sync engine and drift detector can tell "gone" apart from "failed".
    """

    api_name = "Gmail"
    error_class = GoogleGmailError

    def _labels_url(self, label_id: str | None = None) -> str:
        base = f"{GMAIL_API_BASE_URL}/users/{GMAIL_USER_ID}/labels"
        return f"{base}/{label_id}" if label_id else base

    def _filters_url(self, filter_id: str | None = None) -> str:
        base = f"{GMAIL_API_BASE_URL}/users/{GMAIL_USER_ID}/settings/filters"
        return f"{base}/{filter_id}" if filter_id else base

    async def create_label(self, access_token: str, name: str) -> GmailLabel:
        """
        Create a user label shown in both the label list and message list.

        Raises:
            GoogleGmailError: If label creation fails (e.g. name conflict)
        """
        try:
            body = {
                "name": name,
                "labelListVisibility": "labelShow",
                "messageListVisibility": "show",
            }

            logger.info("Creating Gmail label", label_name=name)

            response = await self._request(
                "POST", self._labels_url(), headers=self._get_auth_headers(access_token), json=body
            )
            data = self._handle_api_response(response, "create_label")

            label = GmailLabel(data)
            if not label.id:
                raise GoogleGmailError("Label created without an id", response_data=data)

            logger.info("Gmail label created", label_id=label.id, label_name=label.name)
            return label

        except GoogleGmailError:
            raise
        except Exception as e:
            logger.error("Unexpected error creating label", label_name=name, error=str(e))
            raise GoogleGmailError(f"Failed to create label: {e}") from e

    async def get_label(self, access_token: str, label_id: str) -> GmailLabel | None:
        """
        Get a label by id.

        Returns:
            GmailLabel, or None if the label no longer exists

        Raises:
            GoogleGmailError: For any failure other than 404
        """
        try:
            response = await self._request(
                "GET", self._labels_url(label_id), headers=self._get_auth_headers(access_token)
            )
            if response.status_code == 404:
                logger.info("Gmail label not found", label_id=label_id)
                return None

            data = self._handle_api_response(response, "get_label")
            return GmailLabel(data)

        except GoogleGmailError:
            raise
        except Exception as e:
            logger.error("Unexpected error getting label", label_id=label_id, error=str(e))
            raise GoogleGmailError(f"Failed to get label: {e}") from e

    async def delete_label(self, access_token: str, label_id: str) -> None:
        """
        Delete a label.

        Raises:
            GoogleGmailError: If deletion fails, including 404
        """
        try:
            logger.info("Deleting Gmail label", label_id=label_id)

            response = await self._request(
                "DELETE", self._labels_url(label_id), headers=self._get_auth_headers(access_token)
            )
            self._handle_api_response(response, "delete_label")

            logger.info("Gmail label deleted", label_id=label_id)

        except GoogleGmailError:
            raise
        except Exception as e:
            logger.error("Unexpected error deleting label", label_id=label_id, error=str(e))
            raise GoogleGmailError(f"Failed to delete label: {e}") from e

    async def create_filter(
        self,
        access_token: str,
        name: str,
        expected_senders: list[str],
        keywords: list[str],
        label_id: str,
    ) -> GmailFilter:
        """
        Create a filter that applies ``label_id`` to mail matching the child's query.

        Raises:
            ValueError: If name is empty (nothing is sent)
            GoogleGmailError: If filter creation fails
        """
        query = build_filter_query(name, expected_senders, keywords)

        try:
            body = {
                "criteria": {"query": query},
                "action": {"addLabelIds": [label_id]},
            }

            logger.info("Creating Gmail filter", label_id=label_id, query=query)

            response = await self._request(
                "POST", self._filters_url(), headers=self._get_auth_headers(access_token), json=body
            )
            data = self._handle_api_response(response, "create_filter")

            gmail_filter = GmailFilter(data)
            if not gmail_filter.id:
                raise GoogleGmailError("Filter created without an id", response_data=data)

            logger.info("Gmail filter created", filter_id=gmail_filter.id, label_id=label_id)
            return gmail_filter

        except GoogleGmailError:
            raise
        except Exception as e:
            logger.error("Unexpected error creating filter", label_id=label_id, error=str(e))
            raise GoogleGmailError(f"Failed to create filter: {e}") from e

    async def get_filter(self, access_token: str, filter_id: str) -> GmailFilter | None:
        """
        Get a filter by id.

        Returns:
            GmailFilter, or None if the filter no longer exists

        Raises:
            GoogleGmailError: For any failure other than 404
        """
        try:
            response = await self._request(
                "GET", self._filters_url(filter_id), headers=self._get_auth_headers(access_token)
            )
            if response.status_code == 404:
                logger.info("Gmail filter not found", filter_id=filter_id)
                return None

            data = self._handle_api_response(response, "get_filter")
            return GmailFilter(data)

        except GoogleGmailError:
            raise
        except Exception as e:
            logger.error("Unexpected error getting filter", filter_id=filter_id, error=str(e))
            raise GoogleGmailError(f"Failed to get filter: {e}") from e

    async def delete_filter(self, access_token: str, filter_id: str) -> None:
        """
        Delete a filter.

        Raises:
            GoogleGmailError: If deletion fails, including 404
        """
        try:
            logger.info("Deleting Gmail filter", filter_id=filter_id)

            response = await self._request(
                "DELETE", self._filters_url(filter_id), headers=self._get_auth_headers(access_token)
            )
            self._handle_api_response(response, "delete_filter")

            logger.info("Gmail filter deleted", filter_id=filter_id)

        except GoogleGmailError:
            raise
        except Exception as e:
            logger.error("Unexpected error deleting filter", filter_id=filter_id, error=str(e))
            raise GoogleGmailError(f"Failed to delete filter: {e}") from e


# Singleton instance for application use
google_gmail_client = GoogleGmailClient()
