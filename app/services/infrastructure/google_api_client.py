"""
Shared plumbing for the Google REST clients (Gmail, Calendar).
Owns the httpx.AsyncClient, auth headers and error-envelope parsing.
"""

from typing import Any

import httpx

from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

REQUEST_TIMEOUT = 30  # seconds


class GoogleAPIError(Exception):
    """Base exception for Google REST API errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int | None = None,
        response_data: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.response_data = response_data or {}

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_auth_error(self) -> bool:
        return self.status_code == 401


class GoogleAPIClient:
    """
    Base class for a Google API client.

    Subclasses set ``api_name`` and ``error_class`` and build URLs; this class
    sends requests and turns Google's ``{"error": {...}}`` envelope into
    ``error_class`` instances.
    """

    api_name = "Google"
    error_class: type[GoogleAPIError] = GoogleAPIError

    def __init__(self, timeout: float = REQUEST_TIMEOUT):
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    def _create_client(self) -> httpx.AsyncClient:
        """Create async HTTP client."""
        timeout = httpx.Timeout(self._timeout)
        limits = httpx.Limits(max_keepalive_connections=20, max_connections=50)
        return httpx.AsyncClient(timeout=timeout, limits=limits)

    @property
    def client(self) -> httpx.AsyncClient:
        # Recreated lazily so a closed client never leaks into a later event loop
        if self._client is None or self._client.is_closed:
            self._client = self._create_client()
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    def _get_auth_headers(self, access_token: str) -> dict:
        """Get authorization headers for API requests."""
        return {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send a single request. Transport errors become ``error_class``."""
        try:
            return await self.client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            logger.error(
                f"{self.api_name} API transport error",
                method=method,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise self.error_class(f"{self.api_name} API unreachable: {e}") from e

    def _handle_api_response(self, response: httpx.Response, operation: str) -> dict[str, Any]:
        """
        Handle and validate an API response.

        Args:
            response: HTTP response from the API
            operation: Operation name for logging

        Returns:
            dict: Parsed response data ({} for empty bodies, e.g. DELETE)

        Raises:
            error_class: If the response is not 2xx or the body is not JSON
        """
        logger.debug(
            f"{self.api_name} API {operation} response",
            status_code=response.status_code,
            response_size=len(response.content),
        )

        if response.is_success:
            if not response.content:
                return {}
            try:
                return response.json()
            except ValueError as e:
                logger.error(f"Failed to parse {self.api_name} API {operation} response", error=str(e))
                raise self.error_class(f"Invalid response format: {e}") from e

        try:
            error_data = response.json() if response.content else {}
        except ValueError:
            logger.error(
                f"{self.api_name} API {operation} failed with non-JSON response",
                status_code=response.status_code,
                response_text=response.text[:200],
            )
            raise self.error_class(
                f"{self.api_name} API error (HTTP {response.status_code})",
                status_code=response.status_code,
            ) from None

        error_info = error_data.get("error", {}) if isinstance(error_data, dict) else {}
        if not isinstance(error_info, dict):
            error_info = {"message": str(error_info)}
        error_code = str(error_info.get("code", response.status_code))
        error_message = error_info.get("message") or f"HTTP {response.status_code}"

        log = logger.info if response.status_code == 404 else logger.error
        log(
            f"{self.api_name} API {operation} failed",
            status_code=response.status_code,
            error_code=error_code,
            error_message=error_message,
        )

        raise self.error_class(
            self._map_error(response.status_code, error_message),
            error_code=error_code,
            status_code=response.status_code,
            response_data=error_data,
        )

    def _map_error(self, status_code: int, error_message: str) -> str:
        """Map auth and quota failures to user-facing messages; keep Google's text otherwise."""
        error_mappings = {
            401: f"{self.api_name} authorization expired. Please reconnect.",
            403: f"{self.api_name} access denied: {error_message}",
            429: f"Too many {self.api_name} requests. Please try again later.",
        }
        return error_mappings.get(status_code, error_message)
