"""
Service-level exceptions shared by the children, settings and calendar services.
Routes translate these into HTTP status codes; drift is reported as data, never raised.
"""


class ServiceError(Exception):
    """Base exception for service operations."""

    def __init__(
        self,
        message: str,
        user_id: str | None = None,
        error_code: str | None = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.error_code = error_code
        self.recoverable = recoverable


class ValidationError(ServiceError):
    """A required field is missing or malformed. Caller-fixable, no remote calls were made."""

    def __init__(self, message: str, field: str | None = None, user_id: str | None = None):
        super().__init__(message, user_id=user_id, error_code="validation_error", recoverable=False)
        self.field = field

    def to_detail(self) -> dict:
        return {"message": self.message, "field": self.field}


class NotFoundError(ServiceError):
    """Record is absent or owned by someone else. The two cases are indistinguishable."""

    def __init__(self, message: str = "Not found", user_id: str | None = None):
        super().__init__(message, user_id=user_id, error_code="not_found", recoverable=False)


class AuthRequiredError(ServiceError):
    """No usable Google credential for the remote call."""

    def __init__(
        self,
        message: str = "Google authentication required",
        user_id: str | None = None,
    ):
        super().__init__(message, user_id=user_id, error_code="google_auth_required")


class IntegrationError(ServiceError):
    """A remote mutation failed unexpectedly. The caller may retry."""

    def __init__(
        self,
        reason: str,
        stage: str | None = None,
        user_id: str | None = None,
        provider: str = "Gmail",
    ):
        super().__init__(
            f"{provider} integration failed: {reason}",
            user_id=user_id,
            error_code="integration_error",
        )
        self.reason = reason
        self.stage = stage
