"""
Translation of service exceptions into HTTP errors.
"""

from fastapi import HTTPException, status

from app.services.errors import (
    AuthRequiredError,
    IntegrationError,
    NotFoundError,
    ServiceError,
    ValidationError,
)


def to_http_exception(error: ServiceError) -> HTTPException:
    if isinstance(error, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.to_detail())
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)
    if isinstance(error, AuthRequiredError):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": error.message, "error_code": error.error_code},
        )
    if isinstance(error, IntegrationError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=error.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=error.message)
