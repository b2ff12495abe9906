"""
Children API Routes
CRUD for children; each write keeps the child's Gmail label and filter in sync.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from app.auth.verify import auth_dependency, google_provider_token, require_user_id
from app.db.helpers import DatabaseError
from app.infrastructure.observability.logging import get_logger
from app.models.api.children_request import ChildRequest
from app.routes.errors import to_http_exception
from app.services.children.sync_service import child_sync_service
from app.services.errors import ServiceError

logger = get_logger(__name__)

router = APIRouter(prefix="/children", tags=["children"])


@router.get("")
async def list_children(
    claims: dict = Depends(auth_dependency),
    provider_token: str | None = Depends(google_provider_token),
):
    """List children, oldest first, with ``sync_status`` on drifted entries."""
    user_id = require_user_id(claims)

    try:
        children = await child_sync_service.list_children(user_id, provider_token=provider_token)
        return {"children": [child.to_dict() for child in children]}

    except DatabaseError as e:
        logger.error("Database error listing children", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch children"
        )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_child(
    request: ChildRequest,
    claims: dict = Depends(auth_dependency),
    provider_token: str | None = Depends(google_provider_token),
):
    """Create a child together with its Gmail label and filter."""
    user_id = require_user_id(claims)

    try:
        child = await child_sync_service.create_child(
            user_id,
            name=request.name,
            label_name=request.label_name,
            expected_senders=request.expected_senders,
            keywords=request.keywords,
            provider_token=provider_token,
        )
        return {"child": child.to_dict()}

    except ServiceError as e:
        raise to_http_exception(e) from e
    except DatabaseError as e:
        logger.error("Database error creating child", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create child"
        )


@router.put("/{child_id}")
async def update_child(
    child_id: str,
    request: ChildRequest,
    claims: dict = Depends(auth_dependency),
    provider_token: str | None = Depends(google_provider_token),
):
    """Update a child; the Gmail filter is always rebuilt."""
    user_id = require_user_id(claims)

    try:
        child = await child_sync_service.update_child(
            user_id,
            child_id,
            name=request.name,
            label_name=request.label_name,
            expected_senders=request.expected_senders,
            keywords=request.keywords,
            provider_token=provider_token,
        )
        return {"child": child.to_dict()}

    except ServiceError as e:
        raise to_http_exception(e) from e
    except DatabaseError as e:
        logger.error("Database error updating child", user_id=user_id, child_id=child_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update child"
        )


@router.delete("/{child_id}")
async def delete_child(
    child_id: str,
    claims: dict = Depends(auth_dependency),
    provider_token: str | None = Depends(google_provider_token),
):
    """Delete a child. Gmail cleanup is best-effort."""
    user_id = require_user_id(claims)

    try:
        await child_sync_service.delete_child(user_id, child_id, provider_token=provider_token)
        return {"success": True}

    except ServiceError as e:
        raise to_http_exception(e) from e
    except DatabaseError as e:
        logger.error("Database error deleting child", user_id=user_id, child_id=child_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete child"
        )
