# app/models/domain/child_domain.py
"""
Child Domain Models
A child is a per-user matching configuration backed by one Gmail label and one Gmail filter.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator


class SyncStatus(BaseModel):
    """Drift flags computed on read, never persisted."""

    label_deleted: bool | None = None
    filter_deleted: bool | None = None

    def has_drift(self) -> bool:
        return bool(self.label_deleted or self.filter_deleted)


class ChildFields(BaseModel):
    """The user-editable part of a child, already validated and normalized."""

    name: str
    label_name: str
    expected_senders: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)


class Child(BaseModel):
    """Domain model for a stored child record."""

    id: str
    user_id: str
    name: str
    label_name: str
    expected_senders: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    label_id: str | None = None
    filter_id: str | None = None
    created_at: datetime
    updated_at: datetime

    # Only set by the drift detector
    sync_status: SyncStatus | None = None

    @model_validator(mode="after")
    def _filter_requires_label(self) -> "Child":
        if self.filter_id is not None and self.label_id is None:
            raise ValueError("filter_id set without label_id")
        return self

    def with_sync_status(self, sync_status: SyncStatus) -> "Child":
        """Copy annotated with drift flags; unchanged copy when there is no drift."""
        if not sync_status.has_drift():
            return self.model_copy(update={"sync_status": None})
        return self.model_copy(update={"sync_status": sync_status})

    def to_dict(self) -> dict[str, Any]:
        """API representation. sync_status is omitted on the happy path."""
        data = self.model_dump(mode="json", exclude={"sync_status"})
        if self.sync_status and self.sync_status.has_drift():
            data["sync_status"] = self.sync_status.model_dump(exclude_none=True)
        return data
