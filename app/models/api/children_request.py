# app/models/api/children_request.py
"""
Children API request models.
Shape checks only; field rules (required, lengths, email format) are
enforced by the service so they come back as 400 with a field name.
"""

from pydantic import BaseModel, Field


class ChildRequest(BaseModel):
    """Body for creating or updating a child."""

    name: str | None = Field(default=None, description="Child's name, used in the filter query")
    label_name: str | None = Field(default=None, description="Gmail label display name")
    expected_senders: list[str] = Field(
        default_factory=list, description="Sender addresses, OR-ed in the filter"
    )
    keywords: list[str] = Field(default_factory=list, description="Keywords, OR-ed in the filter")
