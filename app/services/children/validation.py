"""
Field validation for child create/update.
Runs before any remote call; failures carry the offending field name.
"""

import re

from app.models.domain.child_domain import ChildFields
from app.services.errors import ValidationError

MAX_NAME_LENGTH = 100
MAX_LABEL_NAME_LENGTH = 200
MAX_KEYWORD_LENGTH = 100

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _clean_list(values: list[str] | None) -> list[str]:
    # Order preserved, duplicates kept, blanks dropped
    return [value.strip() for value in (values or []) if value and value.strip()]


def validate_child_fields(
    name: str | None,
    label_name: str | None,
    expected_senders: list[str] | None = None,
    keywords: list[str] | None = None,
    user_id: str | None = None,
) -> ChildFields:
    """
    Normalize and validate the editable fields of a child.

    Raises:
        ValidationError: naming the first invalid field
    """
    name = (name or "").strip()
    label_name = (label_name or "").strip()

    if not name:
        raise ValidationError("Name is required", field="name", user_id=user_id)
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"Name must be at most {MAX_NAME_LENGTH} characters", field="name", user_id=user_id
        )

    if not label_name:
        raise ValidationError("Label name is required", field="label_name", user_id=user_id)
    if len(label_name) > MAX_LABEL_NAME_LENGTH:
        raise ValidationError(
            f"Label name must be at most {MAX_LABEL_NAME_LENGTH} characters",
            field="label_name",
            user_id=user_id,
        )

    # Blank senders fail the email check rather than being dropped
    senders = [(sender or "").strip() for sender in (expected_senders or [])]
    for sender in senders:
        if not EMAIL_PATTERN.match(sender):
            raise ValidationError(
                f"Invalid email address: {sender}", field="expected_senders", user_id=user_id
            )

    cleaned_keywords = _clean_list(keywords)
    for keyword in cleaned_keywords:
        if len(keyword) > MAX_KEYWORD_LENGTH:
            raise ValidationError(
                f"Keywords must be at most {MAX_KEYWORD_LENGTH} characters",
                field="keywords",
                user_id=user_id,
            )

    return ChildFields(
        name=name,
        label_name=label_name,
        expected_senders=senders,
        keywords=cleaned_keywords,
    )
