# app/models/domain/gmail_domain.py
"""
Gmail Domain Models
Thin wrappers around Gmail API label and filter resources.
"""


class GmailLabel:
    """Domain model for a Gmail label."""

    def __init__(self, data: dict):
        self.id = data.get("id")
        self.name = data.get("name", "")
        self.type = data.get("type", "user")  # "system" or "user"
        self.label_list_visibility = data.get("labelListVisibility", "labelShow")
        self.message_list_visibility = data.get("messageListVisibility", "show")
        self.raw_data = data

    def is_user_label(self) -> bool:
        return self.type == "user"


class GmailFilter:
    """Domain model for a Gmail filter (criteria + action)."""

    def __init__(self, data: dict):
        self.id = data.get("id")
        criteria = data.get("criteria") or {}
        action = data.get("action") or {}
        self.query = criteria.get("query", "")
        self.add_label_ids = list(action.get("addLabelIds") or [])
        self.remove_label_ids = list(action.get("removeLabelIds") or [])
        self.raw_data = data

    def targets_label(self, label_id: str) -> bool:
        """Check if this filter applies the given label."""
        return label_id in self.add_label_ids
