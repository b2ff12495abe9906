"""
Persistence layer for children.

Every statement is scoped by user_id, so a record owned by another user
behaves exactly like a missing one.
"""

import uuid

from app.db.helpers import DatabaseError, execute_query, fetch_all, fetch_one
from app.infrastructure.observability.logging import get_logger
from app.models.domain.child_domain import Child, ChildFields

logger = get_logger(__name__)


class ChildRepositoryError(DatabaseError):
    """More specific exception for repository failures."""


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


class ChildRepository:
    """CRUD for the children table."""

    SELECT_COLUMNS = """
        id, user_id, name, label_name, expected_senders, keywords,
        label_id, filter_id, created_at, updated_at
    """

    @classmethod
    def _row_to_child(cls, row: dict | None) -> Child | None:
        if not row:
            return None

        return Child(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            name=row["name"],
            label_name=row["label_name"],
            expected_senders=list(row.get("expected_senders") or []),
            keywords=list(row.get("keywords") or []),
            label_id=row.get("label_id"),
            filter_id=row.get("filter_id"),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @classmethod
    async def get(cls, user_id: str, child_id: str) -> Child | None:
        """Return the child if it exists and belongs to user_id."""
        if not _is_uuid(child_id):
            return None

        query = f"SELECT {cls.SELECT_COLUMNS} FROM children WHERE id = %s AND user_id = %s"
        row = await fetch_one(query, (child_id, user_id))
        return cls._row_to_child(row)

    @classmethod
    async def list_for_user(cls, user_id: str) -> list[Child]:
        """All children of user_id, oldest first."""
        query = f"""
            SELECT {cls.SELECT_COLUMNS}
            FROM children
            WHERE user_id = %s
            ORDER BY created_at ASC
        """
        rows = await fetch_all(query, (user_id,))
        return [cls._row_to_child(row) for row in rows]

    @classmethod
    async def insert(
        cls,
        user_id: str,
        fields: ChildFields,
        label_id: str | None,
        filter_id: str | None,
    ) -> Child:
        """Insert a child with its remote ids and return the stored record."""
        query = f"""
            INSERT INTO children (
                user_id, name, label_name, expected_senders, keywords, label_id, filter_id
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING {cls.SELECT_COLUMNS}
        """
        params = (
            user_id,
            fields.name,
            fields.label_name,
            fields.expected_senders,
            fields.keywords,
            label_id,
            filter_id,
        )

        row = await fetch_one(query, params)
        if not row:
            raise ChildRepositoryError("Failed to insert child", operation="insert")

        logger.info("Child inserted", user_id=user_id, child_id=str(row["id"]))
        return cls._row_to_child(row)

    @classmethod
    async def update(
        cls,
        user_id: str,
        child_id: str,
        fields: ChildFields,
        label_id: str | None,
        filter_id: str | None,
    ) -> Child | None:
        """Overwrite fields and remote ids, bump updated_at. None if not found."""
        if not _is_uuid(child_id):
            return None

        query = f"""
            UPDATE children
            SET name = %s,
                label_name = %s,
                expected_senders = %s,
                keywords = %s,
                label_id = %s,
                filter_id = %s,
                updated_at = NOW()
            WHERE id = %s AND user_id = %s
            RETURNING {cls.SELECT_COLUMNS}
        """
        params = (
            fields.name,
            fields.label_name,
            fields.expected_senders,
            fields.keywords,
            label_id,
            filter_id,
            child_id,
            user_id,
        )

        row = await fetch_one(query, params)
        if row:
            logger.info("Child updated", user_id=user_id, child_id=child_id)
        return cls._row_to_child(row)

    @classmethod
    async def delete(cls, user_id: str, child_id: str) -> bool:
        """Delete the child. Returns False if nothing matched."""
        if not _is_uuid(child_id):
            return False

        query = "DELETE FROM children WHERE id = %s AND user_id = %s"
        deleted = await execute_query(query, (child_id, user_id))
        if deleted:
            logger.info("Child deleted", user_id=user_id, child_id=child_id)
        return deleted > 0

    @classmethod
    async def count(cls, user_id: str) -> int:
        row = await fetch_one("SELECT COUNT(*) AS total FROM children WHERE user_id = %s", (user_id,))
        return int(row["total"]) if row else 0
