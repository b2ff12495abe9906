"""
Persistence layer for per-user settings.
One row per user, created on first write.
"""

from psycopg import sql

from app.db.helpers import DatabaseError, fetch_one
from app.infrastructure.observability.logging import get_logger
from app.models.domain.settings_domain import UserSettings

logger = get_logger(__name__)

# Columns a SettingsUpdate may touch
UPDATABLE_COLUMNS = (
    "preferred_language",
    "automation_enabled",
    "last_started_at",
    "last_stopped_at",
    "calendar_id",
    "calendar_name",
    "last_gmail_history_id",
)


class SettingsRepositoryError(DatabaseError):
    """More specific exception for repository failures."""


class SettingsRepository:
    """Read and upsert the settings table."""

    SELECT_COLUMNS = """
        user_id, preferred_language, automation_enabled, last_started_at,
        last_stopped_at, calendar_id, calendar_name, last_gmail_history_id,
        created_at, updated_at
    """

    @classmethod
    def _row_to_settings(cls, row: dict | None) -> UserSettings | None:
        if not row:
            return None

        return UserSettings(
            user_id=str(row["user_id"]),
            preferred_language=row["preferred_language"],
            automation_enabled=row["automation_enabled"],
            last_started_at=row.get("last_started_at"),
            last_stopped_at=row.get("last_stopped_at"),
            calendar_id=row.get("calendar_id"),
            calendar_name=row.get("calendar_name") or "",
            last_gmail_history_id=row.get("last_gmail_history_id"),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @classmethod
    async def get(cls, user_id: str) -> UserSettings | None:
        query = f"SELECT {cls.SELECT_COLUMNS} FROM settings WHERE user_id = %s"
        row = await fetch_one(query, (user_id,))
        return cls._row_to_settings(row)

    @classmethod
    async def upsert(cls, user_id: str, changes: dict) -> UserSettings:
        """
        Merge ``changes`` into the user's row, inserting it if missing.

        Only keys in UPDATABLE_COLUMNS are accepted; columns not present in
        ``changes`` keep their stored (or default) value.
        """
        unknown = set(changes) - set(UPDATABLE_COLUMNS)
        if unknown:
            raise SettingsRepositoryError(
                f"Unknown settings columns: {sorted(unknown)}", operation="upsert", recoverable=False
            )

        columns = [column for column in UPDATABLE_COLUMNS if column in changes]
        insert_columns = [sql.Identifier("user_id")] + [sql.Identifier(c) for c in columns]
        placeholders = [sql.Placeholder()] * len(insert_columns)

        assignments = [
            sql.SQL("{col} = EXCLUDED.{col}").format(col=sql.Identifier(c)) for c in columns
        ]
        assignments.append(sql.SQL("updated_at = NOW()"))

        query = sql.SQL(
            "INSERT INTO settings ({columns}) VALUES ({values}) "
            "ON CONFLICT (user_id) DO UPDATE SET {assignments} "
            "RETURNING {returning}"
        ).format(
            columns=sql.SQL(", ").join(insert_columns),
            values=sql.SQL(", ").join(placeholders),
            assignments=sql.SQL(", ").join(assignments),
            returning=sql.SQL(cls.SELECT_COLUMNS),
        )
        params = (user_id, *(changes[c] for c in columns))

        row = await fetch_one(query, params)
        if not row:
            raise SettingsRepositoryError("Failed to upsert settings", operation="upsert")

        logger.info("Settings upserted", user_id=user_id, fields=columns)
        return cls._row_to_settings(row)
