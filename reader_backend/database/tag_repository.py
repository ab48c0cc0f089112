"""
Tag repository - user-defined labels on subscriptions.
"""

import uuid

from .connection import DatabaseConnection
from .converters import format_timestamp, row_to_tag, utcnow
from .models import DBTag


class TagRepository:
    """Repository for tag operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def create(self, user_id: str, name: str, color: str | None = None) -> str:
        """Create a tag. Returns tag ID."""
        tag_id = str(uuid.uuid4())
        with self._db.conn() as conn:
            conn.execute(
                "INSERT INTO tags (id, user_id, name, color, created_at) VALUES (?, ?, ?, ?, ?)",
                (tag_id, user_id, name, color, format_timestamp(utcnow()))
            )
        return tag_id

    def get(self, tag_id: str) -> DBTag | None:
        with self._db.conn() as conn:
            row = conn.execute("SELECT * FROM tags WHERE id = ?", (tag_id,)).fetchone()
            return row_to_tag(row) if row else None

    def attach(self, user_id: str, subscription_id: str, tag_id: str) -> bool:
        """
        Tag a subscription.

        Both the tag and the subscription must belong to user_id; returns
        False otherwise.
        """
        with self._db.conn() as conn:
            cursor = conn.execute(
                """
                INSERT OR IGNORE INTO subscription_tags (subscription_id, tag_id)
                SELECT s.id, t.id
                FROM subscriptions s, tags t
                WHERE s.id = ? AND s.user_id = ? AND t.id = ? AND t.user_id = ?
                """,
                (subscription_id, user_id, tag_id, user_id)
            )
            return cursor.rowcount > 0

    def detach(self, user_id: str, subscription_id: str, tag_id: str) -> bool:
        """Remove a tag from a subscription. Returns False if nothing was removed."""
        with self._db.conn() as conn:
            cursor = conn.execute(
                """
                DELETE FROM subscription_tags
                WHERE subscription_id = ? AND tag_id = ?
                  AND tag_id IN (SELECT id FROM tags WHERE user_id = ?)
                """,
                (subscription_id, tag_id, user_id)
            )
            return cursor.rowcount > 0
