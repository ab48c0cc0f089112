"""
Repository for user operations.
"""

import uuid

from .connection import DatabaseConnection
from .converters import format_timestamp, row_to_user, utcnow
from .models import DBUser


class UserRepository:
    """Repository for user CRUD operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def create(self, email: str, show_spam: bool = False, user_id: str | None = None) -> str:
        """
        Create a user.

        Args:
            email: User's email address (unique)
            show_spam: Whether spam entries are shown by default
            user_id: Explicit ID, generated when omitted

        Returns:
            User ID
        """
        user_id = user_id or str(uuid.uuid4())
        with self._db.conn() as conn:
            conn.execute(
                "INSERT INTO users (id, email, show_spam, created_at) VALUES (?, ?, ?, ?)",
                (user_id, email, show_spam, format_timestamp(utcnow()))
            )
        return user_id

    def get_by_id(self, user_id: str) -> DBUser | None:
        """Get user by ID."""
        with self._db.conn() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            return row_to_user(row) if row else None

    def set_show_spam(self, user_id: str, show_spam: bool):
        with self._db.conn() as conn:
            conn.execute("UPDATE users SET show_spam = ? WHERE id = ?", (show_spam, user_id))
