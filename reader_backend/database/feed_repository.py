"""
Feed repository - CRUD operations for feeds.
"""

import uuid

from .connection import DatabaseConnection
from .converters import format_timestamp, row_to_feed, utcnow
from .models import DBFeed


class FeedRepository:
    """Repository for feed operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def add(
        self,
        url: str | None,
        title: str | None,
        feed_type: str = "web",
        site_url: str | None = None,
        feed_id: str | None = None
    ) -> str:
        """Add a new feed. Returns feed ID."""
        feed_id = feed_id or str(uuid.uuid4())
        with self._db.conn() as conn:
            conn.execute(
                """INSERT INTO feeds (id, type, url, title, site_url, created_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (feed_id, feed_type, url, title, site_url, format_timestamp(utcnow()))
            )
        return feed_id

    def get(self, feed_id: str) -> DBFeed | None:
        """Get single feed by ID."""
        with self._db.conn() as conn:
            row = conn.execute("SELECT * FROM feeds WHERE id = ?", (feed_id,)).fetchone()
            return row_to_feed(row) if row else None
