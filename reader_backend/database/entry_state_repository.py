"""
Repository for per-user entry state (read/starred).

Mutations run in the same connection as the count queries that follow them,
so the counts returned to the caller always reflect the committed update.
"""

import logging
import sqlite3
from datetime import datetime

from .connection import DatabaseConnection
from .converters import format_timestamp, row_to_entry_state, utcnow
from .count_repository import subscription_unread_counts, tag_unread_counts
from .expressions import All, Column, Compare
from .feed_sets import FeedScope, resolve_feed_set
from .models import (
    EntryState,
    MarkReadResult,
    SubscriptionUnreadCount,
    TagUnreadCount,
)
from .predicates import EntryFilters, build_entry_predicates

logger = logging.getLogger(__name__)


def _placeholders(values: list) -> str:
    return ", ".join("?" * len(values))


class EntryStateRepository:
    """Repository for per-user entry read/starred state."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def get_state(self, user_id: str, entry_id: str) -> EntryState | None:
        """Get state for a specific user+entry pair."""
        with self._db.conn() as conn:
            row = conn.execute(
                """
                SELECT entry_id AS id, read, starred FROM user_entries
                WHERE user_id = ? AND entry_id = ?
                """,
                (user_id, entry_id)
            ).fetchone()
            return row_to_entry_state(row) if row else None

    def mark_read(
        self,
        user_id: str,
        entry_ids: list[str],
        read: bool = True,
        show_spam: bool = False
    ) -> MarkReadResult:
        """
        Set the read flag on the user's entries and recount the affected lists.

        Only subscriptions whose feeds contain an updated entry, and the tags
        on those subscriptions, are recounted and reported. Ids the user has
        no state for are ignored.
        """
        if not entry_ids:
            return MarkReadResult(entries=[], subscription_unread_counts=[], tag_unread_counts=[])

        entry_ids = list(dict.fromkeys(entry_ids))
        now = format_timestamp(utcnow())

        with self._db.conn() as conn:
            rows = conn.execute(
                f"""
                UPDATE user_entries
                SET read = ?, read_changed_at = ?, updated_at = ?
                WHERE user_id = ? AND entry_id IN ({_placeholders(entry_ids)})
                RETURNING entry_id AS id, read, starred
                """,
                [read, now, now, user_id, *entry_ids]
            ).fetchall()

            position = {entry_id: i for i, entry_id in enumerate(entry_ids)}
            states = sorted((row_to_entry_state(row) for row in rows), key=lambda s: position[s.id])

            subscription_ids = self._affected_subscription_ids(conn, user_id, [s.id for s in states])
            tag_ids = self._affected_tag_ids(conn, user_id, subscription_ids)

            subscription_counts = subscription_unread_counts(conn, user_id, subscription_ids, show_spam)
            tag_counts = tag_unread_counts(conn, user_id, tag_ids, show_spam)

        logger.info(
            f"Marked {len(states)} entries {'read' if read else 'unread'} for user {user_id} "
            f"({len(subscription_ids)} subscriptions, {len(tag_ids)} tags recounted)"
        )
        return MarkReadResult(
            entries=states,
            subscription_unread_counts=[
                SubscriptionUnreadCount(subscription_id=c.id, unread_count=c.unread)
                for c in subscription_counts
            ],
            tag_unread_counts=[
                TagUnreadCount(tag_id=c.id, unread_count=c.unread) for c in tag_counts
            ],
        )

    def _affected_subscription_ids(
        self,
        conn: sqlite3.Connection,
        user_id: str,
        entry_ids: list[str]
    ) -> list[str]:
        """Active, owned subscriptions whose feed-set contains any of the entries' feeds."""
        if not entry_ids:
            return []
        rows = conn.execute(
            f"""
            SELECT DISTINCT s.id
            FROM subscriptions s
            JOIN subscription_feeds sf ON sf.subscription_id = s.id
            WHERE s.user_id = ? AND s.unsubscribed_at IS NULL
              AND sf.feed_id IN (
                  SELECT DISTINCT e.feed_id FROM entries e
                  WHERE e.id IN ({_placeholders(entry_ids)}) AND e.feed_id IS NOT NULL
              )
            ORDER BY s.id
            """,
            [user_id, *entry_ids]
        ).fetchall()
        return [row["id"] for row in rows]

    def _affected_tag_ids(
        self,
        conn: sqlite3.Connection,
        user_id: str,
        subscription_ids: list[str]
    ) -> list[str]:
        """Owned tags attached to any of the given subscriptions."""
        if not subscription_ids:
            return []
        rows = conn.execute(
            f"""
            SELECT DISTINCT st.tag_id
            FROM subscription_tags st
            JOIN tags t ON t.id = st.tag_id AND t.user_id = ?
            WHERE st.subscription_id IN ({_placeholders(subscription_ids)})
            ORDER BY st.tag_id
            """,
            [user_id, *subscription_ids]
        ).fetchall()
        return [row["tag_id"] for row in rows]

    def set_starred(self, user_id: str, entry_id: str, starred: bool) -> EntryState | None:
        """Star or unstar one entry. Returns None if the user has no such entry."""
        now = format_timestamp(utcnow())
        with self._db.conn() as conn:
            rows = conn.execute(
                """
                UPDATE user_entries
                SET starred = ?, starred_changed_at = ?, updated_at = ?
                WHERE user_id = ? AND entry_id = ?
                RETURNING entry_id AS id, read, starred
                """,
                (starred, now, now, user_id, entry_id)
            ).fetchall()
            return row_to_entry_state(rows[0]) if rows else None

    def mark_all_read(
        self,
        user_id: str,
        scope: FeedScope,
        filters: EntryFilters,
        before: datetime | None = None
    ) -> int:
        """
        Mark every unread entry matching the scope and filters read.

        Returns count of entries updated.
        """
        now = format_timestamp(utcnow())
        with self._db.conn() as conn:
            feed_set = resolve_feed_set(conn, user_id, scope)
            if feed_set.is_empty:
                return 0

            terms = [
                Compare(Column("user_id"), "=", user_id),
                Compare(Column("read"), "=", False),
                *feed_set.predicates(),
                *build_entry_predicates(filters),
            ]
            if before is not None:
                terms.append(Compare(Column("fetched_at"), "<=", format_timestamp(before)))
            where, params = All(*terms).compile("ve")

            cursor = conn.execute(
                f"""
                UPDATE user_entries
                SET read = TRUE, read_changed_at = ?, updated_at = ?
                WHERE user_id = ? AND entry_id IN (
                    SELECT ve.id FROM visible_entries ve WHERE {where}
                )
                """,
                [now, now, user_id, *params]
            )
            count = cursor.rowcount

        logger.info(f"Marked all read for user {user_id}: {count} entries")
        return count
