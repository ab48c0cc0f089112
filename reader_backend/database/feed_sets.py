"""
Feed-set resolution for entry queries.

Turns a subscription / tag / uncategorized scope into a condition on
visible_entries.feed_id. Ownership is checked inside the same join that
produces the feed ids, so a scope belonging to another user resolves to
nothing instead of raising.
"""

import logging
import sqlite3
from dataclasses import dataclass

from .expressions import Column, Expression, InList, InSubquery, Subquery

logger = logging.getLogger(__name__)

FEED_ID = Column("feed_id")

# Feed ids of one tag's active subscriptions; the tags join enforces ownership.
TAGGED_FEED_IDS_SQL = """
    SELECT sf.feed_id
    FROM subscription_tags st
    JOIN tags t ON t.id = st.tag_id AND t.user_id = ?
    JOIN subscriptions s ON s.id = st.subscription_id
        AND s.user_id = ? AND s.unsubscribed_at IS NULL
    JOIN subscription_feeds sf ON sf.subscription_id = s.id
    WHERE st.tag_id = ?
"""

# Feed ids of active subscriptions with no tag (anti-join).
UNCATEGORIZED_FEED_IDS_SQL = """
    SELECT sf.feed_id
    FROM subscriptions s
    JOIN subscription_feeds sf ON sf.subscription_id = s.id
    LEFT JOIN subscription_tags st ON st.subscription_id = s.id
    WHERE s.user_id = ? AND s.unsubscribed_at IS NULL
      AND st.subscription_id IS NULL
"""


@dataclass(frozen=True)
class FeedScope:
    """Which feeds an entry query is limited to. At most one field is expected."""
    subscription_id: str | None = None
    tag_id: str | None = None
    uncategorized: bool = False


@dataclass(frozen=True)
class FeedSet:
    """
    Resolved feed scope.

    condition is None when the query is not limited to any feeds. is_empty
    means the scope does not exist for this user and callers should return
    an empty result without querying.
    """
    condition: Expression | None = None
    is_empty: bool = False

    @classmethod
    def unrestricted(cls) -> "FeedSet":
        return cls()

    @classmethod
    def empty(cls) -> "FeedSet":
        return cls(is_empty=True)

    @classmethod
    def of_ids(cls, feed_ids: list[str]) -> "FeedSet":
        return cls(condition=InList(FEED_ID, tuple(feed_ids)))

    @classmethod
    def of_subquery(cls, subquery: Subquery) -> "FeedSet":
        return cls(condition=InSubquery(FEED_ID, subquery))

    def predicates(self) -> list[Expression]:
        return [self.condition] if self.condition is not None else []


def get_subscription_feed_ids(
    conn: sqlite3.Connection,
    subscription_id: str,
    user_id: str
) -> list[str] | None:
    """
    Feed ids of an active subscription owned by user_id.

    Returns None when the subscription is missing, unsubscribed, or owned
    by someone else.
    """
    rows = conn.execute(
        """
        SELECT s.id, sf.feed_id
        FROM subscriptions s
        LEFT JOIN subscription_feeds sf ON sf.subscription_id = s.id
        WHERE s.id = ? AND s.user_id = ? AND s.unsubscribed_at IS NULL
        """,
        (subscription_id, user_id)
    ).fetchall()
    if not rows:
        return None
    return [row["feed_id"] for row in rows if row["feed_id"] is not None]


def resolve_feed_set(conn: sqlite3.Connection, user_id: str, scope: FeedScope) -> FeedSet:
    """Resolve a scope to a FeedSet. Subscription wins over tag, tag over uncategorized."""
    if scope.subscription_id:
        feed_ids = get_subscription_feed_ids(conn, scope.subscription_id, user_id)
        if feed_ids is None:
            logger.debug(f"Subscription {scope.subscription_id} not found for user {user_id}")
            return FeedSet.empty()
        return FeedSet.of_ids(feed_ids)

    if scope.tag_id:
        # Evaluated lazily; a foreign or unknown tag yields no rows
        return FeedSet.of_subquery(
            Subquery(TAGGED_FEED_IDS_SQL, (user_id, user_id, scope.tag_id))
        )

    if scope.uncategorized:
        return FeedSet.of_subquery(Subquery(UNCATEGORIZED_FEED_IDS_SQL, (user_id,)))

    return FeedSet.unrestricted()
