"""
Unread count queries.

All counts are recomputed from visible_entries with conditional aggregation;
nothing here is cached. The spam predicate comes from the shared predicate
builder so these numbers match what count/list return for the same scope.

Used by mutations (scoped recompute) and by real-time events, which push
absolute counts for every list an entry belongs to.
"""

import sqlite3
from typing import Iterable

from .connection import DatabaseConnection
from .expressions import All, Column, Compare
from .models import (
    BulkUnreadCounts,
    EntryContext,
    EntryCounts,
    ListUnread,
    UncategorizedUnread,
    UnreadCounts,
)
from .predicates import EntryFilters, build_entry_predicates

UNREAD = "COUNT(CASE WHEN ve.read = FALSE THEN 1 END)"


def _visibility(user_id: str, show_spam: bool) -> tuple[str, list]:
    """Join condition limiting visible_entries ve to one user's visible rows."""
    terms = [
        Compare(Column("user_id"), "=", user_id),
        *build_entry_predicates(EntryFilters(show_spam=show_spam)),
    ]
    return All(*terms).compile("ve")


def _placeholders(values: list) -> str:
    return ", ".join("?" * len(values))


def global_counts(conn: sqlite3.Connection, user_id: str, show_spam: bool = False) -> dict[str, EntryCounts]:
    """All / starred / saved totals for a user in one pass."""
    where, params = _visibility(user_id, show_spam)
    row = conn.execute(
        f"""
        SELECT COUNT(*) AS all_total,
               {UNREAD} AS all_unread,
               COUNT(CASE WHEN ve.starred = TRUE THEN 1 END) AS starred_total,
               COUNT(CASE WHEN ve.starred = TRUE AND ve.read = FALSE THEN 1 END) AS starred_unread,
               COUNT(CASE WHEN ve.type = 'saved' THEN 1 END) AS saved_total,
               COUNT(CASE WHEN ve.type = 'saved' AND ve.read = FALSE THEN 1 END) AS saved_unread
        FROM visible_entries ve
        WHERE {where}
        """,
        params
    ).fetchone()
    return {
        "all": EntryCounts(total=row["all_total"], unread=row["all_unread"]),
        "starred": EntryCounts(total=row["starred_total"], unread=row["starred_unread"]),
        "saved": EntryCounts(total=row["saved_total"], unread=row["saved_unread"]),
    }


def subscription_unread_counts(
    conn: sqlite3.Connection,
    user_id: str,
    subscription_ids: list[str],
    show_spam: bool = False
) -> list[ListUnread]:
    """Unread count per active subscription, zero for subscriptions with no unread entries."""
    if not subscription_ids:
        return []
    visible, visible_params = _visibility(user_id, show_spam)
    rows = conn.execute(
        f"""
        SELECT s.id AS id, {UNREAD} AS unread
        FROM subscriptions s
        LEFT JOIN visible_entries ve ON ve.subscription_id = s.id AND {visible}
        WHERE s.user_id = ? AND s.unsubscribed_at IS NULL
          AND s.id IN ({_placeholders(subscription_ids)})
        GROUP BY s.id
        ORDER BY s.id
        """,
        [*visible_params, user_id, *subscription_ids]
    ).fetchall()
    return [ListUnread(id=row["id"], unread=row["unread"]) for row in rows]


def tag_unread_counts(
    conn: sqlite3.Connection,
    user_id: str,
    tag_ids: list[str],
    show_spam: bool = False
) -> list[ListUnread]:
    """Unread count per owned tag, summed over its active subscriptions."""
    if not tag_ids:
        return []
    visible, visible_params = _visibility(user_id, show_spam)
    rows = conn.execute(
        f"""
        SELECT t.id AS id, {UNREAD} AS unread
        FROM tags t
        LEFT JOIN subscription_tags st ON st.tag_id = t.id
        LEFT JOIN subscriptions s ON s.id = st.subscription_id AND s.unsubscribed_at IS NULL
        LEFT JOIN visible_entries ve ON ve.subscription_id = s.id AND {visible}
        WHERE t.user_id = ? AND t.id IN ({_placeholders(tag_ids)})
        GROUP BY t.id
        ORDER BY t.id
        """,
        [*visible_params, user_id, *tag_ids]
    ).fetchall()
    return [ListUnread(id=row["id"], unread=row["unread"]) for row in rows]


def uncategorized_unread_count(conn: sqlite3.Connection, user_id: str, show_spam: bool = False) -> int:
    """Unread entries across active subscriptions that have no tags."""
    visible, visible_params = _visibility(user_id, show_spam)
    row = conn.execute(
        f"""
        SELECT {UNREAD} AS unread
        FROM subscriptions s
        JOIN visible_entries ve ON ve.subscription_id = s.id AND {visible}
        WHERE s.user_id = ? AND s.unsubscribed_at IS NULL
          AND NOT EXISTS (
              SELECT 1 FROM subscription_tags st WHERE st.subscription_id = s.id
          )
        """,
        [*visible_params, user_id]
    ).fetchone()
    return row["unread"] if row else 0


def subscription_tag_ids(conn: sqlite3.Connection, user_id: str, subscription_ids: Iterable[str]) -> dict[str, list[str]]:
    """Owned tag ids per subscription; subscriptions without tags are absent."""
    subscription_ids = list(subscription_ids)
    if not subscription_ids:
        return {}
    rows = conn.execute(
        f"""
        SELECT st.subscription_id, st.tag_id
        FROM subscription_tags st
        JOIN tags t ON t.id = st.tag_id AND t.user_id = ?
        WHERE st.subscription_id IN ({_placeholders(subscription_ids)})
        ORDER BY st.tag_id
        """,
        [user_id, *subscription_ids]
    ).fetchall()
    result: dict[str, list[str]] = {}
    for row in rows:
        result.setdefault(row["subscription_id"], []).append(row["tag_id"])
    return result


class CountRepository:
    """Absolute unread counts for the lists affected by entry events."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def get_entry_related_counts(
        self,
        user_id: str,
        entry_id: str,
        show_spam: bool = False
    ) -> UnreadCounts:
        """
        Counts for every list one entry belongs to.

        An unknown or foreign entry yields only the all/starred baseline
        with zeros.
        """
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT subscription_id, type FROM visible_entries WHERE user_id = ? AND id = ?",
                (user_id, entry_id)
            ).fetchone()
            if not row:
                return UnreadCounts(all=EntryCounts(0, 0), starred=EntryCounts(0, 0))
            return self._related_counts(conn, user_id, row["type"], row["subscription_id"], show_spam)

    def get_new_entry_related_counts(
        self,
        user_id: str,
        entry_type: str,
        subscription_id: str | None,
        show_spam: bool = False
    ) -> UnreadCounts:
        """Counts for the lists a just-created entry will appear in."""
        with self._db.conn() as conn:
            return self._related_counts(conn, user_id, entry_type, subscription_id, show_spam)

    def get_bulk_entry_related_counts(
        self,
        user_id: str,
        entries: list[EntryContext],
        show_spam: bool = False
    ) -> BulkUnreadCounts:
        """Counts for every list touched by a batch of entries."""
        subscription_ids = sorted({e.subscription_id for e in entries if e.subscription_id})

        with self._db.conn() as conn:
            base = global_counts(conn, user_id, show_spam)
            result = BulkUnreadCounts(all=base["all"], starred=base["starred"], saved=base["saved"])
            if not subscription_ids:
                return result

            result.subscriptions = subscription_unread_counts(conn, user_id, subscription_ids, show_spam)

            tags_by_subscription = subscription_tag_ids(conn, user_id, subscription_ids)
            tag_ids = sorted({t for tags in tags_by_subscription.values() for t in tags})
            result.tags = tag_unread_counts(conn, user_id, tag_ids, show_spam)

            if any(s not in tags_by_subscription for s in subscription_ids):
                unread = uncategorized_unread_count(conn, user_id, show_spam)
                result.uncategorized = UncategorizedUnread(unread=unread)
            return result

    def _related_counts(
        self,
        conn: sqlite3.Connection,
        user_id: str,
        entry_type: str,
        subscription_id: str | None,
        show_spam: bool
    ) -> UnreadCounts:
        base = global_counts(conn, user_id, show_spam)
        counts = UnreadCounts(all=base["all"], starred=base["starred"])

        # Saved entries have no subscription or tags
        if entry_type == "saved":
            counts.saved = base["saved"]
            return counts

        if not subscription_id:
            return counts

        subscription = subscription_unread_counts(conn, user_id, [subscription_id], show_spam)
        counts.subscription = subscription[0] if subscription else ListUnread(id=subscription_id, unread=0)

        tag_ids = subscription_tag_ids(conn, user_id, [subscription_id]).get(subscription_id, [])
        if tag_ids:
            counts.tags = tag_unread_counts(conn, user_id, tag_ids, show_spam)
        else:
            unread = uncategorized_unread_count(conn, user_id, show_spam)
            counts.uncategorized = UncategorizedUnread(unread=unread)
        return counts
