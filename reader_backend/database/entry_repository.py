"""
Entry repository - listing, search, counting and single-entry reads.

All reads go through the visible_entries view and are scoped to one user.
Pagination is keyset-based: pages are ordered by (sort key, id) and a cursor
names the last row of the previous page.
"""

import logging
import re
import sqlite3
import uuid
from datetime import datetime

from .connection import DatabaseConnection
from .converters import format_timestamp, row_to_entry, row_to_entry_full, utcnow
from .cursors import decode_rank_cursor, decode_time_cursor, encode_rank_cursor, encode_time_cursor
from .expressions import All, Column, Compare, Expression, keyset_after
from .feed_sets import FeedScope, resolve_feed_set
from .models import DBEntryFull, EntryCounts, EntryPage
from .predicates import EntryFilters, build_entry_predicates
from .ranking import RANK_FUNCTION, tokenize

logger = logging.getLogger(__name__)

USER_ID = Column("user_id")
ENTRY_ID = Column("id")
SORT_AT = Column("sort_at")
RANK = Column("rank", table="ranked")

_SEARCH_COLUMNS = {"title": ("title",), "content": ("content",), "both": None}
_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


def build_match_query(query: str, search_in: str = "both") -> str | None:
    """
    Turn free text into an FTS5 MATCH expression.

    Every word must match (implicit AND), each word is quoted so FTS syntax
    in user input is inert, and title/content searches filter by column.
    Returns None when the text has no searchable words.
    """
    tokens = _TOKEN_RE.findall(query)
    if not tokens:
        return None
    columns = _SEARCH_COLUMNS.get(search_in)
    phrases = [f'"{token}"' for token in tokens]
    if columns:
        colspec = "{" + " ".join(columns) + "}"
        phrases = [f"{colspec} : {phrase}" for phrase in phrases]
    return " AND ".join(phrases)


class EntryRepository:
    """Repository for entry reads and the write paths that create entries."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    # ─────────────────────────────────────────────────────────────
    # Creating entries
    # ─────────────────────────────────────────────────────────────

    def add(
        self,
        feed_id: str,
        title: str | None,
        url: str | None = None,
        content: str | None = None,
        author: str | None = None,
        summary: str | None = None,
        site_name: str | None = None,
        published_at: datetime | None = None,
        fetched_at: datetime | None = None,
        is_spam: bool = False,
        entry_type: str = "web",
        entry_id: str | None = None,
    ) -> str:
        """
        Add an entry to a feed and deliver it to the feed's active subscribers.

        Returns the entry ID.
        """
        entry_id = entry_id or str(uuid.uuid4())
        with self._db.conn() as conn:
            self._insert(
                conn, entry_id, feed_id, entry_type, title, url, content, author,
                summary, site_name, published_at, fetched_at, is_spam
            )
            now = format_timestamp(utcnow())
            conn.execute(
                """
                INSERT OR IGNORE INTO user_entries (user_id, entry_id, read, starred, updated_at)
                SELECT sf.user_id, ?, FALSE, FALSE, ?
                FROM subscription_feeds sf
                JOIN subscriptions s ON s.id = sf.subscription_id
                WHERE sf.feed_id = ? AND s.unsubscribed_at IS NULL
                """,
                (entry_id, now, feed_id)
            )
        return entry_id

    def add_saved(
        self,
        user_id: str,
        title: str | None,
        url: str | None = None,
        content: str | None = None,
        author: str | None = None,
        summary: str | None = None,
        site_name: str | None = None,
        published_at: datetime | None = None,
        fetched_at: datetime | None = None,
        entry_id: str | None = None,
    ) -> str:
        """Add a saved article owned by one user. Returns the entry ID."""
        entry_id = entry_id or str(uuid.uuid4())
        with self._db.conn() as conn:
            self._insert(
                conn, entry_id, None, "saved", title, url, content, author,
                summary, site_name, published_at, fetched_at, False
            )
            conn.execute(
                """
                INSERT INTO user_entries (user_id, entry_id, read, starred, updated_at)
                VALUES (?, ?, FALSE, FALSE, ?)
                """,
                (user_id, entry_id, format_timestamp(utcnow()))
            )
        return entry_id

    def _insert(
        self,
        conn: sqlite3.Connection,
        entry_id: str,
        feed_id: str | None,
        entry_type: str,
        title: str | None,
        url: str | None,
        content: str | None,
        author: str | None,
        summary: str | None,
        site_name: str | None,
        published_at: datetime | None,
        fetched_at: datetime | None,
        is_spam: bool,
    ):
        now = utcnow()
        conn.execute(
            """INSERT INTO entries
               (id, feed_id, type, url, title, author, content, summary, site_name,
                published_at, fetched_at, is_spam, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (entry_id, feed_id, entry_type, url, title, author, content, summary, site_name,
             format_timestamp(published_at) if published_at else None,
             format_timestamp(fetched_at or now),
             is_spam,
             format_timestamp(now))
        )

    def set_spam(self, entry_id: str, is_spam: bool):
        """Record the spam classifier's verdict for an entry."""
        with self._db.conn() as conn:
            conn.execute("UPDATE entries SET is_spam = ? WHERE id = ?", (is_spam, entry_id))

    # ─────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────

    def get(self, user_id: str, entry_id: str) -> DBEntryFull | None:
        """Get a single entry with full content, if visible to the user."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM visible_entries WHERE user_id = ? AND id = ?",
                (user_id, entry_id)
            ).fetchone()
            return row_to_entry_full(row) if row else None

    def _base_terms(
        self,
        conn: sqlite3.Connection,
        user_id: str,
        scope: FeedScope,
        filters: EntryFilters
    ) -> list[Expression] | None:
        """User, feed-set and filter terms shared by list/search/count; None means empty scope."""
        feed_set = resolve_feed_set(conn, user_id, scope)
        if feed_set.is_empty:
            return None
        return [
            Compare(USER_ID, "=", user_id),
            *feed_set.predicates(),
            *build_entry_predicates(filters),
        ]

    def list(
        self,
        user_id: str,
        scope: FeedScope,
        filters: EntryFilters,
        sort_order: str = "newest",
        limit: int = 50,
        cursor: str | None = None,
    ) -> EntryPage:
        """One page of entries ordered by COALESCE(published_at, fetched_at), then id."""
        descending = sort_order != "oldest"

        with self._db.conn() as conn:
            terms = self._base_terms(conn, user_id, scope, filters)
            if terms is None:
                return EntryPage(items=[])

            if cursor:
                position = decode_time_cursor(cursor)
                terms.append(keyset_after(SORT_AT, ENTRY_ID, position.sort_at, position.id, descending))

            where, params = All(*terms).compile("ve")
            direction = "DESC" if descending else "ASC"
            rows = conn.execute(
                f"""
                SELECT ve.* FROM visible_entries ve
                WHERE {where}
                ORDER BY ve.sort_at {direction}, ve.id {direction}
                LIMIT ?
                """,
                [*params, limit + 1]
            ).fetchall()

        page_rows = rows[:limit]
        next_cursor = None
        if len(rows) > limit and page_rows:
            last = page_rows[-1]
            next_cursor = encode_time_cursor(last["sort_at"], last["id"])

        logger.debug(f"Listed {len(page_rows)} entries for user {user_id} (more: {next_cursor is not None})")
        return EntryPage(items=[row_to_entry(row) for row in page_rows], next_cursor=next_cursor)

    def search(
        self,
        user_id: str,
        query: str,
        scope: FeedScope,
        filters: EntryFilters,
        search_in: str = "both",
        limit: int = 50,
        cursor: str | None = None,
    ) -> EntryPage:
        """
        One page of search hits ordered by relevance, then id, both descending.

        FTS5 selects the hits; entry_rank scores each hit from its own title
        and content, so a row's rank does not move when other entries are
        added and rank cursors stay valid across writes.
        """
        match = build_match_query(query, search_in)

        with self._db.conn() as conn:
            terms = self._base_terms(conn, user_id, scope, filters)
            if terms is None or match is None:
                return EntryPage(items=[])

            boundary = All()
            if cursor:
                position = decode_rank_cursor(cursor)
                boundary = keyset_after(RANK, ENTRY_ID, position.rank, position.id, descending=True)

            where, params = All(*terms).compile("ve")
            after, after_params = boundary.compile("ranked")
            query_terms = " ".join(tokenize(query))
            rows = conn.execute(
                f"""
                WITH hits AS MATERIALIZED (
                    SELECT rowid AS seq FROM entries_fts WHERE entries_fts MATCH ?
                ),
                ranked AS (
                    SELECT ve.*, {RANK_FUNCTION}(ve.title, ve.content, ?, ?) AS rank
                    FROM visible_entries ve
                    JOIN hits ON hits.seq = ve.seq
                    WHERE {where}
                )
                SELECT * FROM ranked
                WHERE {after}
                ORDER BY ranked.rank DESC, ranked.id DESC
                LIMIT ?
                """,
                [match, query_terms, search_in, *params, *after_params, limit + 1]
            ).fetchall()

        page_rows = rows[:limit]
        next_cursor = None
        if len(rows) > limit and page_rows:
            last = page_rows[-1]
            next_cursor = encode_rank_cursor(last["rank"], last["id"])

        logger.debug(f"Search '{query}' returned {len(page_rows)} entries for user {user_id}")
        return EntryPage(items=[row_to_entry(row) for row in page_rows], next_cursor=next_cursor)

    def count(self, user_id: str, scope: FeedScope, filters: EntryFilters) -> EntryCounts:
        """Total and unread entries matching the same filters list() applies."""
        with self._db.conn() as conn:
            terms = self._base_terms(conn, user_id, scope, filters)
            if terms is None:
                return EntryCounts(total=0, unread=0)

            where, params = All(*terms).compile("ve")
            row = conn.execute(
                f"""
                SELECT COUNT(*) AS total,
                       COUNT(CASE WHEN ve.read = FALSE THEN 1 END) AS unread
                FROM visible_entries ve
                WHERE {where}
                """,
                params
            ).fetchone()
            return EntryCounts(total=row["total"], unread=row["unread"])
