"""
Database row converters - convert SQLite rows to dataclasses.

Timestamps are stored as fixed-width UTC ISO-8601 strings so that SQL text
comparison orders them chronologically.
"""

import sqlite3
from datetime import datetime, timezone

from .models import (
    DBEntry,
    DBEntryFull,
    DBFeed,
    DBSubscription,
    DBTag,
    DBUser,
    EntryState,
)


def format_timestamp(value: datetime) -> str:
    """Canonical storage form of a timestamp. Naive datetimes are UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a stored timestamp, returning None when absent."""
    if not value:
        return None
    # fromisoformat only accepts a trailing Z from Python 3.11
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def row_to_user(row: sqlite3.Row) -> DBUser:
    """Convert a database row to a DBUser."""
    return DBUser(
        id=row["id"],
        email=row["email"],
        show_spam=bool(row["show_spam"]),
        created_at=parse_timestamp(row["created_at"]) or utcnow(),
    )


def row_to_feed(row: sqlite3.Row) -> DBFeed:
    """Convert a database row to a DBFeed."""
    return DBFeed(
        id=row["id"],
        type=row["type"],
        url=row["url"],
        title=row["title"],
        site_url=row["site_url"],
    )


def row_to_subscription(row: sqlite3.Row, feed_ids: list[str] | None = None) -> DBSubscription:
    """Convert a database row to a DBSubscription."""
    return DBSubscription(
        id=row["id"],
        user_id=row["user_id"],
        feed_id=row["feed_id"],
        custom_title=row["custom_title"],
        subscribed_at=parse_timestamp(row["subscribed_at"]) or utcnow(),
        unsubscribed_at=parse_timestamp(row["unsubscribed_at"]),
        feed_ids=feed_ids or [],
    )


def row_to_tag(row: sqlite3.Row) -> DBTag:
    """Convert a database row to a DBTag."""
    return DBTag(
        id=row["id"],
        user_id=row["user_id"],
        name=row["name"],
        color=row["color"],
    )


def _entry_fields(row: sqlite3.Row) -> dict:
    return dict(
        id=row["id"],
        subscription_id=row["subscription_id"],
        feed_id=row["feed_id"],
        type=row["type"],
        url=row["url"],
        title=row["title"],
        author=row["author"],
        summary=row["summary"],
        published_at=parse_timestamp(row["published_at"]),
        fetched_at=parse_timestamp(row["fetched_at"]),
        read=bool(row["read"]),
        starred=bool(row["starred"]),
        feed_title=row["feed_title"],
        site_name=row["site_name"],
    )


def row_to_entry(row: sqlite3.Row) -> DBEntry:
    """Convert a visible_entries row to a list item."""
    return DBEntry(**_entry_fields(row))


def row_to_entry_full(row: sqlite3.Row) -> DBEntryFull:
    """Convert a visible_entries row to a full entry."""
    return DBEntryFull(
        **_entry_fields(row),
        content=row["content"],
        feed_url=row["feed_url"],
    )


def row_to_entry_state(row: sqlite3.Row) -> EntryState:
    """Convert a user_entries row (aliased id/read/starred) to an EntryState."""
    return EntryState(
        id=row["id"],
        read=bool(row["read"]),
        starred=bool(row["starred"]),
    )
