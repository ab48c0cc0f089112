"""
Database models - dataclasses for database entities and query results.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

EntryType = Literal["web", "email", "saved"]
FeedType = Literal["web", "email"]
SortOrder = Literal["newest", "oldest"]
SearchIn = Literal["title", "content", "both"]

ENTRY_TYPES: tuple[str, ...] = ("web", "email", "saved")


@dataclass
class DBUser:
    id: str
    email: str
    show_spam: bool
    created_at: datetime


@dataclass
class DBFeed:
    id: str
    type: str
    url: str | None
    title: str | None
    site_url: str | None = None


@dataclass
class DBSubscription:
    id: str
    user_id: str
    feed_id: str
    custom_title: str | None
    subscribed_at: datetime
    unsubscribed_at: datetime | None = None
    feed_ids: list[str] = field(default_factory=list)


@dataclass
class DBTag:
    id: str
    user_id: str
    name: str
    color: str | None = None


@dataclass
class DBEntry:
    """Entry as shown in a list view, with the owning user's state."""
    id: str
    subscription_id: str | None
    feed_id: str | None
    type: str
    url: str | None
    title: str | None
    author: str | None
    summary: str | None
    published_at: datetime | None
    fetched_at: datetime
    read: bool
    starred: bool
    feed_title: str | None = None
    site_name: str | None = None


@dataclass
class DBEntryFull(DBEntry):
    """Entry with full content for the detail view."""
    content: str | None = None
    feed_url: str | None = None


@dataclass
class EntryState:
    id: str
    read: bool
    starred: bool


@dataclass
class EntryPage:
    items: list[DBEntry]
    next_cursor: str | None = None


@dataclass
class EntryCounts:
    total: int
    unread: int


@dataclass
class SubscriptionUnreadCount:
    subscription_id: str
    unread_count: int


@dataclass
class TagUnreadCount:
    tag_id: str
    unread_count: int


@dataclass
class MarkReadResult:
    entries: list[EntryState]
    subscription_unread_counts: list[SubscriptionUnreadCount]
    tag_unread_counts: list[TagUnreadCount]


# Count payloads pushed to real-time subscribers. They carry absolute
# values, never deltas.

@dataclass
class ListUnread:
    id: str
    unread: int


@dataclass
class UncategorizedUnread:
    unread: int


@dataclass
class UnreadCounts:
    """Counts for every list a single entry belongs to."""
    all: EntryCounts
    starred: EntryCounts
    saved: EntryCounts | None = None
    subscription: ListUnread | None = None
    tags: list[ListUnread] | None = None
    uncategorized: UncategorizedUnread | None = None


@dataclass
class BulkUnreadCounts:
    """Counts for every list touched by a batch of entries."""
    all: EntryCounts
    starred: EntryCounts
    saved: EntryCounts
    subscriptions: list[ListUnread] = field(default_factory=list)
    tags: list[ListUnread] = field(default_factory=list)
    uncategorized: UncategorizedUnread | None = None


@dataclass
class EntryContext:
    """Where an entry lives: enough to know which counts it affects."""
    subscription_id: str | None
    type: str
