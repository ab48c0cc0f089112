"""
Pydantic models for API request/response validation.
"""

from datetime import datetime

from pydantic import BaseModel

from .database.models import (
    DBEntry,
    DBEntryFull,
    EntryCounts,
    EntryPage,
    EntryState,
    ListUnread,
    MarkReadResult,
    UncategorizedUnread,
    UnreadCounts,
)


# ─────────────────────────────────────────────────────────────
# Entry Schemas
# ─────────────────────────────────────────────────────────────

class EntryResponse(BaseModel):
    """Entry for list view."""
    id: str
    subscription_id: str | None
    feed_id: str | None
    type: str
    url: str | None
    title: str | None
    author: str | None
    summary: str | None
    published_at: str | None
    fetched_at: str
    read: bool
    starred: bool
    feed_title: str | None = None
    site_name: str | None = None

    @classmethod
    def from_db(cls, entry: DBEntry) -> "EntryResponse":
        return cls(
            id=entry.id,
            subscription_id=entry.subscription_id,
            feed_id=entry.feed_id,
            type=entry.type,
            url=entry.url,
            title=entry.title,
            author=entry.author,
            summary=entry.summary,
            published_at=entry.published_at.isoformat() if entry.published_at else None,
            fetched_at=entry.fetched_at.isoformat(),
            read=entry.read,
            starred=entry.starred,
            feed_title=entry.feed_title,
            site_name=entry.site_name,
        )


class EntryDetailResponse(EntryResponse):
    """Entry with full content for detail view."""
    content: str | None = None
    feed_url: str | None = None

    @classmethod
    def from_db(cls, entry: DBEntryFull) -> "EntryDetailResponse":
        base = EntryResponse.from_db(entry).model_dump()
        return cls(**base, content=entry.content, feed_url=entry.feed_url)


class EntryListResponse(BaseModel):
    """One page of entries."""
    items: list[EntryResponse]
    next_cursor: str | None = None

    @classmethod
    def from_db(cls, page: EntryPage) -> "EntryListResponse":
        return cls(
            items=[EntryResponse.from_db(e) for e in page.items],
            next_cursor=page.next_cursor,
        )


class EntryCountsResponse(BaseModel):
    total: int
    unread: int

    @classmethod
    def from_db(cls, counts: EntryCounts) -> "EntryCountsResponse":
        return cls(total=counts.total, unread=counts.unread)


class EntryStateResponse(BaseModel):
    """Read/starred state of one entry."""
    id: str
    read: bool
    starred: bool

    @classmethod
    def from_db(cls, entry_state: EntryState) -> "EntryStateResponse":
        return cls(id=entry_state.id, read=entry_state.read, starred=entry_state.starred)


# ─────────────────────────────────────────────────────────────
# State Mutation Schemas
# ─────────────────────────────────────────────────────────────

class MarkReadRequest(BaseModel):
    """Request to mark multiple entries as read/unread."""
    entry_ids: list[str]
    read: bool = True


class SubscriptionUnreadCountResponse(BaseModel):
    subscription_id: str
    unread_count: int


class TagUnreadCountResponse(BaseModel):
    tag_id: str
    unread_count: int


class MarkReadResponse(BaseModel):
    """Updated entries plus fresh unread counts for the lists they belong to."""
    entries: list[EntryStateResponse]
    subscription_unread_counts: list[SubscriptionUnreadCountResponse]
    tag_unread_counts: list[TagUnreadCountResponse]

    @classmethod
    def from_db(cls, result: MarkReadResult) -> "MarkReadResponse":
        return cls(
            entries=[EntryStateResponse.from_db(s) for s in result.entries],
            subscription_unread_counts=[
                SubscriptionUnreadCountResponse(subscription_id=c.subscription_id, unread_count=c.unread_count)
                for c in result.subscription_unread_counts
            ],
            tag_unread_counts=[
                TagUnreadCountResponse(tag_id=c.tag_id, unread_count=c.unread_count)
                for c in result.tag_unread_counts
            ],
        )


class MarkAllReadRequest(BaseModel):
    """Request to mark everything in a scope as read."""
    subscription_id: str | None = None
    tag_id: str | None = None
    uncategorized: bool = False
    starred_only: bool = False
    type: str | None = None
    before: datetime | None = None


class MarkAllReadResponse(BaseModel):
    count: int


class StarRequest(BaseModel):
    """Request to star or unstar an entry."""
    starred: bool


# ─────────────────────────────────────────────────────────────
# Unread Count Schemas
# ─────────────────────────────────────────────────────────────

class ListUnreadResponse(BaseModel):
    id: str
    unread: int

    @classmethod
    def from_db(cls, counts: ListUnread) -> "ListUnreadResponse":
        return cls(id=counts.id, unread=counts.unread)


class UncategorizedUnreadResponse(BaseModel):
    unread: int

    @classmethod
    def from_db(cls, counts: UncategorizedUnread) -> "UncategorizedUnreadResponse":
        return cls(unread=counts.unread)


class UnreadCountsResponse(BaseModel):
    """Absolute counts for every list an entry belongs to."""
    all: EntryCountsResponse
    starred: EntryCountsResponse
    saved: EntryCountsResponse | None = None
    subscription: ListUnreadResponse | None = None
    tags: list[ListUnreadResponse] | None = None
    uncategorized: UncategorizedUnreadResponse | None = None

    @classmethod
    def from_db(cls, counts: UnreadCounts) -> "UnreadCountsResponse":
        return cls(
            all=EntryCountsResponse.from_db(counts.all),
            starred=EntryCountsResponse.from_db(counts.starred),
            saved=EntryCountsResponse.from_db(counts.saved) if counts.saved else None,
            subscription=ListUnreadResponse.from_db(counts.subscription) if counts.subscription else None,
            tags=[ListUnreadResponse.from_db(t) for t in counts.tags] if counts.tags is not None else None,
            uncategorized=(
                UncategorizedUnreadResponse.from_db(counts.uncategorized) if counts.uncategorized else None
            ),
        )
