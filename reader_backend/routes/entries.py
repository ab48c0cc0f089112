"""
Entry routes: list, search, counts, detail and read/starred operations.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from ..auth import get_current_user
from ..schemas import (
    EntryCountsResponse,
    EntryDetailResponse,
    EntryListResponse,
    EntryStateResponse,
    MarkAllReadRequest,
    MarkAllReadResponse,
    MarkReadRequest,
    MarkReadResponse,
    StarRequest,
    UnreadCountsResponse,
)
from ..services import EntryServiceDep

router = APIRouter(prefix="/entries", tags=["entries"])

UserId = Annotated[str, Depends(get_current_user)]
ENTRY_TYPE_PATTERN = "^(web|email|saved)$"


# ─────────────────────────────────────────────────────────────
# List, search & count (static paths first)
# ─────────────────────────────────────────────────────────────

@router.get("")
async def list_entries(
    service: EntryServiceDep,
    user_id: UserId,
    subscription_id: str | None = None,
    tag_id: str | None = None,
    uncategorized: bool = False,
    unread_only: bool = False,
    read_only: bool = False,
    starred_only: bool = False,
    unstarred_only: bool = False,
    type: str | None = Query(default=None, pattern=ENTRY_TYPE_PATTERN),
    exclude_types: list[str] = Query(default=[]),
    show_spam: bool | None = None,
    sort_order: str = Query(default="newest", pattern="^(newest|oldest)$"),
    limit: int | None = None,
    cursor: str | None = None,
) -> EntryListResponse:
    """Get one page of entries. Oversized limits are capped, not rejected."""
    page = service.list_entries(
        user_id,
        subscription_id=subscription_id,
        tag_id=tag_id,
        uncategorized=uncategorized,
        unread_only=unread_only,
        read_only=read_only,
        starred_only=starred_only,
        unstarred_only=unstarred_only,
        type=type,
        exclude_types=exclude_types,
        show_spam=service.resolve_show_spam(user_id, show_spam),
        sort_order=sort_order,
        limit=limit,
        cursor=cursor,
    )
    return EntryListResponse.from_db(page)


@router.get("/search")
async def search_entries(
    service: EntryServiceDep,
    user_id: UserId,
    q: str,
    search_in: str = Query(default="both", pattern="^(title|content|both)$"),
    subscription_id: str | None = None,
    tag_id: str | None = None,
    uncategorized: bool = False,
    unread_only: bool = False,
    starred_only: bool = False,
    type: str | None = Query(default=None, pattern=ENTRY_TYPE_PATTERN),
    exclude_types: list[str] = Query(default=[]),
    show_spam: bool | None = None,
    limit: int | None = None,
    cursor: str | None = None,
) -> EntryListResponse:
    """Full-text search over entry titles and content, most relevant first."""
    page = service.search_entries(
        user_id,
        q,
        search_in=search_in,
        subscription_id=subscription_id,
        tag_id=tag_id,
        uncategorized=uncategorized,
        unread_only=unread_only,
        starred_only=starred_only,
        type=type,
        exclude_types=exclude_types,
        show_spam=service.resolve_show_spam(user_id, show_spam),
        limit=limit,
        cursor=cursor,
    )
    return EntryListResponse.from_db(page)


@router.get("/count")
async def count_entries(
    service: EntryServiceDep,
    user_id: UserId,
    subscription_id: str | None = None,
    tag_id: str | None = None,
    uncategorized: bool = False,
    unread_only: bool = False,
    read_only: bool = False,
    starred_only: bool = False,
    unstarred_only: bool = False,
    type: str | None = Query(default=None, pattern=ENTRY_TYPE_PATTERN),
    exclude_types: list[str] = Query(default=[]),
    show_spam: bool | None = None,
) -> EntryCountsResponse:
    """Total and unread counts for the same filters GET /entries accepts."""
    counts = service.count_entries(
        user_id,
        subscription_id=subscription_id,
        tag_id=tag_id,
        uncategorized=uncategorized,
        unread_only=unread_only,
        read_only=read_only,
        starred_only=starred_only,
        unstarred_only=unstarred_only,
        type=type,
        exclude_types=exclude_types,
        show_spam=service.resolve_show_spam(user_id, show_spam),
    )
    return EntryCountsResponse.from_db(counts)


# ─────────────────────────────────────────────────────────────
# Bulk state operations
# ─────────────────────────────────────────────────────────────

@router.post("/read")
async def mark_entries_read(
    request: MarkReadRequest,
    service: EntryServiceDep,
    user_id: UserId,
) -> MarkReadResponse:
    """Mark entries read/unread and return fresh counts for affected lists."""
    result = service.mark_entries_read(
        user_id,
        request.entry_ids,
        read=request.read,
        show_spam=service.resolve_show_spam(user_id, None),
    )
    return MarkReadResponse.from_db(result)


@router.post("/mark-all-read")
async def mark_all_read(
    request: MarkAllReadRequest,
    service: EntryServiceDep,
    user_id: UserId,
) -> MarkAllReadResponse:
    """Mark every unread entry in a scope as read."""
    count = service.mark_all_read(
        user_id,
        subscription_id=request.subscription_id,
        tag_id=request.tag_id,
        uncategorized=request.uncategorized,
        starred_only=request.starred_only,
        type=request.type,
        show_spam=service.resolve_show_spam(user_id, None),
        before=request.before,
    )
    return MarkAllReadResponse(count=count)


# ─────────────────────────────────────────────────────────────
# Single entry
# ─────────────────────────────────────────────────────────────

@router.get("/{entry_id}")
async def get_entry(
    entry_id: str,
    service: EntryServiceDep,
    user_id: UserId,
) -> EntryDetailResponse:
    """Get a single entry with full content."""
    return EntryDetailResponse.from_db(service.get_entry(user_id, entry_id))


@router.get("/{entry_id}/counts")
async def get_entry_counts(
    entry_id: str,
    service: EntryServiceDep,
    user_id: UserId,
) -> UnreadCountsResponse:
    """Absolute unread counts for every list the entry belongs to."""
    counts = service.get_entry_related_counts(
        user_id, entry_id, show_spam=service.resolve_show_spam(user_id, None)
    )
    return UnreadCountsResponse.from_db(counts)


@router.put("/{entry_id}/starred")
async def set_entry_starred(
    entry_id: str,
    request: StarRequest,
    service: EntryServiceDep,
    user_id: UserId,
) -> EntryStateResponse:
    """Star or unstar an entry."""
    return EntryStateResponse.from_db(service.update_entry_starred(user_id, entry_id, request.starred))
