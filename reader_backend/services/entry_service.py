"""
Entry service: business logic for entry retrieval and read/starred state.

Handles listing, search, counts, single-entry reads and state mutations.
Routes call into this class; it raises ReaderError subclasses and leaves
mapping them to HTTP to the app's exception handlers.
"""

import logging
from datetime import datetime

from ..config import config
from ..database import Database
from ..database.feed_sets import FeedScope
from ..database.models import (
    BulkUnreadCounts,
    DBEntryFull,
    EntryContext,
    EntryCounts,
    EntryPage,
    EntryState,
    MarkReadResult,
    UnreadCounts,
)
from ..database.predicates import EntryFilters
from ..exceptions import ValidationError, entry_not_found, require_entry

logger = logging.getLogger(__name__)

SORT_ORDERS = ("newest", "oldest")
SEARCH_IN = ("title", "content", "both")


class EntryService:
    """Service for entry-related business logic."""

    def __init__(
        self,
        db: Database,
        default_limit: int = config.DEFAULT_PAGE_LIMIT,
        max_limit: int = config.MAX_PAGE_LIMIT,
        max_bulk_mark_read: int = config.MAX_BULK_MARK_READ,
    ):
        self.db = db
        self.default_limit = default_limit
        self.max_limit = max_limit
        self.max_bulk_mark_read = max_bulk_mark_read

    # ─────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────

    def clamp_limit(self, limit: int | None) -> int:
        """Apply the default page size and silently cap oversized requests."""
        if limit is None:
            return self.default_limit
        return max(1, min(limit, self.max_limit))

    def resolve_show_spam(self, user_id: str, show_spam: bool | None) -> bool:
        """Explicit value wins; otherwise fall back to the user's preference."""
        if show_spam is not None:
            return show_spam
        user = self.db.get_user(user_id)
        return user.show_spam if user else False

    @staticmethod
    def _scope(
        subscription_id: str | None,
        tag_id: str | None,
        uncategorized: bool
    ) -> FeedScope:
        return FeedScope(
            subscription_id=subscription_id,
            tag_id=tag_id,
            uncategorized=uncategorized,
        )

    @staticmethod
    def _filters(
        unread_only: bool,
        read_only: bool,
        starred_only: bool,
        unstarred_only: bool,
        type: str | None,
        exclude_types: list[str] | None,
        show_spam: bool
    ) -> EntryFilters:
        return EntryFilters(
            unread_only=unread_only,
            read_only=read_only,
            starred_only=starred_only,
            unstarred_only=unstarred_only,
            type=type,
            exclude_types=tuple(exclude_types or ()),
            show_spam=show_spam,
        )

    # ─────────────────────────────────────────────────────────────
    # Listing, search & counts
    # ─────────────────────────────────────────────────────────────

    def list_entries(
        self,
        user_id: str,
        subscription_id: str | None = None,
        tag_id: str | None = None,
        uncategorized: bool = False,
        unread_only: bool = False,
        read_only: bool = False,
        starred_only: bool = False,
        unstarred_only: bool = False,
        type: str | None = None,
        exclude_types: list[str] | None = None,
        show_spam: bool = False,
        sort_order: str = "newest",
        limit: int | None = None,
        cursor: str | None = None,
    ) -> EntryPage:
        """
        Get one page of entries.

        Args:
            subscription_id / tag_id / uncategorized: feed scope; an unknown
                or foreign subscription or tag yields an empty page
            sort_order: "newest" or "oldest"
            limit: page size, defaults to 50 and is capped at 100
            cursor: next_cursor from the previous page

        Returns:
            EntryPage with next_cursor set when more entries remain
        """
        if sort_order not in SORT_ORDERS:
            raise ValidationError(f"Invalid sort order: {sort_order}")

        return self.db.list_entries(
            user_id,
            self._scope(subscription_id, tag_id, uncategorized),
            self._filters(unread_only, read_only, starred_only, unstarred_only, type, exclude_types, show_spam),
            sort_order=sort_order,
            limit=self.clamp_limit(limit),
            cursor=cursor,
        )

    def search_entries(
        self,
        user_id: str,
        query: str,
        search_in: str = "both",
        subscription_id: str | None = None,
        tag_id: str | None = None,
        uncategorized: bool = False,
        unread_only: bool = False,
        read_only: bool = False,
        starred_only: bool = False,
        unstarred_only: bool = False,
        type: str | None = None,
        exclude_types: list[str] | None = None,
        show_spam: bool = False,
        limit: int | None = None,
        cursor: str | None = None,
    ) -> EntryPage:
        """Get one page of search results, most relevant first."""
        if search_in not in SEARCH_IN:
            raise ValidationError(f"Invalid search field: {search_in}")

        return self.db.search_entries(
            user_id,
            query,
            self._scope(subscription_id, tag_id, uncategorized),
            self._filters(unread_only, read_only, starred_only, unstarred_only, type, exclude_types, show_spam),
            search_in=search_in,
            limit=self.clamp_limit(limit),
            cursor=cursor,
        )

    def count_entries(
        self,
        user_id: str,
        subscription_id: str | None = None,
        tag_id: str | None = None,
        uncategorized: bool = False,
        unread_only: bool = False,
        read_only: bool = False,
        starred_only: bool = False,
        unstarred_only: bool = False,
        type: str | None = None,
        exclude_types: list[str] | None = None,
        show_spam: bool = False,
    ) -> EntryCounts:
        """Total and unread counts under the same filters as list_entries."""
        return self.db.count_entries(
            user_id,
            self._scope(subscription_id, tag_id, uncategorized),
            self._filters(unread_only, read_only, starred_only, unstarred_only, type, exclude_types, show_spam),
        )

    def get_entry(self, user_id: str, entry_id: str) -> DBEntryFull:
        """Get a single entry. Raises NotFoundError if the user cannot see it."""
        return require_entry(self.db.get_entry(user_id, entry_id))

    # ─────────────────────────────────────────────────────────────
    # State mutations
    # ─────────────────────────────────────────────────────────────

    def mark_entries_read(
        self,
        user_id: str,
        entry_ids: list[str],
        read: bool = True,
        show_spam: bool = False
    ) -> MarkReadResult:
        """
        Mark entries read or unread.

        Unknown ids are ignored. Returns the updated entry states and fresh
        unread counts for the subscriptions and tags those entries belong to.
        """
        if len(entry_ids) > self.max_bulk_mark_read:
            raise ValidationError(
                f"Cannot mark more than {self.max_bulk_mark_read} entries at once"
            )
        return self.db.mark_read(user_id, entry_ids, read=read, show_spam=show_spam)

    def update_entry_starred(self, user_id: str, entry_id: str, starred: bool) -> EntryState:
        """Star or unstar an entry. Raises NotFoundError if the user has no such entry."""
        entry_state = self.db.set_starred(user_id, entry_id, starred)
        if entry_state is None:
            raise entry_not_found()
        logger.debug(f"Entry {entry_id} {'starred' if starred else 'unstarred'} by user {user_id}")
        return entry_state

    def mark_all_read(
        self,
        user_id: str,
        subscription_id: str | None = None,
        tag_id: str | None = None,
        uncategorized: bool = False,
        starred_only: bool = False,
        type: str | None = None,
        show_spam: bool = False,
        before: datetime | None = None,
    ) -> int:
        """Mark every unread entry in a scope read. Returns the number updated."""
        return self.db.mark_all_read(
            user_id,
            self._scope(subscription_id, tag_id, uncategorized),
            self._filters(False, False, starred_only, False, type, None, show_spam),
            before=before,
        )

    # ─────────────────────────────────────────────────────────────
    # Real-time count payloads
    # ─────────────────────────────────────────────────────────────

    def get_entry_related_counts(self, user_id: str, entry_id: str, show_spam: bool = False) -> UnreadCounts:
        return self.db.get_entry_related_counts(user_id, entry_id, show_spam)

    def get_new_entry_related_counts(
        self,
        user_id: str,
        entry_type: str,
        subscription_id: str | None,
        show_spam: bool = False
    ) -> UnreadCounts:
        return self.db.get_new_entry_related_counts(user_id, entry_type, subscription_id, show_spam)

    def get_bulk_entry_related_counts(
        self,
        user_id: str,
        entries: list[EntryContext],
        show_spam: bool = False
    ) -> BulkUnreadCounts:
        return self.db.get_bulk_entry_related_counts(user_id, entries, show_spam)
