"""
Database facade - provides unified access to all repositories.

Callers can reach the repositories directly (db.entries, db.counts, ...) or
use the delegating methods below for the common operations.
"""

from datetime import datetime
from pathlib import Path

from .connection import DatabaseConnection
from .count_repository import CountRepository
from .entry_repository import EntryRepository
from .entry_state_repository import EntryStateRepository
from .feed_repository import FeedRepository
from .feed_sets import FeedScope
from .models import (
    BulkUnreadCounts,
    DBEntryFull,
    DBUser,
    EntryContext,
    EntryCounts,
    EntryPage,
    EntryState,
    MarkReadResult,
    UnreadCounts,
)
from .predicates import EntryFilters
from .subscription_repository import SubscriptionRepository
from .tag_repository import TagRepository
from .user_repository import UserRepository


class Database:
    """Unified database access facade."""

    def __init__(self, db_path: Path):
        self._connection = DatabaseConnection(db_path)

        # Initialize repositories
        self.users = UserRepository(self._connection)
        self.feeds = FeedRepository(self._connection)
        self.subscriptions = SubscriptionRepository(self._connection)
        self.tags = TagRepository(self._connection)
        self.entries = EntryRepository(self._connection)
        self.entry_state = EntryStateRepository(self._connection)
        self.counts = CountRepository(self._connection)

    # ─────────────────────────────────────────────────────────────
    # User operations (delegated to UserRepository)
    # ─────────────────────────────────────────────────────────────

    def get_user(self, user_id: str) -> DBUser | None:
        return self.users.get_by_id(user_id)

    # ─────────────────────────────────────────────────────────────
    # Entry reads (delegated to EntryRepository)
    # ─────────────────────────────────────────────────────────────

    def list_entries(
        self,
        user_id: str,
        scope: FeedScope,
        filters: EntryFilters,
        sort_order: str = "newest",
        limit: int = 50,
        cursor: str | None = None
    ) -> EntryPage:
        return self.entries.list(user_id, scope, filters, sort_order, limit, cursor)

    def search_entries(
        self,
        user_id: str,
        query: str,
        scope: FeedScope,
        filters: EntryFilters,
        search_in: str = "both",
        limit: int = 50,
        cursor: str | None = None
    ) -> EntryPage:
        return self.entries.search(user_id, query, scope, filters, search_in, limit, cursor)

    def count_entries(self, user_id: str, scope: FeedScope, filters: EntryFilters) -> EntryCounts:
        return self.entries.count(user_id, scope, filters)

    def get_entry(self, user_id: str, entry_id: str) -> DBEntryFull | None:
        return self.entries.get(user_id, entry_id)

    # ─────────────────────────────────────────────────────────────
    # Entry state (delegated to EntryStateRepository)
    # ─────────────────────────────────────────────────────────────

    def mark_read(
        self,
        user_id: str,
        entry_ids: list[str],
        read: bool = True,
        show_spam: bool = False
    ) -> MarkReadResult:
        return self.entry_state.mark_read(user_id, entry_ids, read, show_spam)

    def set_starred(self, user_id: str, entry_id: str, starred: bool) -> EntryState | None:
        return self.entry_state.set_starred(user_id, entry_id, starred)

    def mark_all_read(
        self,
        user_id: str,
        scope: FeedScope,
        filters: EntryFilters,
        before: datetime | None = None
    ) -> int:
        return self.entry_state.mark_all_read(user_id, scope, filters, before)

    # ─────────────────────────────────────────────────────────────
    # Unread counts (delegated to CountRepository)
    # ─────────────────────────────────────────────────────────────

    def get_entry_related_counts(self, user_id: str, entry_id: str, show_spam: bool = False) -> UnreadCounts:
        return self.counts.get_entry_related_counts(user_id, entry_id, show_spam)

    def get_new_entry_related_counts(
        self,
        user_id: str,
        entry_type: str,
        subscription_id: str | None,
        show_spam: bool = False
    ) -> UnreadCounts:
        return self.counts.get_new_entry_related_counts(user_id, entry_type, subscription_id, show_spam)

    def get_bulk_entry_related_counts(
        self,
        user_id: str,
        entries: list[EntryContext],
        show_spam: bool = False
    ) -> BulkUnreadCounts:
        return self.counts.get_bulk_entry_related_counts(user_id, entries, show_spam)
