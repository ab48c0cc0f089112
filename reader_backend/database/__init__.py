"""
Database module - SQLite storage for entries, subscriptions and per-user state.

Uses repository pattern for better separation of concerns.
"""

from .connection import DatabaseConnection
from .models import DBEntry, DBEntryFull, EntryCounts, EntryPage, EntryState, MarkReadResult
from .feed_sets import FeedScope
from .predicates import EntryFilters
from .count_repository import CountRepository
from .entry_repository import EntryRepository
from .entry_state_repository import EntryStateRepository
from .feed_repository import FeedRepository
from .subscription_repository import SubscriptionRepository
from .tag_repository import TagRepository
from .user_repository import UserRepository
from .database import Database

__all__ = [
    "Database",
    "DatabaseConnection",
    "DBEntry",
    "DBEntryFull",
    "EntryCounts",
    "EntryFilters",
    "EntryPage",
    "EntryState",
    "FeedScope",
    "MarkReadResult",
    "CountRepository",
    "EntryRepository",
    "EntryStateRepository",
    "FeedRepository",
    "SubscriptionRepository",
    "TagRepository",
    "UserRepository",
]
