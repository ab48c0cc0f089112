"""
Shared entry filter predicates.

Used unchanged by listing, search, counting, mark-all-read and the unread
count recomputation so that "what matches" and "how many match" cannot
disagree.
"""

from dataclasses import dataclass
from typing import Sequence

from .expressions import Column, Compare, Expression, InList

READ = Column("read")
STARRED = Column("starred")
TYPE = Column("type")
IS_SPAM = Column("is_spam")


@dataclass(frozen=True)
class EntryFilters:
    """State and type filters over visible entries."""
    unread_only: bool = False
    read_only: bool = False
    starred_only: bool = False
    unstarred_only: bool = False
    type: str | None = None
    exclude_types: Sequence[str] = ()
    show_spam: bool = False


def build_entry_predicates(filters: EntryFilters) -> list[Expression]:
    """
    Build independent, AND-composable predicates for the given filters.

    unread_only wins over read_only and starred_only wins over
    unstarred_only. A type that is also excluded simply matches nothing.
    """
    predicates: list[Expression] = []

    if filters.unread_only:
        predicates.append(Compare(READ, "=", False))
    elif filters.read_only:
        predicates.append(Compare(READ, "=", True))

    if filters.starred_only:
        predicates.append(Compare(STARRED, "=", True))
    elif filters.unstarred_only:
        predicates.append(Compare(STARRED, "=", False))

    if filters.type:
        predicates.append(Compare(TYPE, "=", filters.type))

    if filters.exclude_types:
        predicates.append(InList(TYPE, tuple(filters.exclude_types), negate=True))

    if not filters.show_spam:
        predicates.append(Compare(IS_SPAM, "=", False))

    return predicates
