"""
Search relevance scoring.

FTS5 decides which entries match; the score used for ordering is computed
from each row alone. bm25() depends on corpus-wide statistics, so an insert
anywhere would shift every stored rank and break rank cursors.
"""

import re
import sqlite3

RANK_FUNCTION = "entry_rank"

TITLE_WEIGHT = 1.0
CONTENT_WEIGHT = 0.4

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


def tokenize(text: str | None) -> list[str]:
    """Lowercased word tokens, the same word boundaries MATCH queries use."""
    if not text:
        return []
    return [token.casefold() for token in _TOKEN_RE.findall(text)]


def relevance(title: str | None, content: str | None, terms: str, search_in: str = "both") -> float:
    """
    Score one entry against space-separated query terms.

    Each occurrence of a query term counts once, weighted by the field it
    appears in. Only the fields named by search_in contribute.
    """
    wanted = set(terms.split())
    if not wanted:
        return 0.0

    score = 0.0
    if search_in in ("title", "both"):
        score += TITLE_WEIGHT * sum(1 for token in tokenize(title) if token in wanted)
    if search_in in ("content", "both"):
        score += CONTENT_WEIGHT * sum(1 for token in tokenize(content) if token in wanted)
    return score


def register_functions(connection: sqlite3.Connection):
    """Make entry_rank(title, content, terms, search_in) available in SQL."""
    connection.create_function(RANK_FUNCTION, 4, relevance, deterministic=True)
