"""
Opaque pagination cursors.

A cursor is base64-encoded JSON of {"sortKey": ..., "id": ...} naming the
last row of a page. Two shapes exist:

- time cursors, whose sortKey is the canonical timestamp string of
  COALESCE(published_at, fetched_at)
- rank cursors, whose sortKey is the float relevance of a search hit

Callers must treat the encoded string as opaque.
"""

import base64
import binascii
import json
from dataclasses import dataclass
from datetime import datetime

from ..exceptions import ValidationError
from .converters import format_timestamp, parse_timestamp

INVALID_CURSOR = "Invalid cursor format"


@dataclass(frozen=True)
class TimeCursor:
    sort_at: str
    id: str


@dataclass(frozen=True)
class RankCursor:
    rank: float
    id: str


def _encode(payload: dict) -> str:
    raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def _decode(cursor: str) -> dict:
    try:
        raw = base64.b64decode(cursor.encode("ascii"), validate=True)
        payload = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise ValidationError(INVALID_CURSOR) from e

    if not isinstance(payload, dict):
        raise ValidationError(INVALID_CURSOR)
    entry_id = payload.get("id")
    if not isinstance(entry_id, str) or not entry_id or "sortKey" not in payload:
        raise ValidationError(INVALID_CURSOR)
    return payload


def encode_time_cursor(sort_at: datetime | str, entry_id: str) -> str:
    """Encode a cursor for chronological pages."""
    if isinstance(sort_at, datetime):
        sort_at = format_timestamp(sort_at)
    return _encode({"sortKey": sort_at, "id": entry_id})


def decode_time_cursor(cursor: str) -> TimeCursor:
    """Decode a chronological cursor, normalizing its timestamp."""
    payload = _decode(cursor)
    sort_key = payload["sortKey"]
    if not isinstance(sort_key, str) or not sort_key:
        raise ValidationError(INVALID_CURSOR)
    try:
        sort_at = format_timestamp(parse_timestamp(sort_key))
    except ValueError as e:
        raise ValidationError(INVALID_CURSOR) from e
    return TimeCursor(sort_at=sort_at, id=payload["id"])


def encode_rank_cursor(rank: float, entry_id: str) -> str:
    """Encode a cursor for relevance-ranked pages."""
    return _encode({"sortKey": float(rank), "id": entry_id})


def decode_rank_cursor(cursor: str) -> RankCursor:
    """Decode a relevance cursor."""
    payload = _decode(cursor)
    sort_key = payload["sortKey"]
    # bool is an int subclass; a boolean sortKey is never a rank
    if isinstance(sort_key, bool) or not isinstance(sort_key, (int, float)):
        raise ValidationError(INVALID_CURSOR)
    return RankCursor(rank=float(sort_key), id=payload["id"])
