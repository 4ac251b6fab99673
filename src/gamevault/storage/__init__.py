"""
Authoritative library storage.

SQLAlchemy-backed store plus the domain models it hands out.
"""

from gamevault.storage.schemas import LibraryEntry, LibraryStats, MatchStatus
from gamevault.storage.store import (
    EDITABLE_FIELDS,
    IMPORTABLE_FIELDS,
    EntryNotFoundError,
    LibraryStore,
    StoreError,
)
from gamevault.storage.timestamps import next_timestamp, parse_timestamp, utc_now

__all__ = [
    "EDITABLE_FIELDS",
    "IMPORTABLE_FIELDS",
    "EntryNotFoundError",
    "LibraryEntry",
    "LibraryStats",
    "LibraryStore",
    "MatchStatus",
    "StoreError",
    "next_timestamp",
    "parse_timestamp",
    "utc_now",
]
