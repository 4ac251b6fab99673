"""Title to catalog id resolution."""

from gamevault.matching.aliases import KNOWN_ALIASES, is_tombstone
from gamevault.matching.resolver import (
    CatalogResolver,
    MatchCandidate,
    MatchSource,
    best_alias,
    similarity,
)

__all__ = [
    "KNOWN_ALIASES",
    "CatalogResolver",
    "MatchCandidate",
    "MatchSource",
    "best_alias",
    "is_tombstone",
    "similarity",
]
