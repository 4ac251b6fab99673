"""
Catalog resolver.

Maps a clean folder title to a Steam app id with a similarity-based
confidence: first against the curated alias table, then against the
top hits of the community search endpoint.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
from rapidfuzz.distance import JaroWinkler

from gamevault.config import get_settings
from gamevault.ingestion.extractors import SteamSearchExtractor
from gamevault.logger import get_logger
from gamevault.matching.aliases import KNOWN_ALIASES, is_tombstone


class MatchSource(str, Enum):
    """Where a match came from."""

    ALIAS = "alias"
    SEARCH = "search"
    MANUAL = "manual"


@dataclass(frozen=True)
class MatchCandidate:
    """A catalog id paired with the similarity that selected it."""

    app_id: int
    confidence: float
    source: MatchSource = MatchSource.SEARCH


def similarity(a: str, b: str) -> float:
    """Jaro-Winkler similarity in [0, 1]."""
    return JaroWinkler.similarity(a, b)


def best_alias(
    title: str,
    aliases: Mapping[str, int] = KNOWN_ALIASES,
) -> tuple[str, int, float] | None:
    """
    Highest-scoring usable alias for ``title``, first-seen winning ties.

    Tombstones are never candidates. Returns ``(alias, app_id, score)``,
    or None when the table holds no positive id.
    """
    lowered = title.lower()
    best: tuple[str, int, float] | None = None
    for alias, app_id in aliases.items():
        if is_tombstone(app_id):
            continue
        score = similarity(lowered, alias)
        if best is None or score > best[2]:
            best = (alias, app_id, score)
    return best


class CatalogResolver:
    """
    Resolves titles to Steam app ids.

    Example:
        >>> async with CatalogResolver() as resolver:
        ...     match = await resolver.resolve("Cyberpunk 2077")
        ...     match.app_id
        1091500
    """

    def __init__(
        self,
        *,
        search_extractor: SteamSearchExtractor | None = None,
        client: httpx.AsyncClient | None = None,
        aliases: Mapping[str, int] = KNOWN_ALIASES,
        alias_threshold: float | None = None,
        search_threshold: float | None = None,
        max_candidates: int | None = None,
    ) -> None:
        settings = get_settings().enrichment
        self._search = search_extractor or SteamSearchExtractor(client=client)
        self._aliases = aliases
        self._alias_threshold = (
            settings.alias_threshold if alias_threshold is None else alias_threshold
        )
        self._search_threshold = (
            settings.search_threshold if search_threshold is None else search_threshold
        )
        self._max_candidates = max_candidates or settings.max_search_candidates
        self._logger = get_logger(__name__, component="resolver")

    def match_alias(self, title: str) -> MatchCandidate | None:
        """Alias-table lookup only; never returns a tombstone."""
        hit = best_alias(title, self._aliases)
        if hit is None:
            return None
        _, app_id, score = hit
        if score <= self._alias_threshold:
            return None
        return MatchCandidate(app_id=app_id, confidence=score, source=MatchSource.ALIAS)

    async def search(self, title: str) -> MatchCandidate | None:
        """Remote fuzzy search; any failure is reported as no match."""
        result = await self._search.extract(title)
        if not result.success or result.data is None:
            return None

        lowered = title.lower()
        best: MatchCandidate | None = None
        for hit in result.data.results[: self._max_candidates]:
            score = similarity(lowered, hit.name.lower())
            if best is None or score > best.confidence:
                best = MatchCandidate(app_id=hit.appid, confidence=score)

        if best is None or best.confidence <= self._search_threshold:
            self._logger.info(
                "No search match",
                title=title,
                best_score=round(best.confidence, 3) if best else None,
            )
            return None
        return best

    async def resolve(self, title: str) -> MatchCandidate | None:
        """
        Resolve a title to a catalog id.

        Alias hits short-circuit the remote search. Tombstoned aliases are
        never returned and do not prevent the search.

        Args:
            title: Clean folder title

        Returns:
            MatchCandidate | None: Accepted match, or None
        """
        title = title.strip()
        if not title:
            return None

        alias_match = self.match_alias(title)
        if alias_match is not None:
            self._logger.info(
                "Found known mapping",
                title=title,
                app_id=alias_match.app_id,
                similarity=round(alias_match.confidence, 3),
            )
            return alias_match

        match = await self.search(title)
        if match is not None:
            self._logger.info(
                "Found search match",
                title=title,
                app_id=match.app_id,
                similarity=round(match.confidence, 3),
            )
        return match

    async def close(self) -> None:
        await self._search.close()

    async def __aenter__(self) -> "CatalogResolver":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
