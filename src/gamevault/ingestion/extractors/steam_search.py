"""
Steam community app search extractor.

Fuzzy title search used as the fallback when a folder title is not
in the alias table.
"""

import time
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError as PydanticValidationError

from gamevault.config import get_settings
from gamevault.ingestion.contracts import SearchResult, SteamSearchResults
from gamevault.ingestion.extractors.base import (
    BaseExtractor,
    ExtractionError,
    ExtractionResult,
    ValidationError,
)


class SteamSearchExtractor(BaseExtractor[SteamSearchResults]):
    """
    Extractor for ``steamcommunity.com/actions/SearchApps/<title>``.

    Example:
        >>> async with SteamSearchExtractor() as extractor:
        ...     result = await extractor.extract("Hollow Knight")
        ...     if result.success:
        ...         print(result.data.results[0].appid)
    """

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._search_url = get_settings().steam.search_url.rstrip("/")

    @property
    def source_name(self) -> str:
        """Return source identifier."""
        return "steam_search"

    def _build_url(self, title: str) -> str:
        return f"{self._search_url}/{quote(title, safe='')}"

    def _parse_response(self, raw_data: Any) -> SteamSearchResults:
        """
        Validate the search payload item by item.

        A malformed hit is dropped rather than failing the whole search;
        a payload that is not a list at all is a validation error.
        """
        if not isinstance(raw_data, list):
            raise ValidationError(
                f"Expected a JSON list, got {type(raw_data).__name__}",
                source=self.source_name,
            )

        results: list[SearchResult] = []
        dropped = 0
        for item in raw_data:
            try:
                results.append(SearchResult.model_validate(item))
            except PydanticValidationError:
                dropped += 1
        return SteamSearchResults(query="", results=results, dropped=dropped)

    async def extract(self, title: str) -> ExtractionResult[SteamSearchResults]:
        """
        Search the catalog for a title.

        Args:
            title: Cleaned folder title

        Returns:
            ExtractionResult[SteamSearchResults]: Hits in endpoint order
        """
        endpoint = self._build_url(title)
        start_time = time.perf_counter()

        try:
            response = await self._make_request("GET", endpoint)
            parsed = self._parse_response(self._decode_json(response, endpoint))
        except ExtractionError as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self._logger.warning(
                "Search failed",
                title=title,
                error=str(e),
                status_code=e.status_code,
            )
            return self._failure(endpoint, str(e), duration_ms, e.status_code)

        duration_ms = (time.perf_counter() - start_time) * 1000
        if parsed.dropped:
            self._logger.debug("Dropped malformed search hits", title=title, dropped=parsed.dropped)
        self._logger.debug(
            "Search complete",
            title=title,
            hits=len(parsed.results),
            duration_ms=round(duration_ms, 2),
        )
        return ExtractionResult(
            success=True,
            data=parsed.model_copy(update={"query": title}),
            source=self.source_name,
            endpoint=endpoint,
            duration_ms=duration_ms,
            status_code=response.status_code,
        )
