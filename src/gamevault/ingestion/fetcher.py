"""
Detail fetcher.

Facade over the store and reviews extractors that turns unsuccessful
extraction results into ``None``. The two calls are independent: a
failed review lookup says nothing about the details call.
"""

from typing import Any

import httpx

from gamevault.ingestion.contracts import GameDetails, ReviewStats
from gamevault.ingestion.extractors import SteamReviewsExtractor, SteamStoreExtractor
from gamevault.logger import get_logger


class DetailFetcher:
    """
    Fetches descriptive metadata and review statistics for a catalog id.

    Example:
        >>> async with DetailFetcher() as fetcher:
        ...     details = await fetcher.fetch_details(1091500)
        ...     reviews = await fetcher.fetch_reviews(1091500)
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        store_extractor: SteamStoreExtractor | None = None,
        reviews_extractor: SteamReviewsExtractor | None = None,
    ) -> None:
        self._store = store_extractor or SteamStoreExtractor(client=client)
        self._reviews = reviews_extractor or SteamReviewsExtractor(client=client)
        self._logger = get_logger(__name__, component="fetcher")

    async def fetch_details(self, app_id: int) -> GameDetails | None:
        """Return details for ``app_id``, or None if the store call failed."""
        result = await self._store.extract(app_id)
        if not result.success or result.data is None:
            self._logger.warning(
                "Details unavailable",
                app_id=app_id,
                error=result.error_message,
            )
            return None
        return GameDetails.from_store_game(result.data)

    async def fetch_reviews(self, app_id: int) -> ReviewStats | None:
        """Return review statistics for ``app_id``, or None if the reviews call failed."""
        result = await self._reviews.extract(app_id)
        if not result.success or result.data is None or result.data.query_summary is None:
            self._logger.warning(
                "Reviews unavailable",
                app_id=app_id,
                error=result.error_message,
            )
            return None
        return ReviewStats.from_summary(result.data.query_summary)

    async def close(self) -> None:
        """Close the underlying extractors."""
        await self._store.close()
        await self._reviews.close()

    async def __aenter__(self) -> "DetailFetcher":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
