"""
Steam Reviews API extractor.

Fetches the aggregate review summary for a game; individual
reviews are never requested.
"""

import time
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from gamevault.config import get_settings
from gamevault.ingestion.contracts import AppId, SteamReviewsResponse
from gamevault.ingestion.extractors.base import (
    BaseExtractor,
    ExtractionError,
    ExtractionResult,
    ValidationError,
)


class SteamReviewsExtractor(BaseExtractor[SteamReviewsResponse]):
    """
    Extractor for Steam Reviews API.

    Example:
        >>> async with SteamReviewsExtractor() as extractor:
        ...     result = await extractor.extract(app_id=1091500)
        ...     if result.success:
        ...         print(result.data.query_summary.total_reviews)
    """

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._reviews_url = get_settings().steam.reviews_url.rstrip("/")

    @property
    def source_name(self) -> str:
        """Return source identifier."""
        return "steam_reviews_api"

    def _build_url(self, app_id: AppId) -> str:
        """Build API URL for app reviews."""
        return f"{self._reviews_url}/appreviews/{app_id}"

    def _parse_response(self, raw_data: Any) -> SteamReviewsResponse:
        """
        Parse and validate Steam Reviews API response.

        Raises:
            ValidationError: If response doesn't match expected schema
        """
        try:
            return SteamReviewsResponse.model_validate(raw_data)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Response validation failed: {e}",
                source=self.source_name,
            ) from e

    async def extract(self, app_id: AppId) -> ExtractionResult[SteamReviewsResponse]:
        """
        Extract the review summary for one game.

        Args:
            app_id: Steam application ID

        Returns:
            ExtractionResult[SteamReviewsResponse]: Extraction result with metadata
        """
        url = self._build_url(app_id)
        start_time = time.perf_counter()

        try:
            response = await self._make_request(
                "GET",
                url,
                params={
                    "json": 1,
                    "language": "all",
                    "purchase_type": "all",
                    "num_per_page": 0,
                },
            )
            reviews_data = self._parse_response(self._decode_json(response, url))
        except ExtractionError as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self._logger.warning(
                "Extraction failed",
                app_id=app_id,
                error=str(e),
                status_code=e.status_code,
            )
            return self._failure(url, str(e), duration_ms, e.status_code)

        duration_ms = (time.perf_counter() - start_time) * 1000

        if not reviews_data.is_successful or reviews_data.query_summary is None:
            self._logger.warning("API returned unsuccessful response", app_id=app_id)
            return self._failure(
                url,
                f"Steam Reviews API returned success={reviews_data.success} for app_id={app_id}",
                duration_ms,
                response.status_code,
            )

        self._logger.info(
            "Reviews extraction successful",
            app_id=app_id,
            total_reviews=reviews_data.query_summary.total_reviews,
            duration_ms=round(duration_ms, 2),
        )
        return ExtractionResult(
            success=True,
            data=reviews_data,
            source=self.source_name,
            endpoint=url,
            duration_ms=duration_ms,
            status_code=response.status_code,
        )
