"""
Steam Store API extractor.

Fetches descriptive game details (description, images, credits,
genres and release date) from /appdetails.
"""

import time
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from gamevault.config import get_settings
from gamevault.ingestion.contracts import AppId, SteamStoreAPIResponse, SteamStoreGame
from gamevault.ingestion.extractors.base import (
    BaseExtractor,
    ExtractionError,
    ExtractionResult,
    ValidationError,
)


class SteamStoreExtractor(BaseExtractor[SteamStoreGame]):
    """
    Extractor for Steam Store API.

    Example:
        >>> async with SteamStoreExtractor() as extractor:
        ...     result = await extractor.extract(app_id=1091500)
        ...     if result.success:
        ...         print(result.data.name)
    """

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._store_url = get_settings().steam.store_url.rstrip("/")

    @property
    def source_name(self) -> str:
        """Return source identifier."""
        return "steam_store_api"

    def _build_url(self) -> str:
        """Build API URL for app details."""
        return f"{self._store_url}/appdetails"

    def _parse_response(self, raw_data: Any) -> SteamStoreGame:
        """
        Parse and validate the ``data`` object of one app entry.

        Raises:
            ValidationError: If response doesn't match expected schema
        """
        try:
            return SteamStoreGame.model_validate(raw_data)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Response validation failed: {e}",
                source=self.source_name,
            ) from e

    async def extract(
        self,
        app_id: AppId,
        *,
        language: str = "english",
    ) -> ExtractionResult[SteamStoreGame]:
        """
        Extract game details from Steam Store API.

        Args:
            app_id: Steam application ID
            language: Language for descriptions (default: english)

        Returns:
            ExtractionResult[SteamStoreGame]: Extraction result with metadata
        """
        url = self._build_url()
        endpoint = f"{url}?appids={app_id}"
        start_time = time.perf_counter()

        self._logger.debug("Starting extraction", app_id=app_id)

        try:
            response = await self._make_request(
                "GET",
                url,
                params={"appids": app_id, "l": language},
            )
            raw_data = self._decode_json(response, endpoint)
            duration_ms = (time.perf_counter() - start_time) * 1000

            # Steam returns {app_id: {success: bool, data: {...}}}
            app_entry = raw_data.get(str(app_id)) if isinstance(raw_data, dict) else None
            if app_entry is None:
                return self._failure(
                    endpoint,
                    f"Response has no entry for app_id={app_id}",
                    duration_ms,
                    response.status_code,
                )

            try:
                wrapper = SteamStoreAPIResponse.model_validate(app_entry)
            except PydanticValidationError as e:
                raise ValidationError(
                    f"Response validation failed: {e}",
                    source=self.source_name,
                    endpoint=endpoint,
                ) from e

            if not wrapper.success or wrapper.data is None:
                self._logger.warning("API returned success=false", app_id=app_id)
                return self._failure(
                    endpoint,
                    f"Steam API returned success=false for app_id={app_id}",
                    duration_ms,
                    response.status_code,
                )

            game_data = wrapper.data

        except ExtractionError as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self._logger.warning(
                "Extraction failed",
                app_id=app_id,
                error=str(e),
                status_code=e.status_code,
            )
            return self._failure(endpoint, str(e), duration_ms, e.status_code)

        self._logger.info(
            "Extraction successful",
            app_id=app_id,
            game_name=game_data.name,
            duration_ms=round(duration_ms, 2),
        )
        return ExtractionResult(
            success=True,
            data=game_data,
            source=self.source_name,
            endpoint=endpoint,
            duration_ms=duration_ms,
            status_code=response.status_code,
        )
