"""
Local image cache.

Downloads the cover and background images of a game into its private
directory. Existing files are reused, so repeated enrichment runs make
no network calls for images that are already cached.
"""

from pathlib import Path
from typing import Any, NamedTuple

import httpx

from gamevault.config import get_settings
from gamevault.local.paths import (
    background_path,
    cover_path,
    ensure_sidecar_dir,
    is_folder_writable,
)
from gamevault.logger import get_logger


class CachedImages(NamedTuple):
    """Local paths of cached images; None where nothing is cached."""

    cover: str | None = None
    background: str | None = None


class ImageDownloadError(Exception):
    """Raised when a single image cannot be fetched or written."""


class ImageCache:
    """
    Idempotent per-folder image downloader.

    Example:
        >>> async with ImageCache() as cache:
        ...     images = await cache.cache_images("/games/Hades", cover_url, bg_url)
        ...     images.cover
        '/games/Hades/.gamevault/cover.jpg'
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        settings = get_settings()
        self._timeout = timeout or settings.steam.image_timeout_seconds
        self._user_agent = settings.steam.user_agent
        self._client = client
        self._owns_client = client is None
        self._logger = get_logger(__name__, component="image_cache")

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                follow_redirects=True,
                headers={"User-Agent": self._user_agent},
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ImageCache":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def download(self, url: str, dest: Path, *, force: bool = False) -> Path:
        """
        Download ``url`` to ``dest`` unless ``dest`` already exists.

        The body is written to a temporary file and moved into place,
        so an interrupted download never leaves a file that would later
        be mistaken for a cached image.

        Raises:
            ImageDownloadError: On timeout, transport error, error status or write failure
        """
        if dest.exists() and not force:
            self._logger.debug("Image already cached", path=str(dest))
            return dest

        try:
            response = await self.client.get(url, timeout=httpx.Timeout(self._timeout))
        except httpx.HTTPError as e:
            raise ImageDownloadError(f"Download failed for {url}: {e}") from e

        if not response.is_success:
            raise ImageDownloadError(f"HTTP error {response.status_code} for {url}")

        partial = dest.with_name(dest.name + ".part")
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            partial.write_bytes(response.content)
            partial.replace(dest)
        except OSError as e:
            partial.unlink(missing_ok=True)
            raise ImageDownloadError(f"Could not write {dest}: {e}") from e

        self._logger.info("Saved image", path=str(dest), size_bytes=len(response.content))
        return dest

    async def _cache_one(self, kind: str, url: str | None, dest: Path, force: bool) -> str | None:
        if not url:
            return None
        try:
            return str(await self.download(url, dest, force=force))
        except ImageDownloadError as e:
            self._logger.warning("Failed to cache image", kind=kind, error=str(e))
            return None

    async def cache_images(
        self,
        game_folder: str | Path,
        cover_url: str | None,
        background_url: str | None,
        *,
        force: bool = False,
    ) -> CachedImages:
        """
        Cache the cover and background of one game.

        The two downloads are independent: one failing does not stop the
        other. An unwritable folder yields ``CachedImages(None, None)``
        without any network traffic.

        Args:
            game_folder: Game installation folder
            cover_url: Remote cover image URL
            background_url: Remote background image URL
            force: Re-download even when files already exist

        Returns:
            CachedImages: Local paths that are now present
        """
        if not is_folder_writable(game_folder):
            self._logger.warning(
                "Game folder not writable, skipping image cache", folder=str(game_folder)
            )
            return CachedImages()

        try:
            ensure_sidecar_dir(game_folder)
        except OSError as e:
            self._logger.warning(
                "Could not create image directory", folder=str(game_folder), error=str(e)
            )
            return CachedImages()

        return CachedImages(
            cover=await self._cache_one("cover", cover_url, cover_path(game_folder), force),
            background=await self._cache_one(
                "background", background_url, background_path(game_folder), force
            ),
        )
