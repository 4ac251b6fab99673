"""
Human-driven edits.

Manual field edits and the two-step rematch (preview, then confirm)
used when automatic matching picked the wrong game. Both paths mark
the entry as manually edited and re-export its sidecar.
"""

import re
from typing import Any

import httpx
from pydantic import BaseModel, Field, field_validator

from gamevault.config import get_settings
from gamevault.ingestion.contracts import GameDetails, ReviewStats
from gamevault.ingestion.fetcher import DetailFetcher
from gamevault.ingestion.utils.rate_limiter import RateLimiter, RateLimiterConfig
from gamevault.local.images import ImageCache
from gamevault.logger import get_logger
from gamevault.storage import EntryNotFoundError, LibraryEntry, LibraryStore
from gamevault.sync.reconciler import ExportStatus, SyncReconciler

_APP_URL = re.compile(r"/app/(\d+)")


class RematchError(Exception):
    """Raised when a rematch cannot be previewed or applied."""


def parse_steam_input(text: str) -> int:
    """
    Extract a Steam app id from user input.

    Accepts a bare id (``292030``) or a store URL such as
    ``https://store.steampowered.com/app/292030/The_Witcher_3/``.

    Raises:
        RematchError: If no positive id can be found
    """
    text = text.strip()
    if text.isdigit():
        app_id = int(text)
    else:
        found = _APP_URL.search(text)
        if found is None:
            raise RematchError(f"Could not find a Steam app id in {text!r}")
        app_id = int(found.group(1))
    if app_id <= 0:
        raise RematchError(f"Invalid Steam app id: {app_id}")
    return app_id


class EntryUpdate(BaseModel):
    """Fields a human may change; unset fields are left alone."""

    title: str | None = None
    summary: str | None = None
    genres: list[str] | None = None
    developers: list[str] | None = None
    publishers: list[str] | None = None
    release_date: str | None = None
    review_score: int | None = Field(default=None, ge=0, le=100)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("title must not be blank")
        return v.strip() if v is not None else v

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class RematchPreview(BaseModel):
    """What a confirmed rematch would write."""

    steam_app_id: int
    title: str
    summary: str | None = None
    genres: list[str] | None = None
    developers: list[str] | None = None
    publishers: list[str] | None = None
    release_date: str | None = None
    cover_url: str | None = None
    review_score: int | None = None
    review_summary: str | None = None

    @classmethod
    def build(cls, details: GameDetails, reviews: ReviewStats | None) -> "RematchPreview":
        return cls(
            steam_app_id=details.app_id,
            title=details.name,
            summary=details.description,
            genres=details.genres or None,
            developers=details.developers or None,
            publishers=details.publishers or None,
            release_date=details.release_date,
            cover_url=details.cover_url,
            review_score=reviews.score if reviews else None,
            review_summary=reviews.summary if reviews else None,
        )


class LibraryEditor:
    """
    Applies manual edits and rematches to library entries.

    Example:
        >>> async with LibraryEditor(store) as editor:
        ...     preview = await editor.preview_rematch(7, "292030")
        ...     entry = await editor.confirm_rematch(7, "292030")
    """

    def __init__(
        self,
        store: LibraryStore,
        *,
        fetcher: DetailFetcher | None = None,
        image_cache: ImageCache | None = None,
        sync: SyncReconciler | None = None,
        rate_limiter: RateLimiter | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._store = store
        self._fetcher = fetcher or DetailFetcher(client=client)
        self._images = image_cache or ImageCache(client=client)
        self._sync = sync or SyncReconciler(store)
        self._rate_limiter = rate_limiter or RateLimiter(
            RateLimiterConfig(delay_seconds=get_settings().enrichment.request_delay_seconds)
        )
        self._logger = get_logger(__name__, component="editor")

    async def close(self) -> None:
        await self._fetcher.close()
        await self._images.close()

    async def __aenter__(self) -> "LibraryEditor":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def _export(self, entry: LibraryEntry) -> None:
        outcome = self._sync.export_entry(entry)
        if outcome.status is not ExportStatus.EXPORTED:
            self._logger.warning("Sidecar export failed", entry_id=entry.id, reason=outcome.reason)

    def update_entry(self, entry_id: int, update: EntryUpdate) -> LibraryEntry:
        """
        Apply a manual edit and export the sidecar.

        The entry is flagged as manually edited even when ``update``
        carries no changes.

        Raises:
            EntryNotFoundError: If the entry does not exist
        """
        entry = self._store.update_manual_edit(entry_id, **update.changes())
        self._logger.info("Entry edited", entry_id=entry_id, fields=sorted(update.changes()))
        self._export(entry)
        return entry

    async def _lookup(self, app_id: int) -> tuple[GameDetails, ReviewStats | None]:
        details = await self._fetcher.fetch_details(app_id)
        if details is None:
            raise RematchError(f"Could not fetch details for Steam app {app_id}")
        await self._rate_limiter.pause()
        reviews = await self._fetcher.fetch_reviews(app_id)
        return details, reviews

    def _require(self, entry_id: int) -> LibraryEntry:
        entry = self._store.get(entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)
        return entry

    async def preview_rematch(self, entry_id: int, steam_input: str) -> RematchPreview:
        """
        Look up what a rematch would write, without writing it.

        Raises:
            EntryNotFoundError: If the entry does not exist
            RematchError: If the input is invalid or details are unavailable
        """
        app_id = parse_steam_input(steam_input)
        self._require(entry_id)
        details, reviews = await self._lookup(app_id)
        return RematchPreview.build(details, reviews)

    async def confirm_rematch(self, entry_id: int, steam_input: str) -> LibraryEntry:
        """
        Point an entry at a human-chosen Steam app.

        Descriptive fields are overwritten even on a manually edited
        entry, images are downloaded again, and the entry is marked
        manually edited so later enrichment passes leave it alone.

        Raises:
            EntryNotFoundError: If the entry does not exist
            RematchError: If the input is invalid or details are unavailable
        """
        app_id = parse_steam_input(steam_input)
        entry = self._require(entry_id)
        details, reviews = await self._lookup(app_id)

        self._store.update_resolution(
            entry_id,
            app_id,
            1.0,
            summary=details.description,
            cover_url=details.cover_url,
            background_url=details.background_url,
            genres=details.genres or None,
            developers=details.developers or None,
            publishers=details.publishers or None,
            release_date=details.release_date,
            overwrite_edited=True,
        )
        if reviews is not None:
            self._store.update_reviews(
                entry_id, reviews.score, reviews.count, reviews.summary, overwrite_edited=True
            )

        images = await self._images.cache_images(
            entry.folder_path, details.cover_url, details.background_url, force=True
        )
        if images.cover or images.background:
            self._store.update_local_images(entry_id, images.cover, images.background)

        updated = self._store.update_manual_edit(entry_id, title=details.name)
        self._logger.info("Entry rematched", entry_id=entry_id, app_id=app_id, title=details.name)
        self._export(updated)
        return updated
