"""
Enrichment orchestrator.

Runs resolve, fetch, cache and write for a bounded batch of eligible
library entries, one entry at a time. Each entry ends in an explicit
outcome; a failing entry never aborts the batch.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import httpx

from gamevault.config import get_settings
from gamevault.ingestion.fetcher import DetailFetcher
from gamevault.ingestion.utils.rate_limiter import RateLimiter, RateLimiterConfig
from gamevault.local.images import ImageCache
from gamevault.logger import get_logger
from gamevault.matching.resolver import CatalogResolver, MatchCandidate, MatchSource
from gamevault.storage import LibraryEntry, LibraryStore, StoreError
from gamevault.sync.reconciler import ExportStatus, SyncReconciler


class ItemStatus(str, Enum):
    """Per-entry outcome of an enrichment pass."""

    ENRICHED = "enriched"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class ItemOutcome:
    """What happened to one entry."""

    entry_id: int
    title: str
    status: ItemStatus
    reason: str | None = None
    app_id: int | None = None
    images_cached: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_id": self.entry_id,
            "title": self.title,
            "status": self.status.value,
            "reason": self.reason,
            "app_id": self.app_id,
            "images_cached": self.images_cached,
        }


@dataclass
class EnrichmentProgress:
    """Tracks progress of an enrichment run."""

    total: int
    completed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    current_title: str | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def percentage(self) -> float:
        """Get completion percentage."""
        if self.total == 0:
            return 100.0
        return (self.completed / self.total) * 100

    @property
    def elapsed_seconds(self) -> float:
        """Get elapsed time in seconds."""
        return (datetime.now(timezone.utc) - self.started_at).total_seconds()


@dataclass
class EnrichmentSummary:
    """Result of one enrichment run."""

    attempted: int
    succeeded: int
    failed: int
    skipped: int
    remaining: int
    total_eligible: int
    outcomes: list[ItemOutcome] = field(default_factory=list)

    def to_dict(self, *, include_outcomes: bool = False) -> dict[str, Any]:
        data: dict[str, Any] = {
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "remaining": self.remaining,
            "total_eligible": self.total_eligible,
        }
        if include_outcomes:
            data["outcomes"] = [o.to_dict() for o in self.outcomes]
        return data


class EnrichmentOrchestrator:
    """
    Enriches pending library entries in bounded batches.

    Example:
        >>> async with EnrichmentOrchestrator(store) as orchestrator:
        ...     summary = await orchestrator.run()
        ...     print(summary.succeeded, summary.remaining)
    """

    def __init__(
        self,
        store: LibraryStore,
        *,
        resolver: CatalogResolver | None = None,
        fetcher: DetailFetcher | None = None,
        image_cache: ImageCache | None = None,
        sync: SyncReconciler | None = None,
        rate_limiter: RateLimiter | None = None,
        batch_size: int | None = None,
        export_sidecars: bool | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        settings = get_settings().enrichment
        self._store = store
        self._resolver = resolver or CatalogResolver(client=client)
        self._fetcher = fetcher or DetailFetcher(client=client)
        self._images = image_cache or ImageCache(client=client)
        self._sync = sync or SyncReconciler(store)
        self._rate_limiter = rate_limiter or RateLimiter(
            RateLimiterConfig(delay_seconds=settings.request_delay_seconds)
        )
        self._batch_size = batch_size or settings.batch_size
        self._export_sidecars = (
            settings.export_sidecars if export_sidecars is None else export_sidecars
        )
        self._logger = get_logger(__name__, component="orchestrator")

    async def close(self) -> None:
        await self._resolver.close()
        await self._fetcher.close()
        await self._images.close()

    async def __aenter__(self) -> "EnrichmentOrchestrator":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def run(
        self,
        *,
        on_progress: Callable[[EnrichmentProgress], None] | None = None,
    ) -> EnrichmentSummary:
        """
        Enrich up to ``batch_size`` eligible entries.

        Raises:
            StoreError: Only if the eligible list itself cannot be read
        """
        eligible = self._store.list_eligible_for_enrichment()
        batch = eligible[: self._batch_size]
        progress = EnrichmentProgress(total=len(batch))
        outcomes: list[ItemOutcome] = []

        self._logger.info(
            "Starting enrichment",
            total_eligible=len(eligible),
            batch_size=len(batch),
        )

        for entry in batch:
            progress.current_title = entry.title
            outcome = await self._enrich_one(entry)
            outcomes.append(outcome)

            progress.completed += 1
            if outcome.status is ItemStatus.ENRICHED:
                progress.succeeded += 1
            elif outcome.status is ItemStatus.FAILED:
                progress.failed += 1
            else:
                progress.skipped += 1

            if on_progress:
                on_progress(progress)

        summary = EnrichmentSummary(
            attempted=len(batch),
            succeeded=progress.succeeded,
            failed=progress.failed,
            skipped=progress.skipped,
            remaining=max(0, len(eligible) - len(batch)),
            total_eligible=len(eligible),
            outcomes=outcomes,
        )
        self._logger.info(
            "Enrichment complete",
            duration_seconds=round(progress.elapsed_seconds, 2),
            **summary.to_dict(),
        )
        return summary

    async def _enrich_one(self, entry: LibraryEntry) -> ItemOutcome:
        try:
            return await self._process(entry)
        except Exception as e:
            self._logger.exception("Unexpected enrichment error", entry_id=entry.id)
            return self._failed(entry, f"Unexpected error: {e}")

    def _failed(self, entry: LibraryEntry, reason: str, app_id: int | None = None) -> ItemOutcome:
        return ItemOutcome(
            entry_id=entry.id,
            title=entry.title,
            status=ItemStatus.FAILED,
            reason=reason,
            app_id=app_id,
        )

    async def _match(self, entry: LibraryEntry) -> MatchCandidate | None:
        # Matched entries only come back for missing images; keep their id
        if entry.is_matched and entry.steam_app_id:
            return MatchCandidate(
                app_id=entry.steam_app_id,
                confidence=entry.match_confidence if entry.match_confidence is not None else 1.0,
                source=MatchSource.MANUAL if entry.manually_edited else MatchSource.SEARCH,
            )
        return await self._resolver.resolve(entry.title)

    async def _process(self, entry: LibraryEntry) -> ItemOutcome:
        log = self._logger.bind(entry_id=entry.id, title=entry.title)

        if not entry.title.strip():
            return ItemOutcome(
                entry_id=entry.id,
                title=entry.title,
                status=ItemStatus.SKIPPED,
                reason="Empty title",
            )

        match = await self._match(entry)
        if match is None:
            log.info("No catalog match")
            return self._failed(entry, "No catalog match")

        await self._rate_limiter.pause()
        details = await self._fetcher.fetch_details(match.app_id)
        if details is None:
            return self._failed(entry, "Details unavailable", match.app_id)

        await self._rate_limiter.pause()
        reviews = await self._fetcher.fetch_reviews(match.app_id)

        try:
            self._store.update_resolution(
                entry.id,
                match.app_id,
                match.confidence,
                summary=details.description,
                cover_url=details.cover_url,
                background_url=details.background_url,
                genres=details.genres or None,
                developers=details.developers or None,
                publishers=details.publishers or None,
                release_date=details.release_date,
            )
        except StoreError as e:
            log.error("Failed to store resolution", error=str(e))
            return self._failed(entry, f"Store write failed: {e}", match.app_id)

        images = await self._images.cache_images(
            entry.folder_path, details.cover_url, details.background_url
        )

        try:
            if images.cover or images.background:
                self._store.update_local_images(entry.id, images.cover, images.background)
            if reviews is not None:
                self._store.update_reviews(entry.id, reviews.score, reviews.count, reviews.summary)
        except StoreError as e:
            log.error("Failed to store enrichment", error=str(e))
            return self._failed(entry, f"Store write failed: {e}", match.app_id)

        if self._export_sidecars:
            self._export(entry.id)

        log.info(
            "Entry enriched",
            app_id=match.app_id,
            confidence=round(match.confidence, 3),
            cover=images.cover is not None,
            background=images.background is not None,
            reviews=reviews is not None,
        )
        return ItemOutcome(
            entry_id=entry.id,
            title=entry.title,
            status=ItemStatus.ENRICHED,
            app_id=match.app_id,
            images_cached=images.cover is not None or images.background is not None,
        )

    def _export(self, entry_id: int) -> None:
        try:
            updated = self._store.get(entry_id)
        except StoreError as e:
            self._logger.warning(
                "Could not reload entry for export", entry_id=entry_id, error=str(e)
            )
            return
        if updated is None:
            return
        outcome = self._sync.export_entry(updated)
        if outcome.status is not ExportStatus.EXPORTED:
            self._logger.debug("Sidecar not exported", entry_id=entry_id, reason=outcome.reason)
