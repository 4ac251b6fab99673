"""Integration tests for the enrichment orchestrator."""

from pathlib import Path
from typing import Any

import httpx
import pytest
import respx

from gamevault.ingestion.orchestrator import (
    EnrichmentOrchestrator,
    EnrichmentProgress,
    ItemStatus,
)
from gamevault.ingestion.utils.rate_limiter import RateLimiter, RateLimiterConfig
from gamevault.local import metadata_path, read_sidecar
from gamevault.storage import LibraryEntry, LibraryStore, MatchStatus, StoreError

STORE_URL = "https://store.steampowered.com/api/appdetails"
REVIEWS_URL = "https://store.steampowered.com/appreviews/1091500"
SEARCH_URL = "https://steamcommunity.com/actions/SearchApps/"
COVER_URL = "https://cdn.akamai.steamstatic.com/steam/apps/1091500/header.jpg"
BACKGROUND_URL = "https://cdn.akamai.steamstatic.com/steam/apps/1091500/page_bg_generated_v6b.jpg"


def mock_catalog(store_response: dict[str, Any], reviews_response: dict[str, Any]) -> None:
    respx.get(STORE_URL).mock(return_value=httpx.Response(200, json=store_response))
    respx.get(REVIEWS_URL).mock(return_value=httpx.Response(200, json=reviews_response))
    respx.get(COVER_URL).mock(return_value=httpx.Response(200, content=b"cover"))
    respx.get(BACKGROUND_URL).mock(return_value=httpx.Response(200, content=b"background"))


def register(store: LibraryStore, folder: Path, title: str) -> int:
    return store.upsert(str(folder), folder.name, title, None)


class FailingResolutionStore(LibraryStore):
    """Store whose resolution writes always fail."""

    def update_resolution(self, *args: Any, **kwargs: Any) -> LibraryEntry:
        raise StoreError("disk I/O error")


class BrokenListStore(LibraryStore):
    """Store that cannot produce the eligible list."""

    def list_eligible_for_enrichment(self) -> list[LibraryEntry]:
        raise StoreError("database is locked")


class TestEnrichmentOrchestrator:
    """Tests for EnrichmentOrchestrator."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_enrich_entry(
        self,
        store: LibraryStore,
        game_folder: Path,
        store_response: dict[str, Any],
        reviews_response: dict[str, Any],
    ) -> None:
        mock_catalog(store_response, reviews_response)
        entry_id = register(store, game_folder, "Cyberpunk 2077")
        limiter = RateLimiter(RateLimiterConfig(delay_seconds=0))

        async with EnrichmentOrchestrator(store, rate_limiter=limiter) as orchestrator:
            summary = await orchestrator.run()

        assert summary.to_dict() == {
            "attempted": 1,
            "succeeded": 1,
            "failed": 0,
            "skipped": 0,
            "remaining": 0,
            "total_eligible": 1,
        }
        # One pause before details, one before reviews
        assert limiter.pauses == 2

        entry = store.get(entry_id)
        assert entry is not None
        assert entry.match_status is MatchStatus.MATCHED
        assert entry.steam_app_id == 1091500
        assert entry.match_confidence is not None and entry.match_confidence > 0.85
        assert entry.genres == ["Action", "RPG"]
        assert entry.review_score == 86
        assert entry.review_summary == "Very Positive"
        assert entry.local_cover_path == str(game_folder / ".gamevault" / "cover.jpg")
        assert entry.has_local_images

        sidecar = read_sidecar(game_folder)
        assert sidecar is not None
        assert sidecar.steam_app_id == 1091500
        assert store.list_eligible_for_enrichment() == []

    @respx.mock
    @pytest.mark.asyncio
    async def test_read_only_folder_still_enriched(
        self,
        store: LibraryStore,
        read_only_folder: Path,
        store_response: dict[str, Any],
        reviews_response: dict[str, Any],
    ) -> None:
        """Scenario: metadata is stored even when images cannot be cached."""
        respx.get(STORE_URL).mock(return_value=httpx.Response(200, json=store_response))
        respx.get(REVIEWS_URL).mock(return_value=httpx.Response(200, json=reviews_response))
        entry_id = register(store, read_only_folder, "Cyberpunk 2077")

        async with EnrichmentOrchestrator(store) as orchestrator:
            summary = await orchestrator.run()

        assert summary.succeeded == 1
        assert summary.failed == 0
        assert summary.outcomes[0].status is ItemStatus.ENRICHED
        assert summary.outcomes[0].images_cached is False

        entry = store.get(entry_id)
        assert entry is not None
        assert entry.steam_app_id == 1091500
        assert entry.local_cover_path is None
        assert entry.local_background_path is None
        # Missing images keep the entry eligible for a later run
        assert [e.id for e in store.list_eligible_for_enrichment()] == [entry_id]

    @respx.mock
    @pytest.mark.asyncio
    async def test_no_match_fails_without_writes(
        self, store: LibraryStore, game_folder: Path
    ) -> None:
        respx.get(url__startswith=SEARCH_URL).mock(return_value=httpx.Response(200, json=[]))
        entry_id = register(store, game_folder, "Qxzv Unknowable")
        before = store.get(entry_id)

        async with EnrichmentOrchestrator(store) as orchestrator:
            summary = await orchestrator.run()

        assert summary.failed == 1
        assert summary.outcomes[0].reason == "No catalog match"
        assert store.get(entry_id) == before

    @respx.mock(assert_all_called=False)
    @pytest.mark.asyncio
    async def test_details_failure_skips_reviews(
        self,
        store: LibraryStore,
        game_folder: Path,
        reviews_response: dict[str, Any],
    ) -> None:
        respx.get(STORE_URL).mock(return_value=httpx.Response(500))
        reviews = respx.get(REVIEWS_URL).mock(
            return_value=httpx.Response(200, json=reviews_response)
        )
        entry_id = register(store, game_folder, "Cyberpunk 2077")

        async with EnrichmentOrchestrator(store) as orchestrator:
            summary = await orchestrator.run()

        assert summary.failed == 1
        assert reviews.call_count == 0
        entry = store.get(entry_id)
        assert entry is not None
        assert entry.match_status is MatchStatus.PENDING

    @respx.mock
    @pytest.mark.asyncio
    async def test_reviews_failure_still_enriches(
        self,
        store: LibraryStore,
        game_folder: Path,
        store_response: dict[str, Any],
    ) -> None:
        respx.get(STORE_URL).mock(return_value=httpx.Response(200, json=store_response))
        respx.get(REVIEWS_URL).mock(return_value=httpx.Response(200, json={"success": 0}))
        respx.get(COVER_URL).mock(return_value=httpx.Response(200, content=b"c"))
        respx.get(BACKGROUND_URL).mock(return_value=httpx.Response(200, content=b"b"))
        entry_id = register(store, game_folder, "Cyberpunk 2077")

        async with EnrichmentOrchestrator(store) as orchestrator:
            summary = await orchestrator.run()

        assert summary.succeeded == 1
        entry = store.get(entry_id)
        assert entry is not None
        assert entry.review_score is None

    @respx.mock
    @pytest.mark.asyncio
    async def test_batch_cap(self, store: LibraryStore, library_root: Path) -> None:
        respx.get(url__startswith=SEARCH_URL).mock(return_value=httpx.Response(200, json=[]))
        for name in ("Qxa One", "Qxb Two", "Qxc Three"):
            folder = library_root / name
            folder.mkdir()
            register(store, folder, name)

        async with EnrichmentOrchestrator(store, batch_size=2) as orchestrator:
            summary = await orchestrator.run()

        assert summary.attempted == 2
        assert summary.failed == 2
        assert summary.remaining == 1
        assert summary.total_eligible == 3

    @respx.mock
    @pytest.mark.asyncio
    async def test_manual_edit_not_clobbered(
        self,
        store: LibraryStore,
        game_folder: Path,
        store_response: dict[str, Any],
        reviews_response: dict[str, Any],
    ) -> None:
        mock_catalog(store_response, reviews_response)
        entry_id = register(store, game_folder, "Cyberpunk 2077")
        store.update_manual_edit(entry_id, summary="My own summary", review_score=99)

        async with EnrichmentOrchestrator(store) as orchestrator:
            await orchestrator.run()

        entry = store.get(entry_id)
        assert entry is not None
        assert entry.manually_edited is True
        assert entry.summary == "My own summary"
        assert entry.review_score == 99
        assert entry.genres == ["Action", "RPG"]

    @respx.mock
    @pytest.mark.asyncio
    async def test_matched_entry_reuses_id(
        self,
        store: LibraryStore,
        game_folder: Path,
        store_response: dict[str, Any],
        reviews_response: dict[str, Any],
    ) -> None:
        """Matched entries missing images are not resolved again."""
        mock_catalog(store_response, reviews_response)
        entry_id = register(store, game_folder, "A Title Nobody Knows")
        store.update_resolution(entry_id, 1091500, 0.7)

        async with EnrichmentOrchestrator(store) as orchestrator:
            summary = await orchestrator.run()

        assert summary.succeeded == 1
        entry = store.get(entry_id)
        assert entry is not None
        assert entry.match_confidence == pytest.approx(0.7)
        assert entry.has_local_images

    @respx.mock
    @pytest.mark.asyncio
    async def test_store_write_failure_counted(
        self,
        tmp_path: Path,
        game_folder: Path,
        store_response: dict[str, Any],
        reviews_response: dict[str, Any],
    ) -> None:
        respx.get(STORE_URL).mock(return_value=httpx.Response(200, json=store_response))
        respx.get(REVIEWS_URL).mock(return_value=httpx.Response(200, json=reviews_response))
        store = FailingResolutionStore.from_url(f"sqlite:///{tmp_path / 'failing.db'}")
        register(store, game_folder, "Cyberpunk 2077")

        async with EnrichmentOrchestrator(store) as orchestrator:
            summary = await orchestrator.run()

        assert summary.failed == 1
        assert summary.outcomes[0].reason is not None
        assert "disk I/O error" in summary.outcomes[0].reason
        assert not metadata_path(game_folder).exists()
        store.dispose()

    @pytest.mark.asyncio
    async def test_list_failure_propagates(self, tmp_path: Path) -> None:
        store = BrokenListStore.from_url(f"sqlite:///{tmp_path / 'broken.db'}")

        async with EnrichmentOrchestrator(store) as orchestrator:
            with pytest.raises(StoreError):
                await orchestrator.run()
        store.dispose()

    @respx.mock
    @pytest.mark.asyncio
    async def test_progress_callback(self, store: LibraryStore, library_root: Path) -> None:
        respx.get(url__startswith=SEARCH_URL).mock(return_value=httpx.Response(200, json=[]))
        for name in ("Qxa One", "Qxb Two"):
            folder = library_root / name
            folder.mkdir()
            register(store, folder, name)
        seen: list[tuple[int, int]] = []

        def on_progress(progress: EnrichmentProgress) -> None:
            seen.append((progress.completed, progress.total))

        async with EnrichmentOrchestrator(store) as orchestrator:
            await orchestrator.run(on_progress=on_progress)

        assert seen == [(1, 2), (2, 2)]

    @pytest.mark.asyncio
    async def test_empty_library(self, store: LibraryStore) -> None:
        async with EnrichmentOrchestrator(store) as orchestrator:
            summary = await orchestrator.run()

        assert summary.attempted == 0
        assert summary.total_eligible == 0
