"""Integration tests for the per-folder image cache and sidecar files."""

import os
import stat
from pathlib import Path

import httpx
import pytest
import respx

from gamevault.local import (
    FolderStatus,
    ImageCache,
    SidecarError,
    SidecarMetadata,
    cover_path,
    folder_status,
    is_folder_writable,
    list_backups,
    metadata_path,
    read_sidecar,
    saves_dir,
    write_sidecar,
)

COVER_URL = "https://cdn.example.com/apps/1/header.jpg"
BACKGROUND_URL = "https://cdn.example.com/apps/1/page_bg.jpg"

running_as_root = hasattr(os, "geteuid") and os.geteuid() == 0


class TestWritability:
    """Tests for is_folder_writable."""

    def test_creates_private_dir(self, game_folder: Path) -> None:
        assert is_folder_writable(game_folder) is True
        assert (game_folder / ".gamevault").is_dir()

    def test_existing_private_dir(self, game_folder: Path) -> None:
        (game_folder / ".gamevault").mkdir()

        assert is_folder_writable(game_folder) is True
        assert not (game_folder / ".gamevault" / ".write_test").exists()

    def test_missing_folder(self, tmp_path: Path) -> None:
        assert is_folder_writable(tmp_path / "gone") is False

    def test_blocked_private_dir(self, read_only_folder: Path) -> None:
        assert is_folder_writable(read_only_folder) is False

    @pytest.mark.skipif(running_as_root, reason="root ignores directory permissions")
    def test_read_only_permissions(self, game_folder: Path) -> None:
        game_folder.chmod(stat.S_IRUSR | stat.S_IXUSR)
        try:
            assert is_folder_writable(game_folder) is False
        finally:
            game_folder.chmod(stat.S_IRWXU)


class TestImageCache:
    """Tests for ImageCache."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_downloads_both(self, game_folder: Path) -> None:
        respx.get(COVER_URL).mock(return_value=httpx.Response(200, content=b"cover-bytes"))
        respx.get(BACKGROUND_URL).mock(return_value=httpx.Response(200, content=b"bg-bytes"))

        async with ImageCache() as cache:
            images = await cache.cache_images(game_folder, COVER_URL, BACKGROUND_URL)

        assert images.cover == str(game_folder / ".gamevault" / "cover.jpg")
        assert images.background == str(game_folder / ".gamevault" / "background.jpg")
        assert Path(images.cover).read_bytes() == b"cover-bytes"

    @respx.mock
    @pytest.mark.asyncio
    async def test_second_call_makes_no_requests(self, game_folder: Path) -> None:
        cover = respx.get(COVER_URL).mock(return_value=httpx.Response(200, content=b"c"))
        background = respx.get(BACKGROUND_URL).mock(return_value=httpx.Response(200, content=b"b"))

        async with ImageCache() as cache:
            first = await cache.cache_images(game_folder, COVER_URL, BACKGROUND_URL)
            second = await cache.cache_images(game_folder, COVER_URL, BACKGROUND_URL)

        assert first == second
        assert cover.call_count == 1
        assert background.call_count == 1

    @respx.mock
    @pytest.mark.asyncio
    async def test_force_redownloads(self, game_folder: Path) -> None:
        cover = respx.get(COVER_URL).mock(
            side_effect=[
                httpx.Response(200, content=b"old"),
                httpx.Response(200, content=b"new"),
            ]
        )

        async with ImageCache() as cache:
            await cache.cache_images(game_folder, COVER_URL, None)
            images = await cache.cache_images(game_folder, COVER_URL, None, force=True)

        assert cover.call_count == 2
        assert images.cover is not None
        assert Path(images.cover).read_bytes() == b"new"

    @respx.mock
    @pytest.mark.asyncio
    async def test_downloads_are_independent(self, game_folder: Path) -> None:
        """A failed cover does not block the background."""
        respx.get(COVER_URL).mock(return_value=httpx.Response(404))
        respx.get(BACKGROUND_URL).mock(return_value=httpx.Response(200, content=b"bg"))

        async with ImageCache() as cache:
            images = await cache.cache_images(game_folder, COVER_URL, BACKGROUND_URL)

        assert images.cover is None
        assert images.background is not None
        assert not cover_path(game_folder).exists()

    @respx.mock
    @pytest.mark.asyncio
    async def test_timeout_leaves_no_file(self, game_folder: Path) -> None:
        respx.get(COVER_URL).mock(side_effect=httpx.ReadTimeout("slow"))

        async with ImageCache() as cache:
            images = await cache.cache_images(game_folder, COVER_URL, None)

        assert images.cover is None
        assert list((game_folder / ".gamevault").iterdir()) == []

    @respx.mock
    @pytest.mark.asyncio
    async def test_read_only_folder(self, read_only_folder: Path) -> None:
        """Scenario: an unwritable folder yields no paths and no requests."""
        # No routes: any request would fail the test
        async with ImageCache() as cache:
            images = await cache.cache_images(read_only_folder, COVER_URL, BACKGROUND_URL)

        assert images.cover is None
        assert images.background is None
        assert is_folder_writable(read_only_folder) is False

    @pytest.mark.asyncio
    async def test_no_urls(self, game_folder: Path) -> None:
        async with ImageCache() as cache:
            images = await cache.cache_images(game_folder, None, None)

        assert images.cover is None
        assert images.background is None


class TestSidecarFile:
    """Tests for sidecar read/write."""

    def test_round_trip(self, game_folder: Path) -> None:
        metadata = SidecarMetadata(title="Cyberpunk 2077", steam_app_id=1091500, genres=["RPG"])

        path = write_sidecar(game_folder, metadata)

        assert path == metadata_path(game_folder)
        assert read_sidecar(game_folder) == metadata

    def test_missing(self, game_folder: Path) -> None:
        assert read_sidecar(game_folder) is None

    def test_invalid_json(self, game_folder: Path) -> None:
        path = metadata_path(game_folder)
        path.parent.mkdir()
        path.write_text("{ not json", encoding="utf-8")

        with pytest.raises(SidecarError):
            read_sidecar(game_folder)

    def test_title_required(self, game_folder: Path) -> None:
        path = metadata_path(game_folder)
        path.parent.mkdir()
        path.write_text(
            '{"schema_version": 1, "exported_at": "2024-01-01T00:00:00Z"}', encoding="utf-8"
        )

        with pytest.raises(SidecarError):
            read_sidecar(game_folder)

    def test_unknown_fields_ignored(self, game_folder: Path) -> None:
        path = metadata_path(game_folder)
        path.parent.mkdir()
        path.write_text('{"title": "Hades", "future_field": true}', encoding="utf-8")

        sidecar = read_sidecar(game_folder)

        assert sidecar is not None
        assert sidecar.title == "Hades"
        assert sidecar.exported_at == ""

    def test_write_blocked(self, read_only_folder: Path) -> None:
        with pytest.raises(SidecarError):
            write_sidecar(read_only_folder, SidecarMetadata(title="Hades"))


def make_backup(folder: Path, name: str, size: int, mtime: int) -> Path:
    saves = saves_dir(folder)
    saves.mkdir(parents=True, exist_ok=True)
    path = saves / name
    path.write_bytes(b"\0" * size)
    os.utime(path, (mtime, mtime))
    return path


class TestBackups:
    """Tests for the save-backup listing and folder status."""

    def test_saves_dir_location(self, game_folder: Path) -> None:
        assert saves_dir(game_folder) == game_folder / ".gamevault" / "saves"

    def test_no_saves_dir(self, game_folder: Path) -> None:
        assert list_backups(game_folder) == []

    def test_newest_first(self, game_folder: Path) -> None:
        make_backup(game_folder, "old.zip", 10, 1_600_000_000)
        make_backup(game_folder, "new.zip", 20, 1_700_000_000)
        make_backup(game_folder, "notes.txt", 5, 1_800_000_000)

        backups = list_backups(game_folder)

        assert [b.filename for b in backups] == ["new.zip", "old.zip"]
        assert backups[0].size_bytes == 20
        assert backups[0].path == str(saves_dir(game_folder) / "new.zip")
        if not hasattr(os.stat(backups[0].path), "st_birthtime"):
            assert backups[0].created_at == 1_700_000_000

    def test_folder_status(self, game_folder: Path) -> None:
        make_backup(game_folder, "slot1.zip", 10, 1_600_000_000)

        status = folder_status(game_folder)

        assert status.writable is True
        assert status.backup_count == 1
        assert status.backups[0].filename == "slot1.zip"

    def test_read_only_folder_status(self, read_only_folder: Path) -> None:
        assert folder_status(read_only_folder) == FolderStatus(writable=False)
