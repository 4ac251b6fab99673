"""Shared pytest fixtures."""

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
import structlog

from gamevault.config import get_settings
from gamevault.storage import LibraryStore

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> Any:
    """Load a JSON fixture file."""
    with (FIXTURES_DIR / name).open(encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Point settings at temporary paths and disable request pacing."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GAMEVAULT_DATABASE_URL", f"sqlite:///{tmp_path / 'gamevault.db'}")
    monkeypatch.setenv("GAMEVAULT_GAME_LIBRARY", str(tmp_path / "library"))
    monkeypatch.setenv("ENRICH_REQUEST_DELAY_SECONDS", "0")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Drop logging config bound to pytest's per-test capture streams."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def store(tmp_path: Path) -> Iterator[LibraryStore]:
    """Library store on a fresh SQLite file."""
    library_store = LibraryStore.from_url(f"sqlite:///{tmp_path / 'test.db'}")
    yield library_store
    library_store.dispose()


@pytest.fixture
def library_root(tmp_path: Path) -> Path:
    root = tmp_path / "library"
    root.mkdir()
    return root


@pytest.fixture
def game_folder(library_root: Path) -> Path:
    folder = library_root / "Cyberpunk 2077 [FitGirl Repack]"
    folder.mkdir()
    (folder / "setup.exe").write_bytes(b"\0" * 1024)
    return folder


@pytest.fixture
def read_only_folder(library_root: Path) -> Path:
    """
    A game folder whose private directory cannot be created.

    A regular file occupies the private directory's name, which blocks
    writes even when tests run as root.
    """
    folder = library_root / "Hades"
    folder.mkdir()
    (folder / ".gamevault").write_text("not a directory", encoding="utf-8")
    return folder


@pytest.fixture
def store_response() -> dict[str, Any]:
    return load_fixture("steam_store_response.json")


@pytest.fixture
def reviews_response() -> dict[str, Any]:
    return load_fixture("steam_reviews_response.json")


@pytest.fixture
def search_response() -> list[dict[str, Any]]:
    return load_fixture("steam_search_response.json")
