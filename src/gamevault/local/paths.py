"""
Per-game private directory layout.

Each game folder gets a hidden subdirectory (``.gamevault`` by default)
holding the cached cover, the cached background, the metadata sidecar
and a ``saves`` directory of save-game backups.
"""

from pathlib import Path

from gamevault.config import get_settings

COVER_FILENAME = "cover.jpg"
BACKGROUND_FILENAME = "background.jpg"
METADATA_FILENAME = "metadata.json"
SAVES_DIRNAME = "saves"
_WRITE_PROBE = ".write_test"


def sidecar_dir(game_folder: str | Path) -> Path:
    """Private directory for ``game_folder``."""
    return Path(game_folder) / get_settings().library.sidecar_dir_name


def cover_path(game_folder: str | Path) -> Path:
    return sidecar_dir(game_folder) / COVER_FILENAME


def background_path(game_folder: str | Path) -> Path:
    return sidecar_dir(game_folder) / BACKGROUND_FILENAME


def metadata_path(game_folder: str | Path) -> Path:
    return sidecar_dir(game_folder) / METADATA_FILENAME


def saves_dir(game_folder: str | Path) -> Path:
    """Directory holding save-game backup archives."""
    return sidecar_dir(game_folder) / SAVES_DIRNAME


def is_folder_writable(game_folder: str | Path) -> bool:
    """
    Check whether the private directory can be written.

    If the directory exists, a probe file is created and removed;
    otherwise the directory itself is created. A missing game folder
    is never writable.
    """
    folder = Path(game_folder)
    if not folder.is_dir():
        return False

    private = sidecar_dir(folder)
    if private.exists():
        probe = private / _WRITE_PROBE
        try:
            probe.touch()
            probe.unlink()
        except OSError:
            return False
        return True

    try:
        private.mkdir()
    except OSError:
        return False
    return True


def ensure_sidecar_dir(game_folder: str | Path) -> Path:
    """Create the private directory if needed and return it."""
    private = sidecar_dir(game_folder)
    private.mkdir(parents=True, exist_ok=True)
    return private

