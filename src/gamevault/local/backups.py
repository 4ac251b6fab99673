"""
Save-game backups kept in a game's private directory.

Backups are ``.zip`` archives under ``<folder>/.gamevault/saves``. This
module only reports on them; creating and restoring archives is left
to the user.
"""

from pathlib import Path

from pydantic import BaseModel, Field

from gamevault.local.paths import is_folder_writable, saves_dir
from gamevault.logger import get_logger

logger = get_logger(__name__, component="backups")

BACKUP_SUFFIX = ".zip"


class BackupInfo(BaseModel):
    """One backup archive."""

    filename: str
    path: str
    size_bytes: int = Field(..., ge=0)
    created_at: int = Field(..., description="Unix seconds")


class FolderStatus(BaseModel):
    """Storage status of one game folder."""

    writable: bool
    backup_count: int = 0
    backups: list[BackupInfo] = Field(default_factory=list)


def _created_at(path: Path) -> int:
    stat = path.stat()
    # st_birthtime only exists on some platforms
    return int(getattr(stat, "st_birthtime", stat.st_mtime))


def list_backups(game_folder: str | Path) -> list[BackupInfo]:
    """
    Backup archives for ``game_folder``, newest first.

    A missing saves directory yields an empty list. Files that vanish or
    cannot be read while listing are skipped.
    """
    saves = saves_dir(game_folder)
    if not saves.is_dir():
        return []

    backups: list[BackupInfo] = []
    for path in saves.iterdir():
        if not path.is_file() or path.suffix.lower() != BACKUP_SUFFIX:
            continue
        try:
            backups.append(
                BackupInfo(
                    filename=path.name,
                    path=str(path),
                    size_bytes=path.stat().st_size,
                    created_at=_created_at(path),
                )
            )
        except OSError as e:
            logger.warning("Could not read backup", path=str(path), error=str(e))

    backups.sort(key=lambda b: (b.created_at, b.filename), reverse=True)
    return backups


def folder_status(game_folder: str | Path) -> FolderStatus:
    """Writability plus the backup listing; backups are only listed when writable."""
    if not is_folder_writable(game_folder):
        return FolderStatus(writable=False)
    backups = list_backups(game_folder)
    return FolderStatus(writable=True, backup_count=len(backups), backups=backups)
