"""
Library folder scanner.

Discovers game folders directly under the library root, normalizes
their names and registers them in the library store.
"""

from dataclasses import dataclass, field
from pathlib import Path

import structlog

from gamevault.catalog.normalizer import exclusion_reason, normalize
from gamevault.storage import LibraryStore, StoreError

logger = structlog.get_logger(__name__)


@dataclass
class ScannedFolder:
    """A game folder found on disk."""

    folder_path: str
    folder_name: str
    clean_title: str
    size_bytes: int | None = None


@dataclass
class ScanSummary:
    """Result of a scan pass."""

    total_found: int = 0
    added_or_updated: int = 0
    excluded: int = 0
    failed: int = 0
    excluded_names: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, int]:
        """Counts only, for CLI/JSON output."""
        return {
            "total_found": self.total_found,
            "added_or_updated": self.added_or_updated,
            "excluded": self.excluded,
            "failed": self.failed,
        }


def estimate_folder_size(path: Path) -> int | None:
    """
    Sum the sizes of the files directly inside ``path``.

    Subdirectories are not walked; this is a cheap hint, not a total.
    Returns None when nothing could be measured.
    """
    total = 0
    try:
        for child in path.iterdir():
            try:
                if child.is_file():
                    total += child.stat().st_size
            except OSError:
                continue
    except OSError as e:
        logger.warning("Could not read folder for size estimate", folder=str(path), error=str(e))
        return None
    return total or None


class LibraryScanner:
    """
    Walks the library root and upserts every folder that looks like a game.

    Example:
        >>> scanner = LibraryScanner(store)
        >>> summary = scanner.scan(Path("/mnt/games"))
        >>> summary.added_or_updated
        42
    """

    def __init__(self, store: LibraryStore) -> None:
        self._store = store

    def discover(self, root: Path) -> tuple[list[ScannedFolder], list[str]]:
        """
        List candidate folders under ``root`` without touching the store.

        Returns:
            Included folders and the names of excluded ones
        """
        if not root.is_dir():
            logger.error("Games path does not exist", root=str(root))
            return [], []

        found: list[ScannedFolder] = []
        excluded: list[str] = []

        for child in sorted(root.iterdir()):
            if not child.is_dir():
                continue

            name = child.name
            title, included = normalize(name)
            if not included:
                reason = exclusion_reason(name) or "empty title after cleanup"
                logger.info("Excluding folder", folder=name, reason=reason)
                excluded.append(name)
                continue

            found.append(
                ScannedFolder(
                    folder_path=str(child),
                    folder_name=name,
                    clean_title=title,
                    size_bytes=estimate_folder_size(child),
                )
            )

        return found, excluded

    def scan(self, root: Path) -> ScanSummary:
        """
        Discover folders under ``root`` and upsert them into the store.

        A failed upsert is logged and counted; the scan continues.
        """
        logger.info("Starting library scan", root=str(root))
        folders, excluded = self.discover(root)
        summary = ScanSummary(
            total_found=len(folders),
            excluded=len(excluded),
            excluded_names=excluded,
        )

        for folder in folders:
            try:
                self._store.upsert(
                    folder.folder_path,
                    folder.folder_name,
                    folder.clean_title,
                    folder.size_bytes,
                )
                summary.added_or_updated += 1
            except StoreError as e:
                logger.warning("Failed to upsert folder", title=folder.clean_title, error=str(e))
                summary.failed += 1

        logger.info("Scan complete", **summary.to_dict())
        return summary
