"""
Store and sidecar synchronization.

The store and the sidecar file are two timestamped replicas of the same
payload. ``reconcile`` decides, without touching disk or database,
whether a sidecar should be merged into the store; ``SyncReconciler``
performs the actual export and import passes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from gamevault.local.paths import is_folder_writable
from gamevault.local.sidecar import SidecarError, SidecarMetadata, read_sidecar, write_sidecar
from gamevault.logger import get_logger
from gamevault.storage import LibraryEntry, LibraryStore, StoreError, parse_timestamp


class MergeAction(str, Enum):
    IMPORT = "import"
    SKIP = "skip"


@dataclass(frozen=True)
class MergeDecision:
    """Outcome of comparing a sidecar with its store row."""

    action: MergeAction
    reason: str
    updates: dict[str, Any] = field(default_factory=dict)

    @property
    def should_import(self) -> bool:
        return self.action is MergeAction.IMPORT


def reconcile(sidecar: SidecarMetadata, store_updated_at: str | None) -> MergeDecision:
    """
    Decide whether ``sidecar`` wins over the store row.

    The store wins only when both timestamps parse and the sidecar's
    ``exported_at`` is not strictly later than ``store_updated_at``.
    In every other case the sidecar's non-null fields are merged.
    """
    sidecar_time = parse_timestamp(sidecar.exported_at)
    store_time = parse_timestamp(store_updated_at)

    if sidecar_time is not None and store_time is not None and sidecar_time <= store_time:
        return MergeDecision(
            action=MergeAction.SKIP,
            reason=(
                f"Database is newer ({store_time.isoformat()} vs {sidecar_time.isoformat()})"
            ),
        )

    if sidecar_time is None:
        reason = f"Sidecar timestamp unparsable ({sidecar.exported_at!r})"
    elif store_time is None:
        reason = f"Database timestamp unparsable ({store_updated_at!r})"
    else:
        reason = f"Sidecar is newer ({sidecar_time.isoformat()} vs {store_time.isoformat()})"

    return MergeDecision(action=MergeAction.IMPORT, reason=reason, updates=sidecar.store_fields())


class ExportStatus(str, Enum):
    EXPORTED = "exported"
    SKIPPED = "skipped"
    FAILED = "failed"


class ImportStatus(str, Enum):
    IMPORTED = "imported"
    SKIPPED = "skipped"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass
class ExportOutcome:
    status: ExportStatus
    entry_id: int
    path: str | None = None
    reason: str | None = None


@dataclass
class ImportOutcome:
    status: ImportStatus
    entry_id: int
    reason: str | None = None
    entry: LibraryEntry | None = None


@dataclass
class ExportSummary:
    exported: int = 0
    skipped: int = 0
    failed: int = 0
    total: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "exported": self.exported,
            "skipped": self.skipped,
            "failed": self.failed,
            "total": self.total,
        }


@dataclass
class ImportSummary:
    imported: int = 0
    skipped: int = 0
    not_found: int = 0
    failed: int = 0
    total: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "imported": self.imported,
            "skipped": self.skipped,
            "not_found": self.not_found,
            "failed": self.failed,
            "total": self.total,
        }


class SyncReconciler:
    """
    Moves metadata between the store and per-folder sidecars.

    Example:
        >>> sync = SyncReconciler(store)
        >>> sync.export_entry(store.get(1)).status
        <ExportStatus.EXPORTED: 'exported'>
    """

    def __init__(self, store: LibraryStore) -> None:
        self._store = store
        self._logger = get_logger(__name__, component="sync")

    def export_entry(self, entry: LibraryEntry) -> ExportOutcome:
        """Write the sidecar for one entry. Never raises for file errors."""
        if not is_folder_writable(entry.folder_path):
            self._logger.warning(
                "Game folder not writable, skipping export", folder=entry.folder_path
            )
            return ExportOutcome(
                status=ExportStatus.FAILED,
                entry_id=entry.id,
                reason=f"Game folder not writable: {entry.folder_path}",
            )
        try:
            path = write_sidecar(entry.folder_path, SidecarMetadata.from_entry(entry))
        except SidecarError as e:
            self._logger.warning("Export failed", entry_id=entry.id, error=str(e))
            return ExportOutcome(status=ExportStatus.FAILED, entry_id=entry.id, reason=str(e))

        self._logger.debug("Exported metadata", entry_id=entry.id, path=str(path))
        return ExportOutcome(status=ExportStatus.EXPORTED, entry_id=entry.id, path=str(path))

    def import_entry(self, entry: LibraryEntry) -> ImportOutcome:
        """Merge one entry's sidecar into the store if it is newer."""
        try:
            sidecar = read_sidecar(entry.folder_path)
        except SidecarError as e:
            self._logger.warning("Could not read sidecar", entry_id=entry.id, error=str(e))
            return ImportOutcome(status=ImportStatus.FAILED, entry_id=entry.id, reason=str(e))

        if sidecar is None:
            return ImportOutcome(status=ImportStatus.NOT_FOUND, entry_id=entry.id)

        decision = reconcile(sidecar, entry.updated_at)
        if not decision.should_import:
            self._logger.debug("Skipping import", entry_id=entry.id, reason=decision.reason)
            return ImportOutcome(
                status=ImportStatus.SKIPPED, entry_id=entry.id, reason=decision.reason
            )

        try:
            updated = self._store.apply_import(
                entry.id,
                decision.updates,
                manually_edited=sidecar.manually_edited,
            )
        except StoreError as e:
            self._logger.error("Import write failed", entry_id=entry.id, error=str(e))
            return ImportOutcome(status=ImportStatus.FAILED, entry_id=entry.id, reason=str(e))

        self._logger.info("Imported metadata", entry_id=entry.id, title=updated.title)
        return ImportOutcome(
            status=ImportStatus.IMPORTED,
            entry_id=entry.id,
            reason=decision.reason,
            entry=updated,
        )

    def export_all(self) -> ExportSummary:
        """Export every matched entry; entries without a Steam id are skipped."""
        summary = ExportSummary()
        for entry in self._store.list_all():
            summary.total += 1
            if entry.steam_app_id is None:
                summary.skipped += 1
                continue
            outcome = self.export_entry(entry)
            if outcome.status is ExportStatus.EXPORTED:
                summary.exported += 1
            else:
                summary.failed += 1

        self._logger.info("Export complete", **summary.to_dict())
        return summary

    def import_all(self) -> ImportSummary:
        """Run the import decision for every entry."""
        summary = ImportSummary()
        for entry in self._store.list_all():
            summary.total += 1
            outcome = self.import_entry(entry)
            if outcome.status is ImportStatus.IMPORTED:
                summary.imported += 1
            elif outcome.status is ImportStatus.SKIPPED:
                summary.skipped += 1
            elif outcome.status is ImportStatus.NOT_FOUND:
                summary.not_found += 1
            else:
                summary.failed += 1

        self._logger.info("Import complete", **summary.to_dict())
        return summary
