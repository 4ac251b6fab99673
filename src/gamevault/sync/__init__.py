"""Store and sidecar synchronization."""

from gamevault.sync.reconciler import (
    ExportOutcome,
    ExportStatus,
    ExportSummary,
    ImportOutcome,
    ImportStatus,
    ImportSummary,
    MergeAction,
    MergeDecision,
    SyncReconciler,
    reconcile,
)

__all__ = [
    "ExportOutcome",
    "ExportStatus",
    "ExportSummary",
    "ImportOutcome",
    "ImportStatus",
    "ImportSummary",
    "MergeAction",
    "MergeDecision",
    "SyncReconciler",
    "reconcile",
]
