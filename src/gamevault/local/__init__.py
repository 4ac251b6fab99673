"""
Per-folder local data.

Writability checks, the image cache, the metadata sidecar file and the
save-backup listing.
"""

from gamevault.local.backups import BackupInfo, FolderStatus, folder_status, list_backups
from gamevault.local.images import CachedImages, ImageCache, ImageDownloadError
from gamevault.local.paths import (
    background_path,
    cover_path,
    ensure_sidecar_dir,
    is_folder_writable,
    metadata_path,
    saves_dir,
    sidecar_dir,
)
from gamevault.local.sidecar import (
    SIDECAR_SCHEMA_VERSION,
    HltbData,
    SidecarError,
    SidecarMetadata,
    read_sidecar,
    write_sidecar,
)

__all__ = [
    "SIDECAR_SCHEMA_VERSION",
    "BackupInfo",
    "CachedImages",
    "FolderStatus",
    "HltbData",
    "ImageCache",
    "ImageDownloadError",
    "SidecarError",
    "SidecarMetadata",
    "background_path",
    "cover_path",
    "ensure_sidecar_dir",
    "folder_status",
    "is_folder_writable",
    "list_backups",
    "metadata_path",
    "read_sidecar",
    "saves_dir",
    "sidecar_dir",
    "write_sidecar",
]
