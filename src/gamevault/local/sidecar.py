"""
Metadata sidecar file.

A JSON mirror of a library entry's enrichment payload, written to
``<game>/.gamevault/metadata.json`` so metadata travels with the game
folder and can be edited by hand.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from gamevault.local.paths import ensure_sidecar_dir, metadata_path
from gamevault.storage import LibraryEntry, utc_now

SIDECAR_SCHEMA_VERSION = 1


class SidecarError(Exception):
    """Raised when a sidecar exists but cannot be read or written."""


class HltbData(BaseModel):
    """Play-time estimates in minutes."""

    main_mins: int | None = None
    extra_mins: int | None = None
    completionist_mins: int | None = None

    def is_empty(self) -> bool:
        return all(
            v is None for v in (self.main_mins, self.extra_mins, self.completionist_mins)
        )


class SidecarMetadata(BaseModel):
    """On-disk sidecar format."""

    model_config = ConfigDict(extra="ignore")

    schema_version: int = SIDECAR_SCHEMA_VERSION
    title: str
    steam_app_id: int | None = None
    summary: str | None = None
    genres: list[str] | None = None
    developers: list[str] | None = None
    publishers: list[str] | None = None
    release_date: str | None = None
    review_score: int | None = None
    review_summary: str | None = None
    hltb: HltbData | None = None
    # Kept as text so an unparsable value can be told apart from a missing file
    exported_at: str = ""
    manually_edited: bool = False

    @classmethod
    def from_entry(cls, entry: LibraryEntry, exported_at: str | None = None) -> "SidecarMetadata":
        """Snapshot the enrichment payload of ``entry``."""
        hltb = HltbData(
            main_mins=entry.hltb_main_mins,
            extra_mins=entry.hltb_extra_mins,
            completionist_mins=entry.hltb_completionist_mins,
        )
        return cls(
            title=entry.title,
            steam_app_id=entry.steam_app_id,
            summary=entry.summary,
            genres=entry.genres,
            developers=entry.developers,
            publishers=entry.publishers,
            release_date=entry.release_date,
            review_score=entry.review_score,
            review_summary=entry.review_summary,
            hltb=None if hltb.is_empty() else hltb,
            exported_at=exported_at or utc_now(),
            manually_edited=entry.manually_edited,
        )

    def store_fields(self) -> dict[str, object]:
        """Fields to merge into the store: present and non-null only."""
        fields: dict[str, object] = {
            "title": self.title.strip() or None,
            "steam_app_id": (
                self.steam_app_id if self.steam_app_id and self.steam_app_id > 0 else None
            ),
            "summary": self.summary,
            "genres": self.genres,
            "developers": self.developers,
            "publishers": self.publishers,
            "release_date": self.release_date,
            "review_score": self.review_score,
            "review_summary": self.review_summary,
        }
        if self.hltb is not None:
            fields.update(
                hltb_main_mins=self.hltb.main_mins,
                hltb_extra_mins=self.hltb.extra_mins,
                hltb_completionist_mins=self.hltb.completionist_mins,
            )
        return {key: value for key, value in fields.items() if value is not None}


def read_sidecar(game_folder: str | Path) -> SidecarMetadata | None:
    """
    Load the sidecar of ``game_folder``.

    Returns None when there is no sidecar file.

    Raises:
        SidecarError: If the file exists but is unreadable or malformed
    """
    path = metadata_path(game_folder)
    if not path.is_file():
        return None
    try:
        return SidecarMetadata.model_validate_json(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise SidecarError(f"Could not read {path}: {e}") from e
    except PydanticValidationError as e:
        raise SidecarError(f"Invalid sidecar {path}: {e}") from e


def write_sidecar(game_folder: str | Path, metadata: SidecarMetadata) -> Path:
    """
    Write ``metadata`` as pretty-printed UTF-8 JSON.

    Raises:
        SidecarError: If the directory or file cannot be written
    """
    try:
        ensure_sidecar_dir(game_folder)
        path = metadata_path(game_folder)
        partial = path.with_name(path.name + ".part")
        partial.write_text(metadata.model_dump_json(indent=2), encoding="utf-8")
        partial.replace(path)
    except OSError as e:
        raise SidecarError(f"Could not write sidecar for {game_folder}: {e}") from e
    return path
