"""
Domain models for library entries.

These Pydantic models are what the rest of the application sees;
ORM records never leave the store.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MatchStatus(str, Enum):
    """Catalog resolution state of an entry."""

    PENDING = "pending"
    MATCHED = "matched"


class LibraryEntry(BaseModel):
    """A game folder and its enrichment payload."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    folder_path: str
    folder_name: str
    title: str

    steam_app_id: int | None = None
    match_confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    match_status: MatchStatus = MatchStatus.PENDING

    summary: str | None = None
    release_date: str | None = None
    genres: list[str] | None = None
    developers: list[str] | None = None
    publishers: list[str] | None = None

    cover_url: str | None = None
    background_url: str | None = None
    local_cover_path: str | None = None
    local_background_path: str | None = None

    review_score: int | None = None
    review_count: int | None = None
    review_summary: str | None = None

    hltb_main_mins: int | None = None
    hltb_extra_mins: int | None = None
    hltb_completionist_mins: int | None = None

    size_bytes: int | None = None
    manually_edited: bool = False

    created_at: str
    updated_at: str

    @property
    def is_matched(self) -> bool:
        """True once the entry has been resolved to a catalog id."""
        return self.match_status == MatchStatus.MATCHED

    @property
    def has_local_images(self) -> bool:
        """True when both images are cached locally."""
        return self.local_cover_path is not None and self.local_background_path is not None


class LibraryStats(BaseModel):
    """Aggregate counts over the library."""

    total_games: int = 0
    matched_games: int = 0
    pending_games: int = 0
    enriched_games: int = 0
    manually_edited_games: int = 0
