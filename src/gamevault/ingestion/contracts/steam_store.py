"""
Data contracts for Steam Store API responses.

These Pydantic models define the subset of /appdetails that the
library keeps, plus the flattened details handed to the rest of
the application.
"""

from typing import Annotated

from pydantic import BaseModel, Field, field_validator


class ReleaseDate(BaseModel):
    """Release date information."""

    coming_soon: bool = Field(default=False, description="Whether the game is not yet released")
    date: str | None = Field(default=None, description="Release date string")


class Genre(BaseModel):
    """Game genre."""

    id: str
    description: str

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: int | str) -> str:
        """Steam sends genre ids as strings, but not always."""
        return str(v)


class SteamStoreGame(BaseModel):
    """
    Game data from the Steam Store API.

    Represents the ``data`` object of an /appdetails entry.
    """

    steam_appid: int = Field(..., description="Steam application ID")
    name: str = Field(..., description="Game name")
    type: str = Field(default="game", description="Type: game, dlc, demo, etc.")

    short_description: str | None = Field(default=None, description="Brief description")

    developers: list[str] = Field(default_factory=list)
    publishers: list[str] = Field(default_factory=list)
    genres: list[Genre] = Field(default_factory=list)

    release_date: ReleaseDate = Field(default_factory=ReleaseDate)

    header_image: str | None = Field(default=None, description="Header image URL (cover)")
    background: str | None = Field(default=None, description="Background image URL")

    @field_validator("developers", "publishers", "genres", mode="before")
    @classmethod
    def none_to_empty(cls, v: list[object] | None) -> list[object]:
        """Treat explicit nulls as empty lists."""
        return v or []

    @property
    def genre_names(self) -> list[str]:
        """Genre descriptions in API order."""
        return [g.description for g in self.genres]


class SteamStoreAPIResponse(BaseModel):
    """
    One per-id entry of the /appdetails response.

    The API returns ``{app_id: {success: bool, data: {...}}}``.
    """

    success: bool
    data: SteamStoreGame | None = None


def _unique(values: list[str]) -> list[str]:
    """Drop blanks and duplicates, keeping first-seen order."""
    seen: dict[str, None] = {}
    for value in values:
        value = value.strip()
        if value:
            seen.setdefault(value, None)
    return list(seen)


class GameDetails(BaseModel):
    """Descriptive metadata for one catalog id."""

    app_id: int
    name: str
    description: str | None = None
    cover_url: str | None = None
    background_url: str | None = None
    developers: list[str] = Field(default_factory=list)
    publishers: list[str] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
    release_date: str | None = None

    @classmethod
    def from_store_game(cls, game: SteamStoreGame) -> "GameDetails":
        """Flatten an /appdetails payload."""
        return cls(
            app_id=game.steam_appid,
            name=game.name,
            description=game.short_description or None,
            cover_url=game.header_image or None,
            background_url=game.background or None,
            developers=_unique(game.developers),
            publishers=_unique(game.publishers),
            genres=_unique(game.genre_names),
            release_date=game.release_date.date or None,
        )


# Positive Steam application id
AppId = Annotated[int, Field(gt=0, description="Steam App ID")]
