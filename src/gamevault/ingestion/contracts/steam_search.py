"""
Data contracts for the Steam community app search.

The endpoint returns a bare JSON list of ``{appid, name, icon, logo}``
objects, with ``appid`` as a string.
"""

from pydantic import AliasChoices, BaseModel, Field


class SearchResult(BaseModel):
    """One search hit."""

    appid: int = Field(..., gt=0, validation_alias=AliasChoices("appid", "id"))
    name: str = Field(..., min_length=1)


class SteamSearchResults(BaseModel):
    """Search hits in the order the endpoint returned them."""

    query: str
    results: list[SearchResult] = Field(default_factory=list)
    dropped: int = Field(default=0, description="Malformed items that were skipped")
