"""
Data contracts for Steam API responses.

Pydantic models describing what the search, store and reviews
endpoints return, and the flattened shapes the library stores.
"""

from gamevault.ingestion.contracts.steam_reviews import (
    ReviewQuerySummary,
    ReviewStats,
    SteamReviewsResponse,
    compute_review_score,
)
from gamevault.ingestion.contracts.steam_search import SearchResult, SteamSearchResults
from gamevault.ingestion.contracts.steam_store import (
    AppId,
    GameDetails,
    Genre,
    ReleaseDate,
    SteamStoreAPIResponse,
    SteamStoreGame,
)

__all__ = [
    "AppId",
    "GameDetails",
    "Genre",
    "ReleaseDate",
    "ReviewQuerySummary",
    "ReviewStats",
    "SearchResult",
    "SteamReviewsResponse",
    "SteamSearchResults",
    "SteamStoreAPIResponse",
    "SteamStoreGame",
    "compute_review_score",
]
