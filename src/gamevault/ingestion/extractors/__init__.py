"""
Data extractors for Steam APIs.

Search, store details and review summary extractors, all built on
a common base with error classification and structured logging.
"""

from gamevault.ingestion.extractors.base import (
    APIError,
    BaseExtractor,
    ExtractionError,
    ExtractionResult,
    RateLimitError,
    ValidationError,
)
from gamevault.ingestion.extractors.steam_reviews import SteamReviewsExtractor
from gamevault.ingestion.extractors.steam_search import SteamSearchExtractor
from gamevault.ingestion.extractors.steam_store import SteamStoreExtractor

__all__ = [
    # Base classes and errors
    "APIError",
    "BaseExtractor",
    "ExtractionError",
    "ExtractionResult",
    "RateLimitError",
    "ValidationError",
    # Extractors
    "SteamReviewsExtractor",
    "SteamSearchExtractor",
    "SteamStoreExtractor",
]
