"""Tests for Steam API data contracts."""

from typing import Any

import pytest
from pydantic import ValidationError

from gamevault.ingestion.contracts import (
    GameDetails,
    ReviewQuerySummary,
    ReviewStats,
    SearchResult,
    SteamReviewsResponse,
    SteamStoreAPIResponse,
    SteamStoreGame,
    compute_review_score,
)


class TestComputeReviewScore:
    """Tests for the local review score."""

    def test_no_reviews(self) -> None:
        assert compute_review_score(0, 0) == 0

    def test_exact_percentage(self) -> None:
        assert compute_review_score(75, 25) == 75

    @pytest.mark.parametrize(
        ("positive", "negative", "expected"),
        [
            (1, 2, 33),
            (2, 1, 67),
            (1, 7, 13),
            (1, 0, 100),
            (0, 5, 0),
            (600000, 100000, 86),
        ],
    )
    def test_rounding(self, positive: int, negative: int, expected: int) -> None:
        """Scores round half up."""
        assert compute_review_score(positive, negative) == expected


class TestSteamStoreGame:
    """Tests for SteamStoreGame model."""

    def test_parse(self, store_response: dict[str, Any]) -> None:
        game = SteamStoreGame.model_validate(store_response["1091500"]["data"])

        assert game.steam_appid == 1091500
        assert game.name == "Cyberpunk 2077"
        assert game.genre_names == ["Action", "RPG"]
        assert game.release_date.date == "10 Dec, 2020"

    def test_null_lists(self) -> None:
        """Steam sometimes sends null instead of an empty list."""
        game = SteamStoreGame.model_validate(
            {"steam_appid": 1, "name": "Test", "developers": None, "genres": None}
        )

        assert game.developers == []
        assert game.genres == []

    def test_numeric_genre_id(self) -> None:
        game = SteamStoreGame.model_validate(
            {"steam_appid": 1, "name": "Test", "genres": [{"id": 23, "description": "Indie"}]}
        )

        assert game.genres[0].id == "23"

    def test_unsuccessful_wrapper(self) -> None:
        wrapper = SteamStoreAPIResponse.model_validate({"success": False})

        assert wrapper.success is False
        assert wrapper.data is None


class TestGameDetails:
    """Tests for the flattened details model."""

    def test_from_store_game(self, store_response: dict[str, Any]) -> None:
        game = SteamStoreGame.model_validate(store_response["1091500"]["data"])

        details = GameDetails.from_store_game(game)

        assert details.app_id == 1091500
        assert details.cover_url is not None
        assert details.cover_url.endswith("header.jpg")
        assert details.background_url is not None
        assert details.genres == ["Action", "RPG"]
        assert details.developers == ["CD PROJEKT RED"]

    def test_duplicates_and_blanks_dropped(self) -> None:
        game = SteamStoreGame.model_validate(
            {
                "steam_appid": 1,
                "name": "Test",
                "developers": ["Studio", " Studio ", "", "Other"],
                "short_description": "",
                "release_date": {"coming_soon": True, "date": ""},
            }
        )

        details = GameDetails.from_store_game(game)

        assert details.developers == ["Studio", "Other"]
        assert details.description is None
        assert details.release_date is None


class TestReviews:
    """Tests for review contracts."""

    def test_success_flag(self, reviews_response: dict[str, Any]) -> None:
        response = SteamReviewsResponse.model_validate(reviews_response)

        assert response.is_successful is True
        assert response.query_summary is not None
        assert response.query_summary.total_reviews == 700000

    def test_failure_flag(self) -> None:
        response = SteamReviewsResponse.model_validate({"success": 2})

        assert response.is_successful is False

    def test_stats_from_summary(self) -> None:
        summary = ReviewQuerySummary(
            total_positive=75,
            total_negative=25,
            total_reviews=100,
            review_score_desc="Mostly Positive",
        )

        stats = ReviewStats.from_summary(summary)

        assert stats.score == 75
        assert stats.count == 100
        assert stats.summary == "Mostly Positive"

    def test_stats_without_reviews(self) -> None:
        stats = ReviewStats.from_summary(ReviewQuerySummary())

        assert stats.score == 0
        assert stats.count == 0


class TestSearchResult:
    """Tests for search hits."""

    def test_string_appid(self) -> None:
        hit = SearchResult.model_validate({"appid": "367520", "name": "Hollow Knight"})

        assert hit.appid == 367520

    def test_id_alias(self) -> None:
        hit = SearchResult.model_validate({"id": 10, "name": "Foo"})

        assert hit.appid == 10

    @pytest.mark.parametrize(
        "payload",
        [
            {"appid": "abc", "name": "Foo"},
            {"appid": "0", "name": "Foo"},
            {"appid": "10", "name": ""},
            {"name": "Foo"},
        ],
    )
    def test_invalid(self, payload: dict[str, Any]) -> None:
        with pytest.raises(ValidationError):
            SearchResult.model_validate(payload)
