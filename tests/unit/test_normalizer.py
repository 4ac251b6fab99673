"""Tests for folder name normalization."""

import pytest

from gamevault.catalog import clean_title, exclusion_reason, normalize


class TestCleanTitle:
    """Tests for the removal rules."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Cyberpunk 2077 [FitGirl Repack]", "Cyberpunk 2077"),
            ("Elden Ring [DODI Repack]", "Elden Ring"),
            ("Hollow Knight v1.5.78.11833", "Hollow Knight"),
            ("Frostpunk (GOG)", "Frostpunk"),
            ("Stardew Valley Portable by Someone", "Stardew Valley"),
            ("Fallout 4 NG - HRTP [FitGirl Repack]", "Fallout 4 NG"),
            ("  Hades   II  ", "Hades II"),
        ],
    )
    def test_cleanup(self, raw: str, expected: str) -> None:
        """Test that release tags, versions and notes are removed."""
        assert clean_title(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [
            "Cyberpunk 2077 [FitGirl Repack]",
            "Fallout 4 NG - HRTP [FitGirl Repack]",
            "Some Game v2.0 (Build 123) [DODI Repack]",
            "Portable by X",
            "Game" + " by a" * 12,
            "",
        ],
    )
    def test_idempotent(self, raw: str) -> None:
        """Cleaning an already clean title changes nothing."""
        once = normalize(raw).clean_title
        assert normalize(once).clean_title == once

    def test_stacked_suffixes_fully_removed(self) -> None:
        assert clean_title("Game" + " by a" * 12) == "Game"


class TestExclusion:
    """Tests for the inclusion verdict."""

    def test_game_folder_included(self) -> None:
        """Scenario: a repack folder is a game."""
        result = normalize("Cyberpunk 2077 [FitGirl Repack]")

        assert result.clean_title == "Cyberpunk 2077"
        assert result.included is True

    def test_tv_episode_excluded(self) -> None:
        """Scenario: a video file name is never a game."""
        result = normalize("Movie.Title.S01E05.1080p.mkv")

        assert result.included is False
        assert exclusion_reason("Movie.Title.S01E05.1080p.mkv") is not None

    @pytest.mark.parametrize(
        "raw",
        [
            ".hidden",
            "GameVault",
            "game-library-app",
            "Adult",
            "Backup.rar",
            "Archive.ZIP",
            "Some Movie [1080p]",
            "Film [YTS.MX]",
            "clip.mp4",
        ],
    )
    def test_reserved_and_media_excluded(self, raw: str) -> None:
        """Test hidden, housekeeping, archive and media names."""
        assert normalize(raw).included is False

    def test_empty_title_excluded(self) -> None:
        """A name that cleans down to nothing is excluded."""
        result = normalize("[FitGirl Repack]")

        assert result.clean_title == ""
        assert result.included is False
        assert exclusion_reason("[FitGirl Repack]") is None
