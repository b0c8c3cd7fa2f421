"""Configuration settings behaviour tests."""

from __future__ import annotations

import pytest

from app.config import DEFAULT_FEED_SOURCE_KEYS, Settings


def test_defaults_match_documented_limits() -> None:
    """Out of the box the pipeline uses the documented bounds."""

    settings = Settings(_env_file=None)

    assert settings.request_max_attempts == 3
    assert settings.request_timeout_seconds == 10.0
    assert settings.feed_max_results == 24
    assert settings.movie_source_limit == 30
    assert settings.series_source_limit == 15
    assert settings.video_site == "YouTube"
    assert str(settings.tmdb_api_url).startswith("https://api.themoviedb.org/3")


def test_feed_sources_subset_selection() -> None:
    """Settings should respect custom feed source selections and ordering."""

    settings = Settings(_env_file=None, FEED_SOURCES="on-the-air-series,upcoming-movies")

    assert settings.feed_source_keys == ("on-the-air-series", "upcoming-movies")
    assert [definition.key for definition in settings.feed_sources] == [
        "on-the-air-series",
        "upcoming-movies",
    ]


def test_feed_sources_accept_loose_spelling() -> None:
    """Feed source keys are parsed case-insensitively with underscores allowed."""

    settings = Settings(_env_file=None, FEED_SOURCES=["Now_Playing_Movies", "UPCOMING-SERIES"])

    assert settings.feed_source_keys == ("now-playing-movies", "upcoming-series")


def test_feed_sources_blank_defaults() -> None:
    """Blank feed sources fall back to every source in priority order."""

    settings = Settings(_env_file=None, FEED_SOURCES="")

    assert settings.feed_source_keys == DEFAULT_FEED_SOURCE_KEYS


def test_feed_sources_invalid_raises() -> None:
    """Unknown feed sources should raise a validation error."""

    with pytest.raises(ValueError, match="Unknown feed sources configured"):
        Settings(_env_file=None, FEED_SOURCES="does-not-exist")


def test_feed_sources_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Comma separated environment values are not parsed as JSON."""

    monkeypatch.setenv("FEED_SOURCES", "upcoming-series,upcoming-movies-later")
    monkeypatch.setenv("REQUEST_MAX_ATTEMPTS", "5")

    settings = Settings(_env_file=None)

    assert settings.feed_source_keys == ("upcoming-series", "upcoming-movies-later")
    assert settings.request_max_attempts == 5


def test_attempt_bounds_are_validated() -> None:
    with pytest.raises(ValueError):
        Settings(_env_file=None, REQUEST_MAX_ATTEMPTS=0)
