from datetime import date, datetime, timezone

import pytest

from app.utils import build_image_url, parse_date, parse_timestamp, upstream_segment


def test_parse_date_accepts_iso_prefix():
    assert parse_date("2024-02-27") == date(2024, 2, 27)
    assert parse_date("2024-02-27T00:00:00Z") == date(2024, 2, 27)


@pytest.mark.parametrize("value", ["", "TBA", "2024-13-40", None, 20240227])
def test_parse_date_rejects_unusable_values(value):
    assert parse_date(value) is None


def test_parse_timestamp_handles_zulu_suffix():
    assert parse_timestamp("2024-05-01T16:00:06.000Z") == datetime(
        2024, 5, 1, 16, 0, 6, tzinfo=timezone.utc
    )


def test_parse_timestamp_rejects_garbage():
    assert parse_timestamp("yesterday") is None
    assert parse_timestamp("   ") is None


def test_build_image_url_joins_size_and_path():
    assert build_image_url("/a.jpg", "https://image.tmdb.org/t/p/", "w342") == (
        "https://image.tmdb.org/t/p/w342/a.jpg"
    )
    assert build_image_url(None, "https://image.tmdb.org/t/p", "w342") is None
    assert build_image_url("https://cdn/x.jpg", "ignored", "w342") == "https://cdn/x.jpg"


def test_upstream_segment_maps_series_to_tv():
    assert upstream_segment("movie") == "movie"
    assert upstream_segment("series") == "tv"
    with pytest.raises(ValueError):
        upstream_segment("person")
