from datetime import date, datetime, timedelta, timezone

from app.models import (
    CatalogEntity,
    CatalogPage,
    PromotionalVideo,
    RankedFeedItem,
    decode_entities,
    decode_videos,
)


def test_series_payload_maps_name_and_first_air_date():
    entity = CatalogEntity.model_validate(
        {
            "kind": "series",
            "id": 94997,
            "name": "House of the Dragon",
            "original_name": "House of the Dragon",
            "first_air_date": "2022-08-21",
            "backdrop_path": "/backdrop.jpg",
        }
    )

    assert entity.title == "House of the Dragon"
    assert entity.original_title == "House of the Dragon"
    assert entity.release_date == date(2022, 8, 21)
    assert entity.backdrop_url() == "https://image.tmdb.org/t/p/w1280/backdrop.jpg"


def test_malformed_release_date_decodes_to_none():
    entity = CatalogEntity(kind="movie", id=1, title="Untitled", release_date="TBA")

    assert entity.release_date is None
    assert entity.year is None


def test_decode_entities_skips_invalid_items():
    entities = decode_entities(
        [
            {"id": 1, "title": "Valid"},
            {"id": "not-a-number", "title": "Broken"},
            {"id": 3},
            "junk",
            {"id": 4, "name": "Also Valid"},
        ],
        kind="movie",
    )

    assert [entity.id for entity in entities] == [1, 4]
    assert all(entity.kind == "movie" for entity in entities)


def test_catalog_page_tolerates_missing_fields():
    page = CatalogPage.from_payload({"results": None, "page": "x"}, kind="series")

    assert page.page == 1
    assert page.results == []
    assert CatalogPage.from_payload(["unexpected"], kind="movie").results == []


def test_card_uses_placeholders_for_missing_values():
    entity = CatalogEntity(kind="movie", id=12, title="Mystery Film")

    assert entity.to_card() == {
        "id": 12,
        "kind": "movie",
        "title": "Mystery Film",
        "poster": None,
        "backdrop": None,
        "year": "TBA",
        "rating": "0.0",
        "genre": "Unknown",
    }


def test_card_formats_rating_and_custom_image_base():
    entity = CatalogEntity(
        kind="movie",
        id=603,
        title="The Matrix",
        poster_path="/matrix.jpg",
        vote_average=8.218,
        release_date="1999-03-30",
        genres=[{"id": 28, "name": "Action"}],
    )

    card = entity.to_card(base_url="https://cdn.example.com/t/p/")

    assert card["poster"] == "https://cdn.example.com/t/p/w500/matrix.jpg"
    assert card["rating"] == "8.2"
    assert card["year"] == "1999"
    assert card["genre"] == "Action"


def test_video_timestamps_are_timezone_aware():
    zulu = PromotionalVideo(
        key="a", site="YouTube", type="Trailer", published_at="2024-05-01T16:00:06.000Z"
    )
    naive = PromotionalVideo(
        key="b", site="YouTube", type="Teaser", published_at="2024-05-01T16:00:06"
    )
    offset = PromotionalVideo(
        key="c", site="YouTube", type="Clip", published_at="2024-05-01T18:00:06+02:00"
    )

    assert zulu.published_at == datetime(2024, 5, 1, 16, 0, 6, tzinfo=timezone.utc)
    assert naive.published_at == zulu.published_at
    assert offset.published_at == zulu.published_at
    assert offset.published_at.utcoffset() == timedelta(hours=2)


def test_video_optional_fields_stay_absent():
    videos = decode_videos(
        [
            {"key": "abc", "site": "YouTube", "type": "Featurette", "published_at": "soon"},
            {"key": "def", "site": "YouTube", "type": "Webisode"},
        ]
    )

    assert len(videos) == 1
    assert videos[0].official is None
    assert videos[0].published_at is None
    assert videos[0].watch_url == "https://www.youtube.com/watch?v=abc"


def test_ranked_item_payload_includes_video_metadata():
    published = datetime(2024, 7, 4, 9, 30, tzinfo=timezone.utc)
    item = RankedFeedItem(
        entity=CatalogEntity(kind="series", id=5, title="Pilot Season"),
        video=PromotionalVideo(
            key="xyz", site="YouTube", type="Trailer", official=True, published_at=published
        ),
        published_at=published,
    )

    payload = item.to_payload()

    assert payload["id"] == 5
    assert payload["kind"] == "series"
    assert payload["video"]["url"] == "https://www.youtube.com/watch?v=xyz"
    assert payload["video"]["official"] is True
    assert payload["publishedAt"] == "2024-07-04T09:30:00+00:00"
