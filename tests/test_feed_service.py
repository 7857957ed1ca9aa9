from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from anifeed.models import FeedItem, RawFeedItem
from anifeed.services import filter_feed_items, parse_feed_items, reconcile_season_feed

from conftest import FakeSource, prequel

BASE_TIME = datetime(2024, 10, 1, 12, 0, 0, tzinfo=timezone.utc)
INFO_HASH = "c12fe1c06bba254a9dc9f519b335aa7c1367a88a"


def raw(title, day=0, **kwargs):
    return {"title": title, "publishedAt": BASE_TIME + timedelta(days=day), **kwargs}


def test_parse_feed_items_attaches_parsed_fields():
    items = parse_feed_items([
        raw("[Lilith-Raws] Jujutsu Kaisen S02 - 23 [Baha][WebDL 1080p AVC AAC][CHT]",
            magnetLink=f"magnet:?xt=urn:btih:{INFO_HASH}&dn=test", fileSize=1610612736),
    ])
    item = items[0]
    assert item.episode == 23
    assert item.resolution == "1080p"
    assert item.subgroup == "Lilith-Raws"
    assert item.torrent_hash == INFO_HASH.upper()
    assert item.formatted_size == "1.5 GB"


def test_parse_feed_items_keeps_already_parsed_items():
    item = FeedItem(title="[G] Title - 01", published_at=BASE_TIME, episode=99)
    assert parse_feed_items([item])[0] is item

    parsed = parse_feed_items([RawFeedItem(title="[G] Title - 01", published_at=BASE_TIME)])
    assert parsed[0].episode == 1


@pytest.mark.asyncio
async def test_reconcile_with_sort_map_context():
    feed = await reconcile_season_feed(
        "咒术回战 第二季",
        [raw("[G] Jujutsu Kaisen - 31 [1080p]", 0), raw("[G] Jujutsu Kaisen - 32 [1080p]", 1)],
        {"episodeSortMap": [{"ep": 3, "sort": 31}, {"ep": 4, "sort": 32}]},
    )
    assert feed.episode_offset == 28
    assert [i.normalized_episode for i in feed.items] == [4, 3]
    assert feed.latest_episode == 4
    assert feed.latest_published_at == BASE_TIME + timedelta(days=1)
    assert feed.season_number == 2


@pytest.mark.asyncio
async def test_reconcile_movie_context():
    feed = await reconcile_season_feed(
        "剧场版",
        [raw("[G] Movie - 25 [1080p]", 0), raw("[G] Movie - 26 [1080p]", 1)],
        {"isMovieOrSingleEpisode": True},
    )
    assert feed.episode_offset == 0
    assert feed.offset_strategy == "movie"
    assert all(i.normalized_episode == 1 for i in feed.items)


@pytest.mark.asyncio
async def test_reconcile_lazily_loads_from_primary():
    primary = FakeSource(
        classification={"200": False},
        relations={"200": [prequel("100")]},
        totals={"100": 24},
    )
    feed = await reconcile_season_feed(
        "Title Season 2",
        [raw("[G] Title - 25 [1080p]"), raw("[G] Title S02E02 [1080p]", 1)],
        {"subjectId": "200"},
        primary=primary,
    )
    assert feed.offset_strategy == "prequel"
    assert feed.episode_offset == 24
    assert sorted(i.normalized_episode for i in feed.items) == [1, 2]


@pytest.mark.asyncio
async def test_reconcile_without_context_defaults_to_zero_offset():
    feed = await reconcile_season_feed("Title", [raw("[G] Title - 05 [1080p]")])
    assert feed.offset_strategy == "default"
    assert feed.items[0].normalized_episode == 5


@pytest_asyncio.fixture
async def season_two_feed():
    primary = FakeSource(classification={"200": False}, sort_maps={"200": {1: 25, 2: 26, 3: 27}})
    return await reconcile_season_feed(
        "Title Season 2",
        [
            raw("[A] Title - 25 [1080p][CHS]", 0),
            raw("[B] Title - 26 [720p][CHT]", 1),
            raw("[A] Title - 27 [1080p][CHS]", 2),
        ],
        {"subjectId": "200"},
        primary=primary,
    )


@pytest.mark.asyncio
async def test_reconciled_feed_filter_options(season_two_feed):
    assert season_two_feed.offset_strategy == "sort_map"
    assert [i.normalized_episode for i in season_two_feed.items] == [3, 2, 1]
    assert season_two_feed.available_subgroups == ["A", "B"]
    assert season_two_feed.available_resolutions == ["1080p", "720p"]
    assert season_two_feed.latest_title == "[A] Title - 27 [1080p][CHS]"

    filtered = filter_feed_items(season_two_feed.items, subgroup="A")
    assert [i.normalized_episode for i in filtered] == [3, 1]


def test_filter_feed_items():
    items = parse_feed_items([
        raw("[A] Title - 01 [720p][CHS]", 0),
        raw("[B] Title - 02 [1080p][CHT]", 1),
        raw("[A] Title - 03 [1080p][CHS]", 2),
    ])

    assert [i.episode for i in filter_feed_items(items, resolution="1080P")] == [3, 2]
    assert [i.episode for i in filter_feed_items(items, subgroup="a")] == [3, 1]
    assert [i.episode for i in filter_feed_items(items, subtitle_type="CHT")] == [2]
    assert [i.episode for i in filter_feed_items(items, resolution="1080p", subgroup="A")] == [3]
    assert len(filter_feed_items(items, resolution="all", subgroup="", subtitle_type=None)) == 3
    assert filter_feed_items(items, subgroup="C") == []


def test_filter_feed_items_accepts_naive_timestamps():
    items = parse_feed_items([
        RawFeedItem(title="[A] Title - 01 [1080p]", published_at=datetime(2024, 1, 3)),
        RawFeedItem(title="[A] Title - 02 [1080p]", published_at=datetime(2024, 1, 2, tzinfo=timezone.utc)),
    ])
    assert [i.episode for i in filter_feed_items(items, subgroup="A")] == [1, 2]
