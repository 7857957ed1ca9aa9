import pytest

from anifeed.metadata_sources import (
    AniListMetadataSource,
    BangumiMetadataSource,
    JikanMetadataSource,
    MetadataPayloadError,
)
from anifeed.models import RelationEdge

from conftest import FakeFetcher


# --- Bangumi ---

def _subject(**overrides):
    data = {"id": 100, "name": "呪術廻戦", "name_cn": "咒术回战", "type": 2, "platform": "TV", "eps": 24, "total_episodes": 47}
    data.update(overrides)
    return data


@pytest.mark.asyncio
@pytest.mark.parametrize("overrides, expected", [
    ({}, False),
    ({"platform": "剧场版"}, True),
    ({"platform": "Movie"}, True),
    ({"eps": 1}, True),
    ({"name_cn": "名侦探柯南 剧场版"}, True),
])
async def test_bangumi_classification(overrides, expected):
    fetcher = FakeFetcher({"/v0/subjects/100": _subject(**overrides)})
    assert await BangumiMetadataSource(fetcher).get_subject_classification("100") is expected


@pytest.mark.asyncio
async def test_bangumi_missing_subject_returns_none():
    source = BangumiMetadataSource(FakeFetcher({}))
    assert await source.get_subject_classification("404") is None
    assert await source.get_total_episodes("404") is None


@pytest.mark.asyncio
async def test_bangumi_total_episodes_falls_back_to_total():
    fetcher = FakeFetcher({"/v0/subjects/100": _subject(eps=0)})
    assert await BangumiMetadataSource(fetcher).get_total_episodes("100") == 47


@pytest.mark.asyncio
async def test_bangumi_episode_sort_map_is_paged():
    episodes = [
        {"id": 1, "type": 0, "ep": 1, "sort": 25},
        {"id": 2, "type": 0, "ep": 2, "sort": 26},
        {"id": 3, "type": 0, "ep": 2.5, "sort": 26.5},
        {"id": 4, "type": 0, "ep": 3, "sort": 27},
        {"id": 5, "type": 0, "ep": None, "sort": 28},
    ]

    def page(params):
        start, limit = params["offset"], params["limit"]
        return {"data": episodes[start:start + limit], "total": len(episodes), "limit": limit, "offset": start}

    fetcher = FakeFetcher({"/v0/episodes": page})
    sort_map = await BangumiMetadataSource(fetcher, page_size=2).get_episode_sort_map("100")

    assert sort_map == {1: 25, 2: 26, 3: 27}
    assert len(fetcher.calls) == 3
    assert fetcher.calls[0][1]["subject_id"] == "100"
    assert fetcher.calls[0][1]["type"] == 0


@pytest.mark.asyncio
async def test_bangumi_empty_episode_list_returns_none():
    fetcher = FakeFetcher({"/v0/episodes": {"data": [], "total": 0, "limit": 100, "offset": 0}})
    assert await BangumiMetadataSource(fetcher).get_episode_sort_map("100") is None


@pytest.mark.asyncio
async def test_bangumi_relations():
    fetcher = FakeFetcher({"/v0/subjects/200/subjects": [
        {"id": 100, "type": 2, "name": "呪術廻戦", "name_cn": "咒术回战", "relation": "前传"},
        {"id": 300, "type": 2, "name": "x", "name_cn": "", "relation": "续集"},
        {"id": 400, "type": 1, "name": "manga", "name_cn": "", "relation": ""},
    ]})
    edges = await BangumiMetadataSource(fetcher).get_relations("200")
    assert edges == [RelationEdge(target_id="100", kind="前传"), RelationEdge(target_id="300", kind="续集")]


@pytest.mark.asyncio
async def test_bangumi_malformed_payload_raises_payload_error():
    fetcher = FakeFetcher({"/v0/subjects/100": {"name": "no id"}})
    with pytest.raises(MetadataPayloadError):
        await BangumiMetadataSource(fetcher).get_subject_classification("100")


# --- AniList ---

ANILIST_MEDIA = {
    "data": {
        "Media": {
            "id": 145064,
            "idMal": 51009,
            "format": "TV",
            "episodes": 23,
            "relations": {
                "edges": [
                    {"relationType": "PREQUEL", "node": {"id": 113415, "idMal": 40748, "episodes": 24, "format": "TV"}},
                    {"relationType": "SIDE_STORY", "node": {"id": 131573, "idMal": None, "episodes": 1, "format": "MOVIE"}},
                ]
            },
        }
    }
}


@pytest.mark.asyncio
async def test_anilist_relations_carry_mal_ids():
    fetcher = FakeFetcher({"graphql": ANILIST_MEDIA})
    edges = await AniListMetadataSource(fetcher).get_relations("145064")

    assert edges[0] == RelationEdge(target_id="113415", kind="PREQUEL", alternate_id="40748", episode_count=24)
    assert edges[1].alternate_id is None
    assert fetcher.calls[0][1]["variables"] == {"id": 145064}


@pytest.mark.asyncio
async def test_anilist_classification_and_total():
    source = AniListMetadataSource(FakeFetcher({"graphql": ANILIST_MEDIA}))
    assert await source.get_subject_classification("145064") is False
    assert await source.get_total_episodes("145064") == 23


@pytest.mark.asyncio
async def test_anilist_unknown_media():
    source = AniListMetadataSource(FakeFetcher({"graphql": {"data": {"Media": None}}}))
    assert await source.get_relations("1") is None
    assert await source.get_relations("not-a-number") is None


# --- Jikan ---

@pytest.mark.asyncio
async def test_jikan_total_episodes_and_relations():
    fetcher = FakeFetcher({
        "/anime/40748": {"data": {"mal_id": 40748, "type": "TV", "episodes": 24}},
        "/anime/51009/relations": {"data": [
            {"relation": "Prequel", "entry": [{"mal_id": 40748, "type": "anime", "name": "Jujutsu Kaisen"}]},
            {"relation": "Adaptation", "entry": [{"mal_id": 113138, "type": "manga", "name": "Jujutsu Kaisen"}]},
        ]},
    })
    source = JikanMetadataSource(fetcher)

    assert await source.get_total_episodes("40748") == 24
    assert await source.get_subject_classification("40748") is False
    assert await source.get_relations("51009") == [
        RelationEdge(target_id="40748", kind="Prequel", alternate_id="40748"),
    ]


@pytest.mark.asyncio
async def test_jikan_movie_type():
    fetcher = FakeFetcher({"/anime/1": {"data": {"mal_id": 1, "type": "Movie", "episodes": 1}}})
    assert await JikanMetadataSource(fetcher).get_subject_classification("1") is True
