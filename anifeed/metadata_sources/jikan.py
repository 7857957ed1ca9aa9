from typing import List, Optional

from pydantic import BaseModel, Field

from anifeed.models import RelationEdge
from .base import BaseMetadataSource


class JikanAnime(BaseModel):
    mal_id: int
    type: Optional[str] = None
    episodes: Optional[int] = None


class JikanAnimeResponse(BaseModel):
    data: Optional[JikanAnime] = None


class JikanRelationEntry(BaseModel):
    mal_id: int
    type: str = "anime"
    name: str = ""


class JikanRelation(BaseModel):
    relation: str
    entry: List[JikanRelationEntry] = Field(default_factory=list)


class JikanRelationsResponse(BaseModel):
    data: List[JikanRelation] = Field(default_factory=list)


class JikanMetadataSource(BaseMetadataSource):
    """Jikan (MyAnimeList 非官方 API)，以 MAL ID 查询总集数"""

    provider_name = "jikan"

    async def _get_anime(self, subject_id: str) -> Optional[JikanAnime]:
        response = await self._fetch(f"/anime/{subject_id}", None, JikanAnimeResponse)
        return response.data if response else None

    async def get_subject_classification(self, subject_id: str) -> Optional[bool]:
        anime = await self._get_anime(subject_id)
        if anime is None:
            return None
        return (anime.type or "").lower() == "movie" or anime.episodes == 1

    async def get_relations(self, subject_id: str) -> Optional[List[RelationEdge]]:
        response = await self._fetch(f"/anime/{subject_id}/relations", None, JikanRelationsResponse)
        if response is None:
            return None
        return [
            RelationEdge(target_id=str(entry.mal_id), kind=relation.relation, alternate_id=str(entry.mal_id))
            for relation in response.data
            for entry in relation.entry
            if entry.type == "anime"
        ]

    async def get_total_episodes(self, subject_id: str) -> Optional[int]:
        anime = await self._get_anime(subject_id)
        return anime.episodes if anime else None
