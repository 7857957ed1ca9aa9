from typing import List, Optional

from pydantic import BaseModel, Field

from anifeed.models import RelationEdge
from .base import BaseMetadataSource

MEDIA_QUERY = """
query ($id: Int) {
  Media(id: $id, type: ANIME) {
    id
    idMal
    format
    episodes
    relations {
      edges {
        relationType
        node { id idMal episodes format }
      }
    }
  }
}
"""


class AniListNode(BaseModel):
    id: int
    idMal: Optional[int] = None
    episodes: Optional[int] = None
    format: Optional[str] = None


class AniListEdge(BaseModel):
    relationType: str
    node: AniListNode


class AniListRelations(BaseModel):
    edges: List[AniListEdge] = Field(default_factory=list)


class AniListMedia(AniListNode):
    relations: Optional[AniListRelations] = None


class AniListMediaData(BaseModel):
    Media: Optional[AniListMedia] = None


class AniListResponse(BaseModel):
    data: Optional[AniListMediaData] = None


class AniListMetadataSource(BaseMetadataSource):
    """AniList GraphQL，作为次级关系图来源；关系边上携带 MAL ID 供第三方源查询集数"""

    provider_name = "anilist"

    async def _get_media(self, subject_id: str) -> Optional[AniListMedia]:
        try:
            media_id = int(subject_id)
        except (TypeError, ValueError):
            self.logger.debug(f"AniList: 无效的条目ID '{subject_id}'")
            return None
        response = await self._fetch("graphql", {"query": MEDIA_QUERY, "variables": {"id": media_id}}, AniListResponse)
        if response is None or response.data is None:
            return None
        return response.data.Media

    async def get_subject_classification(self, subject_id: str) -> Optional[bool]:
        media = await self._get_media(subject_id)
        if media is None:
            return None
        return media.format == "MOVIE" or media.episodes == 1

    async def get_relations(self, subject_id: str) -> Optional[List[RelationEdge]]:
        media = await self._get_media(subject_id)
        if media is None or media.relations is None:
            return None
        return [
            RelationEdge(
                target_id=str(edge.node.id),
                kind=edge.relationType,
                alternate_id=str(edge.node.idMal) if edge.node.idMal else None,
                episode_count=edge.node.episodes,
            )
            for edge in media.relations.edges
        ]

    async def get_total_episodes(self, subject_id: str) -> Optional[int]:
        media = await self._get_media(subject_id)
        return media.episodes if media else None
