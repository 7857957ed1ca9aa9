from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from anifeed.core import settings
from anifeed.models import RelationEdge
from anifeed.utils import is_movie_by_title
from anifeed.utils.title_patterns import MOVIE_PLATFORMS
from .base import BaseMetadataSource, JsonFetcher


class BangumiSubject(BaseModel):
    id: int
    name: str = ""
    name_cn: str = ""
    type: Optional[int] = None
    platform: Optional[str] = None
    eps: Optional[int] = None
    total_episodes: Optional[int] = None

    @property
    def episode_count(self) -> Optional[int]:
        # eps 为正片数，未登记时退回 total_episodes
        return self.eps or self.total_episodes or None


class BangumiEpisode(BaseModel):
    id: int
    type: int = 0
    ep: Optional[float] = None
    sort: Optional[float] = None


class BangumiEpisodePage(BaseModel):
    data: List[BangumiEpisode] = Field(default_factory=list)
    total: int = 0
    limit: int = 0
    offset: int = 0


class BangumiRelatedSubject(BaseModel):
    id: int
    type: Optional[int] = None
    name: str = ""
    name_cn: str = ""
    relation: str = ""


class BangumiMetadataSource(BaseMetadataSource):
    """Bangumi (bgm.tv) v0 API，作为主元数据源"""

    provider_name = "bangumi"

    def __init__(self, fetch_json: JsonFetcher, page_size: Optional[int] = None):
        super().__init__(fetch_json)
        self.page_size = page_size or settings.reconcile.bangumi_page_size

    async def _get_subject(self, subject_id: str) -> Optional[BangumiSubject]:
        return await self._fetch(f"/v0/subjects/{subject_id}", None, BangumiSubject)

    async def get_subject_classification(self, subject_id: str) -> Optional[bool]:
        subject = await self._get_subject(subject_id)
        if subject is None:
            return None

        if subject.platform and subject.platform.lower() in MOVIE_PLATFORMS:
            return True
        if subject.type not in (None, 2):  # 2 = 动画
            return False
        if subject.eps == 1:
            return True
        # 检查标题中是否包含电影关键词
        return is_movie_by_title(subject.name) or is_movie_by_title(subject.name_cn)

    async def get_episode_sort_map(self, subject_id: str) -> Optional[Dict[int, int]]:
        sort_map: Dict[int, int] = {}
        offset = 0
        while True:
            page = await self._fetch(
                "/v0/episodes",
                {"subject_id": subject_id, "type": 0, "limit": self.page_size, "offset": offset},
                BangumiEpisodePage,
            )
            if page is None or not page.data:
                break

            for episode in page.data:
                if episode.type != 0 or episode.ep is None or episode.sort is None:
                    continue
                # 13.5 这类总集篇序号不参与映射
                if not episode.ep.is_integer() or not episode.sort.is_integer():
                    continue
                local, global_sort = int(episode.ep), int(episode.sort)
                if local in sort_map:
                    self.logger.debug(f"Bangumi: 条目 {subject_id} 的集数 {local} 重复，保留第一个")
                    continue
                sort_map[local] = global_sort

            offset += len(page.data)
            if offset >= page.total:
                break

        if not sort_map:
            return None
        self.logger.debug(f"Bangumi: 条目 {subject_id} 分集映射共 {len(sort_map)} 条")
        return sort_map

    async def get_relations(self, subject_id: str) -> Optional[List[RelationEdge]]:
        related = await self._fetch(f"/v0/subjects/{subject_id}/subjects", None, List[BangumiRelatedSubject])
        if related is None:
            return None
        return [
            RelationEdge(target_id=str(item.id), kind=item.relation)
            for item in related
            if item.relation
        ]

    async def get_total_episodes(self, subject_id: str) -> Optional[int]:
        subject = await self._get_subject(subject_id)
        return subject.episode_count if subject else None
