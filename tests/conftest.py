from collections import defaultdict
from typing import Any, Dict, List, Optional

from anifeed.metadata_sources import BaseMetadataSource
from anifeed.models import RelationEdge


class FakeFetcher:
    """按 endpoint 返回预置 JSON 的 fetch_json；值为可调用对象时以 params 调用，为异常时抛出"""

    def __init__(self, responses: Dict[str, Any]):
        self.responses = responses
        self.calls: List[tuple] = []

    async def __call__(self, endpoint: str, params: Optional[dict] = None) -> Any:
        self.calls.append((endpoint, params))
        value = self.responses.get(endpoint)
        if isinstance(value, Exception):
            raise value
        if callable(value):
            return value(params)
        return value


class FakeSource(BaseMetadataSource):
    """内存元数据源，记录每种能力的调用次数"""

    provider_name = "fake"

    def __init__(
        self,
        classification: Optional[Dict[str, bool]] = None,
        sort_maps: Optional[Dict[str, Dict[int, int]]] = None,
        relations: Optional[Dict[str, List[RelationEdge]]] = None,
        totals: Optional[Dict[str, int]] = None,
        fail: Optional[Dict[str, Exception]] = None,
    ):
        super().__init__(fetch_json=None)
        self.classification = classification or {}
        self.sort_maps = sort_maps or {}
        self.relations = relations or {}
        self.totals = totals or {}
        self.fail = fail or {}
        self.calls = defaultdict(int)

    def _record(self, name: str):
        self.calls[name] += 1
        if name in self.fail:
            raise self.fail[name]

    async def get_subject_classification(self, subject_id):
        self._record("classification")
        return self.classification.get(subject_id)

    async def get_episode_sort_map(self, subject_id):
        self._record("sort_map")
        return self.sort_maps.get(subject_id)

    async def get_relations(self, subject_id):
        self._record("relations")
        return self.relations.get(subject_id)

    async def get_total_episodes(self, subject_id):
        self._record("total")
        return self.totals.get(subject_id)


def prequel(target_id: str, **kwargs) -> RelationEdge:
    return RelationEdge(target_id=target_id, kind=kwargs.pop("kind", "前传"), **kwargs)
