"""
集数偏移策略链

按顺序尝试每个策略，第一个给出结果的策略生效，之后的策略（以及它们的元数据源请求）不会被执行。
策略抛出的任何异常都视为 "放弃"，整条链永远返回一个 SeasonOffset。

    策略1: 电影/单集条目 → 偏移 0，所有单集归一为第 1 集
    策略2: 分集排序映射 (ep → sort) → 偏移 = sort - ep
    策略3: 主元数据源的前传关系 → 偏移 = 前传各季集数之和
    策略4: 次级元数据源的前传关系 + 第三方源集数
    策略5: 默认偏移 0
"""
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, ClassVar, Dict, Iterable, List, Optional

from anifeed.core import settings
from anifeed.metadata_sources import BaseMetadataSource
from anifeed.models import RelationEdge, SeasonContext, SeasonOffset

logger = logging.getLogger(__name__)

RelationFetcher = Callable[[str], Awaitable[Optional[List[RelationEdge]]]]
CountFetcher = Callable[[RelationEdge], Awaitable[Optional[int]]]


class OffsetStrategy(ABC):
    """偏移策略基类：resolve 返回 SeasonOffset 表示解决，返回 None 表示放弃"""

    tag: ClassVar[str] = ""

    @abstractmethod
    async def resolve(self, ctx: SeasonContext) -> Optional[SeasonOffset]:
        ...


def make_prequel_matcher(kinds: Optional[Iterable[str]] = None) -> Callable[[RelationEdge], bool]:
    """构造前传关系判断函数，比较时忽略大小写和首尾空白"""
    normalized = {k.strip().lower() for k in (kinds or settings.reconcile.prequel_relation_kinds)}
    return lambda edge: edge.kind.strip().lower() in normalized


async def follow_prequel_chain(
    first_edges: List[RelationEdge],
    start_id: Optional[str],
    is_prequel: Callable[[RelationEdge], bool],
    fetch_relations: Optional[RelationFetcher],
    fetch_count: CountFetcher,
    max_depth: int,
) -> Optional[int]:
    """
    沿前传关系向前追溯，累加每一季的集数。

    没有前传时返回 0（即第一季）；任意一季集数未知时返回 None。
    未提供 fetch_relations 时只追溯一层。遇到环或超过 max_depth 层仍有前传时返回 None。
    """
    total = 0
    visited = {start_id} if start_id else set()
    edges = first_edges
    depth = 0

    while True:
        prequel = next((e for e in edges if is_prequel(e)), None)
        if prequel is None:
            break
        if prequel.target_id in visited:
            logger.warning(f"前传关系出现环: {prequel.target_id}，放弃追溯")
            return None
        if depth >= max_depth:
            logger.warning(f"前传关系超过 {max_depth} 层，放弃追溯")
            return None
        visited.add(prequel.target_id)

        count = await fetch_count(prequel)
        if count is None:
            logger.debug(f"前传条目 {prequel.target_id} 的集数未知")
            return None
        total += count
        depth += 1

        if fetch_relations is None:
            break
        edges = await fetch_relations(prequel.target_id) or []

    return total


# ============================================================================
# 策略实现
# ============================================================================

class MovieShortCircuitStrategy(OffsetStrategy):
    tag = "movie"

    def __init__(self, primary: Optional[BaseMetadataSource] = None):
        self.primary = primary

    async def resolve(self, ctx: SeasonContext) -> Optional[SeasonOffset]:
        is_movie = ctx.is_movie_or_single_episode
        if is_movie is None and self.primary is not None and ctx.subject_id:
            is_movie = await self.primary.get_subject_classification(ctx.subject_id)
        if not is_movie:
            return None
        return SeasonOffset(value=0, strategy=self.tag, resolved=True, single_episode=True)


class EpisodeSortMapStrategy(OffsetStrategy):
    tag = "sort_map"

    def __init__(self, primary: Optional[BaseMetadataSource] = None):
        self.primary = primary

    async def resolve(self, ctx: SeasonContext) -> Optional[SeasonOffset]:
        sort_map = ctx.episode_sort_map
        if sort_map is None and self.primary is not None and ctx.subject_id:
            sort_map = await self.primary.get_episode_sort_map(ctx.subject_id)
        if not sort_map:
            return None

        # 以本季最小的集数为基准，通常就是第 1 集
        first_ep = min(sort_map)
        offset = sort_map[first_ep] - first_ep
        if offset < 0:
            logger.debug(f"分集映射给出负偏移 {offset}，放弃")
            return None
        return SeasonOffset(value=offset, strategy=self.tag, resolved=True, sort_map=dict(sort_map))


class PrimaryPrequelStrategy(OffsetStrategy):
    tag = "prequel"

    def __init__(
        self,
        primary: Optional[BaseMetadataSource] = None,
        prequel_kinds: Optional[Iterable[str]] = None,
        max_depth: Optional[int] = None,
    ):
        self.primary = primary
        self.is_prequel = make_prequel_matcher(prequel_kinds)
        self.max_depth = max_depth if max_depth is not None else settings.reconcile.max_prequel_depth

    async def _count(self, edge: RelationEdge) -> Optional[int]:
        if edge.episode_count is not None:
            return edge.episode_count
        if self.primary is None:
            return None
        return await self.primary.get_total_episodes(edge.target_id)

    async def resolve(self, ctx: SeasonContext) -> Optional[SeasonOffset]:
        edges = ctx.relation_graph
        if edges is None and self.primary is not None and ctx.subject_id:
            edges = await self.primary.get_relations(ctx.subject_id)
        if not edges:
            # 主元数据源没有关系数据，交给次级元数据源
            return None

        total = await follow_prequel_chain(
            edges,
            ctx.subject_id,
            self.is_prequel,
            self.primary.get_relations if self.primary is not None else None,
            self._count,
            self.max_depth,
        )
        if total is None:
            return None
        return SeasonOffset(value=total, strategy=self.tag, resolved=True)


class SecondaryPrequelStrategy(OffsetStrategy):
    tag = "secondary_prequel"

    def __init__(
        self,
        secondary: Optional[BaseMetadataSource] = None,
        tertiary: Optional[BaseMetadataSource] = None,
        prequel_kinds: Optional[Iterable[str]] = None,
        max_depth: Optional[int] = None,
    ):
        self.secondary = secondary
        self.tertiary = tertiary
        self.is_prequel = make_prequel_matcher(prequel_kinds)
        self.max_depth = max_depth if max_depth is not None else settings.reconcile.max_prequel_depth

    def _make_counter(self, known_counts: Dict[str, int]) -> CountFetcher:
        async def count(edge: RelationEdge) -> Optional[int]:
            key = edge.alternate_id
            if key and key in known_counts:
                return known_counts[key]
            if key and self.tertiary is not None:
                tertiary_count = await self.tertiary.get_total_episodes(key)
                if tertiary_count is not None:
                    return tertiary_count
            return edge.episode_count
        return count

    async def resolve(self, ctx: SeasonContext) -> Optional[SeasonOffset]:
        if self.secondary is None or not ctx.secondary_subject_id:
            return None

        edges = await self.secondary.get_relations(ctx.secondary_subject_id)
        if not edges:
            return None

        total = await follow_prequel_chain(
            edges,
            ctx.secondary_subject_id,
            self.is_prequel,
            self.secondary.get_relations,
            self._make_counter(ctx.secondary_episode_counts),
            self.max_depth,
        )
        if total is None:
            return None
        return SeasonOffset(value=total, strategy=self.tag, resolved=True)


class DefaultStrategy(OffsetStrategy):
    tag = "default"

    async def resolve(self, ctx: SeasonContext) -> Optional[SeasonOffset]:
        return SeasonOffset(value=0, strategy=self.tag, resolved=False)


# ============================================================================
# 策略链
# ============================================================================

class OffsetStrategyChain:
    def __init__(self, strategies: List[OffsetStrategy]):
        self.strategies = list(strategies)

    @classmethod
    def default(
        cls,
        primary: Optional[BaseMetadataSource] = None,
        secondary: Optional[BaseMetadataSource] = None,
        tertiary: Optional[BaseMetadataSource] = None,
        prequel_kinds: Optional[Iterable[str]] = None,
        max_depth: Optional[int] = None,
    ) -> "OffsetStrategyChain":
        return cls([
            MovieShortCircuitStrategy(primary),
            EpisodeSortMapStrategy(primary),
            PrimaryPrequelStrategy(primary, prequel_kinds, max_depth),
            SecondaryPrequelStrategy(secondary, tertiary, prequel_kinds, max_depth),
            DefaultStrategy(),
        ])

    async def resolve(self, ctx: SeasonContext) -> SeasonOffset:
        for strategy in self.strategies:
            name = strategy.tag or strategy.__class__.__name__
            try:
                result = await strategy.resolve(ctx)
            except Exception as e:
                # asyncio.CancelledError 不是 Exception 的子类，会继续向上传播
                logger.warning(f"偏移策略 '{name}' 出错，视为放弃: {e}")
                continue
            if result is None:
                logger.debug(f"偏移策略 '{name}' 放弃 (subject={ctx.subject_id})")
                continue
            logger.info(f"偏移策略 '{name}' 给出偏移 {result.value} (subject={ctx.subject_id})")
            return result

        logger.info(f"所有偏移策略均放弃，使用默认偏移 0 (subject={ctx.subject_id})")
        return SeasonOffset()
