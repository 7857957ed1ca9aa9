"""
季度订阅对齐服务

对外入口：输入季度名、原始 RSS 条目和季度元数据上下文，输出归一化后的季度订阅。
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from anifeed.metadata_sources import BaseMetadataSource
from anifeed.models import FeedItem, NormalizedFeed, RawFeedItem, SeasonContext
from anifeed.utils import parse_title
from .episode_normalizer import normalize_feed
from .offset_strategies import OffsetStrategyChain

logger = logging.getLogger(__name__)

# 过滤条件为空或等于该值时不过滤
FILTER_ALL = "all"


def parse_feed_items(raw_items: Iterable[Union[RawFeedItem, Dict[str, Any]]]) -> List[FeedItem]:
    """解析原始条目的标题，附加集数、分辨率等字段；已解析过的条目原样返回"""
    parsed_items = []
    for raw in raw_items:
        if isinstance(raw, FeedItem):
            parsed_items.append(raw)
            continue
        if not isinstance(raw, RawFeedItem):
            raw = RawFeedItem.model_validate(raw)
        parsed_items.append(FeedItem.from_parsed(raw, parse_title(raw.title)))
    return parsed_items


async def reconcile_season_feed(
    season_name: str,
    raw_items: Iterable[Union[RawFeedItem, Dict[str, Any]]],
    context: Optional[Union[SeasonContext, Dict[str, Any]]] = None,
    *,
    primary: Optional[BaseMetadataSource] = None,
    secondary: Optional[BaseMetadataSource] = None,
    tertiary: Optional[BaseMetadataSource] = None,
    chain: Optional[OffsetStrategyChain] = None,
) -> NormalizedFeed:
    """
    对齐一季的订阅条目。

    context 中缺失的字段会由策略链向 primary/secondary/tertiary 元数据源懒加载；
    传入 chain 时忽略三个元数据源参数。
    """
    if context is None:
        context = SeasonContext()
    elif not isinstance(context, SeasonContext):
        context = SeasonContext.model_validate(context)

    items = parse_feed_items(raw_items)
    if chain is None:
        chain = OffsetStrategyChain.default(primary, secondary, tertiary)

    offset = await chain.resolve(context)
    feed = normalize_feed(season_name, items, offset)
    logger.info(
        f"季度 '{season_name}' 对齐完成: 偏移 {feed.episode_offset} ({feed.offset_strategy}), "
        f"最新集数 {feed.latest_episode}"
    )
    return feed


def _matches(value: Optional[str], wanted: Optional[str]) -> bool:
    if not wanted or wanted.strip().lower() == FILTER_ALL:
        return True
    return value is not None and value.lower() == wanted.strip().lower()


def filter_feed_items(
    items: Iterable[FeedItem],
    resolution: Optional[str] = None,
    subgroup: Optional[str] = None,
    subtitle_type: Optional[str] = None,
) -> List[FeedItem]:
    """按分辨率/字幕组/字幕类型过滤（忽略大小写），结果按发布时间倒序"""
    filtered = [
        item for item in items
        if _matches(item.resolution, resolution)
        and _matches(item.subgroup, subgroup)
        and _matches(item.subtitle_type, subtitle_type)
    ]
    return sorted(filtered, key=lambda i: i.published_at, reverse=True)
