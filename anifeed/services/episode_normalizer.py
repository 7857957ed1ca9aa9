import logging
from typing import Dict, Iterable, List, Optional, Tuple

from anifeed.models import FeedItem, NormalizedFeed, NormalizedFeedItem, SeasonOffset
from anifeed.utils import extract_season_number

logger = logging.getLogger(__name__)


def _reverse_sort_map(sort_map: Optional[Dict[int, int]]) -> Dict[int, int]:
    # 全局排序序号 → 本季集数
    if not sort_map:
        return {}
    return {global_sort: local for local, global_sort in sort_map.items()}


def normalize_episode(
    item: FeedItem,
    offset: SeasonOffset,
    reverse_map: Optional[Dict[int, int]] = None,
) -> Optional[int]:
    """
    计算单个条目在本季内的集数，无法确定时返回 None。

    - 合集永远为 None
    - 电影/单集条目一律为 1
    - 季内编号 (S02E04) 原样保留
    - 绝对编号先查分集映射，查不到再减去偏移；结果 <= 0 视为无法确定
    """
    if item.is_collection:
        return None
    if offset.single_episode:
        return 1
    if item.episode is None:
        return None
    if item.is_season_scoped:
        return item.episode

    if reverse_map is None:
        reverse_map = _reverse_sort_map(offset.sort_map)
    if item.episode in reverse_map:
        return reverse_map[item.episode]

    normalized = item.episode - offset.value
    if normalized <= 0:
        logger.debug(f"条目 '{item.title}' 的集数 {item.episode} 减去偏移 {offset.value} 后无效")
        return None
    return normalized


def _distinct(values: Iterable[Optional[str]]) -> List[str]:
    seen = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


def collect_filter_options(items: Iterable[FeedItem]) -> Tuple[List[str], List[str], List[str]]:
    """返回 (字幕组, 分辨率, 字幕类型) 三个去重列表，保持首次出现的顺序"""
    items = list(items)
    return (
        _distinct(i.subgroup for i in items),
        _distinct(i.resolution for i in items),
        _distinct(i.subtitle_type for i in items),
    )


def normalize_feed(season_name: str, items: Iterable[FeedItem], offset: SeasonOffset) -> NormalizedFeed:
    """将偏移应用到一季的全部条目，按发布时间倒序输出，并统计最新集数"""
    reverse_map = _reverse_sort_map(offset.sort_map)

    ordered = sorted(items, key=lambda i: i.published_at, reverse=True)
    normalized_items = [
        NormalizedFeedItem(
            **item.model_dump(exclude={"normalized_episode"}),
            normalized_episode=normalize_episode(item, offset, reverse_map),
        )
        for item in ordered
    ]

    episodes = [
        i.normalized_episode for i in normalized_items
        if not i.is_collection and i.normalized_episode is not None
    ]
    newest = normalized_items[0] if normalized_items else None
    subgroups, resolutions, subtitle_types = collect_filter_options(normalized_items)

    feed = NormalizedFeed(
        season_name=season_name,
        season_number=extract_season_number(season_name),
        items=normalized_items,
        episode_offset=offset.value,
        offset_strategy=offset.strategy,
        latest_episode=max(episodes) if episodes else None,
        latest_published_at=newest.published_at if newest else None,
        latest_title=newest.title if newest else None,
        available_subgroups=subgroups,
        available_resolutions=resolutions,
        available_subtitle_types=subtitle_types,
    )
    logger.debug(
        f"季度 '{season_name}' 归一化完成: {len(normalized_items)} 个条目, "
        f"偏移 {offset.value} ({offset.strategy}), 最新集数 {feed.latest_episode}"
    )
    return feed
