from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from anifeed.utils.common import format_file_size, resolve_torrent_hash, to_camel
from anifeed.utils.title_parser import ParsedTitle
from anifeed.utils.title_patterns import SCOPE_SEASON


class CamelModel(BaseModel):
    """序列化为 camelCase，输入同时接受 snake_case 和 camelCase"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Feed Items ---

class RawFeedItem(CamelModel):
    """来自 RSS 源的原始条目"""
    title: str
    published_at: datetime
    torrent_hash: str = ""
    torrent_url: str = ""
    magnet_link: Optional[str] = None
    file_size: Optional[int] = None
    link: Optional[str] = None

    @field_validator("published_at")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        # 不带时区的时间按 UTC 处理，保证同一订阅内可比较
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def torrent_identity(self) -> Optional[str]:
        return resolve_torrent_hash(self.torrent_hash, self.magnet_link, self.torrent_url)


class FeedItem(RawFeedItem):
    """附带解析结果的条目，一次对齐过程中不可变"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    episode: Optional[int] = None
    episode_scope: Optional[str] = None
    resolution: Optional[str] = None
    subgroup: Optional[str] = None
    subtitle_type: Optional[str] = None
    is_collection: bool = False
    season: Optional[int] = None
    episode_range: Optional[Tuple[int, int]] = None
    formatted_size: str = ""

    @property
    def is_season_scoped(self) -> bool:
        return self.episode_scope == SCOPE_SEASON

    @classmethod
    def from_parsed(cls, raw: RawFeedItem, parsed: ParsedTitle) -> "FeedItem":
        data = raw.model_dump()
        data["torrent_hash"] = raw.torrent_identity or raw.torrent_hash
        return cls(
            **data,
            episode=parsed.episode,
            episode_scope=parsed.episode_scope,
            resolution=parsed.resolution,
            subgroup=parsed.subgroup,
            subtitle_type=parsed.subtitle_type,
            is_collection=parsed.is_collection,
            season=parsed.season,
            episode_range=parsed.episode_range,
            formatted_size=format_file_size(raw.file_size),
        )


class NormalizedFeedItem(FeedItem):
    """episode 保留原始集数，normalized_episode 为本季内的集数（无法确定时为 None）"""
    normalized_episode: Optional[int] = None


# --- Season Context ---

class RelationEdge(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    target_id: str
    kind: str
    alternate_id: Optional[str] = None
    episode_count: Optional[int] = None


class SeasonContext(CamelModel):
    """
    一季的元数据上下文。字段为 None 表示调用方未提供，策略会在需要时向元数据源懒加载。
    """
    subject_id: Optional[str] = None
    is_movie_or_single_episode: Optional[bool] = None
    episode_sort_map: Optional[Dict[int, int]] = None
    relation_graph: Optional[List[RelationEdge]] = None
    secondary_subject_id: Optional[str] = None
    secondary_episode_counts: Dict[str, int] = Field(default_factory=dict)

    @field_validator("episode_sort_map", mode="before")
    @classmethod
    def _coerce_sort_map(cls, value: Any) -> Any:
        # 兼容 [{"ep": 3, "sort": 31}, ...] 形式，键必须唯一
        if not isinstance(value, list):
            return value
        result: Dict[int, int] = {}
        for entry in value:
            if not isinstance(entry, dict) or "ep" not in entry or "sort" not in entry:
                raise ValueError(f"无效的 episode_sort_map 条目: {entry!r}")
            ep, sort = entry["ep"], entry["sort"]
            if ep in result:
                raise ValueError(f"episode_sort_map 中的集数 {ep} 重复")
            result[ep] = sort
        return result


# --- Results ---

class SeasonOffset(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    value: int = 0
    strategy: str = "default"
    resolved: bool = False
    single_episode: bool = False
    sort_map: Optional[Dict[int, int]] = None


class NormalizedFeed(CamelModel):
    season_name: str
    season_number: Optional[int] = None
    items: List[NormalizedFeedItem] = Field(default_factory=list)
    episode_offset: int = 0
    offset_strategy: str = "default"
    latest_episode: Optional[int] = None
    latest_published_at: Optional[datetime] = None
    latest_title: Optional[str] = None
    available_subgroups: List[str] = Field(default_factory=list)
    available_resolutions: List[str] = Field(default_factory=list)
    available_subtitle_types: List[str] = Field(default_factory=list)
