from .log_manager import setup_logging, SensitiveInfoFilter
from .offset_strategies import (
    OffsetStrategy,
    OffsetStrategyChain,
    MovieShortCircuitStrategy,
    EpisodeSortMapStrategy,
    PrimaryPrequelStrategy,
    SecondaryPrequelStrategy,
    DefaultStrategy,
    follow_prequel_chain,
)
from .episode_normalizer import normalize_episode, normalize_feed, collect_filter_options
from .feed_service import parse_feed_items, reconcile_season_feed, filter_feed_items

__all__ = [
    'setup_logging',
    'SensitiveInfoFilter',
    'OffsetStrategy',
    'OffsetStrategyChain',
    'MovieShortCircuitStrategy',
    'EpisodeSortMapStrategy',
    'PrimaryPrequelStrategy',
    'SecondaryPrequelStrategy',
    'DefaultStrategy',
    'follow_prequel_chain',
    'normalize_episode',
    'normalize_feed',
    'collect_filter_options',
    'parse_feed_items',
    'reconcile_season_feed',
    'filter_feed_items',
]
