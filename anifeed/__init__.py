from .models import (
    RawFeedItem,
    FeedItem,
    NormalizedFeedItem,
    RelationEdge,
    SeasonContext,
    SeasonOffset,
    NormalizedFeed,
)
from .utils import ParsedTitle, parse_title
from .services import (
    OffsetStrategyChain,
    reconcile_season_feed,
    parse_feed_items,
    filter_feed_items,
    collect_filter_options,
    setup_logging,
)

__version__ = "0.1.0"
