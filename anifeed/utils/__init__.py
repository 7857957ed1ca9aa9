from .common import to_camel, format_file_size, resolve_torrent_hash, normalize_torrent_hash
from .title_parser import (
    ParsedTitle,
    EpisodeToken,
    parse_title,
    extract_episode,
    extract_resolution,
    extract_subgroup,
    classify_subtitle,
    detect_collection,
    extract_season_number,
    chinese_numeral_to_int,
    is_movie_by_title,
)
from .title_patterns import SCOPE_SEASON, SCOPE_ABSOLUTE

__all__ = [
    'to_camel',
    'format_file_size',
    'resolve_torrent_hash',
    'normalize_torrent_hash',
    'ParsedTitle',
    'EpisodeToken',
    'parse_title',
    'extract_episode',
    'extract_resolution',
    'extract_subgroup',
    'classify_subtitle',
    'detect_collection',
    'extract_season_number',
    'chinese_numeral_to_int',
    'is_movie_by_title',
    'SCOPE_SEASON',
    'SCOPE_ABSOLUTE',
]
