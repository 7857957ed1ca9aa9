from .base import BaseMetadataSource, JsonFetcher, MetadataPayloadError, MetadataSourceError
from .bangumi import BangumiMetadataSource
from .anilist import AniListMetadataSource
from .jikan import JikanMetadataSource

__all__ = [
    'BaseMetadataSource',
    'JsonFetcher',
    'MetadataSourceError',
    'MetadataPayloadError',
    'BangumiMetadataSource',
    'AniListMetadataSource',
    'JikanMetadataSource',
]
