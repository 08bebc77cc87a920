"""Podcast feed handling.

Provides functionality for:
- Fetching and parsing RSS feeds
- Tracking processed episodes across runs
- Matching episodes against files already on the media server
- Downloading episode assets
"""

from .dedup import DedupTracker
from .downloader import AssetDownloader
from .feed_fetcher import FeedFetcher
from .feed_parser import EpisodeRecord, FeedParser, ShowMetadata
from .matcher import EpisodeMatcher

__all__ = [
    "AssetDownloader",
    "DedupTracker",
    "EpisodeMatcher",
    "EpisodeRecord",
    "FeedFetcher",
    "FeedParser",
    "ShowMetadata",
]
