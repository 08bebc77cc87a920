"""RSS/Atom feed parser for show metadata and episodes.

Uses feedparser library to handle various feed formats, including the
iTunes namespace extensions most podcast feeds carry. Parsing is
best-effort: missing elements become empty strings and only episodes
without a downloadable enclosure are dropped.
"""

import hashlib
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Tuple

import feedparser

logger = logging.getLogger(__name__)


@dataclass
class ShowMetadata:
    """Show-level data taken from a feed's channel element."""

    title: str = ""
    description: str = ""
    author: str = ""
    image_url: str = ""


@dataclass
class EpisodeRecord:
    """One downloadable episode from a feed."""

    guid: str
    title: str
    enclosure_url: str
    published: Optional[datetime]
    description: str = ""
    duration: str = ""
    image_url: str = ""


def derive_guid(title: str, enclosure_url: str) -> str:
    """Stable identifier for an episode whose feed carries no guid."""
    return hashlib.md5((title + enclosure_url).encode("utf-8")).hexdigest()


class FeedParser:
    """Parser for podcast RSS/Atom feeds.

    Example:
        parser = FeedParser()
        show, episodes = parser.parse(xml_text)
        print(f"Show: {show.title}")
        for episode in episodes:
            print(f"  - {episode.title}")
    """

    def parse(self, content: str) -> Tuple[ShowMetadata, List[EpisodeRecord]]:
        """Parse feed text into show metadata and episodes in feed order.

        Args:
            content: RSS/Atom feed content

        Returns:
            Tuple of (ShowMetadata, list of EpisodeRecord)
        """
        feed = feedparser.parse(content)

        if feed.bozo and feed.get("bozo_exception"):
            logger.warning(f"Feed parsing warning: {feed.bozo_exception}")

        f = feed.feed
        show = ShowMetadata(
            title=(f.get("title") or "").strip(),
            description=self._clean_html(f.get("description") or f.get("subtitle")),
            author=(f.get("author") or f.get("itunes_author") or "").strip(),
            image_url=self._extract_image_url(f),
        )

        episodes = []
        for entry in feed.entries:
            episode = self._parse_episode(entry)
            if episode:
                episodes.append(episode)

        logger.debug(f"Parsed show '{show.title}' with {len(episodes)} episodes")
        return show, episodes

    def _parse_episode(self, entry: feedparser.FeedParserDict) -> Optional[EpisodeRecord]:
        """Parse a feed entry into an EpisodeRecord.

        Args:
            entry: Feed entry from feedparser

        Returns:
            EpisodeRecord or None if the entry has no enclosure URL
        """
        enclosure_url = self._extract_enclosure_url(entry)
        if not enclosure_url:
            logger.debug(f"Skipping entry without enclosure: {entry.get('title')}")
            return None

        title = (entry.get("title") or "").strip()
        guid = (entry.get("id") or "").strip() or derive_guid(title, enclosure_url)

        image = entry.get("image")
        image_url = image.get("href", "") if isinstance(image, dict) else ""

        return EpisodeRecord(
            guid=guid,
            title=title,
            enclosure_url=enclosure_url,
            published=self._parse_published(entry),
            description=self._clean_html(entry.get("description") or entry.get("summary")),
            duration=str(entry.get("itunes_duration") or "").strip(),
            image_url=image_url,
        )

    def _extract_enclosure_url(self, entry: feedparser.FeedParserDict) -> str:
        for enclosure in entry.get("enclosures", []):
            url = enclosure.get("href") or enclosure.get("url")
            if url:
                return url.strip()
        return ""

    def _parse_published(self, entry: feedparser.FeedParserDict) -> Optional[datetime]:
        # Undated entries sort as if published now; an unreadable date is None
        if not entry.get("published"):
            return datetime.now(timezone.utc)
        if entry.get("published_parsed"):
            try:
                return datetime(*entry.published_parsed[:6], tzinfo=timezone.utc)
            except (TypeError, ValueError):
                pass
        logger.warning(
            f"Unreadable pubDate {entry.get('published')!r} on {entry.get('title', '')!r}"
        )
        return None

    def _extract_image_url(self, feed: feedparser.FeedParserDict) -> str:
        """Extract show artwork URL from feed.

        Args:
            feed: Feed dict from feedparser

        Returns:
            Image URL or empty string
        """
        # itunes:image and <image><url> both land here
        image = feed.get("image")
        if image:
            if isinstance(image, dict):
                return image.get("href") or image.get("url") or ""
            return str(image)

        thumbs = feed.get("media_thumbnail")
        if thumbs and isinstance(thumbs, list):
            return thumbs[0].get("url", "")

        return ""

    def _clean_html(self, text: Optional[str]) -> str:
        """Remove HTML tags from text.

        Args:
            text: Text that may contain HTML

        Returns:
            Cleaned text, empty when nothing remains
        """
        if not text:
            return ""

        # Remove HTML tags
        clean = re.sub(r"<[^>]+>", "", text)
        # Decode HTML entities
        clean = clean.replace("&amp;", "&")
        clean = clean.replace("&lt;", "<")
        clean = clean.replace("&gt;", ">")
        clean = clean.replace("&quot;", '"')
        clean = clean.replace("&#39;", "'")
        clean = clean.replace("&nbsp;", " ")
        # Normalize whitespace
        return re.sub(r"\s+", " ", clean).strip()
