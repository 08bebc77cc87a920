"""Run-scoped state shared by the workers of a single upload run."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Optional

from src.config import ShowConfig
from src.media.client import MediaServerClient
from src.media.models import RemoteFile
from src.podcast.dedup import DedupTracker
from src.podcast.feed_parser import EpisodeRecord, ShowMetadata

logger = logging.getLogger(__name__)


@dataclass
class RunStats:
    """Statistics for an upload run."""

    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    stopped_at: Optional[datetime] = None

    shows_fetched: int = 0
    shows_failed: int = 0
    episodes_found: int = 0
    episodes_new: int = 0
    episodes_already_remote: int = 0
    episodes_uploaded: int = 0
    episodes_failed: int = 0
    orphans_deleted: int = 0
    orphans_failed: int = 0
    retention_unassigned: int = 0
    retention_failed: int = 0

    @property
    def duration_seconds(self) -> float:
        """Duration of the run in seconds."""
        end = self.stopped_at or datetime.now(UTC)
        return (end - self.started_at).total_seconds()


@dataclass
class PendingEpisode:
    """An episode selected for upload, with the show it came from."""

    episode: EpisodeRecord
    show: ShowMetadata
    show_config: ShowConfig

    def describe(self) -> str:
        return f'"{self.episode.title}" from {self.show.title or self.show_config.feed_url}'


@dataclass
class RunContext:
    """Mutable state carried through one run.

    The remote file list is a snapshot; it goes stale as soon as the run
    changes anything on the server, so workers that delete files must call
    refresh_remote_files() afterwards.

    Attributes:
        client: Media server client.
        dedup: Processed-episode tracker, loaded at run start.
        remote_files: Snapshot of the station's files.
        show_metadata: Metadata of shows fetched this run, keyed by feed URL.
        pending: New episodes queued for upload, oldest first.
        stats: Counters for the run summary.
    """

    client: MediaServerClient
    dedup: DedupTracker
    remote_files: list[RemoteFile] = field(default_factory=list)
    show_metadata: dict[str, ShowMetadata] = field(default_factory=dict)
    pending: list[PendingEpisode] = field(default_factory=list)
    stats: RunStats = field(default_factory=RunStats)

    def refresh_remote_files(self) -> list[RemoteFile]:
        """Replace the snapshot with a fresh listing.

        A failed listing is logged and leaves an empty snapshot.
        """
        try:
            self.remote_files = self.client.list_files()
        except Exception as e:
            logger.warning(f"Failed to load server files: {e}")
            self.remote_files = []
            return self.remote_files

        logger.info(f"Found {len(self.remote_files)} existing files on server")
        by_show = Counter(f.artist or f.album or "Unknown" for f in self.remote_files)
        if by_show:
            logger.info(
                "Files by show: "
                + ", ".join(f"{show}: {count}" for show, count in by_show.items())
            )
        return self.remote_files
