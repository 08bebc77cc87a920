"""Retention worker enforcing per-show episode limits.

Files beyond a show's episode count, or older than its age limit, are
removed from all playlists. The files themselves stay on the server.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Iterable, Optional

from src.config import ShowConfig
from src.media.models import RemoteFile
from src.podcast.feed_fetcher import FeedFetcher
from src.podcast.feed_parser import FeedParser, ShowMetadata
from src.podcast.matcher import EpisodeMatcher
from src.workflow.config import WorkflowConfig
from src.workflow.context import RunContext
from src.workflow.workers.base import WorkerInterface, WorkerResult, apply_best_effort

logger = logging.getLogger(__name__)


@dataclass
class RemovalCandidate:
    """A remote file selected for unassignment and why."""

    file: RemoteFile
    rank: int
    age_days: int
    beyond_limit: bool
    too_old: bool

    @property
    def reason(self) -> str:
        if self.too_old and self.beyond_limit:
            return f"{self.age_days} days old & beyond episode limit"
        if self.too_old:
            return f"{self.age_days} days old"
        return "beyond episode limit"


def select_for_removal(
    files: Iterable[RemoteFile],
    max_episodes: int,
    max_age_days: int,
    now: Optional[datetime] = None,
) -> list[RemovalCandidate]:
    """Pick the files a show should no longer have assigned.

    Files are ranked newest first; files without an upload time rank last.
    A file is selected if its rank is at or past ``max_episodes`` or its age
    exceeds ``max_age_days``.
    """
    now = now or datetime.now(UTC)
    ranked = sorted(files, key=lambda f: f.uploaded_at or 0, reverse=True)

    candidates = []
    for rank, remote_file in enumerate(ranked):
        age = remote_file.age_days(now)
        beyond_limit = rank >= max_episodes
        too_old = age > max_age_days
        if beyond_limit or too_old:
            candidates.append(
                RemovalCandidate(
                    file=remote_file,
                    rank=rank,
                    age_days=age,
                    beyond_limit=beyond_limit,
                    too_old=too_old,
                )
            )
    return candidates


class RetentionWorker(WorkerInterface):
    """Worker that unassigns episodes exceeding each show's retention policy.

    Matches files to shows across the whole station listing, not only the
    files uploaded in this run.
    """

    def __init__(
        self,
        shows: list[ShowConfig],
        workflow_config: WorkflowConfig,
        fetcher: FeedFetcher,
        parser: Optional[FeedParser] = None,
        matcher: Optional[EpisodeMatcher] = None,
    ):
        """Initialize the retention worker.

        Args:
            shows: Configured shows; disabled ones are ignored.
            workflow_config: Timing settings.
            fetcher: Used for shows whose feed was not fetched earlier in the run.
            parser: Feed parser.
            matcher: Show association rules.
        """
        self.shows = shows
        self.workflow_config = workflow_config
        self.fetcher = fetcher
        self.parser = parser or FeedParser()
        self.matcher = matcher or EpisodeMatcher()

    @property
    def name(self) -> str:
        """Human-readable name for this worker."""
        return "Retention"

    def _show_metadata(self, context: RunContext, show_config: ShowConfig) -> Optional[ShowMetadata]:
        metadata = context.show_metadata.get(show_config.feed_url)
        if metadata is not None:
            return metadata
        try:
            metadata, _ = self.parser.parse(self.fetcher.fetch(show_config.feed_url))
        except Exception as e:
            logger.warning(
                f"Could not fetch show metadata for cleanup: {show_config.feed_url} ({e})"
            )
            return None
        context.show_metadata[show_config.feed_url] = metadata
        return metadata

    def _unassign(self, context: RunContext, candidate: RemovalCandidate) -> None:
        context.client.set_playlists(candidate.file.id, [])
        logger.info(f'Removed from all playlists: "{candidate.file.title}" ({candidate.reason})')

    def show_candidates(
        self,
        context: RunContext,
        show_config: ShowConfig,
        show: ShowMetadata,
        now: Optional[datetime] = None,
    ) -> list[RemovalCandidate]:
        """Select the files one show should no longer have assigned."""
        show_files = self.matcher.files_for_show(show, context.remote_files)
        candidates = select_for_removal(
            show_files, show_config.max_episodes, show_config.max_age_days, now
        )

        if not candidates:
            logger.info(
                f"{show.title}: {len(show_files)}/{show_config.max_episodes} episodes, "
                f"none older than {show_config.max_age_days} days - no cleanup needed"
            )
        else:
            logger.info(
                f"{show.title}: Removing {len(candidates)} episodes "
                f"({len(show_files) - len(candidates)} will remain)"
            )
        return candidates

    def run(self, context: RunContext, now: Optional[datetime] = None) -> WorkerResult:
        """Enforce retention for every enabled show.

        Candidates from all shows are unassigned as one paced batch.

        Args:
            context: Run context; its remote snapshot is refreshed first.
            now: Reference time for file ages; defaults to the current time.

        Returns:
            WorkerResult counting unassigned and failed files.
        """
        logger.info("Starting episode cleanup to maintain configured limits...")
        context.refresh_remote_files()

        skipped = 0
        batch: list[RemovalCandidate] = []
        selected: set[str] = set()
        for show_config in self.shows:
            if not show_config.enabled:
                continue

            show = self._show_metadata(context, show_config)
            if show is None:
                skipped += 1
                continue

            for candidate in self.show_candidates(context, show_config, show, now):
                # A file matching several shows is unassigned once
                if candidate.file.id not in selected:
                    selected.add(candidate.file.id)
                    batch.append(candidate)

        result = apply_best_effort(
            batch,
            lambda candidate: self._unassign(context, candidate),
            describe=lambda c: f"Failed to remove file {c.file.id} from playlists",
            delay_seconds=self.workflow_config.remote_call_delay_seconds,
        )
        result.skipped += skipped

        context.stats.retention_unassigned += result.processed
        context.stats.retention_failed += result.failed
        logger.info(
            f"Cleanup complete: removed {result.processed} episodes from playlists"
        )
        return result
