"""Single-run orchestrator for podcast uploads.

Sequence: reconcile orphans -> fetch and filter every enabled show ->
upload new episodes oldest first -> save dedup state -> enforce retention.
Everything runs sequentially on one thread.
"""

import logging
import os
from datetime import UTC, datetime, timedelta
from typing import Optional

from src.config import Config, ShowConfig
from src.errors import UploaderError
from src.media.client import MediaServerClient
from src.podcast.dedup import DedupTracker
from src.podcast.downloader import AssetDownloader
from src.podcast.feed_fetcher import FeedFetcher
from src.podcast.feed_parser import EpisodeRecord, FeedParser
from src.podcast.matcher import EpisodeMatcher
from src.workflow.config import WorkflowConfig
from src.workflow.context import PendingEpisode, RunContext, RunStats
from src.workflow.workers.reconcile import OrphanReconcileWorker
from src.workflow.workers.retention import RetentionWorker
from src.workflow.workers.upload import UploadPipeline, UploadWorker

logger = logging.getLogger(__name__)


def select_recent(
    episodes: list[EpisodeRecord],
    show_config: ShowConfig,
    now: Optional[datetime] = None,
) -> list[EpisodeRecord]:
    """Episodes inside a show's age window, capped at its episode count.

    The cap applies in feed order, after the age cut. Episodes with an
    unreadable publish date are never selected.
    """
    now = now or datetime.now(UTC)
    cutoff = now - timedelta(days=show_config.max_age_days)
    recent = [
        ep for ep in episodes if ep.published is not None and ep.published > cutoff
    ]
    return recent[: show_config.max_episodes]


class UploadOrchestrator:
    """Runs one complete upload pass.

    Example:
        config = Config()
        orchestrator = UploadOrchestrator(config, WorkflowConfig.from_env())
        stats = orchestrator.run()
    """

    def __init__(
        self,
        config: Config,
        workflow_config: WorkflowConfig,
        client: Optional[MediaServerClient] = None,
        fetcher: Optional[FeedFetcher] = None,
        downloader: Optional[AssetDownloader] = None,
        dedup: Optional[DedupTracker] = None,
    ):
        """Initialize the orchestrator.

        Args:
            config: Application configuration.
            workflow_config: Timing and limit settings.
            client: Media server client; built from config when omitted.
            fetcher: Feed fetcher.
            downloader: Asset downloader.
            dedup: Processed-episode tracker.
        """
        self.config = config
        self.workflow_config = workflow_config

        self.client = client or MediaServerClient(
            host=config.MEDIA_API_HOST,
            station_id=config.MEDIA_STATION_ID,
            api_key=config.MEDIA_API_KEY,
            timeout=workflow_config.api_timeout_seconds,
        )
        self.fetcher = fetcher or FeedFetcher(timeout=workflow_config.feed_timeout_seconds)
        self.downloader = downloader or AssetDownloader(
            timeout=workflow_config.asset_timeout_seconds
        )
        self.dedup = dedup if dedup is not None else DedupTracker(config.STATE_FILE)
        self.parser = FeedParser()
        self.matcher = EpisodeMatcher()

        self.reconcile_worker = OrphanReconcileWorker(
            default_playlist_id=config.MEDIA_DEFAULT_PLAYLIST,
            workflow_config=workflow_config,
        )
        self.upload_worker = UploadWorker(
            pipeline=UploadPipeline(
                client=self.client,
                downloader=self.downloader,
                workflow_config=workflow_config,
                temp_directory=config.TEMP_DIRECTORY,
            ),
            workflow_config=workflow_config,
        )
        self.retention_worker = RetentionWorker(
            shows=config.SHOWS,
            workflow_config=workflow_config,
            fetcher=self.fetcher,
            parser=self.parser,
            matcher=self.matcher,
        )

    def run(self) -> RunStats:
        """Run every phase once.

        Returns:
            RunStats with run statistics.

        Raises:
            UploaderError: If initialization fails.
        """
        logger.info("Starting podcast uploader")
        context = self._startup()

        result = self.reconcile_worker.run(context)
        self.reconcile_worker.log_result(result)

        self._collect_new_episodes(context)

        if context.pending:
            result = self.upload_worker.run(context)
            self.upload_worker.log_result(result)
        else:
            logger.info("All episodes up to date!")

        self._save_dedup()

        # Retention runs even when nothing was uploaded
        result = self.retention_worker.run(context)
        self.retention_worker.log_result(result)

        context.stats.stopped_at = datetime.now(UTC)
        self._log_summary(context.stats)
        return context.stats

    def _startup(self) -> RunContext:
        """Prepare scratch storage, dedup state and the remote snapshot."""
        try:
            os.makedirs(self.config.TEMP_DIRECTORY, exist_ok=True)
        except OSError as e:
            raise UploaderError(f"Failed to create temp directory: {e}") from e

        self.dedup.load()

        context = RunContext(client=self.client, dedup=self.dedup)
        context.refresh_remote_files()
        self._log_playlist_summary()
        return context

    def _log_playlist_summary(self) -> None:
        """Log each station playlist and how many files it holds."""
        try:
            playlists = self.client.list_playlists()
        except Exception as e:
            logger.warning(f"Could not load playlist information: {e}")
            return

        logger.info("Available playlists:")
        for playlist in playlists:
            try:
                count = len(self.client.get_playlist_media_ids(playlist.id))
            except Exception as e:
                logger.warning(f"Could not get playlist files for playlist {playlist.id}: {e}")
                count = 0

            logger.info(
                f'ID {playlist.id}: "{playlist.name}" '
                f"({playlist.source}/{playlist.order}) - {count} files"
            )
            if not playlist.accepts_manual_assignment:
                logger.warning(
                    f"  Source '{playlist.source}' may not support manual file assignment"
                )

    def _collect_new_episodes(self, context: RunContext) -> None:
        """Fill context.pending with new episodes from every enabled show, oldest first."""
        found = 0
        queued: set[str] = set()
        for show_config in self.config.enabled_shows:
            logger.info(f"Fetching: {show_config.feed_url}")
            try:
                show, episodes = self.parser.parse(self.fetcher.fetch(show_config.feed_url))
            except Exception as e:
                logger.error(f"Failed to fetch {show_config.feed_url}: {e}")
                context.stats.shows_failed += 1
                continue

            context.stats.shows_fetched += 1
            context.show_metadata[show_config.feed_url] = show
            logger.info(f"{show.title}: {len(episodes)} episodes")

            for episode in select_recent(episodes, show_config):
                found += 1
                if context.dedup.contains(episode.guid) or episode.guid in queued:
                    continue
                if self.matcher.exists_remotely(episode, show, context.remote_files):
                    logger.info(f'Already on server, marking processed: "{episode.title}"')
                    context.dedup.add(episode.guid)
                    context.stats.episodes_already_remote += 1
                    continue
                queued.add(episode.guid)
                context.pending.append(PendingEpisode(episode, show, show_config))

        # Global publish order across shows
        context.pending.sort(key=lambda pending: pending.episode.published)
        context.stats.episodes_found = found
        context.stats.episodes_new = len(context.pending)
        logger.info(f"Summary: {found} total, {len(context.pending)} new episodes to upload")

    def _save_dedup(self) -> None:
        try:
            self.dedup.persist()
        except OSError as e:
            logger.error(f"Failed to save processed episodes: {e}")

    def _log_summary(self, stats: RunStats) -> None:
        logger.info(
            f"Run complete in {stats.duration_seconds:.1f}s: "
            f"shows={stats.shows_fetched} fetched/{stats.shows_failed} failed, "
            f"episodes={stats.episodes_uploaded} uploaded/{stats.episodes_failed} failed/"
            f"{stats.episodes_already_remote} already on server, "
            f"orphans deleted={stats.orphans_deleted}, "
            f"unassigned={stats.retention_unassigned}"
        )

    def close(self) -> None:
        """Release HTTP sessions."""
        self.client.close()
        self.fetcher.close()
        self.downloader.close()
