"""Upload worker for pushing new episodes to the media server.

Each episode goes through download, upload, an indexing wait, metadata,
artwork and playlist assignment. Download, upload, indexing and metadata
failures abort the episode; artwork and playlist problems are logged and
tolerated. Scratch files are removed however the attempt ends.
"""

import logging
import os
import time
from typing import Optional

from src.errors import (
    DownloadError,
    IndexingTimeoutError,
    MediaServerError,
    MetadataUpdateError,
    UploadError,
)
from src.media.client import MediaServerClient
from src.podcast.downloader import AssetDownloader, scratch_filename
from src.podcast.feed_parser import EpisodeRecord, ShowMetadata
from src.workflow.config import WorkflowConfig
from src.workflow.context import PendingEpisode, RunContext
from src.workflow.workers.base import WorkerInterface, WorkerResult, apply_best_effort

logger = logging.getLogger(__name__)

# Uploads are sent base64 encoded in memory
LARGE_FILE_WARNING_MB = 200


class UploadPipeline:
    """Uploads a single episode and applies its metadata.

    Example:
        pipeline = UploadPipeline(client, AssetDownloader(), WorkflowConfig(), "./temp")
        file_id = pipeline.process_episode(episode, show, playlist_id="3")
    """

    def __init__(
        self,
        client: MediaServerClient,
        downloader: AssetDownloader,
        workflow_config: WorkflowConfig,
        temp_directory: str,
    ):
        """Initialize the upload pipeline.

        Args:
            client: Media server client.
            downloader: Downloader for assets and artwork.
            workflow_config: Timing and limit settings.
            temp_directory: Scratch directory; must already exist.
        """
        self.client = client
        self.downloader = downloader
        self.workflow_config = workflow_config
        self.temp_directory = temp_directory

    def process_episode(
        self,
        episode: EpisodeRecord,
        show: ShowMetadata,
        playlist_id: Optional[str] = None,
    ) -> str:
        """Upload one episode.

        Args:
            episode: Episode to upload.
            show: Metadata of the episode's show.
            playlist_id: Playlist to assign the file to, if any.

        Returns:
            The media server id of the uploaded file.

        Raises:
            DownloadError: If the asset cannot be downloaded or is empty.
            UploadError: If the server does not accept the asset.
            IndexingTimeoutError: If the file never becomes queryable.
            MetadataUpdateError: If metadata cannot be applied.
        """
        start = time.monotonic()
        logger.info(f'Processing: "{episode.title}" from {show.title}')

        asset_path = os.path.join(
            self.temp_directory, scratch_filename(episode.enclosure_url)
        )
        artwork_path: Optional[str] = None

        try:
            size = self._download_asset(episode, asset_path)
            logger.info(f"Downloaded {size / 1024 / 1024:.2f} MB")

            image_url = episode.image_url or show.image_url
            if image_url:
                artwork_path = os.path.join(
                    self.temp_directory,
                    scratch_filename(image_url, default_ext=".jpg", label="artwork"),
                )
            has_artwork = bool(artwork_path) and self._download_artwork(image_url, artwork_path)

            file_id = self._upload(asset_path)
            self.wait_for_indexing(file_id)
            self._update_metadata(file_id, episode, show)

            if has_artwork:
                try:
                    logger.info("Uploading artwork...")
                    self.client.upload_artwork(file_id, artwork_path)
                    logger.info(f"Artwork uploaded for file {file_id}")
                except Exception as e:
                    logger.warning(f"Artwork upload failed: {e}")

            if playlist_id:
                try:
                    logger.info(f"Adding to playlist {playlist_id}...")
                    self.client.set_playlists(file_id, [playlist_id])
                    logger.info(f"File {file_id} assigned to playlist {playlist_id}")
                except Exception as e:
                    logger.warning(f"Playlist assignment failed: {e}")

            logger.info(
                f'Successfully processed "{episode.title}" in {time.monotonic() - start:.1f}s'
            )
            return file_id

        except Exception as e:
            logger.error(f'Failed to process "{episode.title}": {e}')
            raise
        finally:
            self._cleanup(asset_path, artwork_path)

    def _download_asset(self, episode: EpisodeRecord, asset_path: str) -> int:
        logger.info("Downloading audio...")
        size = self.downloader.download(episode.enclosure_url, asset_path)
        if size == 0:
            raise DownloadError("Downloaded file is empty")
        return size

    def _download_artwork(self, image_url: str, artwork_path: str) -> bool:
        """Download artwork. Returns False instead of raising on any failure."""
        try:
            size = self.downloader.download(image_url, artwork_path, show_progress=False)
        except Exception as e:
            logger.warning(f"Artwork download failed: {e}")
            return False

        if size == 0:
            logger.warning("Artwork download was empty, skipping artwork")
            return False

        logger.info(f"Downloaded artwork: {size / 1024:.2f} KB")
        return True

    def _upload(self, asset_path: str) -> str:
        filename = os.path.basename(asset_path)
        size_mb = os.path.getsize(asset_path) / 1024 / 1024
        logger.info(f"Uploading: {filename} ({size_mb:.2f}MB)")
        if size_mb > LARGE_FILE_WARNING_MB:
            logger.warning(f"Large file detected ({size_mb:.2f}MB) - this may require more memory")

        with open(asset_path, "rb") as f:
            content = f.read()

        try:
            file_id = self.client.create_file(filename, content)
        except MediaServerError as e:
            raise UploadError(f"Upload failed: {e}") from e

        if not file_id:
            raise UploadError("Upload failed: No file ID returned")

        logger.info(f"Upload successful, file ID: {file_id}")
        return file_id

    def wait_for_indexing(self, file_id: str) -> None:
        """Poll until the uploaded file can be fetched.

        Sleeps before every check, with delays growing from the base by a
        fixed step up to the cap.

        Raises:
            IndexingTimeoutError: If no check succeeds.
        """
        max_attempts = self.workflow_config.indexing_max_attempts
        logger.info(f"Waiting for file {file_id} to be indexed...")

        for attempt in range(max_attempts):
            time.sleep(self.workflow_config.indexing_delay(attempt))
            try:
                self.client.get_file(file_id)
            except Exception as e:
                logger.info(
                    f"Indexing check {attempt + 1}/{max_attempts} failed, retrying... ({e})"
                )
                continue

            logger.info(f"File {file_id} indexed successfully")
            return

        raise IndexingTimeoutError(
            f"File {file_id} indexing timeout after {max_attempts} attempts"
        )

    def _update_metadata(self, file_id: str, episode: EpisodeRecord, show: ShowMetadata) -> None:
        logger.info("Updating metadata...")
        fields = {
            "title": episode.title or "Unknown Episode",
            "artist": show.author or "Unknown",
            "album": show.title or "Podcast",
        }
        if episode.description:
            fields["comment"] = episode.description[: self.workflow_config.comment_max_length]

        try:
            self.client.update_file(file_id, **fields)
        except Exception as e:
            raise MetadataUpdateError(f"Metadata update failed for file {file_id}: {e}") from e
        logger.info(f"Metadata updated for file {file_id}")

    def _cleanup(self, *paths: Optional[str]) -> None:
        for path in paths:
            if not path or not os.path.exists(path):
                continue
            try:
                os.remove(path)
            except OSError as e:
                logger.warning(f"Failed to remove scratch file {path}: {e}")


class UploadWorker(WorkerInterface):
    """Worker that uploads the run's pending episodes one at a time.

    Successful uploads are recorded in the dedup tracker; failures are
    left out so the next run retries them.
    """

    def __init__(self, pipeline: UploadPipeline, workflow_config: WorkflowConfig):
        """Initialize the upload worker.

        Args:
            pipeline: Pipeline that uploads a single episode.
            workflow_config: Timing settings.
        """
        self.pipeline = pipeline
        self.workflow_config = workflow_config

    @property
    def name(self) -> str:
        """Human-readable name for this worker."""
        return "Upload"

    def _upload(self, context: RunContext, pending: PendingEpisode) -> str:
        file_id = self.pipeline.process_episode(
            pending.episode,
            pending.show,
            pending.show_config.playlist_id,
        )
        context.dedup.add(pending.episode.guid)
        return file_id

    def run(self, context: RunContext) -> WorkerResult:
        """Upload every pending episode in order.

        Args:
            context: Run context holding the pending queue.

        Returns:
            WorkerResult with one item result per pending episode.
        """
        if not context.pending:
            return WorkerResult()

        logger.info(f"Starting episode processing: {len(context.pending)} episodes")
        result = apply_best_effort(
            context.pending,
            lambda pending: self._upload(context, pending),
            describe=PendingEpisode.describe,
            delay_seconds=self.workflow_config.episode_delay_seconds,
        )

        context.stats.episodes_uploaded += result.processed
        context.stats.episodes_failed += result.failed
        logger.info(f"Process complete: {result.processed} successful, {result.failed} failed")
        return result
