"""Reconcile worker for deleting files outside the default playlist.

Any station file that is not a member of the configured default playlist
is treated as an orphan and permanently deleted from the server.
"""

import logging
from typing import Iterable, Optional

from src.media.models import RemoteFile
from src.workflow.config import WorkflowConfig
from src.workflow.context import RunContext
from src.workflow.workers.base import WorkerInterface, WorkerResult, apply_best_effort

logger = logging.getLogger(__name__)


def partition_by_playlist(
    files: Iterable[RemoteFile], playlist_id: str
) -> tuple[list[RemoteFile], list[RemoteFile]]:
    """Split files into (members, orphans) of a playlist."""
    members, orphans = [], []
    for remote_file in files:
        (members if remote_file.in_playlist(playlist_id) else orphans).append(remote_file)
    return members, orphans


class OrphanReconcileWorker(WorkerInterface):
    """Worker that deletes orphaned files before feeds are processed."""

    def __init__(self, default_playlist_id: Optional[str], workflow_config: WorkflowConfig):
        """Initialize the reconcile worker.

        Args:
            default_playlist_id: Playlist every kept file must belong to.
                None disables reconciliation.
            workflow_config: Timing settings.
        """
        self.default_playlist_id = default_playlist_id
        self.workflow_config = workflow_config

    @property
    def name(self) -> str:
        """Human-readable name for this worker."""
        return "Reconcile"

    def _delete(self, context: RunContext, remote_file: RemoteFile) -> None:
        logger.info(f'Deleting orphaned file: "{remote_file.title}" (ID: {remote_file.id})')
        context.client.delete_file(remote_file.id)
        logger.info(f"Successfully deleted file ID {remote_file.id}")

    def run(self, context: RunContext) -> WorkerResult:
        """Delete orphans from the current snapshot.

        The snapshot is re-fetched after any successful deletion.

        Args:
            context: Run context holding the remote snapshot.

        Returns:
            WorkerResult counting deleted and failed files.
        """
        if not self.default_playlist_id:
            logger.warning("No default playlist configured, skipping orphaned file cleanup")
            return WorkerResult()

        logger.info(f"Starting orphaned file cleanup (default playlist {self.default_playlist_id})")
        members, orphans = partition_by_playlist(context.remote_files, self.default_playlist_id)
        logger.info(f"Found {len(members)} files in default playlist")

        if not orphans:
            logger.info("No orphaned files found - all server files are in the default playlist")
            return WorkerResult()

        logger.info(f"Found {len(orphans)} orphaned files to delete")
        for remote_file in orphans:
            logger.debug(
                f'  - "{remote_file.title}" (ID: {remote_file.id}) by '
                f"{remote_file.artist or 'Unknown'} (playlists: {sorted(remote_file.playlists)})"
            )

        result = apply_best_effort(
            orphans,
            lambda remote_file: self._delete(context, remote_file),
            describe=lambda f: f"Failed to delete file ID {f.id}",
            delay_seconds=self.workflow_config.remote_call_delay_seconds,
        )

        context.stats.orphans_deleted += result.processed
        context.stats.orphans_failed += result.failed
        logger.info(
            f"Orphaned file cleanup complete: deleted {result.processed}, failed {result.failed}"
        )

        if result.processed > 0:
            logger.info("Reloading server files after cleanup...")
            context.refresh_remote_files()

        return result
