"""Workflow workers for the upload run.

Each worker handles a single phase of the run:
- OrphanReconcileWorker: Deletes files outside the default playlist
- UploadWorker: Uploads new episodes through the UploadPipeline
- RetentionWorker: Unassigns episodes beyond each show's limits
"""

from src.workflow.workers.base import WorkerInterface, WorkerResult, apply_best_effort

__all__ = [
    "WorkerInterface",
    "WorkerResult",
    "apply_best_effort",
]
