"""Upload workflow for podcast episodes.

This package runs a single upload pass against the media server:
reconcile → fetch → upload → persist → retention.
"""

from src.workflow.config import WorkflowConfig
from src.workflow.context import RunContext, RunStats
from src.workflow.orchestrator import UploadOrchestrator
from src.workflow.workers.base import WorkerInterface, WorkerResult

__all__ = [
    "RunContext",
    "RunStats",
    "UploadOrchestrator",
    "WorkerInterface",
    "WorkerResult",
    "WorkflowConfig",
]
