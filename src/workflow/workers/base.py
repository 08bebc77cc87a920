"""Base classes for workflow workers.

Defines the interface and common data structures used by all workers,
plus the continue-on-error batch helper they share.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ItemResult(Generic[T]):
    """Outcome of applying an action to a single item.

    Attributes:
        item: The item the action was applied to.
        success: Whether the action completed without raising.
        value: The action's return value on success.
        error: The exception raised on failure.
    """

    item: T
    success: bool
    value: Any = None
    error: Optional[Exception] = None


@dataclass
class WorkerResult:
    """Result of a worker batch processing run.

    Attributes:
        processed: Number of items successfully processed.
        failed: Number of items that failed processing.
        skipped: Number of items skipped (already processed or invalid).
        errors: List of error messages for failed items.
        items: Per-item results, in processing order.
    """

    processed: int = 0
    failed: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)
    items: list[ItemResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Total number of items attempted."""
        return self.processed + self.failed + self.skipped

    @property
    def succeeded_items(self) -> list:
        """Items whose action completed."""
        return [r.item for r in self.items if r.success]

    def __add__(self, other: "WorkerResult") -> "WorkerResult":
        """Combine two WorkerResults."""
        return WorkerResult(
            processed=self.processed + other.processed,
            failed=self.failed + other.failed,
            skipped=self.skipped + other.skipped,
            errors=self.errors + other.errors,
            items=self.items + other.items,
        )


def apply_best_effort(
    items: Iterable[T],
    action: Callable[[T], Any],
    describe: Callable[[T], str] = str,
    delay_seconds: float = 0,
) -> WorkerResult:
    """Apply ``action`` to each item, continuing past failures.

    A failure is logged and recorded; it never stops the batch. When
    ``delay_seconds`` is set, the helper sleeps between consecutive items
    to pace calls against the remote server.

    Args:
        items: Items to process, in order.
        action: Callable applied to each item.
        describe: Produces a short label for log and error messages.
        delay_seconds: Pause between items.

    Returns:
        WorkerResult with counts and a per-item result list.
    """
    result = WorkerResult()

    for index, item in enumerate(items):
        if index > 0 and delay_seconds > 0:
            time.sleep(delay_seconds)

        try:
            value = action(item)
        except Exception as e:
            error_msg = f"{describe(item)}: {e}"
            logger.error(error_msg)
            result.failed += 1
            result.errors.append(error_msg)
            result.items.append(ItemResult(item=item, success=False, error=e))
        else:
            result.processed += 1
            result.items.append(ItemResult(item=item, success=True, value=value))

    return result


class WorkerInterface(ABC):
    """Abstract base class for workflow workers.

    Each worker is responsible for a single phase of the run and reads
    and updates the shared run context.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this worker."""
        pass

    @abstractmethod
    def run(self, context) -> WorkerResult:
        """Run this worker's phase.

        Args:
            context: The RunContext for the current run.

        Returns:
            WorkerResult with counts of processed, failed, and skipped items.
        """
        pass

    def log_result(self, result: WorkerResult) -> None:
        """Log the result of a batch processing run.

        Args:
            result: The WorkerResult to log.
        """
        if result.total == 0:
            logger.info(f"[{self.name}] No items to process")
        else:
            logger.info(
                f"[{self.name}] Processed: {result.processed}, "
                f"Failed: {result.failed}, Skipped: {result.skipped}"
            )

        for error in result.errors:
            logger.error(f"[{self.name}] {error}")
