"""Configuration for the upload workflow.

Provides environment-based configuration for pacing delays, timeouts,
and the indexing poll schedule.
"""

import os
from dataclasses import dataclass
from typing import Optional


def _get_int_env(
    name: str,
    default: int,
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
) -> int:
    """Parse an integer from an environment variable with validation.

    Args:
        name: Environment variable name.
        default: Default value if env var is not set.
        min_val: Minimum allowed value (inclusive), or None for no minimum.
        max_val: Maximum allowed value (inclusive), or None for no maximum.

    Returns:
        The parsed and validated integer value.

    Raises:
        ValueError: If the value cannot be parsed as an integer or is out of range.
    """
    raw = os.getenv(name)
    if raw is None:
        return default

    try:
        value = int(raw)
    except ValueError:
        raise ValueError(
            f"Invalid value for {name}: '{raw}' is not a valid integer"
        )

    if min_val is not None and value < min_val:
        raise ValueError(
            f"Invalid value for {name}: {value} must be >= {min_val}"
        )

    if max_val is not None and value > max_val:
        raise ValueError(
            f"Invalid value for {name}: {value} must be <= {max_val}"
        )

    return value


@dataclass
class WorkflowConfig:
    """Timing and limit settings for an upload run.

    All settings can be overridden via environment variables.
    """

    # Pacing
    episode_delay_seconds: float = 2.0  # Between episode uploads
    remote_call_delay_seconds: float = 0.5  # Between retention/reconcile calls

    # Indexing poll: delay = min(base + step * attempt, cap)
    indexing_base_seconds: int = 30
    indexing_step_seconds: int = 30
    indexing_max_delay_seconds: int = 300
    indexing_max_attempts: int = 10

    # Timeouts
    feed_timeout_seconds: int = 30
    asset_timeout_seconds: int = 600  # 10 minutes
    api_timeout_seconds: int = 60

    # Metadata
    comment_max_length: int = 500

    def indexing_delay(self, attempt: int) -> int:
        """Seconds to wait before indexing check number ``attempt`` (0-based)."""
        return min(
            self.indexing_base_seconds + self.indexing_step_seconds * attempt,
            self.indexing_max_delay_seconds,
        )

    @classmethod
    def from_env(cls) -> "WorkflowConfig":
        """Create configuration from environment variables.

        Returns:
            WorkflowConfig instance with values from environment or defaults.

        Raises:
            ValueError: If any environment variable has an invalid value.
        """
        return cls(
            episode_delay_seconds=_get_int_env(
                "WORKFLOW_EPISODE_DELAY_MS", 2000, min_val=0
            ) / 1000,
            remote_call_delay_seconds=_get_int_env(
                "WORKFLOW_REMOTE_CALL_DELAY_MS", 500, min_val=0
            ) / 1000,
            indexing_base_seconds=_get_int_env(
                "WORKFLOW_INDEXING_BASE_SECONDS", 30, min_val=0
            ),
            indexing_step_seconds=_get_int_env(
                "WORKFLOW_INDEXING_STEP_SECONDS", 30, min_val=0
            ),
            indexing_max_delay_seconds=_get_int_env(
                "WORKFLOW_INDEXING_MAX_DELAY_SECONDS", 300, min_val=0
            ),
            indexing_max_attempts=_get_int_env(
                "WORKFLOW_INDEXING_MAX_ATTEMPTS", 10, min_val=1
            ),
            feed_timeout_seconds=_get_int_env(
                "WORKFLOW_FEED_TIMEOUT_SECONDS", 30, min_val=1
            ),
            asset_timeout_seconds=_get_int_env(
                "WORKFLOW_ASSET_TIMEOUT_SECONDS", 600, min_val=1
            ),
            api_timeout_seconds=_get_int_env(
                "WORKFLOW_API_TIMEOUT_SECONDS", 60, min_val=1
            ),
            comment_max_length=_get_int_env(
                "WORKFLOW_COMMENT_MAX_LENGTH", 500, min_val=0
            ),
        )
