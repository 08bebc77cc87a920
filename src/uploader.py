"""Podcast uploader entry point.

Runs one upload pass: reconcile orphans, upload new episodes from every
enabled feed, then enforce retention. Exits non-zero only when the run
cannot start or fails outside per-item error handling.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

# Add parent directory to path to import from src
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.argparse_shared import (
    add_config_file_argument,
    add_log_level_argument,
    get_base_parser,
)
from src.config import Config
from src.errors import ConfigError
from src.workflow.config import WorkflowConfig
from src.workflow.orchestrator import UploadOrchestrator

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str, log_file: Optional[str] = None) -> None:
    """Log to stdout and, when given, append to a log file.

    Args:
        level: Log level name.
        log_file: Optional path of a file that receives every log line too.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    file_error = None
    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
        except OSError as e:
            file_error = e

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
    # urllib3 logs every connection on DEBUG and retries on INFO
    if level == "INFO":
        logging.getLogger("urllib3").setLevel("WARNING")

    if file_error:
        logging.warning(f"Failed to open log file {log_file}: {file_error}")


def run_uploader(config: Config, workflow_config: WorkflowConfig) -> None:
    """Run a single upload pass.

    Args:
        config: Application configuration.
        workflow_config: Timing and limit settings.
    """
    orchestrator = UploadOrchestrator(config=config, workflow_config=workflow_config)
    try:
        stats = orchestrator.run()
    finally:
        orchestrator.close()

    logging.info(
        f"Uploader complete: "
        f"{stats.episodes_uploaded} uploaded, "
        f"{stats.episodes_failed} failed, "
        f"duration={stats.duration_seconds:.1f}s"
    )


def main(argv: Optional[list[str]] = None) -> int:
    parser = get_base_parser()
    add_log_level_argument(parser)
    add_config_file_argument(parser)
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    try:
        config = Config(env_file=args.env_file, config_file=args.config_file)
        workflow_config = WorkflowConfig.from_env()
    except (ConfigError, ValueError) as e:
        logging.error(f"Failed to start: {e}")
        logging.error("Make sure config.json exists and is properly formatted.")
        return 1

    configure_logging(args.log_level, config.LOG_FILE)
    config.load_config()

    try:
        run_uploader(config, workflow_config)
    except KeyboardInterrupt:
        logging.info("Uploader interrupted by user")
        return 1
    except Exception as e:
        logging.exception(f"Fatal error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
