"""Persistent record of episodes already handled by earlier runs."""

import json
import logging
import os

logger = logging.getLogger(__name__)


class DedupTracker:
    """Append-only set of processed episode guids backed by a JSON file.

    The file holds a JSON array and is rewritten whole on every persist.
    There is no removal API; the file grows for as long as feeds publish.

    Example:
        tracker = DedupTracker("./processed-episodes.json")
        tracker.load()
        if not tracker.contains(guid):
            ...
            tracker.add(guid)
        tracker.persist()
    """

    def __init__(self, path: str):
        self.path = path
        self._ids: set[str] = set()

    def load(self) -> None:
        """Load ids from disk. A missing or unreadable file means a fresh start."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.info("No previous episode history found, starting fresh")
            self._ids = set()
            return
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read episode history {self.path}, starting fresh: {e}")
            self._ids = set()
            return

        if not isinstance(data, list):
            logger.warning(f"Episode history {self.path} is not a list, starting fresh")
            self._ids = set()
            return

        self._ids = {str(item) for item in data}
        logger.info(f"Loaded {len(self._ids)} processed episodes")

    def contains(self, guid: str) -> bool:
        return guid in self._ids

    def add(self, guid: str) -> None:
        self._ids.add(guid)

    def persist(self) -> None:
        """Rewrite the history file with the current id set.

        Raises:
            OSError: If the file cannot be written.
        """
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(sorted(self._ids), f, indent=2)
        logger.debug(f"Saved {len(self._ids)} processed episodes to {self.path}")

    def __contains__(self, guid: str) -> bool:
        return self.contains(guid)

    def __len__(self) -> int:
        return len(self._ids)
