import json
import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from src.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_MAX_EPISODES = 5
DEFAULT_MAX_AGE_DAYS = 30


@dataclass(frozen=True)
class ShowConfig:
    """Retention and routing settings for one podcast feed."""

    feed_url: str
    max_episodes: int = DEFAULT_MAX_EPISODES
    max_age_days: int = DEFAULT_MAX_AGE_DAYS
    playlist_id: str | None = None
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> "ShowConfig":
        """Build a ShowConfig from a ``shows`` entry of the JSON config file.

        Raises:
            ConfigError: If the entry has no feed URL or bad retention values.
        """
        if not isinstance(data, dict):
            raise ConfigError(f"Show entry must be an object, got: {data!r}")

        feed_url = (data.get("rssUrl") or "").strip()
        if not feed_url:
            raise ConfigError(f"Show entry is missing rssUrl: {data!r}")

        max_episodes = _positive_int(
            data.get("maxEpisodes"), DEFAULT_MAX_EPISODES, f"{feed_url} maxEpisodes"
        )
        max_age_days = _positive_int(
            data.get("maxAgeDays"), DEFAULT_MAX_AGE_DAYS, f"{feed_url} maxAgeDays"
        )

        playlist_id = data.get("playlistId")
        return cls(
            feed_url=feed_url,
            max_episodes=max_episodes,
            max_age_days=max_age_days,
            playlist_id=str(playlist_id) if playlist_id not in (None, "") else None,
            enabled=data.get("enabled") is not False,
        )


def _positive_int(raw, default: int, label: str) -> int:
    if raw is None:
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid value for {label}: {raw!r} is not an integer")
    if value < 1:
        raise ConfigError(f"Invalid value for {label}: {value} must be >= 1")
    return value


class Config:
    def __init__(self, env_file=None, config_file=None):
        """
        Load uploader configuration from the environment and the show list file.

        Environment variables (optionally loaded from `env_file`) take precedence
        over the ``azuraCast`` block of the JSON config file. The ``shows`` list is
        always read from the JSON file.

        Parameters:
            env_file (str | None): Optional path to a .env file.
            config_file (str | None): Optional path to the JSON config file. Falls
                back to UPLOADER_CONFIG_FILE, then ``./config.json``.

        Raises:
            ConfigError: If the config file cannot be read or required settings
                are missing.
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        self.CONFIG_FILE = config_file or os.getenv(
            "UPLOADER_CONFIG_FILE", "./config.json"
        )
        file_data = self._read_config_file(self.CONFIG_FILE)
        server = file_data.get("azuraCast") or {}

        # Media server connection
        self.MEDIA_API_HOST = os.getenv("MEDIA_API_HOST") or server.get("host", "")
        self.MEDIA_STATION_ID = str(
            os.getenv("MEDIA_STATION_ID") or server.get("stationId", "")
        )
        self.MEDIA_API_KEY = os.getenv("MEDIA_API_KEY") or server.get("apiKey", "")

        # Orphan reconciliation is skipped when no default playlist is set
        default_playlist = os.getenv("MEDIA_DEFAULT_PLAYLIST") or server.get(
            "defaultPlaylist"
        )
        self.MEDIA_DEFAULT_PLAYLIST = (
            str(default_playlist) if default_playlist not in (None, "") else None
        )

        # Local paths
        self.TEMP_DIRECTORY = os.getenv(
            "UPLOADER_TEMP_DIR", file_data.get("tempDir", "./temp")
        )
        self.STATE_FILE = os.getenv(
            "UPLOADER_STATE_FILE", "./processed-episodes.json"
        )
        self.LOG_FILE = os.getenv(
            "UPLOADER_LOG_FILE", file_data.get("logFile", "./podcast-uploader.log")
        )

        self.SHOWS = [ShowConfig.from_dict(entry) for entry in file_data.get("shows", [])]

        self.validate()

    @staticmethod
    def _read_config_file(path: str) -> dict:
        if not os.path.exists(path):
            logger.debug(f"Config file not found, using environment only: {path}")
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to read config file {path}: {e}")
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")
        return data

    @property
    def enabled_shows(self) -> list[ShowConfig]:
        """Shows that take part in this run, in configured order."""
        return [show for show in self.SHOWS if show.enabled]

    def validate(self):
        """
        Check that the media server connection settings are present.

        Raises:
            ConfigError: If host, station id or API key is missing.
        """
        missing = [
            name
            for name, value in (
                ("MEDIA_API_HOST", self.MEDIA_API_HOST),
                ("MEDIA_STATION_ID", self.MEDIA_STATION_ID),
                ("MEDIA_API_KEY", self.MEDIA_API_KEY),
            )
            if not value
        ]
        if missing:
            raise ConfigError(
                f"Missing media server settings: {', '.join(missing)}. "
                f"Set them in your .env file or the azuraCast block of {self.CONFIG_FILE}."
            )

    def load_config(self):
        """
        Logs selected configuration values useful for debugging.
        """
        logger.info(f"Media server: {self.MEDIA_API_HOST} (station {self.MEDIA_STATION_ID})")
        logger.info(f"Default playlist: {self.MEDIA_DEFAULT_PLAYLIST or 'not configured'}")
        logger.info(f"Shows: {len(self.enabled_shows)} enabled of {len(self.SHOWS)}")
        logger.info(f"Temp directory: {self.TEMP_DIRECTORY}")
