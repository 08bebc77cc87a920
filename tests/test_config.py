"""Tests for application and workflow configuration."""

import json

import pytest

from src.config import Config, ShowConfig
from src.errors import ConfigError
from src.workflow.config import WorkflowConfig

SERVER_BLOCK = {
    "host": "radio.example.com",
    "stationId": 1,
    "apiKey": "file-key",
    "defaultPlaylist": 7,
}


def write_config(path, **data):
    path.write_text(json.dumps(data))
    return path


class TestShowConfig:
    """Tests for ShowConfig.from_dict."""

    def test_defaults(self):
        show = ShowConfig.from_dict({"rssUrl": "https://example.com/feed.xml"})

        assert show.feed_url == "https://example.com/feed.xml"
        assert show.max_episodes == 5
        assert show.max_age_days == 30
        assert show.playlist_id is None
        assert show.enabled is True

    def test_full_entry(self):
        show = ShowConfig.from_dict({
            "rssUrl": " https://example.com/feed.xml ",
            "maxEpisodes": 3,
            "maxAgeDays": "14",
            "playlistId": 4,
            "enabled": False,
        })

        assert show.feed_url == "https://example.com/feed.xml"
        assert show.max_episodes == 3
        assert show.max_age_days == 14
        assert show.playlist_id == "4"
        assert show.enabled is False

    def test_missing_feed_url(self):
        with pytest.raises(ConfigError, match="rssUrl"):
            ShowConfig.from_dict({"maxEpisodes": 3})

    @pytest.mark.parametrize("value", [0, -1, "many"])
    def test_invalid_max_episodes(self, value):
        with pytest.raises(ConfigError, match="maxEpisodes"):
            ShowConfig.from_dict({"rssUrl": "https://example.com/feed.xml", "maxEpisodes": value})

    def test_entry_must_be_object(self):
        with pytest.raises(ConfigError):
            ShowConfig.from_dict("https://example.com/feed.xml")


class TestConfig:
    """Tests for Config loading."""

    def test_reads_config_file(self, tmp_path):
        """Test server settings and shows come from ./config.json."""
        write_config(
            tmp_path / "config.json",
            azuraCast=SERVER_BLOCK,
            shows=[
                {"rssUrl": "https://a.example.com/feed.xml", "playlistId": 3},
                {"rssUrl": "https://b.example.com/feed.xml", "enabled": False},
            ],
        )

        config = Config()

        assert config.MEDIA_API_HOST == "radio.example.com"
        assert config.MEDIA_STATION_ID == "1"
        assert config.MEDIA_API_KEY == "file-key"
        assert config.MEDIA_DEFAULT_PLAYLIST == "7"
        assert len(config.SHOWS) == 2
        assert [s.feed_url for s in config.enabled_shows] == ["https://a.example.com/feed.xml"]

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        write_config(tmp_path / "config.json", azuraCast=SERVER_BLOCK, shows=[])
        monkeypatch.setenv("MEDIA_API_KEY", "env-key")
        monkeypatch.setenv("MEDIA_DEFAULT_PLAYLIST", "9")

        config = Config()

        assert config.MEDIA_API_KEY == "env-key"
        assert config.MEDIA_DEFAULT_PLAYLIST == "9"
        assert config.MEDIA_API_HOST == "radio.example.com"

    def test_environment_only(self, monkeypatch):
        """Test a run with no config file has no shows and no default playlist."""
        monkeypatch.setenv("MEDIA_API_HOST", "radio.example.com")
        monkeypatch.setenv("MEDIA_STATION_ID", "2")
        monkeypatch.setenv("MEDIA_API_KEY", "key")

        config = Config()

        assert config.SHOWS == []
        assert config.MEDIA_DEFAULT_PLAYLIST is None
        assert config.TEMP_DIRECTORY == "./temp"
        assert config.STATE_FILE == "./processed-episodes.json"

    def test_env_file(self, tmp_path):
        env_file = tmp_path / "uploader.env"
        env_file.write_text(
            "MEDIA_API_HOST=radio.example.com\nMEDIA_STATION_ID=3\nMEDIA_API_KEY=dotenv-key\n"
        )

        config = Config(env_file=str(env_file))

        assert config.MEDIA_API_KEY == "dotenv-key"
        assert config.MEDIA_STATION_ID == "3"

    def test_explicit_config_file(self, tmp_path):
        path = write_config(
            tmp_path / "shows.json",
            azuraCast=SERVER_BLOCK,
            shows=[{"rssUrl": "https://a.example.com/feed.xml"}],
        )

        config = Config(config_file=str(path))

        assert config.CONFIG_FILE == str(path)
        assert len(config.SHOWS) == 1

    def test_config_file_from_environment(self, tmp_path, monkeypatch):
        path = write_config(tmp_path / "other.json", azuraCast=SERVER_BLOCK)
        monkeypatch.setenv("UPLOADER_CONFIG_FILE", str(path))

        assert Config().MEDIA_API_KEY == "file-key"

    def test_path_overrides(self, tmp_path, monkeypatch):
        write_config(tmp_path / "config.json", azuraCast=SERVER_BLOCK)
        monkeypatch.setenv("UPLOADER_TEMP_DIR", "/scratch")
        monkeypatch.setenv("UPLOADER_STATE_FILE", "/state/processed.json")
        monkeypatch.setenv("UPLOADER_LOG_FILE", "/logs/uploader.log")

        config = Config()

        assert config.TEMP_DIRECTORY == "/scratch"
        assert config.STATE_FILE == "/state/processed.json"
        assert config.LOG_FILE == "/logs/uploader.log"

    def test_missing_credentials(self, tmp_path):
        write_config(tmp_path / "config.json", azuraCast={"host": "radio.example.com"})

        with pytest.raises(ConfigError, match="MEDIA_STATION_ID, MEDIA_API_KEY"):
            Config()

    def test_invalid_json(self, tmp_path):
        (tmp_path / "config.json").write_text("{not json")

        with pytest.raises(ConfigError, match="Failed to read config file"):
            Config()

    def test_config_must_be_object(self, tmp_path):
        (tmp_path / "config.json").write_text("[]")

        with pytest.raises(ConfigError, match="JSON object"):
            Config()

    def test_invalid_show_entry(self, tmp_path):
        write_config(tmp_path / "config.json", azuraCast=SERVER_BLOCK, shows=[{"maxEpisodes": 2}])

        with pytest.raises(ConfigError):
            Config()

    def test_load_config_logs_settings(self, tmp_path, caplog):
        write_config(tmp_path / "config.json", azuraCast=SERVER_BLOCK, shows=[])
        config = Config()

        with caplog.at_level("INFO"):
            config.load_config()

        assert "radio.example.com" in caplog.text
        assert "Default playlist: 7" in caplog.text


class TestWorkflowConfig:
    """Tests for WorkflowConfig."""

    def test_defaults(self):
        config = WorkflowConfig.from_env()

        assert config.episode_delay_seconds == 2.0
        assert config.remote_call_delay_seconds == 0.5
        assert config.indexing_max_attempts == 10
        assert config.asset_timeout_seconds == 600
        assert config.comment_max_length == 500

    def test_delays_from_milliseconds(self, monkeypatch):
        monkeypatch.setenv("WORKFLOW_EPISODE_DELAY_MS", "0")
        monkeypatch.setenv("WORKFLOW_REMOTE_CALL_DELAY_MS", "250")

        config = WorkflowConfig.from_env()

        assert config.episode_delay_seconds == 0
        assert config.remote_call_delay_seconds == 0.25

    def test_invalid_integer(self, monkeypatch):
        monkeypatch.setenv("WORKFLOW_INDEXING_MAX_ATTEMPTS", "ten")

        with pytest.raises(ValueError, match="WORKFLOW_INDEXING_MAX_ATTEMPTS"):
            WorkflowConfig.from_env()

    def test_below_minimum(self, monkeypatch):
        monkeypatch.setenv("WORKFLOW_INDEXING_MAX_ATTEMPTS", "0")

        with pytest.raises(ValueError, match="must be >= 1"):
            WorkflowConfig.from_env()

    def test_indexing_delay(self):
        config = WorkflowConfig()

        assert [config.indexing_delay(a) for a in (0, 1, 9, 10, 20)] == [30, 60, 300, 300, 300]
