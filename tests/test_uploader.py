"""Tests for the uploader entry point."""

import logging

import pytest
from unittest.mock import Mock, patch

from src.config import Config
from src.uploader import configure_logging, main, run_uploader
from src.workflow.config import WorkflowConfig
from src.workflow.context import RunStats


@pytest.fixture
def media_env(monkeypatch):
    monkeypatch.setenv("MEDIA_API_HOST", "radio.example.com")
    monkeypatch.setenv("MEDIA_STATION_ID", "1")
    monkeypatch.setenv("MEDIA_API_KEY", "key")


@pytest.fixture
def restore_logging():
    """Undo root logger changes made by configure_logging."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestMain:
    """Tests for main exit codes."""

    @pytest.fixture(autouse=True)
    def mock_logging(self):
        with patch("src.uploader.configure_logging") as mock:
            yield mock

    def test_success(self, media_env):
        with patch("src.uploader.run_uploader") as mock_run:
            assert main([]) == 0

        config, workflow_config = mock_run.call_args.args
        assert isinstance(config, Config)
        assert isinstance(workflow_config, WorkflowConfig)

    def test_log_file_configured_after_load(self, media_env, monkeypatch, mock_logging):
        monkeypatch.setenv("UPLOADER_LOG_FILE", "/logs/uploader.log")

        with patch("src.uploader.run_uploader"):
            main(["-l", "DEBUG"])

        assert mock_logging.call_args.args == ("DEBUG", "/logs/uploader.log")

    def test_missing_credentials(self):
        with patch("src.uploader.run_uploader") as mock_run:
            assert main([]) == 1

        mock_run.assert_not_called()

    def test_invalid_workflow_setting(self, media_env, monkeypatch):
        monkeypatch.setenv("WORKFLOW_EPISODE_DELAY_MS", "soon")

        with patch("src.uploader.run_uploader") as mock_run:
            assert main([]) == 1

        mock_run.assert_not_called()

    def test_fatal_error(self, media_env):
        with patch("src.uploader.run_uploader", side_effect=RuntimeError("disk full")):
            assert main([]) == 1

    def test_interrupted(self, media_env):
        with patch("src.uploader.run_uploader", side_effect=KeyboardInterrupt):
            assert main([]) == 1


class TestRunUploader:
    """Tests for run_uploader."""

    def test_runs_and_closes(self):
        orchestrator = Mock()
        orchestrator.run.return_value = RunStats()

        with patch("src.uploader.UploadOrchestrator", return_value=orchestrator):
            run_uploader(Mock(), WorkflowConfig())

        orchestrator.run.assert_called_once()
        orchestrator.close.assert_called_once()

    def test_closes_on_failure(self):
        orchestrator = Mock()
        orchestrator.run.side_effect = RuntimeError("boom")

        with patch("src.uploader.UploadOrchestrator", return_value=orchestrator):
            with pytest.raises(RuntimeError):
                run_uploader(Mock(), WorkflowConfig())

        orchestrator.close.assert_called_once()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_writes_log_file(self, tmp_path, restore_logging):
        log_file = tmp_path / "uploader.log"

        configure_logging("INFO", str(log_file))
        logging.getLogger("src.test").info("hello from the uploader")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text()
        assert "hello from the uploader" in content
        assert " - src.test - INFO - " in content

    def test_unwritable_log_file(self, tmp_path, restore_logging):
        """Test a bad log file path falls back to stdout only."""
        configure_logging("INFO", str(tmp_path / "missing" / "uploader.log"))

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert not isinstance(handlers[0], logging.FileHandler)
