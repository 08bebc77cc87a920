"""
Pytest configuration and fixtures for podcast-uploader tests.

This module runs before any test imports, setting up the test environment.
Environment variables are explicitly cleared so tests behave the same
regardless of external environment configuration or a local .env file.
"""

import os

import pytest

_ENV_PREFIXES = ("MEDIA_", "UPLOADER_", "WORKFLOW_")


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch, tmp_path):
    """Remove uploader settings from the environment and isolate the working directory."""
    for name in list(os.environ):
        if name.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)
    # Relative default paths (config.json, temp, state file) resolve under tmp_path
    monkeypatch.chdir(tmp_path)
