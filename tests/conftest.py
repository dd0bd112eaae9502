"""Pytest configuration and fixtures for postcheck tests."""

import json
import sys
import tempfile
from pathlib import Path

import pytest

from postcheck.core.log import ConsoleSink, setup_logger


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Configure logging once, with console output disabled so that
    captured stdout only holds what postcheck prints itself."""
    setup_logger(
        log_root=Path(tempfile.gettempdir()) / "postcheck-tests",
        run_name="test",
        console=ConsoleSink(enabled=False),
    )


@pytest.fixture
def mock_argv(monkeypatch):
    """Minimal argv so State() does not parse pytest's arguments."""
    monkeypatch.setattr(sys, "argv", ["postcheck"])


@pytest.fixture
def write_manifest(tmp_path):
    """Write a package.json into tmp_path and return its path."""
    def _write(**fields):
        path = tmp_path / "package.json"
        path.write_text(json.dumps(fields, indent=2))
        return path
    return _write
