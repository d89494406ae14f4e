"""Pytest configuration and fixtures for streampatch tests."""

import tempfile
from pathlib import Path

import pytest

from streampatch.core.log import ConsoleSink, setup_logger


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Configure console-only logging for the test session."""
    test_log_root = Path(tempfile.gettempdir()) / "streampatch-tests"
    setup_logger(
        log_root=test_log_root,
        run_name="test",
        console=ConsoleSink(level="debug"),
    )


@pytest.fixture
def bold():
    """Raw text with a pair of bold markers as patches."""
    return r"\{/?b\}", "Hello{b}World{/b}!"


@pytest.fixture
def tagged():
    """Raw text with four single-letter tags.

    Clean stream is "onetwothree"; patch positions are 0, 3, 6, 11.
    """
    return r"<[a-z]>", "<a>one<b>two<c>three<d>"


@pytest.fixture
def isolated_cwd(tmp_path, monkeypatch):
    """Run in an empty directory so no project config is picked up."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
