"""Shared fixtures for archive-sync tests."""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from archive_sync.logger import RunLogger


@pytest.fixture
def console_output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def logger(console_output: io.StringIO) -> RunLogger:
    """RunLogger at debug level writing to an in-memory console."""
    console = Console(file=console_output, width=200, color_system=None)
    return RunLogger("debug", console=console)


@pytest.fixture
def sleeps() -> list:
    """Collects requested sleep durations instead of sleeping."""
    return []
