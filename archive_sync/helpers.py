"""
Small utilities: retry with exponential backoff, error classification,
duration formatting and filesystem helpers.
"""

import shutil
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, TypeVar, Union

import requests

from .commands import is_transient_output
from .constants import (
    LOG_DIRECTORY,
    LOG_FILE_PREFIX,
    MAX_RETRIES,
    RETRY_BASE_DELAY_MS,
    RETRY_MAX_DELAY_MS,
)
from .exceptions import CommandError

T = TypeVar("T")


def calculate_backoff_delay(attempt: int) -> int:
    """Delay in milliseconds before retry number `attempt` (zero-based)."""
    return min(RETRY_BASE_DELAY_MS * 2 ** attempt, RETRY_MAX_DELAY_MS)


def is_transient_error(exc: BaseException) -> bool:
    """
    Decide whether an error is worth retrying.

    Transient: rate limiting (429, or a 403 that says so), refused or
    reset connections, DNS failures and timeouts. Everything else is
    treated as permanent.
    """
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(exc, requests.HTTPError):
        response = exc.response
        if response is None:
            return False
        if response.status_code == 429:
            return True
        if response.status_code == 403:
            return "rate limit" in (response.text or "").lower()
        return False
    if isinstance(exc, CommandError):
        if exc.result is None:
            return False
        return exc.result.timed_out or is_transient_output(exc.result.output)
    return False


def call_with_retry(
    operation: Callable[[], T],
    *,
    is_retryable: Callable[[BaseException], bool] = is_transient_error,
    max_retries: int = MAX_RETRIES,
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Optional[Callable[[int, int, BaseException], None]] = None,
) -> T:
    """
    Call `operation`, retrying retryable failures with exponential backoff.

    The operation runs once plus at most `max_retries` more times. Before
    retry n the caller sleeps `calculate_backoff_delay(n)` milliseconds.
    Non-retryable errors, and the last error once the budget is spent,
    propagate unchanged.

    Args:
        operation: Zero-argument callable to run
        is_retryable: Classifier for raised exceptions
        max_retries: Number of retries after the first attempt
        sleep: Sleep function taking seconds
        on_retry: Called with (attempt, delay_ms, error) before each sleep

    Returns:
        Whatever the operation returns
    """
    attempt = 0
    while True:
        try:
            return operation()
        except Exception as exc:
            if attempt >= max_retries or not is_retryable(exc):
                raise
            delay_ms = calculate_backoff_delay(attempt)
            if on_retry is not None:
                on_retry(attempt, delay_ms, exc)
            sleep(delay_ms / 1000)
            attempt += 1


def format_duration(seconds: float) -> str:
    """Format a duration as 850ms, 12.3s or 4m 7s."""
    ms = int(round(seconds * 1000))
    if ms < 1000:
        return f"{ms}ms"
    if ms < 60_000:
        return f"{ms / 1000:.1f}s"
    minutes, remainder = divmod(ms, 60_000)
    return f"{minutes}m {remainder / 1000:.0f}s"


def generate_log_file_path(started_at: datetime, directory: str = LOG_DIRECTORY) -> Path:
    """Timestamped log file path, e.g. logs/repo-sync-2024-05-01T10-15-00.log."""
    timestamp = started_at.strftime("%Y-%m-%dT%H-%M-%S")
    return Path(directory) / f"{LOG_FILE_PREFIX}-{timestamp}.log"


def remove_directory(path: Union[str, Path]) -> bool:
    """Remove a directory tree. Returns False if there was nothing to remove."""
    directory = Path(path)
    if not directory.exists():
        return False
    shutil.rmtree(directory)
    return True


def mask_token(token: str) -> str:
    """Show only the first and last three characters of a secret."""
    if len(token) <= 6:
        return "****"
    return f"{token[:3]}****{token[-3:]}"
