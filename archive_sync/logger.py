"""
Run logger.

Prints levelled, timestamped lines to the terminal with rich and keeps every
entry in memory so the whole run can be written to a log file at the end.
"""

import json
import time
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from rich.console import Console
from rich.markup import escape

from .constants import DEFAULT_LOG_LEVEL, LOG_LEVELS
from .models import LogEntry

LEVEL_STYLES = {
    "debug": "cyan",
    "info": "blue",
    "warn": "yellow",
    "error": "red",
    "success": "green",
}

# success is reported with info-level priority
LEVEL_RANK = {"debug": 0, "info": 1, "success": 1, "warn": 2, "error": 3}


class RunLogger:
    """Levelled console logger with step timing and a persistent buffer."""

    def __init__(self, level: str = DEFAULT_LOG_LEVEL, console: Optional[Console] = None):
        self.console = console or Console()
        self.level = DEFAULT_LOG_LEVEL
        self.set_level(level)
        self._entries: List[LogEntry] = []
        self._current_step: Optional[Dict[str, Any]] = None

    def set_level(self, level: str) -> None:
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {level} (expected one of {', '.join(LOG_LEVELS)})")
        self.level = level

    def is_enabled(self, level: str) -> bool:
        return LEVEL_RANK[level] >= LEVEL_RANK[self.level]

    @property
    def entries(self) -> List[LogEntry]:
        return list(self._entries)

    def _log(self, level: str, message: str, error: Optional[BaseException] = None,
             metadata: Optional[Dict[str, Any]] = None) -> None:
        entry = LogEntry(
            level=level,
            message=message,
            timestamp=datetime.now(timezone.utc),
            metadata=dict(metadata or {}),
            error=error,
        )
        self._entries.append(entry)

        if not self.is_enabled(level):
            return

        style = LEVEL_STYLES[level]
        line = f"[{style}]\\[{level.upper()}][/{style}] {entry.timestamp.isoformat()} - {escape(message)}"
        if entry.metadata:
            line += f" {escape(json.dumps(entry.metadata, default=str))}"
        self.console.print(line, highlight=False)

    def debug(self, message: str, **metadata: Any) -> None:
        self._log("debug", message, metadata=metadata)

    def info(self, message: str, **metadata: Any) -> None:
        self._log("info", message, metadata=metadata)

    def warn(self, message: str, **metadata: Any) -> None:
        self._log("warn", message, metadata=metadata)

    def error(self, message: str, error: Optional[BaseException] = None, **metadata: Any) -> None:
        self._log("error", message, error=error, metadata=metadata)

    def success(self, message: str, **metadata: Any) -> None:
        self._log("success", message, metadata=metadata)

    def start_step(self, name: str) -> None:
        self._current_step = {"name": name, "started": time.monotonic()}
        self.debug(f"Starting step: {name}")

    def end_step(self, success: bool, message: Optional[str] = None) -> float:
        """
        Close the current step bracket and log its outcome.

        Returns:
            Step duration in seconds (0.0 if no step was open)
        """
        if self._current_step is None:
            self.warn("end_step called without start_step")
            return 0.0

        duration = time.monotonic() - self._current_step["started"]
        text = message or f"{self._current_step['name']} completed"
        duration_ms = int(duration * 1000)
        if success:
            self.success(f"{text} ({duration_ms}ms)", duration_ms=duration_ms)
        else:
            self.error(text, duration_ms=duration_ms)
        self._current_step = None
        return duration

    def format_for_file(self) -> str:
        header = (
            "Repository Sync Orchestrator - Log Report\n"
            f"Generated: {datetime.now(timezone.utc).isoformat()}\n"
            "=====================================\n\n"
        )
        blocks = []
        for entry in self._entries:
            block = f"[{entry.level.upper()}] {entry.timestamp.isoformat()} - {entry.message}"
            if entry.metadata:
                block += f"\n  Metadata: {json.dumps(entry.metadata, indent=2, default=str)}"
            if entry.error is not None:
                trace = "".join(traceback.format_exception(
                    type(entry.error), entry.error, entry.error.__traceback__
                )).rstrip()
                block += f"\n  Error: {entry.error}\n  Stack: {trace}"
            blocks.append(block)
        return header + "\n\n".join(blocks) + "\n"

    def save_to_file(self, path: Union[str, Path]) -> bool:
        """Write every buffered entry to `path`. Never raises."""
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(self.format_for_file(), encoding="utf-8")
        except OSError as e:
            self.console.print(f"[red]❌ Failed to save logs to {escape(str(target))}: {escape(str(e))}[/red]")
            return False
        self.info(f"Logs saved to {target}")
        return True
