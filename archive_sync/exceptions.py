"""
Exception types raised by the sync tool.
"""

from typing import List, Optional

from .models import CommandResult


class ArchiveSyncError(Exception):
    """Base class for every error raised by archive-sync."""


class ConfigurationError(ArchiveSyncError):
    """Raised when the environment does not describe a usable configuration."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        numbered = "\n".join(f"{i}. {error}" for i, error in enumerate(self.errors, 1))
        super().__init__(f"Configuration validation failed:\n{numbered}")


class PreconditionError(ArchiveSyncError):
    """Raised when GitHub authentication or the organization cannot be verified."""


class CommandError(ArchiveSyncError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, description: str, result: Optional[CommandResult] = None):
        self.description = description
        self.result = result
        detail = result.output if result is not None else ""
        message = f"{description}: {detail}" if detail else description
        super().__init__(message)


class GitError(CommandError):
    """Raised when a git command fails or git is not configured."""


class FileVerificationError(ArchiveSyncError):
    """Raised when a written file does not contain the expected content."""


class StepFailedError(ArchiveSyncError):
    """Raised by a fatal pipeline step; wraps the underlying cause."""

    def __init__(self, step: str, cause: BaseException):
        self.step = step
        self.cause = cause
        super().__init__(f"{step} failed: {cause}")
