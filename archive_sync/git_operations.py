"""
Git command-line operations on a working copy.

Every state-changing method honours dry-run by logging the command it would
have run and returning without touching the filesystem or the remote.
"""

import time
from pathlib import Path
from typing import Callable, Optional, Union

from .commands import is_nothing_to_commit, run_command
from .constants import (
    DEFAULT_MAIN_BRANCH,
    GIT_BINARY,
    GIT_CLONE_TIMEOUT,
    GIT_COMMAND_TIMEOUT,
    GIT_PUSH_TIMEOUT,
    MAX_RETRIES,
)
from .exceptions import GitError
from .helpers import call_with_retry, is_transient_error, remove_directory
from .logger import RunLogger
from .models import CommandResult

Runner = Callable[..., CommandResult]


class GitOperations:
    """Runs git against one working directory."""

    def __init__(self, work_dir: Union[str, Path], logger: RunLogger, dry_run: bool = False,
                 runner: Runner = run_command, sleep: Callable[[float], None] = time.sleep):
        self.work_dir = Path(work_dir)
        self.logger = logger
        self.dry_run = dry_run
        self._run = runner
        self._sleep = sleep

    def _git(self, *args: str, cwd: Optional[Path] = None,
             timeout: float = GIT_COMMAND_TIMEOUT) -> CommandResult:
        directory = self.work_dir if cwd is None else cwd
        return self._run([GIT_BINARY, *args], cwd=str(directory), timeout=timeout)

    def _check(self, result: CommandResult, description: str) -> CommandResult:
        if not result.ok:
            raise GitError(description, result)
        return result

    def _log_retry(self, operation: str) -> Callable[[int, int, BaseException], None]:
        def log(attempt: int, delay_ms: int, error: BaseException) -> None:
            self.logger.warn(
                f"{operation} failed, retrying in {delay_ms}ms (attempt {attempt + 1}/{MAX_RETRIES})",
                error=str(error),
            )
        return log

    def clone(self, url: str, target: Optional[Union[str, Path]] = None) -> None:
        """
        Clone `url` into `target` (defaults to the working directory).

        Any directory already at the target is removed first, so a run that
        crashed half-way does not block the next one. Transient network
        failures are retried with backoff.
        """
        target_path = Path(target) if target is not None else self.work_dir
        if self.dry_run:
            self.logger.debug(f"[DRY-RUN] Would execute: git clone {url} {target_path}")
            return

        self.logger.debug(f"Cloning repository: {url}")
        try:
            if remove_directory(target_path):
                self.logger.debug(f"Removed existing directory: {target_path}")
        except OSError as e:
            self.logger.warn(f"Failed to clean existing directory: {e}")

        target_path.parent.mkdir(parents=True, exist_ok=True)

        def attempt() -> CommandResult:
            result = self._git(
                "clone", url, str(target_path), cwd=target_path.parent, timeout=GIT_CLONE_TIMEOUT
            )
            if not result.ok:
                # git refuses to clone into a partially created directory
                remove_directory(target_path)
            return self._check(result, "Git clone failed")

        try:
            call_with_retry(attempt, is_retryable=is_transient_error,
                            sleep=self._sleep, on_retry=self._log_retry("Clone"))
        except GitError as e:
            self.logger.error("Clone failed", e)
            raise

        self.logger.debug(f"Successfully cloned to {target_path}")

    def configure_identity(self) -> None:
        """
        Copy the global git user.name and user.email into the working copy.

        Raises:
            GitError: if either value is missing from the global config
        """
        if self.dry_run:
            self.logger.debug("[DRY-RUN] Would configure git identity from global config")
            return

        values = {}
        for key in ("user.name", "user.email"):
            result = self._git("config", "--global", "--get", key)
            value = result.stdout.strip() if result.ok else ""
            if not value:
                raise GitError(
                    f"Global git {key} is not set. Run: git config --global {key} <value>", result
                )
            values[key] = value

        for key, value in values.items():
            self._check(self._git("config", key, value), f"Failed to set {key}")

        self.logger.debug(f"Configured git identity: {values['user.name']} <{values['user.email']}>")

    def stage_file(self, file_path: str) -> None:
        if self.dry_run:
            self.logger.debug(f"[DRY-RUN] Would execute: git add {file_path}")
            return

        self.logger.debug(f"Staging file: {file_path}")
        try:
            self._check(self._git("add", file_path), "Git add failed")
        except GitError as e:
            self.logger.error("Stage failed", e)
            raise
        self.logger.debug(f"Successfully staged {file_path}")

    def commit(self, message: str) -> bool:
        """
        Commit the index with `message`.

        Returns:
            True if a commit was created, False if there was nothing to commit
        """
        if self.dry_run:
            self.logger.debug(f'[DRY-RUN] Would execute: git commit -m "{message}"')
            return True

        self.logger.debug(f"Creating commit: {message}")
        result = self._git("commit", "-m", message)
        if not result.ok:
            if is_nothing_to_commit(result):
                self.logger.warn("Nothing to commit - file already committed")
                return False
            error = GitError("Git commit failed", result)
            self.logger.error("Commit failed", error)
            raise error

        self.logger.debug(f"Commit created: {result.stdout.strip()}")
        return True

    def push(self, branch: str = DEFAULT_MAIN_BRANCH) -> None:
        """Push `branch` to origin, retrying transient failures."""
        if self.dry_run:
            self.logger.debug(f"[DRY-RUN] Would execute: git push origin {branch}")
            return

        self.logger.debug(f"Pushing to origin/{branch}")

        def attempt() -> CommandResult:
            return self._check(
                self._git("push", "origin", branch, timeout=GIT_PUSH_TIMEOUT), "Git push failed"
            )

        try:
            result = call_with_retry(attempt, is_retryable=is_transient_error,
                                     sleep=self._sleep, on_retry=self._log_retry("Push"))
        except GitError as e:
            self.logger.error("Push failed", e)
            raise

        self.logger.debug(f"Push successful: {result.output}")

    def current_branch(self) -> str:
        result = self._check(self._git("rev-parse", "--abbrev-ref", "HEAD"), "Failed to get current branch")
        return result.stdout.strip()

    def latest_commit_hash(self) -> str:
        result = self._check(self._git("rev-parse", "--short", "HEAD"), "Failed to get commit hash")
        return result.stdout.strip()

    def status(self) -> str:
        return self._check(self._git("status", "--porcelain"), "Failed to get status").stdout
