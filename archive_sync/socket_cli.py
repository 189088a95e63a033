"""
Socket.dev integration through the `socket` CLI.

Credentials are handed to the CLI through the child process environment
only; nothing is written to this process's environment.
"""

import os
import time
from typing import Callable, Dict, List, Mapping, Optional

from .commands import is_not_found, run_command
from .constants import API_TIMEOUT, DEFAULT_SOCKET_BASE_URL, MAX_RETRIES, SOCKET_CLI_BINARY
from .exceptions import CommandError
from .helpers import call_with_retry, is_transient_error, mask_token
from .logger import RunLogger
from .models import CommandResult, DeletionRecord

Runner = Callable[..., CommandResult]


class SocketCLIClient:
    """Deletes repository records from Socket.dev using the Socket CLI."""

    def __init__(self, api_token: str, org_slug: str, logger: RunLogger,
                 base_url: str = DEFAULT_SOCKET_BASE_URL, runner: Runner = run_command,
                 sleep: Callable[[float], None] = time.sleep,
                 base_env: Optional[Mapping[str, str]] = None):
        self.api_token = api_token
        self.org_slug = org_slug
        self.logger = logger
        self.base_url = base_url
        self._run = runner
        self._sleep = sleep
        self._base_env = base_env

    def _child_env(self) -> Dict[str, str]:
        env = dict(os.environ if self._base_env is None else self._base_env)
        env.update({
            "SOCKET_CLI_API_TOKEN": self.api_token,
            "SOCKET_CLI_ORG_SLUG": self.org_slug,
            "SOCKET_CLI_API_BASE_URL": self.base_url,
        })
        return env

    def _execute(self, args: List[str]) -> CommandResult:
        """
        Run a Socket CLI command, retrying transient failures.

        Returns:
            The final CommandResult; a non-zero exit is returned, not raised,
            once it is known not to be transient
        """
        def attempt() -> CommandResult:
            result = self._run([SOCKET_CLI_BINARY, *args], env=self._child_env(), timeout=API_TIMEOUT)
            if not result.ok:
                error = CommandError(f"socket {' '.join(args)} failed", result)
                if is_transient_error(error):
                    raise error
            return result

        def log_retry(attempt_number: int, delay_ms: int, error: BaseException) -> None:
            self.logger.warn(
                f"Socket CLI call failed, retrying in {delay_ms}ms "
                f"(attempt {attempt_number + 1}/{MAX_RETRIES})",
                error=str(error),
            )

        try:
            return call_with_retry(attempt, is_retryable=is_transient_error,
                                   sleep=self._sleep, on_retry=log_retry)
        except CommandError as e:
            return e.result

    def verify_authentication(self) -> bool:
        """Pre-flight check: list the organization's repositories."""
        self.logger.info("🔐 Verifying Socket.dev authentication...")
        self.logger.debug(f"Auth check: org={self.org_slug}, token={mask_token(self.api_token)}")

        result = self._execute(["repository", "list", "--org", self.org_slug])
        if result.ok:
            self.logger.success("✅ Socket.dev authentication verified")
            return True

        self.logger.error(f"❌ Socket.dev authentication failed: {result.output or 'Unknown error'}")
        return False

    def delete_repository(self, org_slug: str, repo_name: str, dry_run: bool = False) -> DeletionRecord:
        """
        Delete a repository record from Socket.dev.

        A record that does not exist counts as deleted, since the end state
        is the same. This method never raises.

        Args:
            org_slug: Socket.dev organization
            repo_name: Repository to delete
            dry_run: If True, report success without calling the CLI

        Returns:
            DeletionRecord describing the outcome
        """
        self.logger.debug(
            f"[{'DRY-RUN' if dry_run else 'EXEC'}] Deleting repository: {repo_name} from org: {org_slug}"
        )

        if dry_run:
            return DeletionRecord(repo_name, True, f"[DRY-RUN] Would delete repository: {repo_name}")

        try:
            result = self._execute(["repository", "del", "--org", org_slug, repo_name])
        except Exception as e:
            self.logger.warn(f"⚠️ Exception deleting repository {repo_name}: {e}")
            return DeletionRecord(repo_name, False, f"Exception: {e}")

        if result.ok:
            self.logger.info(f"✅ Successfully deleted repository: {repo_name} from {org_slug}")
            return DeletionRecord(repo_name, True, f"Repository {repo_name} deleted successfully")

        self.logger.debug(
            f"Socket CLI error output - exit code: {result.exit_code}, "
            f"stderr: {result.stderr}, stdout: {result.stdout}"
        )

        if is_not_found(result, repo_name):
            self.logger.info(f"⏭️ Repository {repo_name} not found (already deleted or doesn't exist) - skipping")
            return DeletionRecord(
                repo_name, True, f"Repository {repo_name} was not found (already deleted or doesn't exist)",
                already_absent=True,
            )

        error_msg = result.output or "Unknown error"
        self.logger.warn(f"⚠️ Failed to delete repository {repo_name}: {error_msg}")
        return DeletionRecord(repo_name, False, f"Failed to delete repository: {error_msg}")
