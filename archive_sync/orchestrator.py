"""
Repository sync orchestration.

For every archived repository in the organization: unarchive, clone, add
socket.yml, commit, delete the Socket.dev repository record, push and
rearchive. Repositories are processed one at a time; a failure in one
repository never stops the others.
"""

import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from .config import log_config_summary
from .constants import (
    COMMIT_MESSAGE,
    DEFAULT_MAIN_BRANCH,
    LOG_DIRECTORY,
    SOCKET_YML_FILENAME,
    STEP_CLONE,
    STEP_COMMIT,
    STEP_CREATE_FILE,
    STEP_DELETE_SCAN,
    STEP_PUSH,
    STEP_REARCHIVE,
    STEP_STAGE,
    STEP_UNARCHIVE,
)
from .exceptions import ArchiveSyncError, FileVerificationError, PreconditionError, StepFailedError
from .file_operations import create_socket_yml, verify_socket_yml
from .git_operations import GitOperations
from .github_api import GitHubAPI
from .helpers import format_duration, generate_log_file_path, remove_directory
from .logger import RunLogger
from .models import DeletionRecord, OperationResult, RepositoryDescriptor, ScriptConfig, StepResult, SummaryReport
from .report import build_summary_report, render_summary
from .socket_cli import SocketCLIClient

GitFactory = Callable[[Path], GitOperations]


class RepositorySyncOrchestrator:
    """Runs the sync pipeline over every archived repository."""

    def __init__(self, config: ScriptConfig, logger: RunLogger, github: GitHubAPI,
                 socket: SocketCLIClient, git_factory: Optional[GitFactory] = None,
                 log_directory: str = LOG_DIRECTORY):
        self.config = config
        self.logger = logger
        self.github = github
        self.socket = socket
        self.log_directory = log_directory
        self._git_factory = git_factory or (
            lambda path: GitOperations(path, self.logger, dry_run=self.config.dry_run)
        )

        self.started_at = datetime.now(timezone.utc)
        self.results: List[OperationResult] = []
        self.deletions: List[DeletionRecord] = []
        self.report: Optional[SummaryReport] = None
        self.log_path: Optional[Path] = None

    def run(self) -> int:
        """
        Execute the whole run and persist the log.

        Returns:
            Process exit status: 0 if every repository succeeded (or there
            was nothing to do), 1 otherwise
        """
        exit_code = 1
        try:
            exit_code = self._run()
        except PreconditionError as e:
            self.logger.error(str(e))
        except Exception as e:
            self.logger.error(f"Fatal error in orchestrator: {e}", e)
        finally:
            self.log_path = generate_log_file_path(self.started_at, self.log_directory)
            self.logger.save_to_file(self.log_path)
        return exit_code

    def _run(self) -> int:
        self.logger.info("Starting Repository Sync Orchestrator")
        if self.config.dry_run:
            self.logger.info("🔍 DRY-RUN mode: no changes will be made")
        log_config_summary(self.config, self.logger)

        self.verify_preconditions()

        self.logger.info("Fetching archived repositories...")
        repos = self.github.list_archived_repositories()
        if not repos:
            self.logger.info("No archived repositories found")
            return 0

        self.logger.success(f"Found {len(repos)} archived repositories")

        for index, repo in enumerate(repos, 1):
            progress = f"[{index}/{len(repos)}]"
            self.logger.info(f"{progress} Processing repository: {repo.name}")

            result = self.process_repository(repo)
            self.results.append(result)

            if result.success:
                self.logger.success(
                    f"{progress} Repository completed: {repo.name} ({format_duration(result.total_duration)})"
                )
            else:
                self.logger.error(
                    f"{progress} Repository failed: {repo.name}",
                    result.error,
                    duration=format_duration(result.total_duration),
                )

        self.report = build_summary_report(
            total_archived_repos=len(repos),
            results=self.results,
            dry_run=self.config.dry_run,
            start_time=self.started_at,
            end_time=datetime.now(timezone.utc),
        )
        render_summary(self.report, self.deletions, self.logger.console)

        return 0 if all(result.success for result in self.results) else 1

    def verify_preconditions(self) -> None:
        """
        Check GitHub credentials and the organization before touching anything.

        A Socket.dev authentication failure only produces a warning:
        deletion is non-fatal per repository, so the run can still do
        useful work.

        Raises:
            PreconditionError: if GitHub auth or the organization check fails
        """
        self.logger.debug("Verifying authentication...")
        if not self.github.verify_auth():
            raise PreconditionError("GitHub authentication failed")

        if not self.github.verify_organization():
            raise PreconditionError(f"Organization {self.config.github_org} not found")

        if not self.socket.verify_authentication():
            self.logger.warn(
                "Socket.dev authentication check failed; repository record deletion will likely fail"
            )

    def process_repository(self, repo: RepositoryDescriptor) -> OperationResult:
        """
        Run the full pipeline for one repository.

        Fatal step failures stop the pipeline; Socket.dev deletion and
        rearchive failures are recorded and the pipeline carries on. If the
        repository was unarchived and the pipeline stops early, a
        rearchive is still attempted. Never raises.
        """
        start_time = datetime.now(timezone.utc)
        started = time.monotonic()
        steps: List[StepResult] = []
        work_dir = Path(self.config.repos_base_path) / repo.name
        unarchived = False
        rearchive_attempted = False

        try:
            if repo.archived:
                self._run_step(STEP_UNARCHIVE, steps, lambda: self._unarchive(repo))
                unarchived = True

            git = self._git_factory(work_dir)

            self._run_step(STEP_CLONE, steps, lambda: self._clone(git, repo, work_dir))
            self._run_step(STEP_CREATE_FILE, steps, lambda: self._create_file(work_dir))
            self._run_step(STEP_STAGE, steps, lambda: self._stage(git))
            self._run_step(STEP_COMMIT, steps, lambda: self._commit(git))
            self._run_step(STEP_DELETE_SCAN, steps, lambda: self._delete_scan(repo), fatal=False)
            self._run_step(STEP_PUSH, steps, lambda: self._push(git, repo))

            if repo.archived:
                rearchive_attempted = True
                self._run_step(STEP_REARCHIVE, steps, lambda: self._rearchive(repo), fatal=False)

            return self._finish(repo, True, steps, start_time, started)
        except Exception as e:
            cause = e.cause if isinstance(e, StepFailedError) else e
            if unarchived and not rearchive_attempted:
                self.logger.warn(f"Attempting to rearchive {repo.name} after failure")
                self._run_step(STEP_REARCHIVE, steps, lambda: self._rearchive(repo), fatal=False)
            return self._finish(repo, False, steps, start_time, started, error=cause)
        finally:
            if not self.config.dry_run:
                self._cleanup(work_dir)

    def _finish(self, repo: RepositoryDescriptor, success: bool, steps: List[StepResult],
                start_time: datetime, started: float,
                error: Optional[BaseException] = None) -> OperationResult:
        return OperationResult(
            repo_name=repo.name,
            success=success,
            steps=steps,
            start_time=start_time,
            end_time=datetime.now(timezone.utc),
            total_duration=time.monotonic() - started,
            error=error,
        )

    def _run_step(self, name: str, steps: List[StepResult], action: Callable[[], str],
                  fatal: bool = True) -> bool:
        """
        Time `action`, record its StepResult and log the outcome.

        The action returns a success message or raises. A fatal step
        re-raises as StepFailedError; a non-fatal one returns False.
        """
        self.logger.start_step(name)
        started = time.monotonic()
        try:
            message = action()
        except Exception as e:
            duration = time.monotonic() - started
            self.logger.end_step(False, f"{name} failed: {e}")
            steps.append(StepResult(name, False, str(e), duration, datetime.now(timezone.utc)))
            if fatal:
                raise StepFailedError(name, e) from e
            self.logger.warn(f"Continuing despite {name} failure")
            return False

        duration = time.monotonic() - started
        self.logger.end_step(True, message)
        steps.append(StepResult(name, True, message, duration, datetime.now(timezone.utc)))
        return True

    def _unarchive(self, repo: RepositoryDescriptor) -> str:
        if self.config.dry_run:
            self.logger.debug(f"[DRY-RUN] Would unarchive repository: {repo.name}")
            return f"[DRY-RUN] Would unarchive {repo.name}"
        if not self.github.unarchive_repository(repo.name):
            raise ArchiveSyncError(f"Failed to unarchive repository {repo.name}")
        return "Repository unarchived"

    def _clone(self, git: GitOperations, repo: RepositoryDescriptor, work_dir: Path) -> str:
        git.clone(repo.clone_url, work_dir)
        if self.config.dry_run:
            return f"[DRY-RUN] Would clone {repo.clone_url}"
        return "Repository cloned"

    def _create_file(self, work_dir: Path) -> str:
        create_socket_yml(work_dir, self.logger, self.config.dry_run)
        if self.config.dry_run:
            return f"[DRY-RUN] Would create {SOCKET_YML_FILENAME}"
        if not verify_socket_yml(work_dir, self.logger):
            raise FileVerificationError(f"{SOCKET_YML_FILENAME} verification failed")
        return f"{SOCKET_YML_FILENAME} created and verified"

    def _stage(self, git: GitOperations) -> str:
        git.stage_file(SOCKET_YML_FILENAME)
        if self.config.dry_run:
            return f"[DRY-RUN] Would stage {SOCKET_YML_FILENAME}"
        return f"{SOCKET_YML_FILENAME} staged"

    def _commit(self, git: GitOperations) -> str:
        git.configure_identity()
        created = git.commit(COMMIT_MESSAGE)
        if self.config.dry_run:
            return f"[DRY-RUN] Would commit: {COMMIT_MESSAGE}"
        if not created:
            return "Nothing to commit (already committed)"
        return COMMIT_MESSAGE

    def _delete_scan(self, repo: RepositoryDescriptor) -> str:
        try:
            record = self.socket.delete_repository(self.config.socket_org, repo.name, self.config.dry_run)
        except Exception as e:
            record = DeletionRecord(repo.name, False, f"Exception: {e}")
        self.deletions.append(record)
        if not record.success:
            raise ArchiveSyncError(record.message)
        return record.message

    def _push(self, git: GitOperations, repo: RepositoryDescriptor) -> str:
        """
        Push to the repository's own default branch as reported by GitHub.

        A repository whose default is `master` is pushed to `master`;
        DEFAULT_MAIN_BRANCH is used only when no default branch is known.
        """
        branch = repo.default_branch or DEFAULT_MAIN_BRANCH
        git.push(branch)
        if self.config.dry_run:
            return f"[DRY-RUN] Would push to origin/{branch}"
        return f"Pushed to origin/{branch}"

    def _rearchive(self, repo: RepositoryDescriptor) -> str:
        if self.config.dry_run:
            self.logger.debug(f"[DRY-RUN] Would rearchive repository: {repo.name}")
            return f"[DRY-RUN] Would rearchive {repo.name}"
        if not self.github.rearchive_repository(repo.name):
            raise ArchiveSyncError(f"Failed to rearchive repository {repo.name}")
        return "Repository rearchived"

    def _cleanup(self, work_dir: Path) -> None:
        try:
            if remove_directory(work_dir):
                self.logger.debug(f"Cleaned up temporary directory: {work_dir}")
        except OSError as e:
            self.logger.warn(f"Failed to clean up temporary directory: {work_dir}", error=str(e))
