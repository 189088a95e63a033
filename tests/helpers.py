"""Collaborator fakes and builders shared by archive-sync tests."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from archive_sync.exceptions import GitError
from archive_sync.models import CommandResult, DeletionRecord, RepositoryDescriptor, ScriptConfig

VALID_GITHUB_TOKEN = "ghp_" + "a" * 36


def make_repo(name: str, archived: bool = True, repo_id: int = 1,
              default_branch: str = "main") -> RepositoryDescriptor:
    """Build a RepositoryDescriptor for the test organization."""
    return RepositoryDescriptor(
        id=repo_id,
        name=name,
        full_name=f"acme/{name}",
        owner_login="acme",
        owner_type="Organization",
        html_url=f"https://github.com/acme/{name}",
        archived=archived,
        private=False,
        default_branch=default_branch,
    )


def make_config(tmp_path: Path, dry_run: bool = False, **overrides) -> ScriptConfig:
    values = {
        "github_token": VALID_GITHUB_TOKEN,
        "github_org": "acme",
        "socket_api_token": "sk_test_token",
        "socket_org": "acme",
        "repos_base_path": str(tmp_path / "repos"),
        "dry_run": dry_run,
        "socket_base_url": "https://api.socket.dev/v0",
        "github_base_url": "https://api.github.com",
        "log_level": "debug",
    }
    values.update(overrides)
    return ScriptConfig(**values)


def failed_command(stderr: str, exit_code: int = 128) -> CommandResult:
    return CommandResult(("git",), exit_code, "", stderr)


class FakeGitHub:
    """In-memory stand-in for GitHubAPI."""

    def __init__(self, repos: Optional[List[RepositoryDescriptor]] = None) -> None:
        self.repos = list(repos or [])
        self.auth_ok = True
        self.org_ok = True
        self.unarchive_ok = True
        self.rearchive_ok = True
        self.list_error: Optional[Exception] = None
        self.list_calls = 0
        self.archive_calls: List[tuple] = []

    def verify_auth(self) -> bool:
        return self.auth_ok

    def verify_organization(self) -> bool:
        return self.org_ok

    def list_archived_repositories(self) -> List[RepositoryDescriptor]:
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return list(self.repos)

    def set_archived(self, name: str, archived: bool) -> bool:
        self.archive_calls.append((name, archived))
        return self.rearchive_ok if archived else self.unarchive_ok

    def unarchive_repository(self, name: str) -> bool:
        return self.set_archived(name, False)

    def rearchive_repository(self, name: str) -> bool:
        return self.set_archived(name, True)


class FakeSocket:
    """In-memory stand-in for SocketCLIClient."""

    def __init__(self) -> None:
        self.auth_ok = True
        self.outcomes: Dict[str, object] = {}
        self.delete_calls: List[tuple] = []

    def verify_authentication(self) -> bool:
        return self.auth_ok

    def delete_repository(self, org_slug: str, repo_name: str, dry_run: bool = False) -> DeletionRecord:
        self.delete_calls.append((org_slug, repo_name, dry_run))
        if dry_run:
            return DeletionRecord(repo_name, True, f"[DRY-RUN] Would delete repository: {repo_name}")
        outcome = self.outcomes.get(repo_name)
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, DeletionRecord):
            return outcome
        return DeletionRecord(repo_name, True, f"Repository {repo_name} deleted successfully")


class FakeGit:
    """Records git operations; individual operations can be made to fail."""

    def __init__(self, work_dir: Path, failures: Optional[Dict[str, Exception]] = None,
                 nothing_to_commit: bool = False) -> None:
        self.work_dir = Path(work_dir)
        self.failures = failures or {}
        self.nothing_to_commit = nothing_to_commit
        self.calls: List[str] = []
        self.pushed_branches: List[str] = []

    def _maybe_fail(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.failures:
            raise self.failures[operation]

    def clone(self, url: str, target=None) -> None:
        self._maybe_fail("clone")
        Path(target or self.work_dir).mkdir(parents=True, exist_ok=True)

    def configure_identity(self) -> None:
        self._maybe_fail("configure_identity")

    def stage_file(self, file_path: str) -> None:
        self._maybe_fail("stage_file")

    def commit(self, message: str) -> bool:
        self._maybe_fail("commit")
        return not self.nothing_to_commit

    def push(self, branch: str = "main") -> None:
        self._maybe_fail("push")
        self.pushed_branches.append(branch)


class FakeGitFactory:
    """Hands out FakeGit instances, one per repository directory."""

    def __init__(self, failures: Optional[Dict[str, Dict[str, Exception]]] = None,
                 nothing_to_commit: bool = False) -> None:
        self.failures = failures or {}
        self.nothing_to_commit = nothing_to_commit
        self.instances: Dict[str, FakeGit] = {}

    def __call__(self, work_dir: Path) -> FakeGit:
        git = FakeGit(work_dir, self.failures.get(Path(work_dir).name), self.nothing_to_commit)
        self.instances[Path(work_dir).name] = git
        return git


def git_error(message: str = "boom") -> GitError:
    return GitError("Git operation failed", failed_command(message))


