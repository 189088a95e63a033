"""
Shared data models for the archive-sync tool.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class RepositoryDescriptor:
    """A GitHub repository as returned by the organization listing."""
    id: int
    name: str
    full_name: str
    owner_login: str
    owner_type: str
    html_url: str
    archived: bool
    private: bool
    default_branch: str = "main"

    @property
    def clone_url(self) -> str:
        """URL handed to `git clone`."""
        return self.html_url


@dataclass(frozen=True)
class ScriptConfig:
    """Validated settings for one run, built once from the environment."""
    github_token: str
    github_org: str
    socket_api_token: str
    socket_org: str
    repos_base_path: str
    dry_run: bool
    socket_base_url: str
    github_base_url: str
    log_level: str


@dataclass(frozen=True)
class StepResult:
    """Outcome of a single pipeline step for one repository."""
    name: str
    success: bool
    message: str
    duration: float  # seconds
    timestamp: Optional[datetime] = None


@dataclass
class OperationResult:
    """Outcome of the whole pipeline for one repository."""
    repo_name: str
    success: bool
    steps: List[StepResult]
    start_time: datetime
    end_time: datetime
    total_duration: float  # seconds
    error: Optional[BaseException] = None

    @property
    def failed_step(self) -> Optional[StepResult]:
        """The first step that did not succeed, if any."""
        for step in self.steps:
            if not step.success:
                return step
        return None

    def step(self, name: str) -> Optional[StepResult]:
        for step in self.steps:
            if step.name == name:
                return step
        return None


@dataclass(frozen=True)
class DeletionRecord:
    """Result of deleting one repository's record from Socket.dev."""
    repo_name: str
    success: bool
    message: str
    already_absent: bool = False


@dataclass(frozen=True)
class SummaryReport:
    """Aggregate view of a finished run."""
    total_archived_repos: int
    processed_repos: int
    successful_operations: int
    failed_operations: int
    total_duration: float  # seconds
    results: Tuple[OperationResult, ...]
    dry_run: bool
    start_time: datetime
    end_time: datetime


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of an external command."""
    args: Tuple[str, ...]
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out

    @property
    def output(self) -> str:
        """stderr and stdout joined, skipping empty streams."""
        parts = [s.strip() for s in (self.stderr, self.stdout) if s and s.strip()]
        return "\n".join(parts)


@dataclass
class LogEntry:
    """One structured entry in the run log."""
    level: str
    message: str
    timestamp: datetime
    metadata: Dict[str, Any] = field(default_factory=dict)
    error: Optional[BaseException] = None
