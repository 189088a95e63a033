"""
External command execution.

Every subprocess the tool starts (git, the Socket CLI) goes through
`run_command`, which never raises for a failed or hung process: the outcome
is always a `CommandResult`. Callers classify failures with the pattern
helpers below rather than inspecting output themselves.
"""

import subprocess
from typing import Iterable, Mapping, Optional, Sequence

from .models import CommandResult

# Output fragments, matched case-insensitively against stderr + stdout.
NOTHING_TO_COMMIT_PATTERNS = (
    "nothing to commit",
    "no changes added",
)

# Only count as not-found when the missing thing is the repository itself.
NOT_FOUND_PATTERNS = (
    "repository not found",
    "repo not found",
    "resource not found",
)

# Generic fragments; these need the repository name in the output as well.
GENERIC_NOT_FOUND_PATTERNS = (
    "not found",
    "404",
)

# A missing organization or a rejected token also surfaces as a generic not-found.
FOREIGN_NOT_FOUND_PATTERNS = (
    "organization",
    "org not found",
    "api token",
)

TRANSIENT_PATTERNS = (
    "429",
    "rate limit",
    "connection refused",
    "connection reset",
    "timed out",
    "timeout",
    "could not resolve host",
    "temporary failure in name resolution",
    "name or service not known",
)


def run_command(
    args: Sequence[str],
    cwd: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    timeout: Optional[float] = None,
) -> CommandResult:
    """
    Run a command and capture its output.

    Args:
        args: Program and arguments
        cwd: Working directory
        env: Complete environment for the child process (None inherits ours)
        timeout: Seconds before the process is killed

    Returns:
        CommandResult; exit code 127 if the program is missing, -1 on timeout
    """
    argv = tuple(str(arg) for arg in args)
    try:
        completed = subprocess.run(
            argv,
            cwd=cwd,
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        return CommandResult(argv, 127, "", f"{argv[0]}: executable is not installed or not on PATH")
    except subprocess.TimeoutExpired:
        return CommandResult(argv, -1, "", f"Command timed out after {timeout}s", timed_out=True)

    return CommandResult(argv, completed.returncode, completed.stdout or "", completed.stderr or "")


def output_matches(text: str, patterns: Iterable[str]) -> bool:
    """Return True if any pattern occurs in text (case-insensitive)."""
    lowered = (text or "").lower()
    return any(pattern in lowered for pattern in patterns)


def is_nothing_to_commit(result: CommandResult) -> bool:
    return output_matches(result.output, NOTHING_TO_COMMIT_PATTERNS)


def is_not_found(result: CommandResult, name: Optional[str] = None) -> bool:
    """
    Return True if the output says the repository does not exist.

    A bare "not found" or 404 only counts when `name` appears in the output
    and nothing points at the organization or token instead.
    """
    output = result.output
    if output_matches(output, NOT_FOUND_PATTERNS):
        return True
    if output_matches(output, FOREIGN_NOT_FOUND_PATTERNS):
        return False
    if name and name.lower() in output.lower():
        return output_matches(output, GENERIC_NOT_FOUND_PATTERNS)
    return False


def is_transient_output(text: str) -> bool:
    return output_matches(text, TRANSIENT_PATTERNS)
