"""Tests for the command-line entry points."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from archive_sync import main
from archive_sync.cleanup import cleanup
from tests.helpers import VALID_GITHUB_TOKEN

OPTIONAL_VARIABLES = ("REPOS_BASE_PATH", "GITHUB_BASE_URL", "SOCKET_BASE_URL", "LOG_LEVEL")


@pytest.fixture
def valid_env(monkeypatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", VALID_GITHUB_TOKEN)
    monkeypatch.setenv("GITHUB_ORG", "acme")
    monkeypatch.setenv("SOCKET_API_TOKEN", "sk_live_secret")
    monkeypatch.setenv("SOCKET_ORG", "acme")
    for name in OPTIONAL_VARIABLES:
        monkeypatch.delenv(name, raising=False)


class StubOrchestrator:
    def __init__(self, exit_code: int) -> None:
        self.exit_code = exit_code
        self.ran = False

    def run(self) -> int:
        self.ran = True
        return self.exit_code


@pytest.fixture
def built(monkeypatch) -> dict:
    """Replaces orchestrator wiring and records what it was given."""
    captured = {"exit_code": 0}

    def fake_build(config, logger):
        captured["config"] = config
        captured["orchestrator"] = StubOrchestrator(captured["exit_code"])
        return captured["orchestrator"]

    monkeypatch.setattr(main, "build_orchestrator", fake_build)
    return captured


class TestCli:
    """Tests for the archive-sync command."""

    def test_check_config_exits_without_running(self, valid_env, built) -> None:
        result = CliRunner().invoke(main.cli, ["--check-config"])

        assert result.exit_code == 0
        assert "Configuration is valid!" in result.output
        assert "sk_live_secret" not in result.output
        assert "orchestrator" not in built

    def test_invalid_configuration(self, monkeypatch, built) -> None:
        for name in ("GITHUB_TOKEN", "GITHUB_ORG", "SOCKET_API_TOKEN", "SOCKET_ORG") + OPTIONAL_VARIABLES:
            monkeypatch.delenv(name, raising=False)

        result = CliRunner().invoke(main.cli, [])

        assert result.exit_code == 1
        assert "Configuration Error" in result.output
        assert "GITHUB_TOKEN environment variable is required" in result.output
        assert "orchestrator" not in built

    def test_dry_run_flag_propagated(self, valid_env, built) -> None:
        result = CliRunner().invoke(main.cli, ["--dry-run"])

        assert result.exit_code == 0
        assert built["config"].dry_run is True
        assert built["orchestrator"].ran

    def test_run_exit_code_propagated(self, valid_env, built) -> None:
        built["exit_code"] = 1

        result = CliRunner().invoke(main.cli, [])

        assert result.exit_code == 1
        assert built["config"].dry_run is False

    def test_version(self) -> None:
        result = CliRunner().invoke(main.cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestCleanup:
    """Tests for the archive-sync-cleanup command."""

    def test_removes_directory(self, tmp_path) -> None:
        target = tmp_path / "temp-repos"
        (target / "alpha").mkdir(parents=True)

        result = CliRunner().invoke(cleanup, ["--path", str(target)])

        assert result.exit_code == 0
        assert not target.exists()
        assert "Removed" in result.output

    def test_nothing_to_remove(self, tmp_path) -> None:
        result = CliRunner().invoke(cleanup, ["--path", str(tmp_path / "absent")])

        assert result.exit_code == 0
        assert "No cleanup needed" in result.output

    def test_uses_repos_base_path(self, tmp_path, monkeypatch) -> None:
        target = tmp_path / "clones"
        target.mkdir()
        monkeypatch.setenv("REPOS_BASE_PATH", str(target))

        result = CliRunner().invoke(cleanup, [])

        assert result.exit_code == 0
        assert not target.exists()
