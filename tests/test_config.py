"""Tests for environment configuration loading."""

from __future__ import annotations

import pytest

from archive_sync.config import (
    is_valid_github_token,
    is_valid_org_name,
    is_valid_url,
    load_config,
    log_config_summary,
)
from archive_sync.exceptions import ConfigurationError
from tests.helpers import VALID_GITHUB_TOKEN


@pytest.fixture
def env() -> dict:
    return {
        "GITHUB_TOKEN": VALID_GITHUB_TOKEN,
        "GITHUB_ORG": "acme",
        "SOCKET_API_TOKEN": "sk_live_secret",
        "SOCKET_ORG": "acme-security",
    }


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_applied(self, env) -> None:
        config = load_config(dry_run=False, env=env)

        assert config.github_org == "acme"
        assert config.socket_org == "acme-security"
        assert config.repos_base_path == "./temp-repos"
        assert config.socket_base_url == "https://api.socket.dev/v0"
        assert config.github_base_url == "https://api.github.com"
        assert config.log_level == "info"
        assert config.dry_run is False

    def test_values_trimmed_and_level_lowercased(self, env) -> None:
        env.update({"GITHUB_ORG": "  acme  ", "LOG_LEVEL": "DEBUG", "REPOS_BASE_PATH": " /tmp/r "})

        config = load_config(dry_run=True, env=env)

        assert config.github_org == "acme"
        assert config.log_level == "debug"
        assert config.repos_base_path == "/tmp/r"
        assert config.dry_run is True

    def test_all_errors_collected(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(dry_run=False, env={"LOG_LEVEL": "verbose"})

        errors = exc_info.value.errors
        assert "GITHUB_TOKEN environment variable is required" in errors
        assert "SOCKET_API_TOKEN environment variable is required" in errors
        assert "GITHUB_ORG environment variable is required" in errors
        assert "SOCKET_ORG environment variable is required" in errors
        assert any(error.startswith("Invalid LOG_LEVEL") for error in errors)
        assert "1. " in str(exc_info.value)

    def test_blank_value_counts_as_missing(self, env) -> None:
        env["SOCKET_API_TOKEN"] = "   "

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(dry_run=False, env=env)

        assert exc_info.value.errors == ["SOCKET_API_TOKEN environment variable is required"]

    @pytest.mark.parametrize(
        ("variable", "value", "expected"),
        [
            ("GITHUB_ORG", "-acme", "Invalid GITHUB_ORG format: -acme"),
            ("SOCKET_ORG", "acme_corp", "Invalid SOCKET_ORG format: acme_corp"),
            ("SOCKET_BASE_URL", "ftp://socket.dev", "Invalid SOCKET_BASE_URL: ftp://socket.dev"),
            ("GITHUB_BASE_URL", "not a url", "Invalid GITHUB_BASE_URL: not a url"),
        ],
    )
    def test_invalid_values(self, env, variable, value, expected) -> None:
        env[variable] = value

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(dry_run=False, env=env)

        assert exc_info.value.errors == [expected]

    def test_unusual_token_only_warns(self, env, logger) -> None:
        env["GITHUB_TOKEN"] = "github_pat_something"

        config = load_config(dry_run=False, env=env, logger=logger)

        assert config.github_token == "github_pat_something"
        assert [entry.level for entry in logger.entries] == ["warn"]


class TestValidators:
    @pytest.mark.parametrize("token", ["ghp_" + "a" * 36, "ghs_" + "B1_" * 12, "ghu_" + "9" * 40])
    def test_valid_tokens(self, token) -> None:
        assert is_valid_github_token(token)

    @pytest.mark.parametrize("token", ["ghp_short", "gho_" + "a" * 36, ""])
    def test_invalid_tokens(self, token) -> None:
        assert not is_valid_github_token(token)

    @pytest.mark.parametrize("name", ["a", "acme", "acme-corp", "A1" * 19 + "z"])
    def test_valid_org_names(self, name) -> None:
        assert is_valid_org_name(name)

    @pytest.mark.parametrize("name", ["", "-acme", "acme-", "acme corp", "a" * 41])
    def test_invalid_org_names(self, name) -> None:
        assert not is_valid_org_name(name)

    def test_urls(self) -> None:
        assert is_valid_url("https://api.github.com")
        assert is_valid_url("http://localhost:8080/api")
        assert not is_valid_url("api.github.com")


class TestConfigSummary:
    def test_tokens_masked(self, env, logger, console_output) -> None:
        log_config_summary(load_config(dry_run=True, env=env), logger)

        output = console_output.getvalue()
        assert "sk_live_secret" not in output
        assert VALID_GITHUB_TOKEN not in output
        assert "sk_****ret" in output
        assert "Dry Run: Yes" in output
