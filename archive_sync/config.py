"""
Configuration loading.

Settings come from environment variables (a .env file is merged in by the
CLI before this runs). Validation collects every problem so the user can fix
the whole environment in one go.
"""

import os
import re
from typing import List, Mapping, Optional
from urllib.parse import urlparse

from .constants import (
    DEFAULT_GITHUB_BASE_URL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_SOCKET_BASE_URL,
    LOG_LEVELS,
    TEMP_REPOS_DIRECTORY,
)
from .exceptions import ConfigurationError
from .helpers import mask_token
from .logger import RunLogger
from .models import ScriptConfig

GITHUB_TOKEN_PATTERN = re.compile(r'^(ghp_|ghs_|ghu_)[a-zA-Z0-9_]{36,255}$')
ORG_NAME_PATTERN = re.compile(r'^[a-zA-Z0-9]([a-zA-Z0-9-]{0,38}[a-zA-Z0-9])?$')


def is_valid_github_token(token: str) -> bool:
    return bool(GITHUB_TOKEN_PATTERN.match(token))


def is_valid_org_name(name: str) -> bool:
    return bool(ORG_NAME_PATTERN.match(name))


def is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _read(env: Mapping[str, str], name: str, default: str = "") -> str:
    value = (env.get(name) or "").strip()
    return value or default


def validate_config(config: ScriptConfig) -> List[str]:
    """Return every validation error for `config` (empty if valid)."""
    errors = []

    if not config.github_token:
        errors.append("GITHUB_TOKEN environment variable is required")

    if not config.socket_api_token:
        errors.append("SOCKET_API_TOKEN environment variable is required")

    if not config.github_org:
        errors.append("GITHUB_ORG environment variable is required")
    elif not is_valid_org_name(config.github_org):
        errors.append(f"Invalid GITHUB_ORG format: {config.github_org}")

    if not config.socket_org:
        errors.append("SOCKET_ORG environment variable is required")
    elif not is_valid_org_name(config.socket_org):
        errors.append(f"Invalid SOCKET_ORG format: {config.socket_org}")

    if not config.repos_base_path:
        errors.append("REPOS_BASE_PATH is required")

    if not is_valid_url(config.socket_base_url):
        errors.append(f"Invalid SOCKET_BASE_URL: {config.socket_base_url}")

    if not is_valid_url(config.github_base_url):
        errors.append(f"Invalid GITHUB_BASE_URL: {config.github_base_url}")

    if config.log_level not in LOG_LEVELS:
        errors.append(f"Invalid LOG_LEVEL: {config.log_level} (expected one of {', '.join(LOG_LEVELS)})")

    return errors


def load_config(dry_run: bool, env: Optional[Mapping[str, str]] = None,
                logger: Optional[RunLogger] = None) -> ScriptConfig:
    """
    Build the run configuration from environment variables.

    Args:
        dry_run: Value of the --dry-run flag
        env: Variables to read (defaults to os.environ)
        logger: Receives non-fatal warnings

    Returns:
        A validated ScriptConfig

    Raises:
        ConfigurationError: listing every problem found
    """
    env = os.environ if env is None else env

    config = ScriptConfig(
        github_token=_read(env, "GITHUB_TOKEN"),
        github_org=_read(env, "GITHUB_ORG"),
        socket_api_token=_read(env, "SOCKET_API_TOKEN"),
        socket_org=_read(env, "SOCKET_ORG"),
        repos_base_path=_read(env, "REPOS_BASE_PATH", TEMP_REPOS_DIRECTORY),
        dry_run=dry_run,
        socket_base_url=_read(env, "SOCKET_BASE_URL", DEFAULT_SOCKET_BASE_URL),
        github_base_url=_read(env, "GITHUB_BASE_URL", DEFAULT_GITHUB_BASE_URL),
        log_level=_read(env, "LOG_LEVEL", DEFAULT_LOG_LEVEL).lower(),
    )

    errors = validate_config(config)
    if errors:
        raise ConfigurationError(errors)

    if logger is not None and not is_valid_github_token(config.github_token):
        logger.warn(
            "GITHUB_TOKEN may not be in the expected format (should start with ghp_, ghs_, or ghu_)"
        )

    return config


def log_config_summary(config: ScriptConfig, logger: RunLogger) -> None:
    """Log the effective configuration. Tokens are masked."""
    logger.info("📋 Configuration Summary:")
    logger.info(f"   GitHub Org: {config.github_org}")
    logger.info(f"   GitHub Token: {mask_token(config.github_token)}")
    logger.info(f"   Socket.dev Org: {config.socket_org}")
    logger.info(f"   Socket.dev Token: {mask_token(config.socket_api_token)}")
    logger.info(f"   Repos Path: {config.repos_base_path}")
    logger.info(f"   Dry Run: {'Yes' if config.dry_run else 'No'}")
    logger.info(f"   Log Level: {config.log_level}")
    logger.info(f"   GitHub API: {config.github_base_url}")
    logger.info(f"   Socket.dev API: {config.socket_base_url}")
