"""
socket.yml creation and verification.
"""

from pathlib import Path
from typing import Union

from .constants import SOCKET_YML_CONTENT, SOCKET_YML_FILENAME
from .logger import RunLogger


def socket_yml_path(repo_path: Union[str, Path]) -> Path:
    return Path(repo_path) / SOCKET_YML_FILENAME


def socket_yml_exists(repo_path: Union[str, Path]) -> bool:
    return socket_yml_path(repo_path).is_file()


def create_socket_yml(repo_path: Union[str, Path], logger: RunLogger, dry_run: bool = False) -> Path:
    """Write socket.yml into the working copy, replacing any existing file."""
    file_path = socket_yml_path(repo_path)

    if dry_run:
        logger.debug(f"[DRY-RUN] Would create: {file_path}")
        return file_path

    try:
        file_path.write_text(SOCKET_YML_CONTENT, encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to create {SOCKET_YML_FILENAME}", e)
        raise

    logger.debug(f"Created {SOCKET_YML_FILENAME} at {file_path}")
    return file_path


def verify_socket_yml(repo_path: Union[str, Path], logger: RunLogger) -> bool:
    """Check that socket.yml exists and matches the expected content (ignoring surrounding whitespace)."""
    file_path = socket_yml_path(repo_path)

    if not file_path.is_file():
        logger.warn(f"{SOCKET_YML_FILENAME} does not exist at {repo_path}")
        return False

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to verify {SOCKET_YML_FILENAME}", e)
        return False

    if content.strip() != SOCKET_YML_CONTENT.strip():
        logger.warn(f"{SOCKET_YML_FILENAME} content does not match expected format")
        return False

    logger.debug(f"Verified {SOCKET_YML_FILENAME} content")
    return True
