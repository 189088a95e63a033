#!/usr/bin/env python3
"""
Main CLI entry point for archive-sync.
"""

import sys

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from . import __version__
from .config import load_config, log_config_summary
from .exceptions import ConfigurationError
from .github_api import GitHubAPI
from .logger import RunLogger
from .orchestrator import RepositorySyncOrchestrator
from .socket_cli import SocketCLIClient

# Load environment variables from .env file
load_dotenv()

console = Console()


def build_orchestrator(config, logger: RunLogger) -> RepositorySyncOrchestrator:
    """Wire the collaborators for a run."""
    github = GitHubAPI(config.github_token, config.github_org, logger, base_url=config.github_base_url)
    socket = SocketCLIClient(config.socket_api_token, config.socket_org, logger,
                             base_url=config.socket_base_url)
    return RepositorySyncOrchestrator(config, logger, github, socket)


@click.command()
@click.option('--dry-run', is_flag=True, help='Show what would be done without changing anything')
@click.option('--check-config', is_flag=True, help='Validate configuration and exit')
@click.version_option(version=__version__)
def cli(dry_run, check_config):
    """
    Add socket.yml to every archived repository in a GitHub organization.

    Each archived repository is unarchived, cloned, committed to, cleared
    from Socket.dev, pushed and rearchived. Configuration is read from
    environment variables (or a .env file): GITHUB_TOKEN, GITHUB_ORG,
    SOCKET_API_TOKEN, SOCKET_ORG and optionally REPOS_BASE_PATH,
    GITHUB_BASE_URL, SOCKET_BASE_URL, LOG_LEVEL.

    Examples:
      archive-sync --check-config
      archive-sync --dry-run
      archive-sync
    """
    logger = RunLogger(console=console)

    try:
        config = load_config(dry_run, logger=logger)
    except ConfigurationError as e:
        numbered = "\n".join(f"{i}. {escape(error)}" for i, error in enumerate(e.errors, 1))
        console.print(Panel(
            f"[red]Configuration validation failed:[/red]\n\n{numbered}\n\n"
            "Please create a .env file with the required variables.\n"
            "[yellow]GITHUB_TOKEN, GITHUB_ORG, SOCKET_API_TOKEN, SOCKET_ORG[/yellow]",
            title="Configuration Error",
            border_style="red"
        ))
        sys.exit(1)

    logger.set_level(config.log_level)

    if check_config:
        logger.info("Configuration check requested")
        log_config_summary(config, logger)
        logger.success("Configuration is valid!")
        sys.exit(0)

    orchestrator = build_orchestrator(config, logger)
    try:
        exit_code = orchestrator.run()
    except KeyboardInterrupt:
        console.print("\n[yellow]❌ Operation cancelled by user[/yellow]")
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    cli()
