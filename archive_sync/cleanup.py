"""
Remove clone directories left behind by an interrupted run.
"""

import os
import sys

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from .constants import TEMP_REPOS_DIRECTORY
from .helpers import remove_directory

load_dotenv()

console = Console()


@click.command()
@click.option('--path', 'path', default=None,
              help=f'Directory to remove (default: $REPOS_BASE_PATH or {TEMP_REPOS_DIRECTORY})')
def cleanup(path):
    """Delete the temporary clone directory."""
    target = path or (os.getenv('REPOS_BASE_PATH') or '').strip() or TEMP_REPOS_DIRECTORY

    try:
        removed = remove_directory(target)
    except OSError as e:
        console.print(f"[red]❌ Cleanup failed: {escape(str(e))}[/red]")
        sys.exit(1)

    if removed:
        console.print(f"[green]✅ Removed {escape(target)}[/green]")
    else:
        console.print(f"[green]✅ No cleanup needed ({escape(target)} doesn't exist)[/green]")


if __name__ == "__main__":
    cleanup()
