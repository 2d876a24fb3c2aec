#!/usr/bin/env python3
"""
NoteKeep CLI.

Terminal client for the notes application.
Built with Typer for type-safe commands and Rich for formatted output.

Usage:
    python cli.py --help                              # Show help

    # Account
    python cli.py auth signup                         # Create an account
    python cli.py auth signin                         # Sign in and remember the session
    python cli.py auth whoami                         # Show the signed-in profile
    python cli.py auth reset-password                 # Email reset instructions
    python cli.py auth signout                        # Forget the session

    # Notes
    python cli.py notes list                          # Newest first
    python cli.py notes list -s groceries             # Search title and content
    python cli.py notes add "Title" "Content"         # Create a note
    python cli.py notes edit <id> -t "New title"      # Edit a note
    python cli.py notes delete <id>                   # Delete a note

    # Interactive mode
    python cli.py shell                               # Start interactive shell

Options:
    --verbose, -v     Enable verbose output (logs to stderr)
    --debug, -d       Enable debug mode (detailed logging)
    --help            Show help message
"""

import asyncio
import sys
from pathlib import Path

import structlog
import typer
from rich.console import Console

# Add project root to path for absolute imports
project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from notekeep.backend.core.logging import setup_logging
from notekeep.cli.commands import auth_app, notes_app

app = typer.Typer(
    name="cli",
    help="NoteKeep CLI - Personal notes backed by a hosted store.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

app.add_typer(auth_app, name="auth")
app.add_typer(notes_app, name="notes")


@app.command()
def shell() -> None:
    """
    Start interactive shell mode.

    Keeps your notes and the open note form between commands.
    """
    from notekeep.cli.shell import run_shell

    asyncio.run(run_shell())


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
) -> None:
    """
    NoteKeep CLI.

    Sign in, then list, search, create, edit and delete your notes.
    """
    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(
        level=log_level,
        format_type="console",
        enable_console=True if (debug or verbose) else None,
    )
    structlog.contextvars.bind_contextvars(source="cli")

    if debug:
        console.print("[dim]Debug mode enabled[/dim]")


if __name__ == "__main__":
    app()
