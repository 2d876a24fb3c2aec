"""
CLI Client Module.

Terminal client built with Typer and Rich for the notes application.

Architecture:
- CLI is a thin presentation layer
- All state rules live in notekeep.backend services
- Each command opens its own AppState; the shell keeps one for its lifetime

Usage:
    python cli.py --help
    python cli.py auth signin
    python cli.py notes list --search groceries
    python cli.py shell  # Interactive mode
"""
