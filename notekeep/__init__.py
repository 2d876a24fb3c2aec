"""
NoteKeep.

- backend/: Client core: configuration, store client, repositories, services
- cli/: Terminal client (Typer + Rich)
"""
