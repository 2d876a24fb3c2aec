"""
Edit Session State.

Tracks the single inline form that may be open: nothing, a new note being
composed, or an existing note being edited. The states form a tagged
union, so "creating and editing at once" cannot be represented.

Draft keystrokes are buffered here and never reach the note collection
until a create or update is explicitly submitted.
"""

from dataclasses import dataclass, replace

from notekeep.backend.core.exceptions import ConflictError
from notekeep.backend.core.logging import get_logger
from notekeep.backend.schemas.note import Note

logger = get_logger(__name__)


@dataclass(frozen=True)
class Draft:
    """Unsaved title/content pair."""

    title: str = ""
    content: str = ""


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Creating:
    draft: Draft = Draft()


@dataclass(frozen=True)
class Editing:
    note_id: str
    draft: Draft


EditState = Idle | Creating | Editing

IDLE = Idle()


class EditSession:
    """
    Holder of the current EditState.

    Usage:
        session = EditSession()
        session.begin_create()
        session.update_draft(title="Groceries")
        session.update_draft(content="milk, eggs")
        session.draft  # Draft(title="Groceries", content="milk, eggs")
        session.cancel()
    """

    def __init__(self) -> None:
        self._state: EditState = IDLE

    @property
    def state(self) -> EditState:
        return self._state

    @property
    def is_idle(self) -> bool:
        return isinstance(self._state, Idle)

    @property
    def draft(self) -> Draft | None:
        if isinstance(self._state, (Creating, Editing)):
            return self._state.draft
        return None

    @property
    def editing_id(self) -> str | None:
        if isinstance(self._state, Editing):
            return self._state.note_id
        return None

    def begin_create(self) -> Creating:
        """Open an empty create form, discarding any edit draft."""
        if isinstance(self._state, Editing):
            logger.debug("Discarding edit draft", extra={"note_id": self._state.note_id})
            self._state = IDLE
        self._state = Creating(Draft())
        return self._state

    def begin_edit(self, note: Note) -> Editing:
        """Open the edit form for note with a copy of its current values."""
        if isinstance(self._state, Creating):
            logger.debug("Discarding create draft")
        self._state = Editing(note.id, Draft(note.title, note.content))
        return self._state

    def cancel(self) -> None:
        self._state = IDLE

    def update_draft(self, title: str | None = None, content: str | None = None) -> Draft:
        """
        Replace parts of the current draft.

        Raises:
            ConflictError: If no form is open
        """
        if isinstance(self._state, Idle):
            raise ConflictError("No note is being created or edited")
        changes = {}
        if title is not None:
            changes["title"] = title
        if content is not None:
            changes["content"] = content
        draft = replace(self._state.draft, **changes)
        self._state = replace(self._state, draft=draft)
        return draft

    def finish_create(self) -> None:
        if isinstance(self._state, Creating):
            self._state = IDLE

    def clear_if_editing(self, note_id: str) -> bool:
        """Return to idle if note_id is the note being edited."""
        if isinstance(self._state, Editing) and self._state.note_id == note_id:
            self._state = IDLE
            return True
        return False
