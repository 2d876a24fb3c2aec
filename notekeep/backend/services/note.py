"""
Note Service.

Owns the signed-in user's note collection and keeps it consistent with
the remote store. Writes go to the store first; the local list is only
patched from the record the store returns, and is left untouched when a
write fails.

Collection rules:
    - load orders newest-first by created_at (ties keep store order)
    - create prepends, update replaces in place, delete removes
    - no re-sort after load
    - search is a read-only filtered view
"""

from notekeep.backend.core.concurrency import RequestSequencer
from notekeep.backend.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    StaleResponseError,
)
from notekeep.backend.core.logging import log_with_source
from notekeep.backend.core.store import StoreClient
from notekeep.backend.repositories.note import NoteRepository
from notekeep.backend.schemas.base import OperationResult
from notekeep.backend.schemas.note import (
    CONTENT_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    Note,
    NoteCreate,
    NoteUpdate,
)
from notekeep.backend.services.base import BaseService
from notekeep.backend.services.edit_session import Creating, Draft, EditSession, Editing

_COLLECTION_KEY = ("collection",)


class NoteService(BaseService):
    """
    Service for the in-memory note collection.

    Every public operation returns an OperationResult. Writes for the same
    note are sequenced: a response that arrives after a newer request for
    that note was issued is dropped as stale.
    """

    def __init__(
        self,
        store: StoreClient,
        edit_session: EditSession | None = None,
        sequencer: RequestSequencer | None = None,
    ) -> None:
        super().__init__(store)
        self.repo = NoteRepository(store)
        self.edit_session = edit_session if edit_session is not None else EditSession()
        self._sequencer = sequencer if sequencer is not None else RequestSequencer()
        self._notes: list[Note] = []
        self._user_id: str | None = None

    @property
    def notes(self) -> tuple[Note, ...]:
        """Snapshot of the collection, newest first."""
        return tuple(self._notes)

    @property
    def user_id(self) -> str | None:
        return self._user_id

    def get(self, note_id: str) -> Note | None:
        index = self._index_of(note_id)
        return None if index is None else self._notes[index]

    def _index_of(self, note_id: str) -> int | None:
        for index, note in enumerate(self._notes):
            if note.id == note_id:
                return index
        return None

    def _validate_note(self, title: str, content: str) -> None:
        self._validate_required(
            {"title": title, "content": content},
            ["title", "content"],
            message="Please fill in both title and content",
        )
        self._validate_string_length(title, "title", max_length=TITLE_MAX_LENGTH)
        self._validate_string_length(content, "content", max_length=CONTENT_MAX_LENGTH)

    # -------------------------------------------------------------------------
    # load
    # -------------------------------------------------------------------------

    async def load(self, user_id: str) -> OperationResult:
        """
        Replace the collection with every note owned by user_id.

        On failure the previous collection is kept.
        """
        return await self._run("load_notes", self._load(user_id))

    async def _load(self, user_id: str) -> list[Note]:
        self._log_debug("Loading notes", user_id=user_id)
        ticket = self._sequencer.issue(_COLLECTION_KEY)
        try:
            fetched = await self._execute_remote_operation(
                "load_notes", self.repo.select_by_user(user_id),
            )
            if not self._sequencer.is_current(_COLLECTION_KEY, ticket):
                raise StaleResponseError("A newer load superseded this one")
        finally:
            self._sequencer.release(_COLLECTION_KEY, ticket)

        seen: set[str] = set()
        unique = []
        for note in fetched:
            if note.id not in seen:
                seen.add(note.id)
                unique.append(note)
        # sorted() is stable, so equal timestamps keep the store's order
        self._notes = sorted(unique, key=lambda n: n.created_at, reverse=True)
        self._user_id = user_id

        log_with_source(
            self._logger, "notes", "info", "Notes loaded",
            user_id=user_id, count=len(self._notes),
        )
        return list(self._notes)

    # -------------------------------------------------------------------------
    # create
    # -------------------------------------------------------------------------

    async def create(self, title: str, content: str) -> OperationResult:
        """
        Create a note and prepend the stored record.

        Invalid input is rejected before contacting the store. On success a
        create draft is closed; on failure it is kept for another attempt.
        """
        return await self._run("create_note", self._create(title, content))

    async def _create(self, title: str, content: str) -> Note:
        self._validate_note(title, content)
        if self._user_id is None:
            raise AuthenticationError("Sign in before creating notes")

        self._log_operation("Creating note", title=title)
        note = await self._execute_remote_operation(
            "create_note",
            self.repo.insert_note(NoteCreate(user_id=self._user_id, title=title, content=content)),
        )

        existing = self._index_of(note.id)
        if existing is not None:
            self._notes[existing] = note
        else:
            self._notes.insert(0, note)
        self.edit_session.finish_create()

        self._log_debug("Note created", note_id=note.id)
        return note

    # -------------------------------------------------------------------------
    # update
    # -------------------------------------------------------------------------

    async def update(self, note_id: str, title: str, content: str) -> OperationResult:
        """
        Update a note and replace it in place with the stored record.

        On success an edit form open on this note is closed; on failure the
        entry and the edit form are left as they were.
        """
        return await self._run("update_note", self._update(note_id, title, content))

    async def _update(self, note_id: str, title: str, content: str) -> Note:
        self._validate_note(title, content)
        if self._index_of(note_id) is None:
            raise NotFoundError(f"Note {note_id} is no longer in your notes")

        self._log_operation("Updating note", note_id=note_id)
        ticket = self._sequencer.issue(note_id)
        try:
            note = await self._execute_remote_operation(
                "update_note",
                self.repo.update_note(note_id, NoteUpdate(title=title, content=content)),
            )
            if not self._sequencer.is_current(note_id, ticket):
                raise StaleResponseError(f"A newer change to note {note_id} superseded this update")
        finally:
            self._sequencer.release(note_id, ticket)

        index = self._index_of(note_id)
        if index is None:
            raise NotFoundError(f"Note {note_id} is no longer in your notes")
        self._notes[index] = note
        self.edit_session.clear_if_editing(note_id)
        return note

    # -------------------------------------------------------------------------
    # delete
    # -------------------------------------------------------------------------

    async def delete(self, note_id: str) -> OperationResult:
        """Delete a note; an edit form open on it is closed as well."""
        return await self._run("delete_note", self._delete(note_id))

    async def _delete(self, note_id: str) -> str:
        if self._index_of(note_id) is None:
            raise NotFoundError(f"Note {note_id} is no longer in your notes")

        self._log_operation("Deleting note", note_id=note_id)
        ticket = self._sequencer.issue(note_id)
        try:
            await self._execute_remote_operation("delete_note", self.repo.delete(note_id))
            if not self._sequencer.is_current(note_id, ticket):
                raise StaleResponseError(f"A newer change to note {note_id} superseded this delete")
        finally:
            self._sequencer.release(note_id, ticket)

        self._notes = [note for note in self._notes if note.id != note_id]
        self.edit_session.clear_if_editing(note_id)
        return note_id

    # -------------------------------------------------------------------------
    # search
    # -------------------------------------------------------------------------

    def search(self, term: str) -> list[Note]:
        """Notes whose title or content contains term, ignoring case. Read-only."""
        if not term:
            return list(self._notes)
        return [note for note in self._notes if note.matches(term)]

    # -------------------------------------------------------------------------
    # edit session helpers
    # -------------------------------------------------------------------------

    def begin_create(self) -> Draft:
        return self.edit_session.begin_create().draft

    def begin_edit(self, note_id: str) -> OperationResult:
        """Open the edit form on a note currently in the collection."""
        note = self.get(note_id)
        if note is None:
            return OperationResult.fail(
                NotFoundError(f"Note {note_id} is no longer in your notes"),
                operation="begin_edit",
            )
        return OperationResult.ok(self.edit_session.begin_edit(note).draft, operation="begin_edit")

    async def submit(self) -> OperationResult:
        """Commit the open form: create when composing, update when editing."""
        state = self.edit_session.state
        if isinstance(state, Creating):
            return await self.create(state.draft.title, state.draft.content)
        if isinstance(state, Editing):
            return await self.update(state.note_id, state.draft.title, state.draft.content)
        return OperationResult.fail(ConflictError("Nothing to save"), operation="submit")

    def reset(self) -> None:
        """Forget the collection, close any form and drop in-flight responses."""
        self._notes = []
        self._user_id = None
        self.edit_session.cancel()
        self._sequencer.reset()
