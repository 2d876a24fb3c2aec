"""
Note Repository.

Data access layer for notes in the remote store.
"""

from notekeep.backend.repositories.base import BaseRepository, eq
from notekeep.backend.schemas.note import Note, NoteCreate, NoteUpdate


class NoteRepository(BaseRepository[Note]):
    """
    Repository for the notes table.

    Inherits standard CRUD operations from BaseRepository
    and adds note-specific queries.
    """

    table = "notes"
    model = Note

    async def select_by_user(self, user_id: str) -> list[Note]:
        """
        Get every note owned by a user, newest first.

        Args:
            user_id: Owning user ID

        Returns:
            Notes ordered by created_at descending
        """
        return await self.select(filters={"user_id": eq(user_id)}, order="created_at.desc")

    async def insert_note(self, data: NoteCreate) -> Note:
        """Insert a note; the store assigns id and timestamps."""
        return await self.insert(**data.model_dump(mode="json"))

    async def update_note(self, note_id: str, data: NoteUpdate) -> Note:
        """
        Update a note's title and content.

        Raises:
            NotFoundError: If the note no longer exists remotely
        """
        return await self.update(note_id, **data.model_dump(mode="json"))
