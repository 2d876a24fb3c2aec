"""
Note Schemas.

Pydantic schemas for notes as stored remotely and as sent on writes.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from notekeep.backend.core.utils import utc_now

TITLE_MAX_LENGTH = 255
CONTENT_MAX_LENGTH = 10000


class Note(BaseModel):
    """A note as returned by the store. Immutable once received."""

    id: str = Field(description="Note unique identifier, assigned by the store")
    user_id: str = Field(description="Owning user")
    title: str = Field(description="Note title")
    content: str = Field(description="Note content")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: Any) -> Any:
        # the store may use integer or uuid keys
        if isinstance(value, int):
            return str(value)
        return value

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match against title or content."""
        needle = term.lower()
        return needle in self.title.lower() or needle in self.content.lower()


class NoteCreate(BaseModel):
    """Body for inserting a note."""

    user_id: str
    title: str
    content: str


class NoteUpdate(BaseModel):
    """Body for updating a note. updated_at is stamped client-side as well as by the store."""

    title: str
    content: str
    updated_at: datetime = Field(default_factory=utc_now)
