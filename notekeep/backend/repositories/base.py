"""
Base Repository.

Base class for all table repositories with common CRUD operations
expressed as PostgREST-style requests against the remote store.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from notekeep.backend.core.exceptions import NotFoundError, RemoteError
from notekeep.backend.core.logging import get_logger
from notekeep.backend.core.store import SINGLE_OBJECT, StoreClient

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=BaseModel)

RETURN_REPRESENTATION = {"Prefer": "return=representation"}


def eq(value: Any) -> str:
    """PostgREST equality filter value."""
    return f"eq.{value}"


class BaseRepository(Generic[ModelType]):
    """
    Base repository with common CRUD operations.

    Subclasses should set the table name and model class:

        class NoteRepository(BaseRepository[Note]):
            table = "notes"
            model = Note
    """

    table: str
    model: type[ModelType]

    def __init__(self, store: StoreClient) -> None:
        self.store = store

    def _parse_one(self, rows: Any) -> ModelType:
        if isinstance(rows, list):
            if not rows:
                raise NotFoundError(f"{self.model.__name__} not found")
            rows = rows[0]
        if not isinstance(rows, dict):
            raise RemoteError(f"Unexpected {self.table} payload from remote store")
        return self.model.model_validate(rows)

    async def get_by_id(self, id: str) -> ModelType:
        """
        Get a single record by ID.

        Raises:
            NotFoundError: If record not found
        """
        try:
            row = await self.store.rest(
                "GET",
                self.table,
                params={"select": "*", "id": eq(id)},
                headers={"Accept": SINGLE_OBJECT},
            )
        except RemoteError as e:
            # the store answers 406 when the single-object read matched no row
            if e.status_code == 406:
                raise NotFoundError(f"{self.model.__name__} not found") from e
            raise
        return self._parse_one(row)

    async def select(
        self,
        filters: dict[str, str] | None = None,
        order: str | None = None,
    ) -> list[ModelType]:
        """
        Select records matching PostgREST filters.

        Args:
            filters: Column to filter expression, e.g. {"user_id": "eq.42"}
            order: Order clause, e.g. "created_at.desc"

        Returns:
            Records in the order the store returned them
        """
        params: dict[str, str] = {"select": "*", **(filters or {})}
        if order:
            params["order"] = order
        rows = await self.store.rest("GET", self.table, params=params)
        if not isinstance(rows, list):
            raise RemoteError(f"Unexpected {self.table} payload from remote store")
        return [self.model.model_validate(row) for row in rows]

    async def insert(self, **values: Any) -> ModelType:
        """Insert a record and return the stored row."""
        rows = await self.store.rest(
            "POST", self.table, json=values, headers=RETURN_REPRESENTATION,
        )
        return self._parse_one(rows)

    async def upsert(self, **values: Any) -> ModelType:
        """Insert or merge a record keyed by its primary key."""
        rows = await self.store.rest(
            "POST",
            self.table,
            json=values,
            headers={"Prefer": "resolution=merge-duplicates,return=representation"},
        )
        return self._parse_one(rows)

    async def update(self, id: str, **values: Any) -> ModelType:
        """
        Update an existing record and return the stored row.

        Raises:
            NotFoundError: If no remote row matched
        """
        rows = await self.store.rest(
            "PATCH",
            self.table,
            params={"id": eq(id)},
            json=values,
            headers=RETURN_REPRESENTATION,
        )
        return self._parse_one(rows)

    async def delete(self, id: str) -> None:
        """Delete a record by ID."""
        await self.store.rest("DELETE", self.table, params={"id": eq(id)})
