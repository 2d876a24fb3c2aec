"""
Concurrency Infrastructure.

Request sequencing for remote writes issued from a single event loop.

Remote calls are awaited cooperatively, so two requests touching the same
record can be in flight at once and their responses can come back out of
order. A RequestSequencer hands out a ticket per key before each request;
when the response arrives, only the holder of the latest ticket may apply
it to local state. Older responses are dropped.

Usage:
    from notekeep.backend.core.concurrency import RequestSequencer

    sequencer = RequestSequencer()

    ticket = sequencer.issue(note_id)
    note = await repo.update(note_id, ...)
    if not sequencer.is_current(note_id, ticket):
        raise StaleResponseError()
    sequencer.release(note_id, ticket)
"""

import itertools
from collections.abc import Hashable

from notekeep.backend.core.logging import get_logger

logger = get_logger(__name__)


class RequestSequencer:
    """Monotonic per-key tickets for detecting superseded responses."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._latest: dict[Hashable, int] = {}

    def issue(self, key: Hashable) -> int:
        """Issue a new ticket for key, superseding any earlier one."""
        ticket = next(self._counter)
        self._latest[key] = ticket
        return ticket

    def is_current(self, key: Hashable, ticket: int) -> bool:
        """Whether ticket is still the newest issued for key."""
        current = self._latest.get(key) == ticket
        if not current:
            logger.debug(
                "Dropping superseded response",
                extra={"key": str(key), "ticket": ticket, "latest": self._latest.get(key)},
            )
        return current

    def release(self, key: Hashable, ticket: int) -> None:
        """Forget key once its latest request has settled."""
        if self._latest.get(key) == ticket:
            del self._latest[key]

    def reset(self) -> None:
        """Supersede every outstanding ticket."""
        self._latest.clear()
