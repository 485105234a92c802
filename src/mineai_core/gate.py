"""Single-slot admission gate for command execution."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator


class AdmissionGate:
    """
    Admits one holder at a time and turns everyone else away.

    There is no waiting list: a caller that finds the slot taken is expected
    to retry later. ``release`` is idempotent so an emergency stop can drop
    the slot without coordinating with the holder.
    """

    def __init__(self) -> None:
        self._taken = False
        self._generation = 0

    @property
    def is_taken(self) -> bool:
        return self._taken

    @property
    def queue_length(self) -> int:
        return 0

    def try_acquire(self) -> int | None:
        """Take the slot; returns a ticket, or None when the slot is already taken."""
        if self._taken:
            return None
        self._taken = True
        self._generation += 1
        return self._generation

    def release(self, ticket: int | None = None) -> None:
        """Free the slot. A stale ticket (from before a forced release) is ignored."""
        if ticket is not None and ticket != self._generation:
            return
        self._taken = False

    def holds(self, ticket: int | None) -> bool:
        """True while ``ticket`` still owns the slot (no forced release since)."""
        return ticket is not None and self._taken and ticket == self._generation

    @contextmanager
    def admit(self) -> Iterator[int | None]:
        """Yield a ticket and release it on exit; yield None when turned away."""
        ticket = self.try_acquire()
        if ticket is None:
            yield None
            return
        try:
            yield ticket
        finally:
            self.release(ticket)
