"""Bounded FIFO queue of batches waiting to be retried."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from influxwrite.write_service import Batch


class RetryQueue:
    """FIFO queue holding at most ``limit`` batches.

    When full, pushing a batch discards the oldest one, which is marked
    as evicted.
    """

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self._items: deque[Batch] = deque()

    def push(self, batch: Batch) -> bool:
        """Append a batch; return True if the oldest batch had to be discarded."""
        overwritten = False
        if len(self._items) == self.limit:
            self.pop()
            overwritten = True
        self._items.append(batch)
        return overwritten

    def pop(self) -> Batch | None:
        """Remove and return the oldest batch, marking it evicted; None if empty."""
        if not self._items:
            return None
        batch = self._items.popleft()
        batch.evicted = True
        return batch

    def first(self) -> Batch | None:
        """Return the oldest batch without removing it; None if empty."""
        return self._items[0] if self._items else None

    def is_empty(self) -> bool:
        """Return True if the queue holds no batches."""
        return not self._items

    def __len__(self) -> int:
        return len(self._items)