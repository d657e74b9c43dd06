"""Bounded in-memory history of executed move batches.

Batches are kept oldest-first. Push and pop happen at the newest end; once
the capacity is reached, pushing drops the oldest batch. Nothing is written
to disk: history lives as long as the FileMover that owns it.
"""

import logging
import threading
from collections import deque
from typing import Deque, Optional, Tuple

from tag2dir.core.models import MoveBatch

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 20


class MoveHistory:
    """Bounded LIFO of MoveBatch with eviction of the oldest entry.

    Usage:
        history = MoveHistory(capacity=20)
        history.push(batch)

        if history.has_any():
            batch = history.pop_last()
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_SIZE):
        """Initialize history.

        Args:
            capacity: Maximum number of batches retained (must be >= 1).

        Raises:
            ValueError: If capacity is less than 1.
        """
        if capacity < 1:
            raise ValueError(f"History capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._batches: Deque[MoveBatch] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def push(self, batch: MoveBatch) -> None:
        """Add a batch as the newest entry, evicting the oldest if full."""
        with self._lock:
            if len(self._batches) == self.capacity:
                evicted = self._batches[0]
                logger.debug(
                    f"History full ({self.capacity}), dropping batch from "
                    f"{evicted.moved_at:%Y-%m-%d %H:%M:%S}"
                )
            self._batches.append(batch)

    def pop_last(self) -> Optional[MoveBatch]:
        """Remove and return the newest batch, or None if empty."""
        with self._lock:
            if not self._batches:
                return None
            return self._batches.pop()

    def peek_last(self) -> Optional[MoveBatch]:
        """Return the newest batch without removing it."""
        with self._lock:
            return self._batches[-1] if self._batches else None

    def has_any(self) -> bool:
        """Check if there is a batch to undo."""
        with self._lock:
            return len(self._batches) > 0

    def clear(self) -> None:
        """Drop all batches."""
        with self._lock:
            self._batches.clear()

    @property
    def batches(self) -> Tuple[MoveBatch, ...]:
        """Snapshot of retained batches, oldest first."""
        with self._lock:
            return tuple(self._batches)

    def __len__(self) -> int:
        with self._lock:
            return len(self._batches)
