"""FIFO queue of pending transfer jobs."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable

from augmet_uploader.domain.entities import TransferJob


class TransferQueue:
    """Ordered, mutable sequence of pending upload jobs.

    Used from one event loop only: the drain loop dequeues, producers enqueue,
    and the two interleave at await points. No operation blocks.
    """

    def __init__(self) -> None:
        self._jobs: deque[TransferJob] = deque()

    def enqueue(self, job: TransferJob) -> None:
        """Append a job to the tail."""

        self._jobs.append(job)

    def dequeue(self) -> TransferJob | None:
        """Remove and return the head, or None when empty."""

        if not self._jobs:
            return None
        return self._jobs.popleft()

    def peek(self) -> TransferJob | None:
        """Return the head without removing it."""

        if not self._jobs:
            return None
        return self._jobs[0]

    @property
    def is_empty(self) -> bool:
        return not self._jobs

    def remove_by(self, predicate: Callable[[TransferJob], bool]) -> int:
        """Remove every matching job, keep the order of the rest, return the count."""

        kept = [job for job in self._jobs if not predicate(job)]
        removed = len(self._jobs) - len(kept)
        if removed:
            self._jobs = deque(kept)
        return removed

    def clear(self) -> None:
        self._jobs.clear()

    def to_list(self) -> list[TransferJob]:
        """Return pending jobs head first."""

        return list(self._jobs)

    def __len__(self) -> int:
        return len(self._jobs)


__all__ = ["TransferQueue"]
