"""Single cancellation slot for the network call currently in flight."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

T = TypeVar("T")


class InFlightCallCancelled(Exception):
    """Raised to the awaiting caller when the slot cancelled its call."""

    def __init__(self, job_id: str) -> None:
        super().__init__(f"In-flight call for job {job_id} was cancelled.")
        self.job_id = job_id


class InFlightCallSlot:
    """Holds the one in-flight network call so it can be interrupted.

    Each ``run`` replaces the slot. Cancelling targets whatever call occupies
    the slot at that moment; once a call has finished a later cancel is a
    no-op and never touches the next call.
    """

    def __init__(self) -> None:
        self._job_id: str | None = None
        self._task: asyncio.Task[Any] | None = None
        self._cancelled: asyncio.Task[Any] | None = None

    @property
    def job_id(self) -> str | None:
        """Return the job owning the in-flight call, if any."""

        if self._task is None or self._task.done():
            return None
        return self._job_id

    async def run(self, job_id: str, call: Coroutine[Any, Any, T]) -> T:
        """Run ``call`` as its own task registered in the slot."""

        task: asyncio.Task[T] = asyncio.ensure_future(call)
        self._job_id = job_id
        self._task = task
        try:
            return await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            outer_cancelled = current is not None and current.cancelling() > 0
            if self._cancelled is task and not outer_cancelled:
                raise InFlightCallCancelled(job_id) from None
            raise
        finally:
            if self._task is task:
                self._task = None
                self._job_id = None
            if self._cancelled is task:
                self._cancelled = None

    def cancel(self, job_id: str | None = None) -> bool:
        """Cancel the in-flight call, optionally only when it belongs to ``job_id``."""

        task = self._task
        if task is None or task.done():
            return False
        if job_id is not None and self._job_id != job_id:
            return False
        self._cancelled = task
        task.cancel()
        return True


__all__ = ["InFlightCallCancelled", "InFlightCallSlot"]
