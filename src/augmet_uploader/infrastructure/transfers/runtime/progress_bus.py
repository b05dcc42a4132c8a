"""Fan-out of part-uploaded notifications."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[], None]


@dataclass(slots=True, frozen=True)
class ProgressSubscription:
    """Handle returned by ``ProgressBus.subscribe``."""

    bus: ProgressBus
    handle: int

    def unsubscribe(self) -> None:
        self.bus.unsubscribe(self)


class ProgressBus:
    """Observer set keyed by subscription handle.

    ``publish`` runs every callback synchronously; a failing callback is logged
    and the remaining observers still run.
    """

    def __init__(self) -> None:
        self._callbacks: dict[int, ProgressCallback] = {}
        self._handles = itertools.count(1)

    def subscribe(self, callback: ProgressCallback) -> ProgressSubscription:
        handle = next(self._handles)
        self._callbacks[handle] = callback
        return ProgressSubscription(bus=self, handle=handle)

    def unsubscribe(self, subscription: ProgressSubscription) -> None:
        self._callbacks.pop(subscription.handle, None)

    def publish(self) -> None:
        """Notify every subscriber that one more part was stored."""

        for handle, callback in list(self._callbacks.items()):
            try:
                callback()
            except Exception:  # noqa: BLE001
                logger.exception("Progress subscriber %s failed.", handle)

    def __len__(self) -> int:
        return len(self._callbacks)


__all__ = ["ProgressBus", "ProgressCallback", "ProgressSubscription"]
