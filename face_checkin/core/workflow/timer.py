"""Cancelable one-shot timer used for the post-success redirect."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class NavigationTimer:
    """Wraps ``loop.call_later`` so the owner can arm, re-arm and cancel it.

    ``loop`` only needs ``call_later(delay, callback)`` returning a handle
    with ``cancel()``, so tests can pass a manual scheduler.
    """

    def __init__(self, loop: Optional[Any] = None):
        self._loop = loop
        self._handle = None
        self.delay: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def arm(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self.delay = delay_ms / 1000.0

        def fire() -> None:
            self._handle = None
            callback()

        self._handle = loop.call_later(self.delay, fire)

    def cancel(self) -> bool:
        handle = self._handle
        self._handle = None
        if handle is None:
            return False
        handle.cancel()
        logger.debug("Pending navigation cancelled")
        return True
