#!/usr/bin/env python3
"""Wake-word detection window.

Hearing the assistant's name opens a window (10 s by default). Hearing it
again while the window is open cancels the pending reset and starts a new
one, so the last detection always wins.

Usage:
    timer = WakeWordTimer(timeout=10.0, on_expire=panel.clear_wake_word)
    timer.arm()            # on every detection
    timer.detected         # True until the window closes
"""

import asyncio
from typing import Callable, Optional

from jarvis.utils import jarvis_log


class WakeWordTimer:
    """Cancellable deferred reset owned by the orchestrator."""

    def __init__(
        self,
        timeout: float = 10.0,
        on_expire: Optional[Callable[[], None]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self.timeout = timeout
        self._on_expire = on_expire
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._detected = False

    @property
    def detected(self) -> bool:
        return self._detected

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def arm(self) -> None:
        """Record a detection and (re)start the reset countdown."""
        loop = self._loop or asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._detected = True
        self._handle = loop.call_later(self.timeout, self._expire)
        jarvis_log("WAKE", f"Wake word detected, window open for {self.timeout:g}s")

    def cancel(self) -> None:
        """Drop a pending reset without firing it."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._detected = False

    def _expire(self) -> None:
        self._handle = None
        self._detected = False
        jarvis_log("WAKE", "Wake word window closed")
        if self._on_expire is not None:
            self._on_expire()
