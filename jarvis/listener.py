#!/usr/bin/env python3
"""
Transcript input sources.

A source pushes the latest recognized utterance to a single handler
while it is started. Sources can be started and stopped any number of
times; stopping halts delivery immediately.
"""

import asyncio
import sys
import threading
from typing import Callable, Optional, Protocol, TextIO

from jarvis.utils import jarvis_log, thread_safe_loop

TranscriptHandler = Callable[[str], None]


class UnsupportedCapability(RuntimeError):
    """The host has no usable speech input; orchestration cannot run."""


class TranscriptSource(Protocol):

    def set_handler(self, handler: TranscriptHandler) -> None: ...

    def start(self, continuous: bool = True) -> None: ...

    def stop(self) -> None: ...

    @property
    def is_active(self) -> bool: ...


class ManualTranscriptSource:
    """Push-fed source used by the HTTP API and by tests."""

    def __init__(self) -> None:
        self._handler: Optional[TranscriptHandler] = None
        self._active = False
        self.continuous = True
        self.start_count = 0
        self.stop_count = 0

    def set_handler(self, handler: TranscriptHandler) -> None:
        self._handler = handler

    @property
    def is_active(self) -> bool:
        return self._active

    def start(self, continuous: bool = True) -> None:
        self.continuous = continuous
        self._active = True
        self.start_count += 1
        jarvis_log("MIC", "Listening started")

    def stop(self) -> None:
        self._active = False
        self.stop_count += 1
        jarvis_log("MIC", "Listening stopped")

    def push(self, text: str) -> bool:
        """Deliver a transcript. Returns False when the source is stopped."""
        if not self._active or self._handler is None:
            return False
        self._handler(text)
        return True


class StdinTranscriptSource(ManualTranscriptSource):
    """Each line typed on stdin is one transcript.

    Lines are read on a daemon thread and handed to the event loop that
    called ``start()``; lines read while stopped are discarded.
    """

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        super().__init__()
        self._stream = stream or sys.stdin
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    def start(self, continuous: bool = True) -> None:
        self._loop = asyncio.get_running_loop()
        super().start(continuous)
        if self._thread is None or not self._thread.is_alive():
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=thread_safe_loop,
                args=("STDIN", self._read_line, self._stop_event),
                daemon=True,
                name="jarvis-stdin",
            )
            self._thread.start()

    def close(self) -> None:
        self._stop_event.set()
        self._active = False

    def _read_line(self) -> None:
        line = self._stream.readline()
        if line == "":
            jarvis_log("STDIN", "Input closed", level="WARNING")
            self._stop_event.set()
            return
        text = line.strip()
        if text and self._active and self._loop is not None:
            self._loop.call_soon_threadsafe(self.push, text)


def create_transcript_source(provider: str = "stdin") -> ManualTranscriptSource:
    """Build the configured input source.

    Raises:
        UnsupportedCapability: unknown provider, or stdin is not available.
    """
    provider = (provider or "").strip().lower()
    if provider == "manual":
        return ManualTranscriptSource()
    if provider == "stdin":
        if sys.stdin is None or sys.stdin.closed:
            raise UnsupportedCapability("stdin is not available for transcript input")
        return StdinTranscriptSource()
    raise UnsupportedCapability(f"Unknown input provider: {provider!r}")
