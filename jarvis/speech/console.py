"""Console speech sink: logs utterances and paces completion like a real engine."""

import asyncio
from typing import Callable, Optional

from jarvis.speech.base import SpeechRequest, WORDS_PER_SECOND, estimate_duration
from jarvis.utils import jarvis_log


class ConsoleSpeechSink:
    """Prints each utterance, then signals completion after its estimated duration."""

    def __init__(
        self,
        words_per_second: float = WORDS_PER_SECOND,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self.words_per_second = words_per_second
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._on_done: Optional[Callable[[], None]] = None

    @property
    def is_speaking(self) -> bool:
        return self._handle is not None

    def speak(self, request: SpeechRequest, on_done: Callable[[], None]) -> None:
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        duration = estimate_duration(request, self.words_per_second)
        voice = f", voice={request.voice}" if request.voice else ""
        jarvis_log("SPEAK", f"({request.locale}, rate={request.rate:g}{voice}) {request.text}")
        self._on_done = on_done
        self._handle = loop.call_later(duration, self._finish)

    def cancel(self) -> None:
        if self._handle is None:
            return
        self._handle.cancel()
        jarvis_log("SPEAK", "Utterance cancelled", level="DEBUG")
        self._finish()

    def _finish(self) -> None:
        on_done = self._on_done
        self._handle = None
        self._on_done = None
        if on_done is not None:
            on_done()
