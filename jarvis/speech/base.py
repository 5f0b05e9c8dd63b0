"""Shared speech-output Protocol and request type for all sinks."""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

# Average English speaking speed at rate 1.0
WORDS_PER_SECOND = 2.7


@dataclass(frozen=True)
class SpeechRequest:
    text: str
    locale: str = "en-US"
    rate: float = 0.9
    pitch: float = 1.0
    volume: float = 1.0
    voice: Optional[str] = None


def estimate_duration(request: SpeechRequest, words_per_second: float = WORDS_PER_SECOND,
                      minimum: float = 0.3) -> float:
    """Rough time an engine needs to read the request aloud."""
    words = len(request.text.split())
    rate = request.rate if request.rate > 0 else 1.0
    return max(minimum, words / (words_per_second * rate))


class SpeechSink(Protocol):
    """Unified interface for speech output engines.

    Exactly one ``on_done`` call per accepted utterance. A new ``speak``
    cancels whatever is still rendering first.
    """

    def speak(self, request: SpeechRequest, on_done: Callable[[], None]) -> None: ...

    def cancel(self) -> None: ...
