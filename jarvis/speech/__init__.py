"""Speech output adapters."""

from jarvis.speech.base import SpeechRequest, SpeechSink, estimate_duration
from jarvis.speech.console import ConsoleSpeechSink

__all__ = ["SpeechRequest", "SpeechSink", "ConsoleSpeechSink", "estimate_duration"]
