#!/usr/bin/env python3
"""Dialogue state definitions for Jarvis Voice."""

from enum import Enum


class DialogueState(str, Enum):
    """Phases of one orchestration cycle."""
    IDLE = "idle"              # Input stream stopped
    LISTENING = "listening"    # Waiting for the next transcript
    PROCESSING = "processing"  # Command dispatched (fetching / composing)
    SPEAKING = "speaking"      # Utterance handed to the speech sink

    @property
    def is_busy(self) -> bool:
        return self in (DialogueState.PROCESSING, DialogueState.SPEAKING)
