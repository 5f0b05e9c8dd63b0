#!/usr/bin/env python3
"""
Dialogue orchestrator: the Jarvis state machine.

    IDLE --start--> LISTENING --transcript--> PROCESSING --> SPEAKING --done--> LISTENING
                        |                          |                       +--done--> IDLE (stop requested)
                        +--------stop------> IDLE  +--(wake word only)--> LISTENING

Single-flight: a transcript is accepted only in LISTENING; anything that
arrives while PROCESSING or SPEAKING is dropped, not queued. Every cycle
that reaches the speech sink ends through its completion callback, which
is the only way back to LISTENING from SPEAKING.

Everything runs on one asyncio loop; fetches are awaited in order
(snapshot, then history, then narrative, then speech).
"""

import asyncio
import traceback
from typing import Any, Dict, Optional

from jarvis import __version__
from jarvis.analysis import analyze_market, compose_narrative
from jarvis.commands import Command, CommandKind, build_rules, classify, contains_wake_word
from jarvis.config_loader import JarvisConfig
from jarvis.conversation import reply_for
from jarvis.i18n import t
from jarvis.listener import TranscriptSource
from jarvis.market import HistoryFetchError, MarketFetchError, MarketGateway
from jarvis.panel import INTERACTION_CONVERSATION, ResultPanel
from jarvis.speech.base import SpeechRequest, SpeechSink
from jarvis.state_machine import DialogueState
from jarvis.symbols import AliasNotFound, resolve_symbol
from jarvis.text_processing import normalize_speech_text
from jarvis.utils import jarvis_log
from jarvis.wake_word import WakeWordTimer


class DialogueOrchestrator:
    """Consumes transcripts, dispatches one command at a time, drives speech."""

    def __init__(
        self,
        config: JarvisConfig,
        source: TranscriptSource,
        sink: SpeechSink,
        gateway: MarketGateway,
        panel: Optional[ResultPanel] = None,
    ):
        self.config = config
        self.source = source
        self.sink = sink
        self.gateway = gateway
        self.panel = panel or ResultPanel()

        # === STATE MACHINE ===
        self._state = DialogueState.IDLE
        self._stop_after_speech = False
        self._utterance_seq = 0
        self._active_utterance: Optional[int] = None
        self._cycle: Optional[asyncio.Task] = None

        self._rules = build_rules(config.wake_word_keyword)
        self._wake_timer = WakeWordTimer(config.wake_word_timeout, on_expire=self._on_wake_window_closed)

        self._handlers = {
            CommandKind.WAKE_WORD: self._handle_wake_word,
            CommandKind.CONVERSATIONAL: self._handle_conversation,
            CommandKind.CRYPTO_QUERY: self._handle_crypto_query,
            CommandKind.STOP_LISTENING: self._handle_stop_listening,
        }

        self.source.set_handler(self.on_transcript)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> DialogueState:
        return self._state

    @property
    def wake_word_detected(self) -> bool:
        return self._wake_timer.detected

    @property
    def wake_timer(self) -> WakeWordTimer:
        return self._wake_timer

    def _set_state(self, new_state: DialogueState):
        old_state = self._state
        if old_state is new_state:
            return
        self._state = new_state
        jarvis_log("STATE", f"{old_state.value} → {new_state.value}", level="INFO")

    def status(self) -> Dict[str, Any]:
        return {
            "state": self._state.value,
            "listening": self.panel.listening,
            "wake_word_detected": self._wake_timer.detected,
            "stop_pending": self._stop_after_speech,
            "version": __version__,
        }

    # ------------------------------------------------------------------
    # User controls
    # ------------------------------------------------------------------

    def start(self):
        """IDLE → LISTENING; opens the input stream."""
        if self._state is not DialogueState.IDLE:
            return
        self.source.start(continuous=True)
        self.panel.listening = True
        self._set_state(DialogueState.LISTENING)

    def stop(self):
        """Close the input stream now; a running cycle still finishes, then IDLE."""
        if self.source.is_active:
            self.source.stop()
        self.panel.listening = False
        if self._state.is_busy:
            self._stop_after_speech = True
        elif self._state is DialogueState.LISTENING:
            self._set_state(DialogueState.IDLE)

    def toggle(self) -> DialogueState:
        """Microphone button."""
        if self._state is DialogueState.IDLE:
            self.panel.transcript = ""
            self.start()
        elif self.panel.listening:
            self.stop()
        else:
            # Stop was requested mid-cycle; the user changed their mind.
            self._stop_after_speech = False
            self.source.start(continuous=True)
            self.panel.listening = True
        return self._state

    async def shutdown(self):
        self._wake_timer.cancel()
        if self.source.is_active:
            self.source.stop()
        self.panel.listening = False
        if self._cycle is not None and not self._cycle.done():
            self._cycle.cancel()
            try:
                await self._cycle
            except asyncio.CancelledError:
                pass
        self._active_utterance = None
        self.sink.cancel()
        self.panel.speaking = False
        self._stop_after_speech = False
        self._set_state(DialogueState.IDLE)

    # ------------------------------------------------------------------
    # Transcript entry point
    # ------------------------------------------------------------------

    def on_transcript(self, text: str):
        """Latest utterance from the input stream."""
        if self._state is not DialogueState.LISTENING:
            jarvis_log("ORCH", f"Dropped transcript while {self._state.value}: {text!r}", level="DEBUG")
            return
        text = (text or "").strip()
        if not text:
            return

        self.panel.transcript = text
        if contains_wake_word(text, self.config.wake_word_keyword):
            self._wake_timer.arm()
            self.panel.wake_word_detected = True

        command = classify(text, self._rules)
        jarvis_log("ORCH", f"Heard: {text!r} → {command}")

        self._set_state(DialogueState.PROCESSING)
        self._cycle = asyncio.get_running_loop().create_task(self._run_cycle(command))

    async def _run_cycle(self, command: Command):
        try:
            await self._handlers[command.kind](command)
        except Exception as e:
            jarvis_log("ORCH", f"Cycle failed for {command}: {e}", level="ERROR")
            jarvis_log("ORCH", traceback.format_exc(), level="DEBUG")
            self.panel.loading = False
            self._speak(t("responses.internal_error"))

    # ------------------------------------------------------------------
    # Command handlers
    # ------------------------------------------------------------------

    async def _handle_wake_word(self, command: Command):
        self._set_state(DialogueState.LISTENING)

    async def _handle_conversation(self, command: Command):
        self.panel.last_interaction = INTERACTION_CONVERSATION
        self._speak(reply_for(command.topic))

    async def _handle_stop_listening(self, command: Command):
        self._stop_after_speech = True
        self._speak(t("responses.stop_listening"))

    async def _handle_crypto_query(self, command: Command):
        alias = command.alias or ""
        self.panel.begin_query()

        try:
            symbol = resolve_symbol(alias)
            if symbol is None:
                raise AliasNotFound(alias)
            snapshot = await self.gateway.fetch_ticker(symbol)
        except (AliasNotFound, MarketFetchError) as e:
            jarvis_log("ORCH", f"Crypto query for {alias!r} failed: {e}", level="WARNING")
            self.panel.fail_query(str(e))
            self._speak(t("responses.market_error", asset=alias, reason=str(e)))
            return

        self.panel.show_snapshot(snapshot)

        try:
            self.panel.history = await self.gateway.fetch_history(symbol)
        except HistoryFetchError as e:
            jarvis_log("ORCH", f"Chart omitted: {e}", level="WARNING")
            self.panel.history = []

        self.panel.loading = False
        facts = analyze_market(snapshot)
        jarvis_log("ORCH", f"{symbol}: trend={facts.trend}, sentiment={facts.sentiment}")
        self._speak(compose_narrative(snapshot, facts))

    # ------------------------------------------------------------------
    # Speech
    # ------------------------------------------------------------------

    def _speak(self, text: str):
        utterance = normalize_speech_text(text)
        self._utterance_seq += 1
        seq = self._utterance_seq
        self._active_utterance = seq

        self.panel.speaking = True
        self.panel.last_utterance = utterance
        self.panel.transcript = ""
        self._set_state(DialogueState.SPEAKING)

        request = SpeechRequest(
            text=utterance,
            locale=self.config.tts_locale,
            rate=self.config.tts_rate,
            pitch=self.config.tts_pitch,
            volume=self.config.tts_volume,
            voice=self.config.tts_voice,
        )
        try:
            self.sink.speak(request, lambda: self._on_speech_done(seq))
        except Exception as e:
            jarvis_log("SPEAK", f"Speech sink failed: {e}", level="ERROR")
            self._on_speech_done(seq)

    def _on_speech_done(self, seq: int):
        if seq != self._active_utterance:
            jarvis_log("SPEAK", f"Ignoring completion of superseded utterance #{seq}", level="DEBUG")
            return
        self._active_utterance = None
        self.panel.speaking = False

        if self._stop_after_speech:
            self._stop_after_speech = False
            if self.source.is_active:
                self.source.stop()
            self.panel.listening = False
            self._set_state(DialogueState.IDLE)
        else:
            self._set_state(DialogueState.LISTENING)

    def _on_wake_window_closed(self):
        self.panel.wake_word_detected = False
