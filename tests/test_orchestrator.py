"""Tests for the dialogue orchestrator state machine."""

import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from jarvis.i18n import setup

setup("en", fallback="en")

from jarvis.commands import Command
from jarvis.config_loader import JarvisConfig
from jarvis.market import HistoryFetchError, MarketFetchError
from jarvis.state_machine import DialogueState

from fakes import make_orchestrator, settle


def run(coro):
    return asyncio.run(coro)


class TestLifecycle:
    def test_starts_idle(self):
        orch, source, _, _ = make_orchestrator()
        assert orch.state is DialogueState.IDLE
        assert source.is_active is False

    def test_start_opens_input_stream(self):
        async def scenario():
            orch, source, _, _ = make_orchestrator()
            orch.start()
            assert orch.state is DialogueState.LISTENING
            assert source.is_active
            assert source.continuous is True
            assert orch.panel.listening is True
        run(scenario())

    def test_start_twice_is_noop(self):
        async def scenario():
            orch, source, _, _ = make_orchestrator()
            orch.start()
            orch.start()
            assert source.start_count == 1
        run(scenario())

    def test_toggle_stops_and_restarts(self):
        async def scenario():
            orch, source, _, _ = make_orchestrator()
            orch.start()
            orch.panel.transcript = "stale words"

            assert orch.toggle() is DialogueState.IDLE
            assert source.is_active is False
            assert source.stop_count == 1

            assert orch.toggle() is DialogueState.LISTENING
            assert source.is_active
            assert source.start_count == 2
            assert orch.panel.transcript == ""
        run(scenario())

    def test_transcript_ignored_while_idle(self):
        async def scenario():
            orch, source, sink, _ = make_orchestrator()
            assert source.push("bitcoin") is False
            await settle()
            assert sink.requests == []
            assert orch.state is DialogueState.IDLE
        run(scenario())


class TestConversation:
    def test_conversational_cycle(self):
        async def scenario():
            orch, source, sink, gateway = make_orchestrator()
            orch.start()
            source.push("Who are you?")
            assert orch.state is DialogueState.PROCESSING

            await settle()
            assert orch.state is DialogueState.SPEAKING
            assert len(sink.requests) == 1
            assert "I am Jarvis" in sink.texts[0]
            assert orch.panel.speaking is True
            assert orch.panel.last_interaction == "conversation"
            assert gateway.ticker_calls == []

            sink.finish()
            assert orch.state is DialogueState.LISTENING
            assert orch.panel.speaking is False
        run(scenario())

    def test_speech_parameters_come_from_config(self):
        async def scenario():
            config = JarvisConfig(tts_rate=1.2, tts_voice="Google US English")
            orch, source, sink, _ = make_orchestrator(config)
            orch.start()
            source.push("tell me a joke")
            await settle()
            request = sink.requests[0]
            assert request.locale == "en-US"
            assert request.rate == 1.2
            assert request.pitch == 1.0
            assert request.volume == 1.0
            assert request.voice == "Google US English"
        run(scenario())

    def test_unrecognized_gets_fallback_reply(self):
        async def scenario():
            orch, source, sink, _ = make_orchestrator()
            orch.start()
            source.push("open the pod bay doors")
            await settle()
            assert "I'm not sure I understand" in sink.texts[0]
        run(scenario())

    def test_priority_conversation_over_crypto(self):
        async def scenario():
            orch, source, sink, gateway = make_orchestrator()
            orch.start()
            source.push("how are you bitcoin")
            await settle()
            assert gateway.ticker_calls == []
            assert len(sink.requests) == 1
        run(scenario())


class TestCryptoQuery:
    def test_full_cycle_orders_fetches_before_speech(self):
        async def scenario():
            orch, source, sink, gateway = make_orchestrator()
            orch.start()
            source.push("what about bitcoin")
            await settle()

            assert gateway.log == ["ticker", "history", "speak"]
            assert gateway.ticker_calls == ["BTCUSDT"]
            assert gateway.history_calls == ["BTCUSDT"]
            assert orch.state is DialogueState.SPEAKING

            utterance = sink.texts[0]
            assert "Here's my analysis for BTC" in utterance
            assert "65000 dollars and 00 cents" in utterance
            assert "upward trend with positive momentum" in utterance
            assert "$" not in utterance and "%" not in utterance

            assert orch.panel.snapshot.symbol == "BTCUSDT"
            assert len(orch.panel.history) == 7
            assert orch.panel.loading is False
            assert orch.panel.error is None

            sink.finish()
            assert orch.state is DialogueState.LISTENING
        run(scenario())

    def test_history_failure_does_not_abort_analysis(self):
        async def scenario():
            orch, source, sink, gateway = make_orchestrator()
            gateway.history_error = HistoryFetchError("Failed to fetch historical data for ETHUSDT")
            orch.start()
            source.push("ethereum")
            await settle()

            assert len(sink.requests) == 1
            assert "analysis for ETH" in sink.texts[0]
            assert orch.panel.history == []
            assert orch.panel.chart() is None
            assert orch.panel.error is None
        run(scenario())

    def test_snapshot_failure_apologises_and_sets_banner(self):
        async def scenario():
            orch, source, sink, gateway = make_orchestrator()
            gateway.ticker_error = MarketFetchError("Failed to fetch data for BTCUSDT", status=503)
            orch.start()
            source.push("bitcoin")
            await settle()

            assert gateway.history_calls == []
            assert sink.texts[0].startswith("I'm sorry, I couldn't retrieve data for bitcoin.")
            assert "Failed to fetch data for BTCUSDT" in sink.texts[0]
            assert orch.panel.error == "Failed to fetch data for BTCUSDT"
            assert orch.panel.loading is False

            sink.finish()
            assert orch.state is DialogueState.LISTENING
        run(scenario())

    def test_failed_query_keeps_previous_data(self):
        async def scenario():
            orch, source, sink, gateway = make_orchestrator()
            orch.start()
            source.push("bitcoin")
            await settle()
            sink.finish()
            previous = orch.panel.snapshot

            gateway.ticker_error = MarketFetchError("Failed to fetch data for ETHUSDT")
            source.push("ethereum")
            await settle()
            assert orch.panel.snapshot is previous
        run(scenario())

    def test_unknown_alias_apologises(self):
        async def scenario():
            orch, _, sink, gateway = make_orchestrator()
            orch.start()
            await orch._run_cycle(Command.crypto_query("moonrocket"))

            assert gateway.ticker_calls == []
            assert "I couldn't retrieve data for moonrocket" in sink.texts[0]
            assert "Could not recognize cryptocurrency: moonrocket" in sink.texts[0]
            assert orch.panel.error == "Could not recognize cryptocurrency: moonrocket"
            sink.finish()
            assert orch.state is DialogueState.LISTENING
        run(scenario())

    def test_unexpected_error_still_speaks(self):
        async def scenario():
            orch, source, sink, gateway = make_orchestrator()
            gateway.ticker_error = RuntimeError("boom")
            orch.start()
            source.push("solana")
            await settle()

            assert orch.state is DialogueState.SPEAKING
            assert "something went wrong" in sink.texts[0]
            sink.finish()
            assert orch.state is DialogueState.LISTENING
        run(scenario())


class TestSingleFlight:
    def test_second_transcript_dropped_while_processing(self):
        async def scenario():
            orch, source, sink, gateway = make_orchestrator()
            gateway.gate = asyncio.Event()
            orch.start()

            source.push("bitcoin")
            await settle()
            assert orch.state is DialogueState.PROCESSING

            source.push("ethereum")
            source.push("how are you")
            await settle()

            gateway.gate.set()
            await settle()
            assert gateway.ticker_calls == ["BTCUSDT"]
            assert len(sink.requests) == 1
        run(scenario())

    def test_transcript_dropped_while_speaking(self):
        async def scenario():
            orch, source, sink, _ = make_orchestrator()
            orch.start()
            source.push("hello")
            await settle()
            assert orch.state is DialogueState.SPEAKING

            source.push("tell me a joke")
            await settle()
            assert len(sink.requests) == 1

            sink.finish()
            source.push("tell me a joke")
            await settle()
            assert len(sink.requests) == 2
        run(scenario())

    def test_superseded_completion_ignored(self):
        async def scenario():
            orch, source, sink, _ = make_orchestrator()
            orch.start()
            source.push("hello")
            await settle()
            orch._on_speech_done(999)
            assert orch.state is DialogueState.SPEAKING
        run(scenario())

    def test_sink_failure_restores_listening(self):
        async def scenario():
            orch, source, _, _ = make_orchestrator(sink_fail=True)
            orch.start()
            source.push("hello")
            await settle()
            assert orch.state is DialogueState.LISTENING
            assert orch.panel.speaking is False
        run(scenario())


class TestStopListening:
    def test_stop_listening_speaks_then_goes_idle(self):
        async def scenario():
            orch, source, sink, _ = make_orchestrator()
            orch.start()
            source.push("please stop listening")
            await settle()

            assert orch.state is DialogueState.SPEAKING
            assert "stopped listening" in sink.texts[0]
            assert source.stop_count == 0

            sink.finish()
            assert orch.state is DialogueState.IDLE
            assert source.stop_count == 1
            assert source.is_active is False
            assert orch.panel.listening is False
        run(scenario())

    def test_toggle_during_fetch_applies_late_result(self):
        async def scenario():
            orch, source, sink, gateway = make_orchestrator()
            gateway.gate = asyncio.Event()
            orch.start()
            source.push("dogecoin")
            await settle()

            orch.toggle()
            assert source.is_active is False
            assert orch.state is DialogueState.PROCESSING

            gateway.gate.set()
            await settle()
            assert orch.panel.snapshot.symbol == "DOGEUSDT"
            assert orch.state is DialogueState.SPEAKING

            sink.finish()
            assert orch.state is DialogueState.IDLE
            assert source.stop_count == 1
        run(scenario())


class TestWakeWord:
    def test_bare_wake_word_returns_to_listening(self):
        async def scenario():
            orch, source, sink, _ = make_orchestrator()
            orch.start()
            source.push("Jarvis")
            await settle()
            assert orch.state is DialogueState.LISTENING
            assert orch.wake_word_detected is True
            assert orch.panel.wake_word_detected is True
            assert sink.requests == []
            orch.wake_timer.cancel()
        run(scenario())

    def test_wake_word_does_not_block_command(self):
        async def scenario():
            orch, source, sink, _ = make_orchestrator()
            orch.start()
            source.push("hello jarvis")
            await settle()
            assert orch.wake_word_detected is True
            assert "Hello, I am Jarvis" in sink.texts[0]
            orch.wake_timer.cancel()
        run(scenario())

    def test_commands_accepted_without_wake_word(self):
        async def scenario():
            orch, source, sink, _ = make_orchestrator()
            orch.start()
            source.push("thanks")
            await settle()
            assert orch.wake_word_detected is False
            assert len(sink.requests) == 1
        run(scenario())

    def test_window_expires(self):
        async def scenario():
            orch, source, _, _ = make_orchestrator(JarvisConfig(wake_word_timeout=0.05))
            orch.start()
            source.push("jarvis")
            await settle()
            assert orch.panel.wake_word_detected is True
            await asyncio.sleep(0.15)
            assert orch.wake_word_detected is False
            assert orch.panel.wake_word_detected is False
        run(scenario())


class TestShutdown:
    def test_shutdown_mid_speech(self):
        async def scenario():
            orch, source, sink, _ = make_orchestrator()
            orch.start()
            source.push("hello")
            await settle()
            await orch.shutdown()
            assert orch.state is DialogueState.IDLE
            assert source.is_active is False
            assert orch.panel.speaking is False
        run(scenario())
