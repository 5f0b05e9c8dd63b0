#!/usr/bin/env python3
"""
Jarvis Voice Service.

Entry point: wires config, input source, speech sink, market gateway,
orchestrator and REST API onto one asyncio loop.
"""

import asyncio
import os
import sys
from typing import Optional

from dotenv import load_dotenv

from jarvis import PROJECT_ROOT
from jarvis.api.server import JarvisAPI
from jarvis.config_loader import JarvisConfig, load_config_yaml
from jarvis.i18n import setup as setup_i18n
from jarvis.integrations.binance import BinanceClient
from jarvis.listener import UnsupportedCapability, create_transcript_source
from jarvis.orchestrator import DialogueOrchestrator
from jarvis.panel import unsupported_message
from jarvis.speech.base import SpeechSink
from jarvis.speech.console import ConsoleSpeechSink
from jarvis.symbols import register_aliases
from jarvis.utils import jarvis_log, set_log_level, setup_crash_protection


def create_speech_sink(provider: str) -> SpeechSink:
    provider = (provider or "console").strip().lower()
    if provider != "console":
        jarvis_log("INIT", f"Unknown speech provider {provider!r}, using console", level="WARNING")
    return ConsoleSpeechSink()


async def run_service(config: JarvisConfig, stop_event: Optional[asyncio.Event] = None) -> int:
    """Run until ``stop_event`` is set (or forever). Returns a process exit code."""
    try:
        source = create_transcript_source(config.input_provider)
    except UnsupportedCapability as e:
        jarvis_log("INIT", str(e), level="ERROR")
        jarvis_log("JARVIS", unsupported_message(), level="ERROR")
        return 1

    register_aliases(config.symbol_aliases)
    gateway = BinanceClient(
        base_url=config.market_base_url,
        timeout=config.market_timeout,
        history_days=config.history_days,
        interval=config.history_interval,
    )
    orchestrator = DialogueOrchestrator(config, source, create_speech_sink(config.tts_provider), gateway)
    api = JarvisAPI(orchestrator, host=config.api_host, port=config.api_port) if config.api_enabled else None

    stop_event = stop_event or asyncio.Event()
    try:
        await gateway.start()
        if api is not None:
            await api.start()
        if config.auto_listen:
            orchestrator.start()

        jarvis_log("JARVIS", "=" * 50)
        jarvis_log("JARVIS", "Service started!")
        jarvis_log("JARVIS", "=" * 50)
        jarvis_log("JARVIS", "Say 'Bitcoin' or 'How are you?' to begin")
        jarvis_log("JARVIS", "Ctrl+C to stop\n")

        await stop_event.wait()
    finally:
        await orchestrator.shutdown()
        if api is not None:
            await api.stop()
        await gateway.close()
        if hasattr(source, "close"):
            source.close()
    return 0


def main():
    """Start the Jarvis service."""
    setup_crash_protection()
    load_dotenv(os.path.join(PROJECT_ROOT, ".env"))

    yaml_config = load_config_yaml(os.getenv("JARVIS_CONFIG", "config.yaml"))
    config = JarvisConfig.from_yaml(yaml_config)
    set_log_level(config.log_level)
    setup_i18n(config.language, fallback="en")
    config.print_config_banner()

    try:
        exit_code = asyncio.run(run_service(config))
    except KeyboardInterrupt:
        jarvis_log("JARVIS", "Stopped by user")
        exit_code = 0
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
