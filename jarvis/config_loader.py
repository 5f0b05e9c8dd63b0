#!/usr/bin/env python3
"""Configuration loader for Jarvis Voice."""

import os
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from jarvis.utils import jarvis_log


def load_config_yaml(config_path: str = "config.yaml") -> dict:
    """Load configuration from a YAML file."""
    import yaml
    if os.path.exists(config_path):
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                return yaml.safe_load(f) or {}
        except Exception as e:
            jarvis_log("CONFIG", f"Warning: Failed to load {config_path}: {e}", level="WARNING")
    return {}


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def _section(yaml_config: dict, name: str) -> dict:
    value = yaml_config.get(name, {})
    return value if isinstance(value, dict) else {}


@dataclass
class JarvisConfig:
    """Jarvis service configuration."""
    assistant_name: str = "Jarvis"
    language: str = "en"

    # Wake word
    wake_word_keyword: str = "jarvis"
    wake_word_timeout: float = 10.0

    # Market gateway
    market_base_url: str = "https://api.binance.com"
    market_timeout: float = 10.0
    history_days: int = 7
    history_interval: str = "1d"

    # Speech output
    tts_provider: str = "console"
    tts_locale: str = "en-US"
    tts_rate: float = 0.9
    tts_pitch: float = 1.0
    tts_volume: float = 1.0
    tts_voice: Optional[str] = None

    # Speech input
    input_provider: str = "stdin"
    auto_listen: bool = True

    # REST API
    api_enabled: bool = True
    api_host: str = "127.0.0.1"
    api_port: int = 7790

    # Extra spoken names → market pairs, merged over the built-in table
    symbol_aliases: Dict[str, str] = field(default_factory=dict)

    log_level: str = "INFO"

    @classmethod
    def from_yaml(cls, yaml_config: dict) -> "JarvisConfig":
        """Create config from YAML + env vars."""
        config = cls()
        yaml_config = yaml_config or {}

        config.language = str(yaml_config.get("language", config.language)).strip() or "en"
        config.log_level = str(yaml_config.get("log_level", config.log_level)).strip().upper() or "INFO"

        assistant_cfg = _section(yaml_config, "assistant")
        wake_cfg = _section(yaml_config, "wake_word")
        market_cfg = _section(yaml_config, "market")
        tts_cfg = _section(yaml_config, "tts")
        input_cfg = _section(yaml_config, "input")
        api_cfg = _section(yaml_config, "api")

        config.assistant_name = str(assistant_cfg.get("name", config.assistant_name))

        config.wake_word_keyword = str(wake_cfg.get("keyword", config.wake_word_keyword)).strip().lower()
        config.wake_word_timeout = float(wake_cfg.get("timeout", config.wake_word_timeout))

        config.market_base_url = str(market_cfg.get("base_url", config.market_base_url)).rstrip("/")
        config.market_timeout = float(market_cfg.get("timeout", config.market_timeout))
        config.history_days = int(market_cfg.get("history_days", config.history_days))
        config.history_interval = str(market_cfg.get("history_interval", config.history_interval))

        config.tts_provider = str(tts_cfg.get("provider", config.tts_provider)).strip().lower()
        config.tts_locale = str(tts_cfg.get("locale", config.tts_locale))
        config.tts_rate = float(tts_cfg.get("rate", config.tts_rate))
        config.tts_pitch = float(tts_cfg.get("pitch", config.tts_pitch))
        config.tts_volume = float(tts_cfg.get("volume", config.tts_volume))
        config.tts_voice = tts_cfg.get("voice", config.tts_voice) or None

        config.input_provider = str(input_cfg.get("provider", config.input_provider)).strip().lower()
        config.auto_listen = _as_bool(input_cfg.get("auto_listen"), config.auto_listen)

        config.api_enabled = _as_bool(api_cfg.get("enabled"), config.api_enabled)
        config.api_host = str(api_cfg.get("host", config.api_host))
        config.api_port = int(api_cfg.get("port", config.api_port))

        symbols = yaml_config.get("symbols", {})
        if isinstance(symbols, dict):
            config.symbol_aliases = {
                str(name).lower().strip(): str(symbol).upper().strip()
                for name, symbol in symbols.items()
                if name and symbol
            }

        config._apply_env()
        return config

    def _apply_env(self):
        """JARVIS_* environment variables win over YAML."""
        self.market_base_url = os.getenv("JARVIS_MARKET_URL", self.market_base_url).rstrip("/")
        self.input_provider = os.getenv("JARVIS_INPUT_PROVIDER", self.input_provider).strip().lower()
        self.tts_voice = os.getenv("JARVIS_TTS_VOICE", self.tts_voice or "") or None
        self.log_level = os.getenv("JARVIS_LOG_LEVEL", self.log_level).strip().upper()

        api_port = os.getenv("JARVIS_API_PORT")
        if api_port:
            try:
                self.api_port = int(api_port)
            except ValueError:
                jarvis_log("CONFIG", f"Ignoring invalid JARVIS_API_PORT={api_port!r}", level="WARNING")

        api_enabled = os.getenv("JARVIS_API_ENABLED")
        if api_enabled is not None:
            self.api_enabled = _as_bool(api_enabled, self.api_enabled)

    def print_config_banner(self):
        jarvis_log("CONFIG", "=" * 50)
        jarvis_log("CONFIG", f"Assistant: {self.assistant_name} (wake word '{self.wake_word_keyword}', "
                             f"window {self.wake_word_timeout:g}s)")
        jarvis_log("CONFIG", f"Market: {self.market_base_url} (timeout {self.market_timeout:g}s, "
                             f"history {self.history_days}x{self.history_interval})")
        jarvis_log("CONFIG", f"Speech: {self.tts_provider} {self.tts_locale} rate={self.tts_rate:g} "
                             f"pitch={self.tts_pitch:g} volume={self.tts_volume:g}"
                             + (f" voice={self.tts_voice}" if self.tts_voice else ""))
        jarvis_log("CONFIG", f"Input: {self.input_provider} (auto-listen: {self.auto_listen})")
        if self.api_enabled:
            jarvis_log("CONFIG", f"API: http://{self.api_host}:{self.api_port}")
        if self.symbol_aliases:
            jarvis_log("CONFIG", f"Extra symbol aliases: {len(self.symbol_aliases)}")
        jarvis_log("CONFIG", "=" * 50)
