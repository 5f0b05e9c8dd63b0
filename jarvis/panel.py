#!/usr/bin/env python3
"""Result panel model: everything the UI draws, kept current by the orchestrator."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from jarvis.analysis import fixed
from jarvis.i18n import t
from jarvis.market import MarketSnapshot, PricePoint
from jarvis.symbols import readable_symbol

INTERACTION_CRYPTO = "crypto"
INTERACTION_CONVERSATION = "conversation"

_MILLION = Decimal(1_000_000)


def chart_label(open_time_ms: int) -> str:
    """Epoch milliseconds -> 'Oct 18'."""
    moment = datetime.fromtimestamp(open_time_ms / 1000, tz=timezone.utc)
    return f"{moment:%b} {moment.day}"


def unsupported_message() -> str:
    return t("panel.unsupported")


@dataclass
class ResultPanel:
    listening: bool = False
    transcript: str = ""
    speaking: bool = False
    loading: bool = False
    error: Optional[str] = None
    last_interaction: str = ""
    snapshot: Optional[MarketSnapshot] = None
    history: List[PricePoint] = field(default_factory=list)
    wake_word_detected: bool = False
    last_utterance: str = ""

    def begin_query(self) -> None:
        """A crypto query is in flight; prior data stays until it succeeds."""
        self.loading = True
        self.error = None
        self.last_interaction = INTERACTION_CRYPTO

    def show_snapshot(self, snapshot: MarketSnapshot) -> None:
        self.snapshot = snapshot
        self.history = []

    def fail_query(self, message: str) -> None:
        self.loading = False
        self.error = message

    @property
    def view(self) -> str:
        if self.speaking:
            return "speaking"
        if self.loading:
            return "loading"
        if self.snapshot is not None and self.last_interaction == INTERACTION_CRYPTO:
            return "crypto"
        if self.last_interaction == INTERACTION_CONVERSATION and self.snapshot is None:
            return "conversation"
        return "prompt"

    def facts(self) -> Optional[Dict[str, str]]:
        if self.snapshot is None:
            return None
        s = self.snapshot
        return {
            "title": f"{readable_symbol(s.symbol)} Analysis",
            "symbol": s.symbol,
            "price": f"${fixed(s.last_price)}",
            "change": f"{fixed(s.price_change)} ({s.price_change_percent}%)",
            "change_direction": "up" if s.price_change >= 0 else "down",
            "high": f"${fixed(s.high_price)}",
            "low": f"${fixed(s.low_price)}",
            "volume": f"${fixed(s.volume / _MILLION)}M",
        }

    def chart(self) -> Optional[Dict[str, Any]]:
        """7-day series; None when there is nothing to draw."""
        if not self.history:
            return None
        label = "Price"
        if self.snapshot is not None:
            label = f"{readable_symbol(self.snapshot.symbol)} Price (USD)"
        return {
            "label": label,
            "labels": [chart_label(p.time) for p in self.history],
            "data": [float(p.price) for p in self.history],
        }

    def hint(self) -> str:
        return t("panel.hint_wake_word") if self.wake_word_detected else t("panel.hint_default")

    def to_dict(self) -> Dict[str, Any]:
        view = self.view
        data: Dict[str, Any] = {
            "view": view,
            "listening": self.listening,
            "speaking": self.speaking,
            "loading": self.loading,
            "hint": self.hint(),
            "transcript": (self.transcript or t("panel.transcript_placeholder")) if self.listening else None,
            "error": self.error,
            "wake_word_detected": self.wake_word_detected,
            "last_interaction": self.last_interaction or None,
            "last_utterance": self.last_utterance,
        }
        if view == "crypto":
            data["facts"] = self.facts()
            data["chart"] = self.chart()
        elif view == "conversation":
            data["message"] = {
                "title": t("panel.conversation_title"),
                "subtitle": t("panel.conversation_subtitle"),
            }
        elif view == "prompt":
            data["message"] = {
                "title": t("panel.prompt_title"),
                "subtitle": t("panel.prompt_subtitle"),
            }
        return data
