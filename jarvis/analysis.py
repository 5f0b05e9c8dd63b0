#!/usr/bin/env python3
"""Trend / sentiment / advice derivation and the spoken market narrative."""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from jarvis.market import MarketSnapshot
from jarvis.symbols import readable_symbol

STABLE_THRESHOLD = Decimal("0.5")
SIGNIFICANT_THRESHOLD = Decimal("5")

TREND_UP = "upward"
TREND_DOWN = "downward"
TREND_STABLE = "relatively stable"

ADVICE_SIGNIFICANT_GAIN = (
    "Be cautious as this significant upward movement might be followed by a correction."
)
ADVICE_SIGNIFICANT_DROP = (
    "This significant drop might present a buying opportunity, "
    "but be aware that the downtrend might continue."
)
ADVICE_CONSOLIDATION = (
    "The market appears to be consolidating. "
    "This might be a period of accumulation before the next significant move."
)
ADVICE_RISK_TOLERANCE = (
    "Consider your investment strategy based on your risk tolerance and long-term outlook."
)

_CENTS = Decimal("0.01")
_MILLION = Decimal(1_000_000)


@dataclass(frozen=True)
class NarrativeFacts:
    trend: str
    sentiment: str
    advice: str


def fixed(value: Decimal) -> str:
    """Two decimal places, half-up (the way prices are printed on screen)."""
    return str(value.quantize(_CENTS, rounding=ROUND_HALF_UP))


def classify_trend(percent_change: Decimal) -> str:
    if abs(percent_change) < STABLE_THRESHOLD:
        return TREND_STABLE
    return TREND_UP if percent_change > 0 else TREND_DOWN


def classify_sentiment(percent_change: Decimal) -> str:
    if abs(percent_change) < STABLE_THRESHOLD:
        return "neutral"
    return "positive" if percent_change > 0 else "negative"


def generate_advice(percent_change: Decimal, trend: str) -> str:
    """Advice by movement size; both thresholds are strict."""
    if abs(percent_change) > SIGNIFICANT_THRESHOLD:
        return ADVICE_SIGNIFICANT_GAIN if percent_change > 0 else ADVICE_SIGNIFICANT_DROP
    if trend == TREND_STABLE:
        return ADVICE_CONSOLIDATION
    return ADVICE_RISK_TOLERANCE


def analyze_market(snapshot: MarketSnapshot) -> NarrativeFacts:
    percent = snapshot.price_change_percent
    trend = classify_trend(percent)
    return NarrativeFacts(
        trend=trend,
        sentiment=classify_sentiment(percent),
        advice=generate_advice(percent, trend),
    )


def compose_narrative(snapshot: MarketSnapshot, facts: NarrativeFacts) -> str:
    """Fixed analysis template; the speech normalizer turns $ / % / decimals into words."""
    asset = readable_symbol(snapshot.symbol)
    percent = snapshot.price_change_percent
    direction = "increase" if percent > 0 else "decrease"
    volume_millions = snapshot.volume / _MILLION

    return (
        f"Here's my analysis for {asset}. "
        f"The current price is ${fixed(snapshot.last_price)} US dollars. "
        f"In the last 24 hours, the price has changed by ${fixed(snapshot.price_change)} dollars, "
        f"which is a {fixed(abs(percent))}% {direction}. "
        f"The highest price reached was ${fixed(snapshot.high_price)} dollars, "
        f"while the lowest was ${fixed(snapshot.low_price)} dollars. "
        f"The trading volume is approximately {fixed(volume_millions)} million dollars. "
        f"Overall, {asset} is showing a {facts.trend} trend with {facts.sentiment} momentum "
        f"in the last 24 hours. "
        f"{facts.advice}"
    )
