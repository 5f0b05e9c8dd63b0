#!/usr/bin/env python3
"""Pure text-processing helpers for the Jarvis speech pipeline."""

import re

_DECIMAL = re.compile(r"(\d+)\.(\d+)")
_MONEY_CONTEXT = re.compile(r"\$|price|dollar", re.IGNORECASE)
_PERCENT_AHEAD = re.compile(r"\s*percent\b")
_WHITESPACE = re.compile(r"\s+")


def read_decimal(whole: str, fraction: str, monetary: bool) -> str:
    """'12', '50' -> '12 dollars and 50 cents' or '12 point 50'."""
    if monetary:
        return f"{whole} dollars and {fraction} cents"
    return f"{whole} point {fraction}"


def normalize_speech_text(text: str) -> str:
    """Rewrite narrative text so a speech engine reads symbols and figures aloud.

    Rules, in order:
      1. ``$`` -> "dollars"
      2. ``%`` -> "percent"
      3. ``<int>.<int>`` -> "N dollars and M cents" when the source text talks
         about money (a ``$``, "price" or "dollar"), otherwise "N point M".
         Figures read as a percentage always use the "point" form.
      4. newlines -> ". "
      5. runs of whitespace -> one space
    """
    if not text:
        return ""

    # Decided on the source: the symbols are gone after steps 1-2.
    monetary = bool(_MONEY_CONTEXT.search(text))

    spoken = text.replace("$", " dollars ")
    spoken = spoken.replace("%", " percent ")

    source = spoken

    def _replace(match: re.Match) -> str:
        is_percent = _PERCENT_AHEAD.match(source, match.end()) is not None
        return read_decimal(match.group(1), match.group(2), monetary and not is_percent)

    spoken = _DECIMAL.sub(_replace, source)
    spoken = spoken.replace("\r\n", "\n").replace("\r", "\n").replace("\n", ". ")
    return _WHITESPACE.sub(" ", spoken).strip()
