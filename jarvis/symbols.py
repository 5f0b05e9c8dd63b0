#!/usr/bin/env python3
"""Spoken asset names → exchange market-pair identifiers."""

from typing import Dict, List, Optional

from jarvis.i18n import t

QUOTE_ASSET = "USDT"

# Order matters: the classifier walks this vocabulary and the first alias heard wins.
SYMBOL_ALIASES: Dict[str, str] = {
    "bitcoin": "BTCUSDT",
    "btc": "BTCUSDT",
    "ethereum": "ETHUSDT",
    "eth": "ETHUSDT",
    "binance coin": "BNBUSDT",
    "bnb": "BNBUSDT",
    "cardano": "ADAUSDT",
    "ada": "ADAUSDT",
    "solana": "SOLUSDT",
    "sol": "SOLUSDT",
    "ripple": "XRPUSDT",
    "xrp": "XRPUSDT",
    "dogecoin": "DOGEUSDT",
    "doge": "DOGEUSDT",
    "polkadot": "DOTUSDT",
    "dot": "DOTUSDT",
    "avalanche": "AVAXUSDT",
    "avax": "AVAXUSDT",
    "shiba inu": "SHIBUSDT",
    "shib": "SHIBUSDT",
    "litecoin": "LTCUSDT",
    "ltc": "LTCUSDT",
    "chainlink": "LINKUSDT",
    "link": "LINKUSDT",
    "polygon": "MATICUSDT",
    "matic": "MATICUSDT",
}

_extra_aliases: Dict[str, str] = {}


class AliasNotFound(LookupError):
    """Spoken asset name has no market-pair mapping."""

    def __init__(self, alias: str):
        self.alias = alias
        super().__init__(t("errors.alias_not_found", asset=alias))


def register_aliases(aliases: Optional[Dict[str, str]]) -> None:
    """Merge configured aliases over the built-in table (replaces previous extras)."""
    _extra_aliases.clear()
    for name, symbol in (aliases or {}).items():
        key = str(name).lower().strip()
        if key and symbol:
            _extra_aliases[key] = str(symbol).upper().strip()


def alias_vocabulary() -> List[str]:
    """All known aliases in match-priority order."""
    vocabulary = list(SYMBOL_ALIASES)
    vocabulary.extend(a for a in _extra_aliases if a not in SYMBOL_ALIASES)
    return vocabulary


def resolve_symbol(text: str) -> Optional[str]:
    """Map 'Bitcoin' / ' btc ' to 'BTCUSDT'; None for unknown names."""
    if not text:
        return None
    key = text.lower().strip()
    return _extra_aliases.get(key) or SYMBOL_ALIASES.get(key)


def readable_symbol(symbol: str) -> str:
    """'BTCUSDT' -> 'BTC'."""
    return symbol.replace(QUOTE_ASSET, "")
