"""Tests for the spoken-name → market pair resolver."""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from jarvis.i18n import setup

setup("en", fallback="en")

from jarvis.symbols import (
    AliasNotFound,
    SYMBOL_ALIASES,
    alias_vocabulary,
    readable_symbol,
    register_aliases,
    resolve_symbol,
)


class TestResolveSymbol:
    def test_full_name(self):
        assert resolve_symbol("bitcoin") == "BTCUSDT"

    def test_abbreviation(self):
        assert resolve_symbol("btc") == "BTCUSDT"

    def test_case_and_whitespace(self):
        assert resolve_symbol("  DogeCoin ") == "DOGEUSDT"

    def test_multi_word(self):
        assert resolve_symbol("shiba inu") == "SHIBUSDT"

    def test_unknown_returns_none(self):
        assert resolve_symbol("moonrocket") is None

    def test_empty_returns_none(self):
        assert resolve_symbol("") is None

    def test_every_alias_maps_to_usdt_pair(self):
        for alias, symbol in SYMBOL_ALIASES.items():
            assert resolve_symbol(alias) == symbol
            assert symbol.endswith("USDT")


class TestRegisteredAliases:
    def teardown_method(self):
        register_aliases({})

    def test_extra_alias_resolves(self):
        register_aliases({"Toncoin": "tonusdt"})
        assert resolve_symbol("toncoin") == "TONUSDT"
        assert alias_vocabulary()[-1] == "toncoin"

    def test_builtin_order_preserved(self):
        register_aliases({"ton": "TONUSDT"})
        vocabulary = alias_vocabulary()
        assert vocabulary[:2] == ["bitcoin", "btc"]

    def test_register_replaces_previous(self):
        register_aliases({"ton": "TONUSDT"})
        register_aliases({})
        assert resolve_symbol("ton") is None


class TestHelpers:
    def test_readable_symbol(self):
        assert readable_symbol("BTCUSDT") == "BTC"
        assert readable_symbol("MATICUSDT") == "MATIC"

    def test_alias_not_found_message(self):
        err = AliasNotFound("moonrocket")
        assert err.alias == "moonrocket"
        assert str(err) == "Could not recognize cryptocurrency: moonrocket"
