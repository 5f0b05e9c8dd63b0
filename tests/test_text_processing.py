"""Tests for the speech text normalizer."""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from jarvis.text_processing import normalize_speech_text, read_decimal


class TestSymbols:
    def test_dollar_sign(self):
        assert normalize_speech_text("costs $5") == "costs dollars 5"

    def test_percent_sign(self):
        assert normalize_speech_text("up 5%") == "up 5 percent"

    def test_empty_string(self):
        assert normalize_speech_text("") == ""


class TestDecimals:
    def test_currency_context_reads_dollars_and_cents(self):
        result = normalize_speech_text("It costs $12.50 today")
        assert "12 dollars and 50 cents" in result

    def test_price_word_makes_figures_monetary(self):
        result = normalize_speech_text("The price is 3.25 now")
        assert result == "The price is 3 dollars and 25 cents now"

    def test_plain_figure_reads_point(self):
        assert normalize_speech_text("version 2.5 is out") == "version 2 point 5 is out"

    def test_percentage_reads_point_even_with_price(self):
        result = normalize_speech_text("the price moved 0.77% up")
        assert "0 point 77 percent" in result

    def test_leading_zeros_kept(self):
        assert "65000 dollars and 00 cents" in normalize_speech_text("price $65000.00")

    def test_read_decimal(self):
        assert read_decimal("1", "05", True) == "1 dollars and 05 cents"
        assert read_decimal("1", "05", False) == "1 point 05"


class TestLayout:
    def test_newlines_become_sentence_breaks(self):
        assert normalize_speech_text("first line\nsecond line") == "first line. second line"

    def test_whitespace_collapsed(self):
        assert normalize_speech_text("hello    wide \t world") == "hello wide world"

    def test_second_pass_is_noop_for_plain_text(self):
        text = "Hello there\nHow can I help   you today"
        once = normalize_speech_text(text)
        assert normalize_speech_text(once) == once

    def test_no_symbols_left(self):
        result = normalize_speech_text("BTC is $65000.00, up 0.77%\nHigh $66000.00")
        assert "$" not in result
        assert "%" not in result
        assert "\n" not in result
