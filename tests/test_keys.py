"""Tests for lookup key normalization."""

from datetime import date, datetime

import pytest

from services.cache import ValidationError, normalize_identifier, normalize_key, normalize_qualifier, sentiment_key
from services.cache.keys import check_sentiment_key, normalize_date, normalize_sentiment_key


class TestNormalizeKey:

    @pytest.mark.parametrize("identifier, qualifier", [
        ("0xABCdef0123", "BSC"),
        ("  0xabc  ", " Ethereum "),
        ("0xAbC", None),
        ("0xabc", ""),
        ("wallet-ONE", "opBNB"),
    ])
    def test_normalize_is_idempotent(self, identifier, qualifier):
        once = normalize_key(identifier, qualifier)
        assert normalize_key(*once) == once

    def test_lowercases_and_trims(self):
        key = normalize_key("  0xABCDEF  ", "  BSC ")
        assert key.identifier == "0xabcdef"
        assert key.qualifier == "bsc"

    def test_missing_qualifier_defaults_to_bsc(self):
        assert normalize_key("0xABC").qualifier == "bsc"
        assert normalize_key("0xABC", "   ").qualifier == "bsc"

    def test_custom_default_qualifier(self):
        assert normalize_key("0xabc", None, default="ETH").qualifier == "eth"

    def test_case_variants_produce_same_key(self):
        assert normalize_key("0xAbC", "BSC") == normalize_key("0xabc", "bsc")

    @pytest.mark.parametrize("raw", ["", "   ", "\t\n"])
    def test_empty_identifier_rejected(self, raw):
        with pytest.raises(ValidationError) as exc:
            normalize_identifier(raw)
        assert exc.value.field == "identifier"

    def test_non_string_identifier_rejected(self):
        with pytest.raises(ValidationError):
            normalize_identifier(None)

    def test_non_string_qualifier_rejected(self):
        with pytest.raises(ValidationError):
            normalize_qualifier(56)

    def test_str_renders_identifier_and_qualifier(self):
        assert str(normalize_key("0xABC", "BSC")) == "0xabc:bsc"


class TestSentimentKey:

    def test_bare_timeframe(self):
        assert sentiment_key("24h") == "sentiment_24h"

    def test_language_suffix(self):
        assert sentiment_key("7d", lang="ZH") == "sentiment_7d_zh"

    def test_date_suffix(self):
        assert sentiment_key("1h", date=date(2026, 10, 19)) == "sentiment_1h_2026-10-19"
        assert sentiment_key("1h", date="2026-10-19") == "sentiment_1h_2026-10-19"

    def test_unknown_timeframe_rejected(self):
        with pytest.raises(ValidationError):
            sentiment_key("2h")

    def test_unknown_language_rejected(self):
        with pytest.raises(ValidationError):
            sentiment_key("24h", lang="fr")

    def test_lang_and_date_are_exclusive(self):
        with pytest.raises(ValidationError):
            sentiment_key("24h", lang="en", date="2026-10-19")

    def test_caller_supplied_key_is_lowercased(self):
        assert normalize_sentiment_key("  Sentiment_24H_EN ") == "sentiment_24h_en"

    @pytest.mark.parametrize("key", [
        "sentiment_24h",
        "Sentiment_24H_EN",
        "sentiment_24h_zh",
        "sentiment_24h_2026-10-19",
    ])
    def test_key_matching_timeframe_accepted(self, key):
        assert check_sentiment_key(key, "24h") == key.lower()

    @pytest.mark.parametrize("key", [
        "sentiment_1h_en",
        "not_a_sentiment_key",
        "sentiment_24h_fr",
        "sentiment_24h_2026-1-9",
        "sentiment_24h_en_extra",
        "sentiment_24hx",
        "sentiment_24h_",
    ])
    def test_key_not_matching_timeframe_rejected(self, key):
        with pytest.raises(ValidationError) as exc:
            check_sentiment_key(key, "24h")
        assert exc.value.field == "key"


class TestNormalizeDate:

    def test_accepts_datetime(self):
        assert normalize_date(datetime(2026, 1, 2, 23, 59)) == "2026-01-02"

    def test_rejects_malformed_string(self):
        with pytest.raises(ValidationError):
            normalize_date("19/10/2026")
