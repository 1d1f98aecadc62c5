"""Tests for marketmail.core.line_parser module.

Tests the deterministic parser:
- parse_market_email(): full record assembly and error messages
- extract_price_items(): price line matching and number handling
- extract_date() / parse_date_value(): date formats and the today default
"""

import datetime as dt
import sys

import pytest

from marketmail.core.errors import ParseError, ValidationError
from marketmail.core.line_parser import (
    extract_date,
    extract_market,
    extract_price_items,
    parse_date_value,
    parse_market_email,
)


# =============================================================================
# parse_market_email tests
# =============================================================================


class TestParseMarketEmail:
    """Tests for the full parse."""

    def test_round_trip_well_formed(self, well_formed_email):
        record = parse_market_email(well_formed_email, "a@b.com")

        assert record.market == "Nakasero"
        assert record.date == dt.date(2025, 5, 24)
        assert record.submitter_email == "a@b.com"
        assert [(i.product, i.unit, i.price) for i in record.price_items] == [
            ("Tomatoes", "kg", 3000),
            ("Onions", "kg", 2500),
        ]

    def test_no_delivery_metadata(self, well_formed_email):
        record = parse_market_email(well_formed_email, "a@b.com")
        assert record.message_id is None
        assert record.original_recipient is None
        assert record.subject is None

    def test_missing_market_mentions_market(self):
        with pytest.raises(ParseError) as exc_info:
            parse_market_email("Date: 2025-05-24\nTomatoes (kg): 3000", "a@b.com")
        assert "market" in exc_info.value.message.lower()

    def test_blank_market_is_missing(self):
        with pytest.raises(ParseError, match="market"):
            parse_market_email("Market:   \nTomatoes (kg): 3000", "a@b.com")

    def test_missing_items_mentions_price_items(self):
        with pytest.raises(ParseError) as exc_info:
            parse_market_email("Market: Nakasero\nDate: 2025-05-24\nNo prices today", "a@b.com")
        assert "price items" in exc_info.value.message

    def test_market_checked_before_items(self):
        with pytest.raises(ParseError, match="market"):
            parse_market_email("hello", "a@b.com")

    def test_single_item_is_valid(self):
        record = parse_market_email("Market: X\nMaize (kg): 1200", "a@b.com")
        assert record.item_count == 1
        assert record.price_items[0].price == 1200

    def test_zero_price_fails_validation(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_market_email("Market: X\nMaize (kg): 1200\nBeans (kg): 0", "a@b.com")
        assert exc_info.value.message == "Price item 2: Price must be greater than zero (got 0)"

    def test_invalid_sender_fails_validation(self, well_formed_email):
        with pytest.raises(ValidationError, match="not a valid email"):
            parse_market_email(well_formed_email, "not-an-email")

    def test_noise_lines_ignored(self, chatty_email):
        record = parse_market_email(chatty_email, "sarah@example.org")

        assert record.market == "Owino"
        assert record.date == dt.date(2025, 6, 2)
        assert [(i.product, i.price) for i in record.price_items] == [
            ("Matooke", 15000),
            ("Beans", 4200),
            ("Tomatoes", 9500),
        ]

    def test_first_market_wins(self):
        record = parse_market_email(
            "Market: Nakasero\nMarket: Owino\nMaize (kg): 1200", "a@b.com"
        )
        assert record.market == "Nakasero"

    def test_labels_case_insensitive(self):
        record = parse_market_email("MARKET: Kalerwe\ndate: 2025-01-02\nMaize (kg): 900", "a@b.com")
        assert record.market == "Kalerwe"
        assert record.date == dt.date(2025, 1, 2)

    def test_market_does_not_swallow_next_line(self):
        record = parse_market_email("Market:\nMaize (kg): 1200\nMarket: Owino", "a@b.com")
        assert record.market == "Owino"

    def test_idempotent(self, chatty_email):
        first = parse_market_email(chatty_email, "a@b.com")
        second = parse_market_email(chatty_email, "a@b.com")
        assert first == second


# =============================================================================
# extract_price_items tests
# =============================================================================


class TestExtractPriceItems:
    """Tests for price line matching."""

    def test_internal_spaces_removed(self):
        items = extract_price_items("Tomatoes (crate): 9 500")
        assert items == [{"product": "Tomatoes", "unit": "crate", "price": 9500}]

    def test_price_is_int(self):
        items = extract_price_items("Maize (kg): 1800")
        assert isinstance(items[0]["price"], int)

    def test_decimal_price_line_ignored(self):
        assert extract_price_items("Cooking oil (litre): 7500.50") == []

    def test_decimal_line_does_not_hide_others(self):
        items = extract_price_items("Oil (litre): 7500.50\nMaize (kg): 1800")
        assert [i["product"] for i in items] == ["Maize"]

    def test_trailing_currency_allowed(self):
        items = extract_price_items("Maize (kg): 1800 UGX")
        assert items[0]["price"] == 1800

    def test_multi_word_product_and_unit(self):
        items = extract_price_items("Irish potatoes (50 kg bag): 120000")
        assert items == [{"product": "Irish potatoes", "unit": "50 kg bag", "price": 120000}]

    def test_leading_whitespace_trimmed(self):
        items = extract_price_items("   Beans (kg):2900")
        assert items == [{"product": "Beans", "unit": "kg", "price": 2900}]

    def test_order_preserved(self):
        items = extract_price_items("B (kg): 2\nA (kg): 1\nC (kg): 3")
        assert [i["product"] for i in items] == ["B", "A", "C"]

    def test_missing_unit_not_matched(self):
        assert extract_price_items("Tomatoes: 3000") == []

    def test_non_numeric_price_not_matched(self):
        assert extract_price_items("Tomatoes (kg): cheap") == []

    def test_windows_line_endings(self):
        items = extract_price_items("Maize (kg): 1800\r\nBeans (kg): 2900\r\n")
        assert [(i["product"], i["price"]) for i in items] == [("Maize", 1800), ("Beans", 2900)]

    def test_trailing_full_stop_allowed(self):
        items = extract_price_items("Maize (kg): 1200.\nBeans (kg): 2900. Thanks")
        assert [(i["product"], i["price"]) for i in items] == [("Maize", 1200), ("Beans", 2900)]

    def test_comma_grouped_price_ignored(self):
        """'1,500' is skipped rather than read as 1."""
        assert extract_price_items("Beans (kg): 1,500") == []

    def test_comma_after_price_allowed(self):
        items = extract_price_items("Maize (kg): 1800, fresh from Masaka")
        assert items[0]["price"] == 1800

    @pytest.mark.skipif(
        not hasattr(sys, "get_int_max_str_digits") or sys.get_int_max_str_digits() == 0,
        reason="interpreter has no int string conversion limit",
    )
    def test_oversized_price_line_skipped(self):
        digits = "9" * max(5000, sys.get_int_max_str_digits() + 1)
        items = extract_price_items(f"Maize (kg): {digits}\nBeans (kg): 10")
        assert items == [{"product": "Beans", "unit": "kg", "price": 10}]


# =============================================================================
# extract_market tests
# =============================================================================


class TestExtractMarket:
    """Tests for the market label."""

    def test_value_trimmed(self):
        assert extract_market("Market:   Nakasero  \n") == "Nakasero"

    def test_absent(self):
        assert extract_market("Maize (kg): 1800") is None


# =============================================================================
# Date tests
# =============================================================================


class TestDates:
    """Tests for extract_date and parse_date_value."""

    def test_missing_date_defaults_to_today(self):
        assert extract_date("Market: X\nMaize (kg): 1") == dt.date.today()

    def test_unparseable_date_defaults_to_today(self):
        assert extract_date("Date: sometime last week") == dt.date.today()

    def test_record_without_date_uses_today(self):
        record = parse_market_email("Market: X\nMaize (kg): 1200", "a@b.com")
        assert record.date == dt.date.today()

    @pytest.mark.parametrize("value,expected", [
        ("2025-05-24", dt.date(2025, 5, 24)),
        ("2025-05-24T08:30:00Z", dt.date(2025, 5, 24)),
        ("2025/05/24", dt.date(2025, 5, 24)),
        ("24/05/2025", dt.date(2025, 5, 24)),
        ("24.05.2025", dt.date(2025, 5, 24)),
        ("24 May 2025", dt.date(2025, 5, 24)),
        ("May 24, 2025", dt.date(2025, 5, 24)),
        ("  24-05-2025  ", dt.date(2025, 5, 24)),
    ])
    def test_accepted_formats(self, value, expected):
        assert parse_date_value(value) == expected

    def test_day_first_preferred(self):
        assert parse_date_value("05/06/2025") == dt.date(2025, 6, 5)

    def test_month_first_when_day_first_impossible(self):
        assert parse_date_value("05/24/2025") == dt.date(2025, 5, 24)

    @pytest.mark.parametrize("value", [None, "", "   ", "next tuesday", "2025-13-40"])
    def test_rejected_values(self, value):
        assert parse_date_value(value) is None
