"""Deterministic line parser for market-price emails.

Pulls three things out of a plain-text body with independent single-pass
regex scans:

    Market: Nakasero            -> market name (first match wins)
    Date: 2025-05-24            -> calendar date (first match wins, optional)
    Tomatoes (kg): 3 000        -> PriceItem(product, unit, price=3000)

Lines that match none of the patterns are ignored, so greetings,
signatures, and quoted replies do not break parsing. The parser is a pure
function of its input: no state, no I/O.
"""

import datetime as dt
import logging
import re
from typing import Any

from marketmail.core.config import DateFormats, RegexPatterns
from marketmail.core.errors import ParseError
from marketmail.pydantic_models.market_data import MarketData, validate_market_data

logger = logging.getLogger(__name__)

_MARKET_RE = re.compile(RegexPatterns.MARKET, re.IGNORECASE)
_DATE_RE = re.compile(RegexPatterns.DATE, re.IGNORECASE)
_PRICE_ITEM_RE = re.compile(RegexPatterns.PRICE_ITEM, re.MULTILINE)
_WHITESPACE_RE = re.compile(r"\s+")


def parse_market_email(email_text: str, sender_email: str) -> MarketData:
    """Parse a market-price email body into a validated MarketData.

    Args:
        email_text: Full plain-text email body.
        sender_email: Envelope sender; used as submitter_email verbatim.

    Returns:
        Validated MarketData with items in order of appearance.

    Raises:
        ParseError: No market name, or no price item lines.
        ValidationError: The assembled candidate violates the schema
            (e.g. a price of 0, an invalid sender address).
    """
    market = extract_market(email_text)
    if market is None:
        raise ParseError("Could not extract market name from email (expected a 'Market: <name>' line)")

    record_date = extract_date(email_text)
    items = extract_price_items(email_text)
    if not items:
        raise ParseError(
            "Could not extract any price items from email "
            "(expected lines like 'Tomatoes (kg): 3000')"
        )

    logger.debug("Parsed %d price item(s) for market %r", len(items), market)
    return validate_market_data(
        market=market,
        date=record_date,
        submitter_email=sender_email,
        price_items=items,
    )


def extract_market(email_text: str) -> str | None:
    """Return the first 'Market:' value, trimmed, or None when absent/blank."""
    match = _MARKET_RE.search(email_text)
    if not match:
        return None
    return match.group("market").strip() or None


def extract_date(email_text: str) -> dt.date:
    """Return the first 'Date:' value as a date, defaulting to today.

    A missing label or an unparseable value is not an error.
    """
    match = _DATE_RE.search(email_text)
    if match:
        parsed = parse_date_value(match.group("date"))
        if parsed is not None:
            return parsed
        logger.debug("Unparseable date %r, defaulting to today", match.group("date").strip())
    return dt.date.today()


def extract_price_items(email_text: str) -> list[dict[str, Any]]:
    """Return every 'product (unit): price' line as an item dict, in order.

    Internal whitespace in the price is removed before conversion, so
    "9 500" becomes 9500. Decimal and comma-grouped prices do not match
    the pattern. A price too long to convert to int is skipped like any
    other non-matching line. Items are validated later, together with the
    whole record.
    """
    items: list[dict[str, Any]] = []
    for match in _PRICE_ITEM_RE.finditer(email_text):
        digits = _WHITESPACE_RE.sub("", match.group("price"))
        try:
            price = int(digits)
        except ValueError:
            # int() refuses strings beyond sys.get_int_max_str_digits()
            logger.debug("Skipping price line with %d-digit price", len(digits))
            continue
        items.append({
            "product": match.group("product").strip(),
            "unit": match.group("unit").strip(),
            "price": price,
        })
    return items


def parse_date_value(value: str | None) -> dt.date | None:
    """Parse a free-text date into a calendar date.

    Tries ISO 8601 first (date or datetime), then DateFormats.FORMATS in
    order. Returns None when nothing matches.

    Examples:
        >>> parse_date_value("2025-05-24")
        datetime.date(2025, 5, 24)
        >>> parse_date_value("24 May 2025")
        datetime.date(2025, 5, 24)
        >>> parse_date_value("next tuesday") is None
        True
    """
    if not value:
        return None
    value = value.strip()
    if not value:
        return None

    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return dt.datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in DateFormats.FORMATS:
        try:
            return dt.datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None
