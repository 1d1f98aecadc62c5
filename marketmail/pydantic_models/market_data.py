"""Canonical market-price record and its validator.

MarketData is the single output shape of both extraction strategies. Both
the deterministic parser and the model-assisted extractor assemble a
candidate and hand it to validate_market_data(), which either returns a
frozen MarketData or raises ValidationError naming the first violated
constraint.

Attributes use snake_case; serialization uses camelCase aliases so that
model_dump(by_alias=True) matches the stored document shape:
    {"market": ..., "date": ..., "submitterEmail": ..., "priceItems": [...],
     "messageId": ..., "originalRecipient": ..., "subject": ...}
"""

import datetime as dt
import math
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from marketmail.core.config import RegexPatterns
from marketmail.core.errors import ValidationError

_EMAIL_RE = re.compile(RegexPatterns.EMAIL)

_PRICE_ITEMS_LOCS = ("price_items", "priceItems")

_FIELD_LABELS = {
    "market": "market name",
    "date": "date",
    "submitter_email": "submitter email",
    "submitterEmail": "submitter email",
    "product": "product name",
    "unit": "unit",
    "price": "price",
}


class PriceItem(BaseModel):
    """One priced product line, as written by the submitter.

    Attributes:
        product: Commodity name (trimmed, otherwise unchanged)
        unit: Unit of measure as written (kg, crate, bunch...), not normalized
        price: Strictly positive number, currency as submitted
    """

    model_config = ConfigDict(frozen=True)

    product: str = Field(description="Commodity name as written by the submitter")
    unit: str = Field(description="Unit of measure as written (kg, crate, bunch, ...)")
    price: int | float = Field(description="Price in local currency, strictly positive")

    @field_validator("product")
    @classmethod
    def _product_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Product name must not be empty")
        return value

    @field_validator("unit")
    @classmethod
    def _unit_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Unit must not be empty")
        return value

    @field_validator("price")
    @classmethod
    def _price_positive(cls, value: int | float) -> int | float:
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError(f"Price must be a finite number (got {value})")
        if value <= 0:
            raise ValueError(f"Price must be greater than zero (got {value})")
        return value


class MarketData(BaseModel):
    """Validated market-price submission (the canonical record).

    Immutable once constructed; the orchestrator attaches delivery metadata
    with model_copy(update=...).

    Attributes:
        market: Market name, non-empty after trimming
        date: Calendar date of the prices (today when the email has none)
        submitter_email: Envelope sender, never taken from the body
        price_items: Items in order of appearance, at least one
        message_id: Delivery metadata (orchestrator only)
        original_recipient: Delivery metadata (orchestrator only)
        subject: Delivery metadata (orchestrator only)
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    market: str = Field(description="Market name")
    date: dt.date = Field(description="Date the prices were observed")
    submitter_email: str = Field(description="Sender address from the email envelope")
    price_items: tuple[PriceItem, ...] = Field(description="Priced products in source order")

    message_id: str | None = None
    original_recipient: str | None = None
    subject: str | None = None

    @field_validator("market")
    @classmethod
    def _market_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Market name must not be empty")
        return value

    @field_validator("submitter_email")
    @classmethod
    def _email_syntax(cls, value: str) -> str:
        value = value.strip()
        if not _EMAIL_RE.match(value):
            raise ValueError(f"Submitter email '{value}' is not a valid email address")
        return value

    @field_validator("price_items")
    @classmethod
    def _at_least_one_item(cls, value: tuple[PriceItem, ...]) -> tuple[PriceItem, ...]:
        if not value:
            raise ValueError("At least one price item is required")
        return value

    @property
    def item_count(self) -> int:
        return len(self.price_items)


def validate_market_data(
    market: Any,
    date: Any,
    submitter_email: Any,
    price_items: Any,
) -> MarketData:
    """Validate a candidate record and return the canonical MarketData.

    Args:
        market: Market name candidate.
        date: Calendar date candidate.
        submitter_email: Envelope sender address.
        price_items: Sequence of PriceItem or dicts with product/unit/price.

    Returns:
        Frozen MarketData.

    Raises:
        ValidationError: Describing the first violated constraint. Checks run
            in field order (market, date, submitter email, then each item in
            order), so the reported error is deterministic.
    """
    try:
        return MarketData(
            market=market,
            date=date,
            submitter_email=submitter_email,
            price_items=price_items,
        )
    except PydanticValidationError as e:
        raise _first_violation(e) from e


def _first_violation(exc: PydanticValidationError) -> ValidationError:
    """Turn the first pydantic error into a submitter-readable ValidationError."""
    error = exc.errors()[0]
    loc = error["loc"]
    field_name = ".".join(str(part) for part in loc)

    if error["type"] == "value_error":
        # Our own validators: the message is already user-facing.
        detail = str(error["ctx"]["error"])
    else:
        # Union members ("int", "float") can trail the field name in loc.
        label = next((_FIELD_LABELS[p] for p in reversed(loc) if p in _FIELD_LABELS), "record")
        detail = f"Invalid {label}: {error['msg']}"

    if len(loc) >= 2 and loc[0] in _PRICE_ITEMS_LOCS and isinstance(loc[1], int):
        detail = f"Price item {loc[1] + 1}: {detail}"

    return ValidationError(detail, field_name=field_name)
