"""Pydantic models for the model-assisted extraction response.

MarketDataExtraction is passed to Instructor as the response_model. In
TOOLS mode Instructor turns it into a single function definition and forces
the model to call it, so the completion comes back as arguments matching
this schema rather than free text.

These models only describe what the language model returns. They are not
the canonical record: the extractor still runs the result through
validate_market_data() and attaches the envelope sender itself.
"""

from pydantic import BaseModel, Field


class ExtractedPriceItem(BaseModel):
    """One product line as read by the model."""

    product: str = Field(description="The name of the product")
    unit: str = Field(description="The unit of measurement (kg, crate, etc.)")
    price: float = Field(description="The price in local currency")


class MarketDataExtraction(BaseModel):
    """Extract market price data from the email."""

    market: str = Field(description="The name of the market")
    date: str = Field(description="The date in YYYY-MM-DD format")
    price_items: list[ExtractedPriceItem] = Field(
        description="List of products with their prices, in the order they appear"
    )
