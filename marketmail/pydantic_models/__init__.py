"""Pydantic models for the extraction core.

Modules:
- market_data: PriceItem, MarketData (canonical record) and validate_market_data()
- inbound: InboundPayload (raw email handed to the orchestrator)
- llm_responses: MarketDataExtraction (function-calling contract for the model)
"""

from marketmail.pydantic_models.inbound import InboundPayload
from marketmail.pydantic_models.llm_responses import ExtractedPriceItem, MarketDataExtraction
from marketmail.pydantic_models.market_data import MarketData, PriceItem, validate_market_data

__all__ = [
    "InboundPayload",
    "ExtractedPriceItem",
    "MarketDataExtraction",
    "MarketData",
    "PriceItem",
    "validate_market_data",
]
