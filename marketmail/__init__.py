"""MarketMail email extraction core.

Turns crowdsourced market-price emails into validated MarketData records:
a deterministic line parser first, a function-calling language model as
fallback.

Architecture:
    core/             - config, errors, logging, line parser, LLM client, formatting
    prompts/          - LLM prompt templates
    agents/           - model-assisted extractor
    pydantic_models/  - MarketData, InboundPayload, LLM response schema
    orchestrator.py   - strategy selection and enrichment

Usage:
    from marketmail import ExtractionSettings, InboundPayload, Orchestrator

    orchestrator = Orchestrator(ExtractionSettings.from_env())
    record = await orchestrator.extract(InboundPayload.from_postmark(webhook_json))

CLI:
    marketmail submission.eml
"""

from marketmail.core.config import ExtractionSettings
from marketmail.core.errors import (
    ExtractionError,
    InvalidPayloadError,
    MarketMailError,
    ParseError,
    ValidationError,
)
from marketmail.orchestrator import ExtractionState, Orchestrator, extract_market_data
from marketmail.pydantic_models import InboundPayload, MarketData, PriceItem

__all__ = [
    # Main entry point
    "Orchestrator",
    "ExtractionState",
    "extract_market_data",
    "ExtractionSettings",
    # Models
    "InboundPayload",
    "MarketData",
    "PriceItem",
    # Errors
    "MarketMailError",
    "InvalidPayloadError",
    "ParseError",
    "ValidationError",
    "ExtractionError",
]
