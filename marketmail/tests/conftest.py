"""Pytest configuration and shared fixtures.

Provides reusable test fixtures for:
- Sample market-price emails
- Extraction settings (fallback on/off)
- Fake structured-completion clients
- Logger isolation
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from marketmail.core.config import ExtractionSettings
from marketmail.core.pipeline_logger import reset_logger
from marketmail.pydantic_models.inbound import InboundPayload
from marketmail.pydantic_models.llm_responses import ExtractedPriceItem, MarketDataExtraction


@pytest.fixture(autouse=True)
def _isolate_logger():
    """Start every test with a fresh global logger."""
    reset_logger()
    yield
    reset_logger()


# =============================================================================
# Sample emails
# =============================================================================


@pytest.fixture
def well_formed_email():
    """Two-item submission in the expected format."""
    return "Market: Nakasero\nDate: 2025-05-24\nTomatoes (kg): 3000\nOnions (kg): 2500"


@pytest.fixture
def chatty_email():
    """Well-formed lines surrounded by greeting, signature and quoted reply."""
    return (
        "Hello MarketMail team,\n"
        "\n"
        "Here are today's prices.\n"
        "\n"
        "Market: Owino\n"
        "Date: 2025-06-02\n"
        "Matooke (bunch): 15 000\n"
        "Beans (kg): 4200\n"
        "Cooking oil (litre): 7500.50\n"
        "Tomatoes (crate): 9 500\n"
        "\n"
        "Thanks,\n"
        "Sarah\n"
        "\n"
        "> Market: Old Quoted Market\n"
        "> See you next week\n"
    )


@pytest.fixture
def loose_email():
    """Free-form submission the line parser cannot handle."""
    return "Hi, at Nakasero today tomatoes were 3000 a kg and onions 2500 per kg. Sent 24 May."


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture
def settings_no_fallback():
    return ExtractionSettings(use_model_fallback=False)


@pytest.fixture
def settings_with_fallback():
    return ExtractionSettings(use_model_fallback=True, api_key="sk-test", timeout_seconds=5.0)


# =============================================================================
# Fake LLM client
# =============================================================================


@pytest.fixture
def sample_extraction():
    """What the model returns for the loose email."""
    return MarketDataExtraction(
        market="Nakasero",
        date="2025-05-24",
        price_items=[
            ExtractedPriceItem(product="Tomatoes", unit="kg", price=3000),
            ExtractedPriceItem(product="Onions", unit="kg", price=2500),
        ],
    )


@pytest.fixture
def fake_llm_client(sample_extraction):
    """Structured completer that answers with sample_extraction."""
    client = MagicMock()
    client.complete_structured = AsyncMock(return_value=sample_extraction)
    return client


@pytest.fixture
def failing_llm_client():
    """Factory for a structured completer that raises the given exception."""
    def _create(exc: Exception):
        client = MagicMock()
        client.complete_structured = AsyncMock(side_effect=exc)
        return client

    return _create


# =============================================================================
# Payloads
# =============================================================================


@pytest.fixture
def make_payload():
    """Factory for InboundPayload with sensible delivery metadata."""
    def _create(body, sender="a@b.com", **overrides):
        fields = {
            "body": body,
            "sender_email": sender,
            "message_id": "msg-001",
            "original_recipient": "prices@marketmail.test",
            "subject": "Prices",
        }
        fields.update(overrides)
        return InboundPayload(**fields)

    return _create
