"""Centralized configuration for the email extraction core.

All magic numbers, patterns, and environment-driven settings live here.
Each constant documents:
- What it controls
- Where it is used

Runtime settings (fallback toggle, credential, model, timeout) are bundled in
ExtractionSettings, a frozen dataclass that is built once at startup and
passed explicitly to the orchestrator. Nothing in the core reads the
environment on its own.
"""

import os
from dataclasses import dataclass
from typing import Final


# =============================================================================
# Environment variables
# =============================================================================
#
#   USE_OPENAI              - "true" enables the model-assisted fallback
#   OPENAI_API_KEY          - credential for the completion service
#   MARKETMAIL_MODEL        - model identifier passed to litellm
#   MARKETMAIL_LLM_TIMEOUT  - seconds before the model call is abandoned
#
# =============================================================================

FALLBACK_ENV_VAR: Final[str] = "USE_OPENAI"
API_KEY_ENV_VAR: Final[str] = "OPENAI_API_KEY"
MODEL_ENV_VAR: Final[str] = "MARKETMAIL_MODEL"
TIMEOUT_ENV_VAR: Final[str] = "MARKETMAIL_LLM_TIMEOUT"

DEFAULT_MODEL: Final[str] = "gpt-4o-mini"
"""Default completion model for the fallback extractor.

Any litellm model string works (e.g. "openrouter/openai/gpt-4o-mini").
"""


# LLM Call Configuration

class LLMConfig:
    """Default parameters for the fallback completion call."""

    TEMPERATURE: Final[float] = 0.0
    """Sampling temperature. 0.0 keeps extractions reproducible."""

    TIMEOUT_SECONDS: Final[float] = 30.0
    """Upper bound on a single completion call.

    Used by: llm_client.py (asyncio.wait_for and the litellm timeout).
    """

    MAX_ATTEMPTS: Final[int] = 1
    """Attempts given to instructor. One attempt means no retry inside the core;
    retries belong to the caller.
    """


# Parser Configuration

class ParserConfig:
    """Thresholds for the deterministic parser and fallback selection."""

    MIN_ITEMS_BEFORE_FALLBACK: Final[int] = 2
    """A deterministic result with fewer items than this is handed to the
    model fallback (when enabled).

    Used by: orchestrator.py
    """


# Regex Patterns

class RegexPatterns:
    """Patterns used by the deterministic line parser and the validator.

    All patterns are single-line: a label never captures text from the
    following line.
    """

    MARKET: Final[str] = r"Market:[ \t]*(?P<market>[^\r\n]+)"
    """First "Market: <value>" occurrence (compiled case-insensitive).
    Used by: line_parser.py
    """

    DATE: Final[str] = r"Date:[ \t]*(?P<date>[^\r\n]+)"
    """First "Date: <value>" occurrence (compiled case-insensitive).
    Used by: line_parser.py
    """

    PRICE_ITEM: Final[str] = (
        r"^[ \t]*(?P<product>[^\s(][^(\r\n]*?)[ \t]*"
        r"\((?P<unit>[^)\r\n]+)\):[ \t]*"
        r"(?P<price>\d[\d \t]*)(?![ \t]*(?:\d|[.,]\d))"
    )
    """"Product (unit): 9 500" lines (compiled multiline).

    The price is digits with optional internal spaces. A decimal part or a
    comma-grouped thousand after the digits makes the whole line a
    non-match, so "1500.50" and "1,500" are ignored rather than truncated.
    A bare trailing full stop ("1200.") still matches.
    Used by: line_parser.py
    """

    EMAIL: Final[str] = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
    """Standard email syntax check (local@domain.tld, no whitespace).
    Used by: pydantic_models/market_data.py
    """


class DateFormats:
    """strptime formats tried, in order, after ISO parsing fails.

    Day-first comes before month-first so "05/06/2025" reads as 5 June.
    Used by: line_parser.py:parse_date_value()
    """

    FORMATS: Final[tuple[str, ...]] = (
        "%Y/%m/%d",
        "%d/%m/%Y",
        "%m/%d/%Y",
        "%d.%m.%Y",
        "%d-%m-%Y",
        "%d %B %Y",
        "%d %b %Y",
        "%d %B, %Y",
        "%d %b, %Y",
        "%B %d, %Y",
        "%b %d, %Y",
        "%B %d %Y",
        "%b %d %Y",
    )


# Runtime settings

def _env_flag(name: str) -> bool:
    """Read a boolean flag. Only the string "true" (any case) enables it."""
    return os.environ.get(name, "").strip().lower() == "true"


@dataclass(frozen=True)
class ExtractionSettings:
    """Strategy-selection configuration, read-only after startup.

    Attributes:
        use_model_fallback: Whether the model-assisted extractor may run.
        api_key: Credential for the completion service. Only required
            when the fallback actually runs.
        model: litellm model identifier.
        timeout_seconds: Timeout for a single completion call.
    """

    use_model_fallback: bool = False
    api_key: str | None = None
    model: str = DEFAULT_MODEL
    timeout_seconds: float = LLMConfig.TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> "ExtractionSettings":
        """Build settings from environment variables (call once at startup)."""
        timeout_raw = os.environ.get(TIMEOUT_ENV_VAR, "").strip()
        return cls(
            use_model_fallback=_env_flag(FALLBACK_ENV_VAR),
            api_key=os.environ.get(API_KEY_ENV_VAR) or None,
            model=os.environ.get(MODEL_ENV_VAR) or DEFAULT_MODEL,
            timeout_seconds=float(timeout_raw) if timeout_raw else LLMConfig.TIMEOUT_SECONDS,
        )
