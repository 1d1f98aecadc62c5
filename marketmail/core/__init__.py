"""Core utilities for the extraction core.

Only leaf modules (config, errors, logging) are re-exported here; parser,
LLM client and formatting depend on pydantic_models and are imported from
their own modules.
"""

from marketmail.core.config import (
    API_KEY_ENV_VAR,
    DEFAULT_MODEL,
    FALLBACK_ENV_VAR,
    DateFormats,
    ExtractionSettings,
    LLMConfig,
    ParserConfig,
    RegexPatterns,
)
from marketmail.core.errors import (
    ErrorCategory,
    ErrorSeverity,
    ExtractionError,
    InvalidPayloadError,
    MarketMailError,
    ParseError,
    ValidationError,
    llm_api_error,
    llm_parse_error,
    missing_credential_error,
    timeout_error,
)
from marketmail.core.pipeline_logger import ExtractionLogger, get_logger, reset_logger

__all__ = [
    # Config
    "API_KEY_ENV_VAR",
    "DEFAULT_MODEL",
    "FALLBACK_ENV_VAR",
    "DateFormats",
    "ExtractionSettings",
    "LLMConfig",
    "ParserConfig",
    "RegexPatterns",
    # Errors
    "ErrorCategory",
    "ErrorSeverity",
    "ExtractionError",
    "InvalidPayloadError",
    "MarketMailError",
    "ParseError",
    "ValidationError",
    "llm_api_error",
    "llm_parse_error",
    "missing_credential_error",
    "timeout_error",
    # Logging
    "ExtractionLogger",
    "get_logger",
    "reset_logger",
]
