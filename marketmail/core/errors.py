"""Structured error types for the email extraction core.

Provides typed exceptions for:
- Invalid inbound payloads
- Deterministic parse failures
- Schema validation failures
- Model-assisted extraction failures (API, parse, timeout, config)

Every error carries a human-readable message meant to be forwarded to the
person who submitted the email, so messages describe the specific problem
rather than saying "parsing failed".
"""

from enum import Enum
from typing import Any


class ErrorSeverity(Enum):
    """Severity levels for extraction errors."""
    WARNING = "warning"   # Recoverable, another strategy may still succeed
    ERROR = "error"       # Terminal for this email


class ErrorCategory(Enum):
    """Categories of extraction errors."""
    INVALID_PAYLOAD = "invalid_payload"  # Webhook payload missing body/sender
    PARSE = "parse"                      # Deterministic parser found nothing usable
    VALIDATION = "validation"            # Candidate record violates the schema
    CONFIG = "config"                    # Fallback enabled without credential
    LLM_API = "llm_api"                  # Transport/provider errors
    LLM_PARSE = "llm_parse"              # Malformed function-call response
    TIMEOUT = "timeout"                  # Completion call exceeded its timeout


# Categories where the submitter most likely got the format wrong.
_FORMAT_CATEGORIES = frozenset({
    ErrorCategory.PARSE,
    ErrorCategory.VALIDATION,
    ErrorCategory.LLM_PARSE,
})


class MarketMailError(Exception):
    """Base class for all errors raised by the extraction core."""

    category: ErrorCategory = ErrorCategory.PARSE
    severity: ErrorSeverity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        category: ErrorCategory | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if category is not None:
            self.category = category
        self.context = context or {}

    @property
    def user_message(self) -> str:
        """Message suitable for the submitter, with format guidance when relevant."""
        if self.category in _FORMAT_CATEGORIES:
            from marketmail.core.formatting import EXPECTED_FORMAT
            return f"{self.message}\n\nPlease use this format:\n{EXPECTED_FORMAT}"
        return self.message

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": type(self).__name__,
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "context": self.context,
        }


class InvalidPayloadError(MarketMailError):
    """The inbound payload is missing the body or the sender address."""

    category = ErrorCategory.INVALID_PAYLOAD


class ParseError(MarketMailError):
    """The deterministic parser could not find a market name or any price items."""

    category = ErrorCategory.PARSE
    severity = ErrorSeverity.WARNING


class ValidationError(MarketMailError):
    """A fully extracted candidate violates a schema constraint."""

    category = ErrorCategory.VALIDATION
    severity = ErrorSeverity.WARNING

    def __init__(self, message: str, field_name: str | None = None) -> None:
        super().__init__(message, context={"field": field_name} if field_name else None)
        self.field_name = field_name


class ExtractionError(MarketMailError):
    """The model-assisted path failed. Always terminal."""

    category = ErrorCategory.LLM_API


# Factory functions for common error types

def missing_credential_error() -> ExtractionError:
    """Create the error raised when the fallback runs without an API key."""
    return ExtractionError(
        "Model-assisted extraction is enabled but no API key is configured",
        category=ErrorCategory.CONFIG,
    )


def llm_api_error(message: str, original: Exception | None = None) -> ExtractionError:
    """Create an LLM API error."""
    context = {"original_error": type(original).__name__} if original else None
    return ExtractionError(message, category=ErrorCategory.LLM_API, context=context)


def llm_parse_error(message: str, raw_response: str | None = None) -> ExtractionError:
    """Create an LLM parse error."""
    return ExtractionError(
        message,
        category=ErrorCategory.LLM_PARSE,
        context={"raw_response": raw_response[:500] if raw_response else None},
    )


def timeout_error(timeout_seconds: float | None = None) -> ExtractionError:
    """Create a timeout error."""
    return ExtractionError(
        f"Model-assisted extraction timed out after {timeout_seconds}s"
        if timeout_seconds else "Model-assisted extraction timed out",
        category=ErrorCategory.TIMEOUT,
    )
