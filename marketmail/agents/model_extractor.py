"""Model-assisted extractor: the fallback for emails the line parser can't handle.

The email body is sent to a chat completion with a function-calling contract
(MarketDataExtraction), so the answer comes back as structured arguments.
The result is then treated like any other candidate: the date string is
parsed, the envelope sender is attached (never an address the model
read from the body), and the whole thing goes through validate_market_data().

Every failure (missing credential, timeout, transport, malformed function
call, validation) is raised as one ExtractionError with a category. This
module never retries.
"""

import asyncio
import datetime as dt
import logging
from typing import Protocol, TypeVar

from instructor.core import InstructorRetryException
from litellm.exceptions import Timeout as LiteLLMTimeout
from pydantic import ValidationError as PydanticValidationError

from marketmail.core.config import ExtractionSettings
from marketmail.core.errors import (
    ErrorCategory,
    ExtractionError,
    ValidationError,
    llm_api_error,
    llm_parse_error,
    missing_credential_error,
    timeout_error,
)
from marketmail.core.line_parser import parse_date_value
from marketmail.core.llm_client import LLMClient
from marketmail.prompts import EXTRACTOR_SYSTEM_PROMPT, build_extractor_prompt
from marketmail.pydantic_models.llm_responses import MarketDataExtraction
from marketmail.pydantic_models.market_data import MarketData, validate_market_data

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StructuredCompleter(Protocol):
    """Anything that can answer a prompt with a validated pydantic model.

    LLMClient is the production implementation; tests pass a fake.
    """

    async def complete_structured(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        response_model: type[T],
        temperature: float | None = None,
    ) -> T: ...


async def extract_with_model(
    email_text: str,
    sender_email: str,
    settings: ExtractionSettings,
    client: StructuredCompleter | None = None,
) -> MarketData:
    """Extract a MarketData record with the language model.

    Args:
        email_text: Raw plain-text email body.
        sender_email: Envelope sender; becomes submitter_email.
        settings: Credential, model and timeout to use.
        client: Completion client. Defaults to an LLMClient built from settings.

    Returns:
        Validated MarketData (no delivery metadata).

    Raises:
        ExtractionError: For any failure of this path.
    """
    if not settings.api_key:
        raise missing_credential_error()

    if client is None:
        client = LLMClient(api_key=settings.api_key, timeout_seconds=settings.timeout_seconds)

    extraction = await _request_extraction(email_text, settings, client)

    record_date = parse_date_value(extraction.date)
    if record_date is None:
        logger.debug("Model returned unparseable date %r, defaulting to today", extraction.date)
        record_date = dt.date.today()

    try:
        return validate_market_data(
            market=extraction.market,
            date=record_date,
            submitter_email=sender_email,
            price_items=[item.model_dump() for item in extraction.price_items],
        )
    except ValidationError as e:
        raise ExtractionError(
            f"Model-assisted extraction returned invalid data: {e.message}",
            category=ErrorCategory.VALIDATION,
            context=e.context,
        ) from e


async def _request_extraction(
    email_text: str,
    settings: ExtractionSettings,
    client: StructuredCompleter,
) -> MarketDataExtraction:
    """Run the completion call and map its failures to ExtractionError."""
    try:
        return await client.complete_structured(
            system_prompt=EXTRACTOR_SYSTEM_PROMPT,
            user_prompt=build_extractor_prompt(email_text),
            model=settings.model,
            response_model=MarketDataExtraction,
        )
    except (asyncio.TimeoutError, LiteLLMTimeout) as e:
        raise timeout_error(settings.timeout_seconds) from e
    except (InstructorRetryException, PydanticValidationError) as e:
        raise llm_parse_error(
            f"Model-assisted extraction returned a malformed response: {e}",
            raw_response=str(getattr(e, "last_completion", "") or ""),
        ) from e
    except ExtractionError:
        raise
    except Exception as e:
        raise llm_api_error(f"Model-assisted extraction failed: {e}", original=e) from e
