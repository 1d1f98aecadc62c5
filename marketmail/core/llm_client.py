"""LLM client for the model-assisted fallback.

Wraps the one kind of call the core makes: a single chat completion whose
answer must match a pydantic model. Instructor (TOOLS mode) turns the model
into a function definition and forces the model to call it; litellm does
the transport, so any provider litellm supports can be used by changing
the model string.

There is no retry and no router: a failed call raises immediately and
retries belong to the caller.

The call is bounded by an explicit timeout (passed to litellm and enforced
with asyncio.wait_for). Cancelling the awaiting task cancels the request.

Usage:
    client = LLMClient(api_key="sk-...", timeout_seconds=20)
    result = await client.complete_structured(
        system_prompt="Extract market prices.",
        user_prompt=email_text,
        model="gpt-4o-mini",
        response_model=MarketDataExtraction,
    )
"""

import asyncio
import logging
from typing import TypeVar

import instructor
from litellm import acompletion

from marketmail.core.config import LLMConfig

logger = logging.getLogger(__name__)

# Suppress LiteLLM debug noise (done once at module load)
logging.getLogger("litellm").setLevel(logging.ERROR)
logging.getLogger("LiteLLM").setLevel(logging.ERROR)
logging.getLogger("httpx").setLevel(logging.ERROR)

T = TypeVar("T")


class LLMClient:
    """Client for structured (function-calling) completions.

    Holds only read-only call settings, so one instance can be shared by
    concurrent extractions.
    """

    def __init__(
        self,
        api_key: str | None = None,
        timeout_seconds: float = LLMConfig.TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Provider credential, passed per call to litellm.
                     None lets litellm fall back to its own env lookup.
            timeout_seconds: Upper bound for a single completion call.
        """
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    async def complete_structured(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        response_model: type[T],
        temperature: float | None = None,
    ) -> T:
        """Make one LLM call that returns a validated pydantic model.

        Args:
            system_prompt: System message content.
            user_prompt: User message content (the raw email text).
            model: litellm model identifier.
            response_model: Pydantic model class the function call must match.
            temperature: Sampling temperature. Defaults to 0.0.

        Returns:
            Validated instance of response_model.

        Raises:
            asyncio.TimeoutError: The call exceeded timeout_seconds.
            instructor.core.InstructorRetryException: The response did
                not match response_model.
            litellm exceptions: Transport or provider errors.
        """
        instructor_client = instructor.from_litellm(acompletion, mode=instructor.Mode.TOOLS)

        kwargs = {}
        if self.api_key:
            kwargs["api_key"] = self.api_key

        logger.debug("Structured completion request model=%s", model)
        return await asyncio.wait_for(
            instructor_client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                response_model=response_model,
                temperature=temperature if temperature is not None else LLMConfig.TEMPERATURE,
                max_retries=LLMConfig.MAX_ATTEMPTS,
                timeout=self.timeout_seconds,
                **kwargs,
            ),
            timeout=self.timeout_seconds,
        )
