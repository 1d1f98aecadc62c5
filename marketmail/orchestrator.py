"""Extraction orchestrator: turns one inbound email into one MarketData record.

Two strategies are available. The deterministic line parser is cheap and
handles well-formed submissions; the model-assisted extractor recovers
loosely formatted ones at higher cost and latency. The orchestrator always
tries the parser first and only calls the model when the parser failed or
found fewer than ParserConfig.MIN_ITEMS_BEFORE_FALLBACK items, and only when
the fallback is enabled.

State machine (linear, no loops)::

    START ──ok, enough items (or fallback off)──────────────► ENRICH ──► SUCCESS
      │                                                          ▲
      ├──failed / too few items, fallback on──► FALLBACK ──ok────┘
      │                                            │
      └──failed, fallback off──► FAILED            └──failed──► FAILED

The orchestrator holds only read-only settings and collaborators, so one
instance can serve concurrent requests.
"""

from enum import Enum

from pydantic import ValidationError as PydanticValidationError

from marketmail.agents.model_extractor import StructuredCompleter, extract_with_model
from marketmail.core.config import ExtractionSettings, ParserConfig
from marketmail.core.errors import (
    ErrorSeverity,
    ExtractionError,
    InvalidPayloadError,
    MarketMailError,
    ParseError,
    ValidationError,
)
from marketmail.core.line_parser import parse_market_email
from marketmail.core.pipeline_logger import ExtractionLogger, get_logger
from marketmail.pydantic_models.inbound import InboundPayload
from marketmail.pydantic_models.market_data import MarketData


class ExtractionState(str, Enum):
    """States of a single extraction."""

    START = "start"
    FALLBACK = "fallback"
    ENRICH = "enrich"
    SUCCESS = "success"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value.upper()


class Orchestrator:
    """Chooses and sequences the extraction strategies for an inbound email."""

    def __init__(
        self,
        settings: ExtractionSettings | None = None,
        llm_client: StructuredCompleter | None = None,
        logger: ExtractionLogger | None = None,
    ):
        """Initialize the orchestrator.

        Args:
            settings: Strategy-selection configuration. Defaults to
                      ExtractionSettings() (fallback disabled).
            llm_client: Completion client for the fallback. Defaults to an
                        LLMClient built from settings when first needed.
            logger: Extraction logger. Defaults to the global one.
        """
        self.settings = settings or ExtractionSettings()
        self.llm_client = llm_client
        self.logger = logger or get_logger()

    async def extract(self, payload: InboundPayload | dict) -> MarketData:
        """Run the extraction for one inbound payload.

        Args:
            payload: InboundPayload, or a dict of its fields (snake_case or
                     camelCase).

        Returns:
            Validated MarketData with delivery metadata attached.

        Raises:
            InvalidPayloadError: Body or sender missing; nothing was parsed.
            ParseError / ValidationError: Parser failed and fallback is off.
            ExtractionError: Fallback ran and failed.
        """
        if isinstance(payload, dict):
            try:
                payload = InboundPayload.model_validate(payload)
            except PydanticValidationError as e:
                raise InvalidPayloadError("Invalid payload: missing required fields") from e

        if not payload.has_required_fields:
            raise InvalidPayloadError("Invalid payload: missing required fields")

        started = self.logger.start_extraction(payload.sender_email, payload.message_id)
        try:
            record = await self._run(payload)
        except MarketMailError as e:
            source = ExtractionState.FALLBACK if isinstance(e, ExtractionError) else ExtractionState.START
            self.logger.transition(source, ExtractionState.FAILED, e.category.value)
            if e.severity is ErrorSeverity.WARNING:
                self.logger.warning("Extraction failed", category=e.category.value, reason=e.message)
            else:
                self.logger.error("Extraction failed", category=e.category.value, reason=e.message)
            self.logger.end_extraction(started, success=False, error=e.message)
            raise

        self.logger.transition(ExtractionState.ENRICH, ExtractionState.SUCCESS)
        self.logger.end_extraction(started, success=True, market=record.market, items=record.item_count)
        return record

    async def _run(self, payload: InboundPayload) -> MarketData:
        """START -> (FALLBACK) -> ENRICH."""
        fallback_enabled = self.settings.use_model_fallback

        try:
            record = parse_market_email(payload.body, payload.sender_email)
        except (ParseError, ValidationError) as e:
            if not fallback_enabled:
                raise
            self.logger.transition(ExtractionState.START, ExtractionState.FALLBACK, e.message)
            record = await self._fallback(payload)
        else:
            if fallback_enabled and record.item_count < ParserConfig.MIN_ITEMS_BEFORE_FALLBACK:
                self.logger.transition(
                    ExtractionState.START,
                    ExtractionState.FALLBACK,
                    f"only {record.item_count} item(s) parsed",
                )
                record = await self._fallback(payload)
            else:
                self.logger.transition(ExtractionState.START, ExtractionState.ENRICH, "parsed")

        return self._enrich(record, payload)

    async def _fallback(self, payload: InboundPayload) -> MarketData:
        """FALLBACK: run the model extractor, wrapping its failure for the whole email."""
        self.logger.milestone("Using model-assisted extraction", model=self.settings.model)
        try:
            record = await extract_with_model(
                payload.body,
                payload.sender_email,
                self.settings,
                client=self.llm_client,
            )
        except ExtractionError as e:
            raise ExtractionError(
                f"Failed to parse email: {e.message}",
                category=e.category,
                context=e.context,
            ) from e

        self.logger.transition(ExtractionState.FALLBACK, ExtractionState.ENRICH, "model extracted")
        return record

    def _enrich(self, record: MarketData, payload: InboundPayload) -> MarketData:
        """ENRICH: attach delivery metadata from the payload."""
        return record.model_copy(update={
            "message_id": payload.message_id,
            "original_recipient": payload.original_recipient,
            "subject": payload.subject,
        })


async def extract_market_data(
    payload: InboundPayload | dict,
    settings: ExtractionSettings | None = None,
    llm_client: StructuredCompleter | None = None,
) -> MarketData:
    """Convenience coroutine for one-off extractions.

    Creates a temporary Orchestrator and runs it once. For a long-lived
    service, create one Orchestrator at startup and reuse it.
    """
    orchestrator = Orchestrator(settings=settings, llm_client=llm_client)
    return await orchestrator.extract(payload)
