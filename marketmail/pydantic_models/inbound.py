"""Inbound email payload handed to the orchestrator.

Fields are optional at the model level on purpose: the webhook collaborator
builds a payload from whatever it received, and the orchestrator is the one
that rejects missing body/sender with InvalidPayloadError before any parsing.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class InboundPayload(BaseModel):
    """Raw inbound email as delivered by the receiving webhook.

    Attributes:
        body: Plain-text email body (required by the orchestrator)
        sender_email: Envelope sender address (required by the orchestrator)
        message_id: Provider message id, passed through to the record
        original_recipient: Address the email was sent to, passed through
        subject: Email subject, passed through
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    body: str | None = Field(default=None, description="Plain-text email body")
    sender_email: str | None = Field(default=None, description="Envelope sender address")
    message_id: str | None = None
    original_recipient: str | None = None
    subject: str | None = None

    @property
    def has_required_fields(self) -> bool:
        """True when both body text and sender address are present and non-blank."""
        return bool(self.body and self.body.strip()) and bool(
            self.sender_email and self.sender_email.strip()
        )

    @classmethod
    def from_postmark(cls, webhook: dict[str, Any] | None) -> "InboundPayload":
        """Build a payload from a Postmark inbound webhook JSON body.

        Uses FromFull.Email for the sender (falling back to the bare From
        header), TextBody for the body, and passes MessageID,
        OriginalRecipient, and Subject through. Missing keys become None.
        """
        webhook = webhook or {}
        from_full = webhook.get("FromFull") or {}
        sender = from_full.get("Email") if isinstance(from_full, dict) else None
        return cls(
            body=webhook.get("TextBody"),
            sender_email=sender or webhook.get("From"),
            message_id=webhook.get("MessageID"),
            original_recipient=webhook.get("OriginalRecipient"),
            subject=webhook.get("Subject"),
        )
