"""Build InboundPayload objects from raw RFC 822 messages.

Used by the CLI (and by mailbox pollers) when the email arrives as a .eml
file or raw bytes rather than as a webhook JSON body.
"""

import email
from email.message import Message
from email.utils import parseaddr

from marketmail.pydantic_models.inbound import InboundPayload


def payload_from_email_message(message: Message | bytes | str) -> InboundPayload:
    """Convert a parsed or raw RFC 822 message into an InboundPayload.

    Args:
        message: email.message.Message, or the raw message as bytes/str.

    Returns:
        InboundPayload with body, sender, message id, recipient and subject.
        Body or sender may be None; the orchestrator rejects those.
    """
    if isinstance(message, bytes):
        message = email.message_from_bytes(message)
    elif isinstance(message, str):
        message = email.message_from_string(message)

    _, sender = parseaddr(message.get("From", ""))
    _, recipient = parseaddr(message.get("Delivered-To") or message.get("To", ""))

    return InboundPayload(
        body=get_text_body(message),
        sender_email=sender or None,
        message_id=message.get("Message-ID"),
        original_recipient=recipient or None,
        subject=message.get("Subject"),
    )


def get_text_body(message: Message) -> str | None:
    """Return the first non-attachment text/plain part, decoded with its charset."""
    if message.is_multipart():
        for part in message.walk():
            disposition = str(part.get("Content-Disposition") or "")
            if part.get_content_type() == "text/plain" and "attachment" not in disposition:
                return _decode_part(part)
        return None

    if message.get_content_type() != "text/plain":
        return None
    return _decode_part(message)


def _decode_part(part: Message) -> str | None:
    payload = part.get_payload(decode=True)
    if payload is None:
        return None
    charset = part.get_content_charset() or "utf-8"
    try:
        return payload.decode(charset, errors="replace")
    except LookupError:
        # Unknown charset label
        return payload.decode("utf-8", errors="replace")
