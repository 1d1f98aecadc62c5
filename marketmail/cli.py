"""CLI entrypoint for extracting a single market-price email."""

import argparse
import asyncio
import dataclasses
import json
import logging
import os
import sys
import warnings
from pathlib import Path

# Suppress LiteLLM's direct prints (must be before import)
os.environ["LITELLM_LOG"] = "ERROR"

warnings.filterwarnings("ignore", message="Pydantic serializer warnings")
warnings.filterwarnings("ignore", message="Unclosed client session")
warnings.filterwarnings("ignore", category=ResourceWarning)

for logger_name in ["httpx", "httpcore", "litellm", "LiteLLM", "aiohttp", "asyncio"]:
    logging.getLogger(logger_name).setLevel(logging.ERROR)

from dotenv import load_dotenv  # noqa: E402 - must be after logging config

from marketmail.core.config import API_KEY_ENV_VAR, ExtractionSettings  # noqa: E402
from marketmail.core.errors import MarketMailError  # noqa: E402
from marketmail.core.formatting import format_confirmation_text  # noqa: E402
from marketmail.core.inbound import payload_from_email_message  # noqa: E402
from marketmail.pydantic_models.inbound import InboundPayload  # noqa: E402

load_dotenv()


def load_payload(path: Path, sender: str | None = None, postmark: bool = False) -> InboundPayload:
    """Read an inbound payload from disk.

    `.eml` files are parsed as RFC 822 messages, `.json` files (or any file
    with postmark=True) as Postmark inbound webhooks. Anything else is taken
    as the plain-text body, with `sender` as the envelope sender.

    A sender given on the command line overrides the one in the file.
    """
    if path.suffix.lower() == ".eml":
        payload = payload_from_email_message(path.read_bytes())
    elif postmark or path.suffix.lower() == ".json":
        with open(path, encoding="utf-8") as f:
            payload = InboundPayload.from_postmark(json.load(f))
    else:
        payload = InboundPayload(body=path.read_text(encoding="utf-8"), sender_email=sender)

    if sender:
        payload = payload.model_copy(update={"sender_email": sender})
    return payload


async def extract(
    payload: InboundPayload,
    settings: ExtractionSettings,
    verbose: bool = False,
    log_dir: str | None = None,
):
    """Run the orchestrator on one payload."""
    # Import here so the environment setup above runs first
    from marketmail.core.pipeline_logger import get_logger
    from marketmail.orchestrator import Orchestrator

    orchestrator = Orchestrator(settings=settings, logger=get_logger(verbose=verbose, log_dir=log_dir))
    return await orchestrator.extract(payload)


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        description="MarketMail: extract market prices from an email",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  marketmail submission.eml
  marketmail --postmark webhook.json --format text
  marketmail body.txt --sender trader@example.com --fallback
        """,
    )
    parser.add_argument("path", help="Path to a .eml file, Postmark JSON payload, or plain-text body")
    parser.add_argument(
        "--sender",
        default=None,
        help="Sender address (required for plain-text input, overrides the file otherwise)",
    )
    parser.add_argument(
        "--postmark",
        action="store_true",
        help="Treat the input as a Postmark inbound webhook JSON payload",
    )
    parser.add_argument(
        "--fallback",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable/disable model-assisted fallback (default: from USE_OPENAI)",
    )
    parser.add_argument(
        "--format",
        choices=["json", "text"],
        default="json",
        help="Output format (default: json)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output with DEBUG level logging",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Also write logs to a timestamped file in this directory",
    )

    args = parser.parse_args(argv)

    path = Path(args.path)
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)

    settings = ExtractionSettings.from_env()
    if args.fallback is not None:
        settings = dataclasses.replace(settings, use_model_fallback=args.fallback)
    if settings.use_model_fallback and not settings.api_key:
        print(f"Warning: fallback enabled but {API_KEY_ENV_VAR} not set", file=sys.stderr)

    try:
        payload = load_payload(path, sender=args.sender, postmark=args.postmark)
        record = asyncio.run(extract(payload, settings, verbose=args.verbose, log_dir=args.log_dir))
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON payload: {e}", file=sys.stderr)
        sys.exit(1)
    except MarketMailError as e:
        print(e.user_message, file=sys.stderr)
        sys.exit(1)

    if args.format == "text":
        print(format_confirmation_text(record), end="")
    else:
        print(json.dumps(record.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False))

    sys.exit(0)


if __name__ == "__main__":
    main()
