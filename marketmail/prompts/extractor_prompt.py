"""Extractor prompts: system prompt and user prompt builder for the
model-assisted fallback.

The response shape is not described here. It is enforced by the function
definition Instructor derives from MarketDataExtraction.
"""

EXTRACTOR_SYSTEM_PROMPT = """
You are a helpful assistant that extracts structured market price data from emails.

Submitters are traders and farmers reporting commodity prices seen at a market.
Their emails are often loosely formatted: missing labels, extra words, prices
written in a sentence, or one product per line without a unit in brackets.

Rules:
- market: the name of the market the prices were observed at
- date: the observation date in YYYY-MM-DD format; if none is given, use an empty string
- price_items: every product that has a price, in the order it appears
  - product: the product name as written (do not translate or rename)
  - unit: the unit as written (kg, crate, bunch, bag, ...); do not convert units
  - price: the number only, without currency; do not convert currencies
- Extract ONLY what is explicitly present. NEVER invent products or prices.
"""


def build_extractor_prompt(email_text: str) -> str:
    """Build the user prompt carrying the raw email body."""
    return f"""Extract the market price report from this email.

--- EMAIL START ---
{email_text}
--- EMAIL END ---"""
