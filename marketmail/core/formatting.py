"""Plain-text messages for the person who submitted the prices.

The caller sends these back to the submitter (delivery is not handled
here). Failures are explained by MarketMailError.user_message, which
appends EXPECTED_FORMAT when the submitter got the format wrong.
"""

from marketmail.pydantic_models.market_data import MarketData

EXPECTED_FORMAT = """Market: [Market Name]
Date: [YYYY-MM-DD]

[Product Name] ([Unit]): [Price]
[Product Name] ([Unit]): [Price]
...

Example:
Market: Nakasero
Date: 2025-05-24
Maize (kg): 1800
Beans (kg): 2900
Tomatoes (crate): 9500"""

_DIVIDER = "-" * 40
_PRODUCT_WIDTH = 18
_UNIT_WIDTH = 14


def format_confirmation_text(record: MarketData) -> str:
    """Render a plain-text receipt with a fixed-width product/unit/price table.

    Example:
        MARKET: Nakasero - DATE: Sat May 24 2025

        ----------------------------------------
        PRODUCT           UNIT          PRICE
        ----------------------------------------
        Tomatoes          kg            3000
    """
    header = f"MARKET: {record.market} - DATE: {record.date.strftime('%a %b %d %Y')}"
    rows = [
        f"{item.product.ljust(_PRODUCT_WIDTH)}{item.unit.ljust(_UNIT_WIDTH)}{_format_price(item.price)}"
        for item in record.price_items
    ]
    lines = [
        header,
        "",
        _DIVIDER,
        f"{'PRODUCT'.ljust(_PRODUCT_WIDTH)}{'UNIT'.ljust(_UNIT_WIDTH)}PRICE",
        _DIVIDER,
        *rows,
        "",
        _DIVIDER,
        "Thank you for contributing to MarketMail!",
    ]
    return "\n".join(lines) + "\n"


def _format_price(price: int | float) -> str:
    """Show whole-number prices without a trailing .0."""
    if isinstance(price, float) and price.is_integer():
        return str(int(price))
    return str(price)
