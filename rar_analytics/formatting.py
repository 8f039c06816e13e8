"""Currency formatting for estimates shown in the risk register."""

import math
from typing import Dict

CURRENCY_SYMBOLS: Dict[str, str] = {
    "dollar": "$",
    "euro": "€",
    "pound": "£",
    "yen": "¥",
    "rupee": "₹",
    "peso": "₱",
    "won": "₩",
    "lira": "₺",
    "franc": "₣",
    "shekel": "₪",
    "other": "¤",
}
"""Currency keys used by the risk form mapped to their display symbols."""

GENERIC_CURRENCY_SYMBOL = CURRENCY_SYMBOLS["other"]


def currency_symbol(currency: str) -> str:
    """Symbol for a currency key, the generic sign ``¤`` when unknown."""
    return CURRENCY_SYMBOLS.get(currency, GENERIC_CURRENCY_SYMBOL)


def format_currency(amount: float, currency: str = "dollar", max_decimals: int = 3) -> str:
    """Format an amount with a currency symbol and thousands separators.

    Up to ``max_decimals`` fractional digits are kept and trailing zeros are
    dropped, so whole amounts print without a decimal point.

    Args:
        amount: Value to format.
        currency: Currency key, e.g. ``"dollar"`` or ``"euro"``.
        max_decimals: Maximum number of fractional digits.

    Returns:
        Formatted string, ``"N/A"`` for non-finite amounts.

    Examples:
        >>> format_currency(5000)
        '$5,000'
        >>> format_currency(1234.5, "euro")
        '€1,234.5'
        >>> format_currency(-250)
        '-$250'
    """
    if amount is None or not math.isfinite(amount):
        return "N/A"
    symbol = currency_symbol(currency)
    text = f"{abs(amount):,.{max_decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if amount < 0 and text != "0":
        return f"-{symbol}{text}"
    return f"{symbol}{text}"
