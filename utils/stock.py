"""
Helpers for the human-readable stock descriptors shown on product cards.

A descriptor is either ``"In Stock (N unit)"`` or ``"Out of Stock"``. The
remote store keeps a plain integer ``stock_quantity`` instead, so descriptors
are synthesized on load and parsed back on every write.
"""

import re

__all__ = [
    "DEFAULT_STOCK_QUANTITY",
    "OUT_OF_STOCK",
    "format_stock",
    "parse_stock_quantity",
    "stock_quantity_or_none",
]

DEFAULT_STOCK_QUANTITY = 10
OUT_OF_STOCK = "Out of Stock"

# Integer followed by a unit word inside parentheses, e.g. "(50 kg)"
_QUANTITY_PATTERN = re.compile(r"\((\d+)\s*\w+\)")


def stock_quantity_or_none(stock: str) -> int | None:
    """Return the quantity embedded in a descriptor, or None if there is none."""
    if not isinstance(stock, str):
        return None
    match = _QUANTITY_PATTERN.search(stock)
    if match is None:
        return None
    return int(match.group(1))


def parse_stock_quantity(stock: str, default: int = DEFAULT_STOCK_QUANTITY) -> int:
    """
    Extract the numeric quantity from a stock descriptor.

    Falls back to ``default`` when the descriptor carries no parenthesised
    quantity ("Out of Stock", "In Stock", free text).
    """
    quantity = stock_quantity_or_none(stock)
    return default if quantity is None else quantity


def format_stock(quantity: int, unit: str) -> str:
    """Build the descriptor for a stored quantity."""
    if quantity > 0:
        return f"In Stock ({quantity} {unit})"
    return OUT_OF_STOCK
