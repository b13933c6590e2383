"""Output formatting utilities for award search results.

Provides reusable functions for:
- Formatting currency amounts
"""

from typing import Any


def format_amount(value: Any, fallback: str = "N/A") -> str:
    """Format a dollar amount the way browsers render ``Number.toLocaleString``.

    Thousands separators, at most three fraction digits, no trailing zeros.

    Args:
        value: Amount in dollars (int, float, or numeric string)
        fallback: Returned for None, zero, empty, or non-numeric input

    Returns:
        Formatted string like "$1,234,567.5"

    Examples:
        format_amount(1234567) -> "$1,234,567"
        format_amount(1234567.5) -> "$1,234,567.5"
        format_amount(None) -> "N/A"
    """
    if not value:
        return fallback
    try:
        v = float(value)
    except (TypeError, ValueError):
        return fallback
    if v == 0:
        return fallback
    text = f"{v:,.3f}".rstrip("0").rstrip(".")
    return f"${text}"

