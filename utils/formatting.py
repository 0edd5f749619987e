"""
Formatting utilities.
"""

from typing import Optional


def format_currency(amount: Optional[float], currency: str = "USD") -> str:
    """
    Format an amount as whole-unit currency.

    Args:
        amount: The amount in whole units (e.g., dollars, not cents).
        currency: Currency code (default USD).

    Returns:
        Formatted currency string, or "N/A" when unknown.
    """
    if amount is None:
        return "N/A"
    symbols = {
        "USD": "$",
        "GBP": "£",
        "EUR": "€",
    }
    symbol = symbols.get(currency, currency + " ")
    return f"{symbol}{amount:,.0f}"


def format_percent(value: float, decimals: int = 1, signed: bool = False) -> str:
    """
    Format a number as a percentage.

    Args:
        value: The percentage value.
        decimals: Number of decimal places.
        signed: Prefix positive values with "+".

    Returns:
        Formatted percentage string.
    """
    sign = "+" if signed and value > 0 else ""
    return f"{sign}{value:.{decimals}f}%"
