"""Cent-precision money helpers.

All stored amounts are integer cents. Conversion to dollars only happens at
the boundary where a price is shown to a person or a quote UI.
"""
from decimal import Decimal

CENTS_PER_DOLLAR = 100


def round_to_nearest_50_cents(cents: int) -> int:
    """
    Round a cent amount to the nearest 50-cent increment.

    The amount is split into whole dollars and a remainder in [0, 100):
    remainders below 25 round down to the dollar, 25-74 round to the half
    dollar and 75 or more round up to the next dollar.

    Only derived monthly amounts are rounded this way. Per-visit prices are
    stored exactly as configured.
    """
    base, remainder = divmod(int(cents), CENTS_PER_DOLLAR)
    base *= CENTS_PER_DOLLAR
    if remainder < 25:
        return base
    if remainder < 75:
        return base + 50
    return base + CENTS_PER_DOLLAR


def round_half_up_div(numerator: int, denominator: int) -> int:
    """Integer division rounding halves toward positive infinity."""
    return (2 * numerator + denominator) // (2 * denominator)


def cents_to_dollars(cents: int) -> Decimal:
    """Convert integer cents to a two-place Decimal dollar amount."""
    return (Decimal(int(cents)) / CENTS_PER_DOLLAR).quantize(Decimal("0.01"))


def format_cents(cents: int) -> str:
    """Format cents as a plain dollar string, e.g. 2300 -> '23.00'."""
    return f"{cents_to_dollars(cents):.2f}"
