"""
Display formatting for amounts in the quote summary and price ranges.

Both countries use '.' as the thousands separator and show whole units.
"""
from decimal import Decimal, ROUND_HALF_UP

from ..config.countries import CountryConfig


def round_half_up(value: float, granularity: int = 1) -> int:
    """Round to the nearest multiple of `granularity`, halves away from zero."""
    steps = (Decimal(str(value)) / granularity).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    return int(steps) * granularity


def format_amount(value: float) -> str:
    """37999.4 → '37.999'"""
    return f"{round_half_up(value):,}".replace(',', '.')


def format_money(value: float, currency: str) -> str:
    return f"{currency} {format_amount(value)}"


def format_range(low: float, high: float, country: CountryConfig) -> str:
    """
    Price range label rounded to the country's granularity.

    Collapses to a single amount when both ends round to the same value.
    """
    low_r = round_half_up(low, country.rounding)
    high_r = round_half_up(high, country.rounding)
    if low_r == high_r:
        return format_money(low_r, country.currency)
    return f"{format_money(low_r, country.currency)} – {format_money(high_r, country.currency)}"
