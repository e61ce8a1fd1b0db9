"""Rate Display Projection — formats rates and dates for the roster and history views.

Invariants:
    - Numeric rates render with exactly 2 decimals and a currency suffix
    - None, booleans, strings and non-finite numbers render as the placeholder
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from payrates.core.domain_types import CurrentRate


PLACEHOLDER = "—"
DEFAULT_CURRENCY = "€"


def format_rate(value: object, currency: str = DEFAULT_CURRENCY) -> str:
    """12.5 -> '12.50 €'; unknown or non-numeric -> '—'."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return PLACEHOLDER
    amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    if not amount.is_finite():
        return PLACEHOLDER
    return f"{amount.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)} {currency}"


def format_effective_from(value: date | None) -> str:
    return value.isoformat() if value else PLACEHOLDER


def roster_line(entry: CurrentRate, currency: str = DEFAULT_CURRENCY) -> dict:
    """Display values for one roster row."""
    return {
        "user_id": entry.user.user_id,
        "username": entry.user.username,
        "avatar": entry.user.avatar,
        "rate": format_rate(entry.hourly_rate, currency),
        "effective_from": format_effective_from(entry.effective_from),
    }
