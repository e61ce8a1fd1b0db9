"""Rate Input Parsing — the single parser shared by the Rate Creator and Rate Editor.

Invariants:
    - Decimal comma is normalized to a decimal point before anything else
    - Accepted rates are non-negative with at most 2 fractional digits and
      at most MAX_HOURLY_RATE (the Numeric(10, 2) column limit)
    - Patterns are applied with fullmatch: a trailing newline is not accepted
    - Empty, signed, exponent or non-numeric input raises InvalidInputError
    - effective_from must be a real calendar date in YYYY-MM-DD form; past dates allowed
    - is_rate_keystroke_allowed is a display-layer guard only; parse_hourly_rate
      is still the authority at submit time
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from payrates.core.errors import InvalidInputError


HOURLY_RATE_FIELD = "hourly_rate"
EFFECTIVE_FROM_FIELD = "effective_from"
USER_ID_FIELD = "user_id"

RATE_PLACES = Decimal("0.01")
# Largest value a Numeric(10, 2) column holds
MAX_HOURLY_RATE = Decimal("99999999.99")

# Partial entries ("", "12", "12,", "12.5") are allowed while typing.
_KEYSTROKE_PATTERN = re.compile(r"\d*([.,]\d{0,2})?")
_RATE_PATTERN = re.compile(r"\d+\.?\d{0,2}|\.\d{1,2}")
_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


def is_rate_keystroke_allowed(text: str) -> bool:
    """True if `text` may be shown in the rate entry control."""
    return bool(_KEYSTROKE_PATTERN.fullmatch(text))


def normalize_rate_text(text: str) -> str:
    """Strip whitespace and turn a decimal comma into a decimal point."""
    return text.strip().replace(",", ".", 1)


def parse_hourly_rate(raw: str | int | float | Decimal | None) -> Decimal:
    """Parse operator input into a 2-place Decimal or raise InvalidInputError."""
    if raw is None or isinstance(raw, bool):
        raise InvalidInputError("Hourly rate is required.", HOURLY_RATE_FIELD)

    if isinstance(raw, (int, float, Decimal)):
        text = str(raw)
    else:
        text = normalize_rate_text(str(raw))

    if not text:
        raise InvalidInputError("Hourly rate is required.", HOURLY_RATE_FIELD)
    if not _RATE_PATTERN.fullmatch(text):
        raise InvalidInputError(
            f"Hourly rate must be a non-negative number with at most 2 decimals, got '{raw}'.",
            HOURLY_RATE_FIELD,
        )
    try:
        value = Decimal(text)
    except InvalidOperation as exc:
        raise InvalidInputError(
            f"Hourly rate must be a number, got '{raw}'.", HOURLY_RATE_FIELD,
        ) from exc
    if value > MAX_HOURLY_RATE:
        raise InvalidInputError(
            f"Hourly rate must not exceed {MAX_HOURLY_RATE}, got '{raw}'.", HOURLY_RATE_FIELD,
        )
    return value.quantize(RATE_PLACES)


def parse_effective_from(raw: str | date | None) -> date:
    """Parse a YYYY-MM-DD string (or pass through a date) or raise InvalidInputError."""
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    text = (raw or "").strip()
    if not _DATE_PATTERN.fullmatch(text):
        raise InvalidInputError(
            f"Effective date must use YYYY-MM-DD, got '{raw or ''}'.",
            EFFECTIVE_FROM_FIELD,
        )
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise InvalidInputError(
            f"'{text}' is not a valid calendar date.", EFFECTIVE_FROM_FIELD,
        ) from exc


def require_user_id(user_id: int | None) -> int:
    """A selected user is mandatory before any write."""
    if user_id is None or isinstance(user_id, bool) or user_id == "":
        raise InvalidInputError("A user must be selected.", USER_ID_FIELD)
    return user_id
