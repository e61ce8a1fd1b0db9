"""Roster Projection — current rate per user, formatted for the roster list."""

import logging

from payrates.core.errors import LoadFailureError, PayRatesError
from payrates.core.rate_formatting import DEFAULT_CURRENCY, roster_line
from payrates.core.repository_protocols import RateStore

logger = logging.getLogger(__name__)


async def load_roster(store: RateStore, currency: str = DEFAULT_CURRENCY) -> list[dict]:
    """Fetch every user's currently effective rate and project it for display."""
    try:
        entries = await store.list_current_rates()
    except PayRatesError as e:
        logger.error(f"Failed to load user rates: {e.message}", extra={"error_code": e.code})
        raise LoadFailureError(f"Could not load user rates: {e.message}") from e
    return [roster_line(entry, currency) for entry in entries]
