"""Rate History Loader — fetches one user's records and orders them.

Invariants:
    - Read-only: never writes to the store
    - Unknown user -> UserNotFoundError; any other store failure -> LoadFailureError
    - Result is always sorted by effective_from descending
"""

import logging

from payrates.core.domain_types import RateRecord, UserId
from payrates.core.errors import (
    ErrorContext, LoadFailureError, PayRatesError, UserNotFoundError,
)
from payrates.core.rate_history import sort_history
from payrates.core.repository_protocols import RateStore

logger = logging.getLogger(__name__)


async def load_rate_history(store: RateStore, user_id: UserId) -> list[RateRecord]:
    """Retrieve and order all rate records of `user_id`."""
    try:
        records = await store.list_rates(user_id)
    except UserNotFoundError:
        logger.warning(f"Rate history requested for unknown user {user_id}")
        raise
    except PayRatesError as e:
        logger.error(
            f"Failed to load rate history: {e.message}",
            extra={"user_id": user_id, "error_code": e.code},
        )
        raise LoadFailureError(
            e.message, ErrorContext(user_id=user_id),
        ) from e

    logger.debug(f"Loaded {len(records)} rate(s)", extra={"user_id": user_id})
    return sort_history(records)
