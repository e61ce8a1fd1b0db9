"""Rate Editor — amends the hourly_rate of an existing record.

Invariants:
    - The update key is (user_id, effective_from); both are immutable
    - The new rate goes through the same parser as the Creator's
    - UserNotFoundError propagates; every other store failure -> UpdateFailureError
"""

import logging
from datetime import date
from decimal import Decimal

from payrates.core.domain_types import RateRecord, UserId
from payrates.core.errors import (
    ErrorContext, PayRatesError, UpdateFailureError, UserNotFoundError,
)
from payrates.core.rate_parsing import (
    parse_effective_from, parse_hourly_rate, require_user_id,
)
from payrates.core.repository_protocols import RateStore

logger = logging.getLogger(__name__)


async def update_rate_record(
    store: RateStore,
    user_id: UserId | None,
    effective_from: str | date,
    hourly_rate: str | Decimal | float | None,
) -> RateRecord:
    """Set a new hourly rate on the record keyed by (user_id, effective_from)."""
    uid = require_user_id(user_id)
    day = parse_effective_from(effective_from)
    rate = parse_hourly_rate(hourly_rate)
    try:
        record = await store.update_rate(uid, day, rate)
    except UserNotFoundError:
        raise
    except PayRatesError as e:
        logger.error(
            f"Failed to update hourly rate: {e.message}",
            extra={"user_id": uid, "effective_from": day.isoformat(), "error_code": e.code},
        )
        raise UpdateFailureError(
            e.message, ErrorContext(user_id=uid, effective_from=day),
        ) from e

    logger.info(
        f"Updated hourly rate to {record.hourly_rate}",
        extra={"user_id": uid, "effective_from": day.isoformat()},
    )
    return record
