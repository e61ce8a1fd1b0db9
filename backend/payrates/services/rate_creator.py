"""Rate Creator — validates and submits a new effective-dated record.

Invariants:
    - Validation (user, date, rate) completes before any store call
    - Past effective dates are accepted (retroactive correction entries)
    - DuplicateDateError and UserNotFoundError propagate unchanged;
      every other store failure becomes CreateFailureError
    - Never touches local history: callers re-run the loader on success
"""

import logging
from datetime import date
from decimal import Decimal

from payrates.core.domain_types import RateRecord, UserId
from payrates.core.errors import (
    CreateFailureError, DuplicateDateError, ErrorContext, PayRatesError,
    UserNotFoundError,
)
from payrates.core.rate_parsing import (
    parse_effective_from, parse_hourly_rate, require_user_id,
)
from payrates.core.repository_protocols import RateStore

logger = logging.getLogger(__name__)


def validate_new_rate(
    user_id: UserId | None,
    effective_from: str | date | None,
    hourly_rate: str | Decimal | float | None,
) -> tuple[UserId, date, Decimal]:
    """Pure validation step; raises InvalidInputError naming the failed field."""
    return (
        require_user_id(user_id),
        parse_effective_from(effective_from),
        parse_hourly_rate(hourly_rate),
    )


async def create_rate_record(
    store: RateStore,
    user_id: UserId | None,
    effective_from: str | date | None,
    hourly_rate: str | Decimal | float | None,
) -> RateRecord:
    """Create a new rate record for `user_id` effective from `effective_from`."""
    uid, day, rate = validate_new_rate(user_id, effective_from, hourly_rate)
    try:
        record = await store.create_rate(uid, day, rate)
    except (DuplicateDateError, UserNotFoundError) as e:
        logger.warning(e.message, extra={"user_id": uid, "error_code": e.code})
        raise
    except CreateFailureError:
        raise
    except PayRatesError as e:
        logger.error(
            f"Failed to create hourly rate: {e.message}",
            extra={"user_id": uid, "effective_from": day.isoformat(), "error_code": e.code},
        )
        raise CreateFailureError(
            e.message, ErrorContext(user_id=uid, effective_from=day),
        ) from e

    logger.info(
        f"Created hourly rate {record.hourly_rate}",
        extra={"user_id": uid, "effective_from": day.isoformat()},
    )
    return record
