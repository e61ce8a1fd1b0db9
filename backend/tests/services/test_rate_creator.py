"""Rate Creator — validation ordering, duplicates and failure mapping."""

from datetime import date
from decimal import Decimal

import pytest

from payrates.core.errors import (
    CreateFailureError, DatabaseError, DuplicateDateError, InvalidInputError,
    UserNotFoundError,
)
from payrates.services.rate_creator import create_rate_record, validate_new_rate


@pytest.fixture
def maria(fake_store):
    return fake_store.add_user(1, "maria")


# ─── Validation ──────────────────────────────────────────────────

async def test_non_numeric_rate_never_reaches_store(fake_store, maria):
    with pytest.raises(InvalidInputError) as exc_info:
        await create_rate_record(fake_store, 1, "2026-01-01", "abc")

    assert exc_info.value.field == "hourly_rate"
    assert fake_store.calls == []


async def test_missing_user_never_reaches_store(fake_store):
    with pytest.raises(InvalidInputError) as exc_info:
        await create_rate_record(fake_store, None, "2026-01-01", "12.00")

    assert exc_info.value.field == "user_id"
    assert fake_store.calls == []


async def test_malformed_date_never_reaches_store(fake_store, maria):
    with pytest.raises(InvalidInputError) as exc_info:
        await create_rate_record(fake_store, 1, "01/01/2026", "12.00")

    assert exc_info.value.field == "effective_from"
    assert fake_store.calls == []


def test_validate_new_rate_normalizes_comma():
    assert validate_new_rate(1, "2026-01-01", "12,5") == (
        1, date(2026, 1, 1), Decimal("12.50"),
    )


# ─── Store interaction ───────────────────────────────────────────

async def test_create_stores_normalized_rate(fake_store, maria):
    record = await create_rate_record(fake_store, 1, "2026-01-01", "12,5")

    assert record.hourly_rate == Decimal("12.50")
    assert fake_store.rates[(1, date(2026, 1, 1))] == Decimal("12.50")


async def test_past_effective_date_accepted(fake_store, maria):
    record = await create_rate_record(fake_store, 1, "2020-03-01", "8")
    assert record.effective_from == date(2020, 3, 1)


async def test_duplicate_date_keeps_existing_record(fake_store, maria):
    fake_store.seed(1, "2026-01-01", "12.00")

    with pytest.raises(DuplicateDateError) as exc_info:
        await create_rate_record(fake_store, 1, "2026-01-01", "15.00")

    assert "2026-01-01" in exc_info.value.message
    assert fake_store.rates[(1, date(2026, 1, 1))] == Decimal("12.00")


async def test_duplicate_is_a_create_failure(fake_store, maria):
    fake_store.seed(1, "2026-01-01", "12.00")
    with pytest.raises(CreateFailureError):
        await create_rate_record(fake_store, 1, "2026-01-01", "15.00")


async def test_unknown_user_propagates(fake_store):
    with pytest.raises(UserNotFoundError):
        await create_rate_record(fake_store, 42, "2026-01-01", "12.00")


async def test_store_failure_becomes_create_failure(fake_store, maria):
    fake_store.fail_next["create_rate"] = DatabaseError("OperationalError", "commit")

    with pytest.raises(CreateFailureError) as exc_info:
        await create_rate_record(fake_store, 1, "2026-01-01", "12.00")

    err = exc_info.value
    assert err.code == "CREATE_FAILED"
    assert err.message == "Database commit failed: OperationalError"
    assert err.context.effective_from == date(2026, 1, 1)
    assert (1, date(2026, 1, 1)) not in fake_store.rates
