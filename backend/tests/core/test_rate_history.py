"""Rate History Rules — ordering, current/pending resolution, keyed reconciliation."""

from datetime import date
from decimal import Decimal

from payrates.core.domain_types import RateRecord, RateStatus, UserId
from payrates.core.rate_history import (
    apply_rate_update,
    classify,
    currently_effective,
    default_effective_from,
    sort_history,
)

U = UserId(1)


def _rec(day: str, rate: str, user: int = 1) -> RateRecord:
    return RateRecord(UserId(user), date.fromisoformat(day), Decimal(rate))


HISTORY = [
    _rec("2024-01-01", "10.00"),
    _rec("2026-01-01", "12.00"),
    _rec("2025-01-01", "11.50"),
]


def test_sort_is_strictly_descending():
    days = [r.effective_from for r in sort_history(HISTORY)]
    assert days == [date(2026, 1, 1), date(2025, 1, 1), date(2024, 1, 1)]
    assert all(a > b for a, b in zip(days, days[1:]))


def test_sort_does_not_mutate_input():
    original = list(HISTORY)
    sort_history(HISTORY)
    assert HISTORY == original


def test_currently_effective_ignores_future_records():
    current = currently_effective(HISTORY, date(2025, 6, 15))
    assert current == _rec("2025-01-01", "11.50")


def test_record_effective_today_is_current():
    current = currently_effective(HISTORY, date(2026, 1, 1))
    assert current.effective_from == date(2026, 1, 1)


def test_no_current_rate_before_first_record():
    assert currently_effective(HISTORY, date(2023, 12, 31)) is None


def test_classify_each_record():
    today = date(2025, 6, 15)
    assert classify(_rec("2026-01-01", "12.00"), HISTORY, today) == RateStatus.PENDING
    assert classify(_rec("2025-01-01", "11.50"), HISTORY, today) == RateStatus.CURRENT
    assert classify(_rec("2024-01-01", "10.00"), HISTORY, today) == RateStatus.SUPERSEDED


def test_apply_rate_update_matches_by_key_not_position():
    ordered = sort_history(HISTORY)
    updated, matched = apply_rate_update(ordered, U, date(2024, 1, 1), Decimal("10.75"))
    assert matched
    assert updated[2].hourly_rate == Decimal("10.75")
    assert updated[0] == ordered[0]
    assert updated[1] == ordered[1]
    assert [r.effective_from for r in updated] == [r.effective_from for r in ordered]


def test_apply_rate_update_ignores_other_users():
    records = [_rec("2025-01-01", "9.00", user=2)]
    updated, matched = apply_rate_update(records, U, date(2025, 1, 1), Decimal("1.00"))
    assert not matched
    assert updated == records


def test_default_effective_from_is_next_january_first():
    assert default_effective_from(date(2025, 6, 15)) == date(2026, 1, 1)
    assert default_effective_from(date(2025, 12, 31)) == date(2026, 1, 1)
    assert default_effective_from(date(2025, 1, 2)) == date(2026, 1, 1)


def test_default_effective_from_is_today_on_january_first():
    assert default_effective_from(date(2026, 1, 1)) == date(2026, 1, 1)
