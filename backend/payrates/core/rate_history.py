"""Rate History Rules — ordering, effective-rate resolution and keyed reconciliation.

Invariants:
    - History is ordered by effective_from descending (future-most first)
    - The currently effective record is the latest one with effective_from <= today
    - Records after today are pending; records before the current one are superseded
    - apply_rate_update matches on (user_id, effective_from), never on position,
      and never changes order (effective_from is immutable)

Design Decisions:
    - Python's sort is stable: if a store ever returns two records with the
      same date they keep the store's relative order
"""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from payrates.core.domain_types import RateRecord, RateStatus, UserId


def sort_history(records: Iterable[RateRecord]) -> list[RateRecord]:
    """Return records ordered by effective_from descending."""
    return sorted(records, key=lambda r: r.effective_from, reverse=True)


def currently_effective(
    records: Iterable[RateRecord], today: date,
) -> RateRecord | None:
    """Latest record whose effective_from is not in the future."""
    applicable = [r for r in records if r.effective_from <= today]
    if not applicable:
        return None
    return max(applicable, key=lambda r: r.effective_from)


def classify(
    record: RateRecord, records: Iterable[RateRecord], today: date,
) -> RateStatus:
    """Status of `record` within its user's history."""
    if record.effective_from > today:
        return RateStatus.PENDING
    current = currently_effective(records, today)
    if current is not None and current.key == record.key:
        return RateStatus.CURRENT
    return RateStatus.SUPERSEDED


def apply_rate_update(
    records: list[RateRecord],
    user_id: UserId,
    effective_from: date,
    hourly_rate: Decimal,
) -> tuple[list[RateRecord], bool]:
    """Replace the rate of the keyed record. Returns (new_records, matched)."""
    matched = False
    updated = []
    for record in records:
        if record.key == (user_id, effective_from):
            updated.append(record.with_rate(hourly_rate))
            matched = True
        else:
            updated.append(record)
    return updated, matched


def default_effective_from(today: date) -> date:
    """Next January 1, or today when today already is January 1."""
    if today.month == 1 and today.day == 1:
        return today
    return date(today.year + 1, 1, 1)
