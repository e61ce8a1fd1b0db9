"""Boundary Protocols — contracts between the rate core and its collaborators.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - The store is addressed by (user_id, effective_from); there is no surrogate
      record id and no delete operation
    - Implementations provided by the shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, SqlRateStore and HttpRateStore
      share no base class
    - Async in Protocol: every implementation does IO
"""

from collections.abc import Awaitable, Callable
from datetime import date
from decimal import Decimal
from typing import Protocol

from payrates.core.domain_types import (
    CurrentRate, Notification, RateRecord, UserId, UserRef,
)


class RateStore(Protocol):
    """Contract for rate record persistence — implemented by shell."""
    async def get_user(self, user_id: UserId) -> UserRef | None: ...
    async def list_users(self) -> list[UserRef]: ...
    async def list_rates(self, user_id: UserId) -> list[RateRecord]: ...
    async def create_rate(
        self, user_id: UserId, effective_from: date, hourly_rate: Decimal,
    ) -> RateRecord: ...
    async def update_rate(
        self, user_id: UserId, effective_from: date, hourly_rate: Decimal,
    ) -> RateRecord: ...
    async def list_current_rates(self) -> list[CurrentRate]: ...


class Notifier(Protocol):
    """Presentation-layer notification channel (toasts)."""
    def notify(self, notification: Notification) -> None: ...


RatesChangedListener = Callable[[UserId], Awaitable[None]]
