"""Domain Types — value objects and enums shared by core, services and shell.

Invariants:
    - RateRecord identity is (user_id, effective_from); both are immutable
    - hourly_rate is a Decimal with at most 2 fractional digits, never negative
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - Frozen dataclasses: records are replaced, never mutated in place
    - str Enums: serialize to JSON without custom encoders
"""

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", int)


# ─── Enums ───────────────────────────────────────────────────────

class RateStatus(str, Enum):
    """Position of a record relative to "today"."""
    PENDING = "pending"
    CURRENT = "current"
    SUPERSEDED = "superseded"


class NotificationSeverity(str, Enum):
    """Severities understood by the presentation layer's notification channel."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class WorkflowPhase(str, Enum):
    """Rate workflow lifecycle — see core/workflow_state.py for transitions."""
    IDLE = "idle"
    HISTORY_LOADING = "history_loading"
    HISTORY_LOADED = "history_loaded"
    EDIT_SUBMITTING = "edit_submitting"
    CREATE_SUBMITTING = "create_submitting"
    LOAD_FAILED = "load_failed"
    HISTORY_STALE = "history_stale"


# ─── Value Types ─────────────────────────────────────────────────

@dataclass(frozen=True)
class UserRef:
    """Roster user as seen by the core. Owned by the roster service."""
    user_id: UserId
    username: str
    avatar: str | None = None


@dataclass(frozen=True)
class RateRecord:
    """One effective-dated hourly rate for one user."""
    user_id: UserId
    effective_from: date
    hourly_rate: Decimal

    @property
    def key(self) -> tuple[UserId, date]:
        return (self.user_id, self.effective_from)

    def with_rate(self, hourly_rate: Decimal) -> "RateRecord":
        return replace(self, hourly_rate=hourly_rate)


@dataclass(frozen=True)
class CurrentRate:
    """Roster row: a user and their currently effective rate, if any."""
    user: UserRef
    hourly_rate: Decimal | None = None
    effective_from: date | None = None


@dataclass(frozen=True)
class Notification:
    """(summary, detail) message pair for the notification channel."""
    severity: NotificationSeverity
    summary: str
    detail: str
