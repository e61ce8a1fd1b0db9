"""Rate Workflow State — explicit finite-state context for one operator session.

Transitions:
    IDLE ──open──▶ HISTORY_LOADING ──ok──▶ HISTORY_LOADED
                         │                   │      │
                         └──fail──▶ LOAD_FAILED     │
    HISTORY_LOADED ──edit──▶ EDIT_SUBMITTING ──ok──▶ HISTORY_LOADED
                                    └──fail──▶ HISTORY_STALE ──▶ HISTORY_LOADING
    {IDLE, HISTORY_LOADED, LOAD_FAILED} ──create──▶ CREATE_SUBMITTING
                                    ├──ok──▶ HISTORY_STALE ──▶ HISTORY_LOADING
                                    └──fail──▶ previous phase (draft stays open)

Invariants:
    - At most one write outstanding; Creator and Editor are mutually exclusive
    - Every load carries a generation token; results for an old token are discarded
    - LOAD_FAILED always has empty records (no stale data next to an error)
    - HISTORY_STALE must be followed by a reload before anything else is shown
    - State is mutated only through the methods below; no IO here
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from payrates.core.domain_types import RateRecord, UserRef, WorkflowPhase
from payrates.core.errors import WorkflowStateError
from payrates.core.rate_history import apply_rate_update, default_effective_from, sort_history


_WRITE_PHASES = frozenset({WorkflowPhase.EDIT_SUBMITTING, WorkflowPhase.CREATE_SUBMITTING})
_EDITABLE_PHASES = frozenset({WorkflowPhase.HISTORY_LOADED})
_CREATABLE_PHASES = frozenset({
    WorkflowPhase.IDLE, WorkflowPhase.HISTORY_LOADED, WorkflowPhase.LOAD_FAILED,
})


@dataclass
class CreateDraft:
    """Values shown in the "add rate" form."""
    effective_from: str
    hourly_rate: str = ""

    @classmethod
    def proposed(cls, today: date) -> "CreateDraft":
        return cls(effective_from=default_effective_from(today).isoformat())


@dataclass
class RateWorkflowState:
    """Selected user, displayed history and in-flight flags — pure dataclass, no IO."""

    phase: WorkflowPhase = WorkflowPhase.IDLE
    user: UserRef | None = None
    records: list[RateRecord] = field(default_factory=list)
    generation: int = 0
    create_draft: CreateDraft | None = None
    # Phase to return to when a create fails
    phase_before_write: WorkflowPhase | None = None

    @property
    def is_loading(self) -> bool:
        return self.phase == WorkflowPhase.HISTORY_LOADING

    @property
    def write_in_flight(self) -> bool:
        return self.phase in _WRITE_PHASES

    @property
    def can_submit(self) -> bool:
        """Drives the enabled state of the submit actions."""
        return not self.write_in_flight and not self.is_loading

    @property
    def create_open(self) -> bool:
        return self.create_draft is not None

    # ─── History ─────────────────────────────────────────────────

    def start_loading(self, user: UserRef) -> int:
        """Enter HISTORY_LOADING for `user`; returns the token for this load."""
        if self.write_in_flight:
            raise WorkflowStateError("Cannot reload history while a change is being saved.")
        if self.user is None or self.user.user_id != user.user_id:
            self.create_draft = None
        self.user = user
        self.records = []
        self.generation += 1
        self.phase = WorkflowPhase.HISTORY_LOADING
        return self.generation

    def is_current(self, token: int) -> bool:
        return token == self.generation and self.phase == WorkflowPhase.HISTORY_LOADING

    def finish_loading(self, token: int, records: list[RateRecord]) -> bool:
        """Accept a load result. False (and no change) if the load was superseded."""
        if not self.is_current(token):
            return False
        self.records = sort_history(records)
        self.phase = WorkflowPhase.HISTORY_LOADED
        return True

    def fail_loading(self, token: int) -> bool:
        """Record a failed load; clears history. False if the load was superseded."""
        if not self.is_current(token):
            return False
        self.records = []
        self.phase = WorkflowPhase.LOAD_FAILED
        return True

    def close(self) -> None:
        """Close the history view; any in-flight load result will be discarded."""
        self.generation += 1
        self.user = None
        self.records = []
        self.create_draft = None
        self.phase_before_write = None
        self.phase = WorkflowPhase.IDLE

    def mark_stale(self) -> None:
        self.phase = WorkflowPhase.HISTORY_STALE

    # ─── Create workflow ─────────────────────────────────────────

    def open_create(self, user: UserRef, today: date) -> CreateDraft:
        if self.write_in_flight:
            raise WorkflowStateError("A change is already being saved.")
        if self.user is None or self.user.user_id != user.user_id:
            self.generation += 1
            self.user = user
            self.records = []
            self.phase = WorkflowPhase.IDLE
        self.create_draft = CreateDraft.proposed(today)
        return self.create_draft

    def cancel_create(self) -> None:
        if self.phase == WorkflowPhase.CREATE_SUBMITTING:
            raise WorkflowStateError("Cannot cancel while the new rate is being saved.")
        self.create_draft = None

    def begin_create(self) -> None:
        if self.create_draft is None or self.user is None:
            raise WorkflowStateError("No rate creation in progress.")
        if self.phase not in _CREATABLE_PHASES:
            raise WorkflowStateError(
                f"Cannot add a rate while {self.phase.value.replace('_', ' ')}.",
            )
        self.phase_before_write = self.phase
        self.phase = WorkflowPhase.CREATE_SUBMITTING

    def finish_create(self) -> None:
        """The store accepted the new record; history must be re-fetched."""
        self.create_draft = None
        self.phase_before_write = None
        self.mark_stale()

    def fail_create(self) -> None:
        """Store rejected the record; nothing local changes, the draft stays open."""
        self.phase = self.phase_before_write or WorkflowPhase.IDLE
        self.phase_before_write = None

    # ─── Edit workflow ───────────────────────────────────────────

    def begin_edit(self) -> None:
        if self.phase not in _EDITABLE_PHASES or self.user is None:
            raise WorkflowStateError(
                f"Cannot edit a rate while {self.phase.value.replace('_', ' ')}.",
            )
        self.phase = WorkflowPhase.EDIT_SUBMITTING

    def finish_edit(self, effective_from: date, hourly_rate: Decimal) -> bool:
        """Reconcile the confirmed edit into the displayed history by key."""
        self.records, matched = apply_rate_update(
            self.records, self.user.user_id, effective_from, hourly_rate,
        )
        self.phase = WorkflowPhase.HISTORY_LOADED
        return matched

    def fail_edit(self) -> None:
        """Discard the attempted edit; the shell must reload authoritative history."""
        self.mark_stale()
