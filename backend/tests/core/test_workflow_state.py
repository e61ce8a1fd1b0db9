"""Rate Workflow State — tests for the explicit finite-state context.

Tests cover:
    - Load lifecycle with generation tokens (superseded results discarded)
    - Load failure clears history
    - Create/edit mutual exclusion and the single outstanding write
    - Keyed reconciliation after a confirmed edit
    - Create draft defaults and cancellation
"""

from datetime import date
from decimal import Decimal

import pytest

from payrates.core.domain_types import RateRecord, UserId, UserRef, WorkflowPhase
from payrates.core.errors import WorkflowStateError
from payrates.core.workflow_state import CreateDraft, RateWorkflowState

MARIA = UserRef(UserId(1), "maria")
NIKOS = UserRef(UserId(2), "nikos")


def _rec(day: str, rate: str, user: int = 1) -> RateRecord:
    return RateRecord(UserId(user), date.fromisoformat(day), Decimal(rate))


def _loaded_state() -> RateWorkflowState:
    state = RateWorkflowState()
    token = state.start_loading(MARIA)
    state.finish_loading(token, [_rec("2024-01-01", "10.00"), _rec("2025-01-01", "11.50")])
    return state


# ─── Loading ─────────────────────────────────────────────────────

def test_new_state_is_idle():
    state = RateWorkflowState()
    assert state.phase == WorkflowPhase.IDLE
    assert state.user is None
    assert state.records == []
    assert state.can_submit


def test_start_loading_enters_loading_phase():
    state = RateWorkflowState()
    state.start_loading(MARIA)
    assert state.phase == WorkflowPhase.HISTORY_LOADING
    assert state.is_loading
    assert not state.can_submit


def test_finish_loading_sorts_descending():
    state = _loaded_state()
    assert state.phase == WorkflowPhase.HISTORY_LOADED
    assert [r.effective_from.year for r in state.records] == [2025, 2024]


def test_fail_loading_clears_history():
    state = _loaded_state()
    token = state.start_loading(MARIA)
    assert state.fail_loading(token)
    assert state.phase == WorkflowPhase.LOAD_FAILED
    assert state.records == []


def test_superseded_load_result_discarded():
    state = RateWorkflowState()
    old = state.start_loading(MARIA)
    new = state.start_loading(NIKOS)
    assert not state.finish_loading(old, [_rec("2024-01-01", "10.00")])
    assert state.phase == WorkflowPhase.HISTORY_LOADING
    assert state.finish_loading(new, [_rec("2024-01-01", "9.00", user=2)])
    assert state.user == NIKOS


def test_close_discards_in_flight_load():
    state = RateWorkflowState()
    token = state.start_loading(MARIA)
    state.close()
    assert not state.finish_loading(token, [_rec("2024-01-01", "10.00")])
    assert not state.fail_loading(token)
    assert state.phase == WorkflowPhase.IDLE
    assert state.records == []


# ─── Edit ────────────────────────────────────────────────────────

def test_edit_requires_loaded_history():
    state = RateWorkflowState()
    with pytest.raises(WorkflowStateError):
        state.begin_edit()


def test_edit_blocks_second_write():
    state = _loaded_state()
    state.begin_edit()
    assert state.write_in_flight
    assert not state.can_submit
    with pytest.raises(WorkflowStateError):
        state.begin_edit()


def test_finish_edit_updates_only_keyed_record():
    state = _loaded_state()
    state.begin_edit()
    assert state.finish_edit(date(2024, 1, 1), Decimal("10.40"))
    assert state.phase == WorkflowPhase.HISTORY_LOADED
    assert state.records == [_rec("2025-01-01", "11.50"), _rec("2024-01-01", "10.40")]


def test_fail_edit_marks_history_stale():
    state = _loaded_state()
    state.begin_edit()
    state.fail_edit()
    assert state.phase == WorkflowPhase.HISTORY_STALE


def test_cannot_reload_during_write():
    state = _loaded_state()
    state.begin_edit()
    with pytest.raises(WorkflowStateError):
        state.start_loading(MARIA)


# ─── Create ──────────────────────────────────────────────────────

def test_open_create_proposes_next_january_first():
    state = RateWorkflowState()
    draft = state.open_create(MARIA, date(2025, 6, 15))
    assert draft == CreateDraft(effective_from="2026-01-01", hourly_rate="")
    assert state.create_open
    assert state.user == MARIA


def test_open_create_on_january_first_proposes_today():
    draft = RateWorkflowState().open_create(MARIA, date(2026, 1, 1))
    assert draft.effective_from == "2026-01-01"


def test_open_create_for_other_user_drops_displayed_history():
    state = _loaded_state()
    state.open_create(NIKOS, date(2025, 6, 15))
    assert state.records == []
    assert state.phase == WorkflowPhase.IDLE


def test_open_create_for_same_user_keeps_history():
    state = _loaded_state()
    state.open_create(MARIA, date(2025, 6, 15))
    assert len(state.records) == 2
    assert state.phase == WorkflowPhase.HISTORY_LOADED


def test_begin_create_without_draft_rejected():
    state = _loaded_state()
    with pytest.raises(WorkflowStateError):
        state.begin_create()


def test_create_and_edit_are_mutually_exclusive():
    state = _loaded_state()
    state.open_create(MARIA, date(2025, 6, 15))
    state.begin_create()
    with pytest.raises(WorkflowStateError):
        state.begin_edit()
    with pytest.raises(WorkflowStateError):
        state.begin_create()


def test_fail_create_restores_phase_and_keeps_draft():
    state = _loaded_state()
    state.open_create(MARIA, date(2025, 6, 15))
    state.create_draft.hourly_rate = "12"
    state.begin_create()
    state.fail_create()
    assert state.phase == WorkflowPhase.HISTORY_LOADED
    assert state.create_draft.hourly_rate == "12"
    assert len(state.records) == 2


def test_finish_create_closes_draft_and_requires_reload():
    state = _loaded_state()
    state.open_create(MARIA, date(2025, 6, 15))
    state.begin_create()
    state.finish_create()
    assert not state.create_open
    assert state.phase == WorkflowPhase.HISTORY_STALE


def test_cancel_create_blocked_while_submitting():
    state = RateWorkflowState()
    state.open_create(MARIA, date(2025, 6, 15))
    state.begin_create()
    with pytest.raises(WorkflowStateError):
        state.cancel_create()


def test_cancel_create_closes_draft():
    state = RateWorkflowState()
    state.open_create(MARIA, date(2025, 6, 15))
    state.cancel_create()
    assert not state.create_open
