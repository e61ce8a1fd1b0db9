"""Rate Workflow — the operator-facing orchestration of loader, creator and editor.

Invariants:
    - Every submitted create or edit emits one notification for its outcome
    - Validation failures never reach the store
    - After a failed or rejected edit, history is reloaded from the store:
      no optimistic state survives a reported failure
    - A successful create always re-fetches history (never splices locally)
    - A successful edit is reconciled in place by (user_id, effective_from)
    - RatesChangedSignal fires after every successful write, never after a failure
    - Results arriving after the operator navigated away are discarded
    - An unexpected store exception propagates, but never leaves a write phase
      behind: the form stays open after a create, history is stale after an edit

Design Decisions:
    - Shell around RateWorkflowState (core): this class awaits, the state decides
    - clock injected so the "next January 1" proposal is testable
"""

import logging
from collections.abc import Callable
from datetime import date

from payrates.core.domain_types import RateRecord, UserRef, WorkflowPhase
from payrates.core.errors import (
    InvalidInputError, PayRatesError, WorkflowStateError,
)
from payrates.core.rate_parsing import (
    is_rate_keystroke_allowed, parse_effective_from, parse_hourly_rate,
)
from payrates.core.repository_protocols import Notifier, RateStore
from payrates.core.workflow_state import CreateDraft, RateWorkflowState
from payrates.services.notifications import RatesChangedSignal, success, warning
from payrates.services.rate_creator import create_rate_record, validate_new_rate
from payrates.services.rate_editor import update_rate_record
from payrates.services.rate_history_loader import load_rate_history

logger = logging.getLogger(__name__)


class RateWorkflow:
    """One operator's view: a selected user, their history and the add/edit forms."""

    def __init__(
        self,
        store: RateStore,
        notifier: Notifier,
        signal: RatesChangedSignal | None = None,
        clock: Callable[[], date] = date.today,
        state: RateWorkflowState | None = None,
    ):
        self.store = store
        self.notifier = notifier
        self.signal = signal or RatesChangedSignal()
        self.clock = clock
        self.state = state or RateWorkflowState()

    @property
    def records(self) -> list[RateRecord]:
        return self.state.records

    # ─── History ─────────────────────────────────────────────────

    async def open_history(self, user: UserRef) -> bool:
        """Load `user`'s history. True if the result was displayed."""
        token = self.state.start_loading(user)
        try:
            records = await load_rate_history(self.store, user.user_id)
        except PayRatesError as e:
            if self.state.fail_loading(token):
                self.notifier.notify(e.to_notification())
            else:
                logger.debug(f"Discarded failed load for user {user.user_id}")
            return False
        except Exception:
            self.state.fail_loading(token)
            raise

        if not self.state.finish_loading(token, records):
            logger.debug(
                "Discarded superseded rate history",
                extra={"user_id": user.user_id},
            )
            return False
        return True

    async def reload(self) -> bool:
        if self.state.user is None:
            return False
        return await self.open_history(self.state.user)

    def close_history(self) -> None:
        self.state.close()

    # ─── Create ──────────────────────────────────────────────────

    def open_create(self, user: UserRef) -> CreateDraft:
        """Open the add form with the default proposal (next January 1, empty rate)."""
        return self.state.open_create(user, self.clock())

    def set_draft_rate(self, text: str) -> bool:
        """Keystroke guard for the rate field. False leaves the draft unchanged."""
        if self.state.create_draft is None:
            raise WorkflowStateError("No rate creation in progress.")
        if not is_rate_keystroke_allowed(text):
            return False
        self.state.create_draft.hourly_rate = text
        return True

    def set_draft_effective_from(self, text: str) -> None:
        if self.state.create_draft is None:
            raise WorkflowStateError("No rate creation in progress.")
        self.state.create_draft.effective_from = text

    def cancel_create(self) -> None:
        self.state.cancel_create()

    async def submit_create(self) -> RateRecord | None:
        """Validate and submit the draft. None if it was rejected (form stays open)."""
        draft = self.state.create_draft
        user = self.state.user
        if draft is None or user is None:
            raise WorkflowStateError("No rate creation in progress.")
        if not self.state.can_submit:
            raise WorkflowStateError("A change is already being saved.")

        try:
            user_id, effective_from, hourly_rate = validate_new_rate(
                user.user_id, draft.effective_from, draft.hourly_rate,
            )
        except InvalidInputError as e:
            logger.warning(f"Rejected new rate: {e.message}", extra={"user_id": user.user_id})
            self.notifier.notify(warning("Missing/Invalid", e.message))
            return None

        self.state.begin_create()
        generation = self.state.generation
        try:
            record = await create_rate_record(
                self.store, user_id, effective_from, hourly_rate,
            )
        except PayRatesError as e:
            if self.state.generation != generation:
                return None
            history_shown = self.state.phase_before_write not in (None, WorkflowPhase.IDLE)
            self.state.fail_create()
            self.notifier.notify(e.to_notification())
            if history_shown:
                await self.reload()
            return None
        except Exception:
            if self.state.generation == generation:
                self.state.fail_create()
            raise

        if self.state.generation == generation:
            self.state.finish_create()
            self.notifier.notify(success("Created", "New hourly rate added."))
            await self.reload()
        await self.signal.emit(user_id)
        return record

    # ─── Edit ────────────────────────────────────────────────────

    async def submit_edit(
        self, effective_from: str | date, hourly_rate: str,
    ) -> RateRecord | None:
        """Amend one record's rate. None if rejected; history is then reloaded."""
        self.state.begin_edit()
        user = self.state.user
        generation = self.state.generation

        try:
            day = parse_effective_from(effective_from)
            rate = parse_hourly_rate(hourly_rate)
        except InvalidInputError as e:
            logger.warning(f"Rejected rate edit: {e.message}", extra={"user_id": user.user_id})
            self.state.fail_edit()
            self.notifier.notify(warning("Invalid", e.message))
            await self.reload()
            return None

        try:
            record = await update_rate_record(self.store, user.user_id, day, rate)
        except PayRatesError as e:
            if self.state.generation != generation:
                return None
            self.state.fail_edit()
            self.notifier.notify(e.to_notification())
            await self.reload()
            return None
        except Exception:
            if self.state.generation == generation:
                self.state.fail_edit()
            raise

        if self.state.generation == generation:
            if not self.state.finish_edit(day, record.hourly_rate):
                logger.warning(
                    "Edited rate not present in displayed history; reloading",
                    extra={"user_id": user.user_id, "effective_from": day.isoformat()},
                )
                self.state.mark_stale()
                await self.reload()
            self.notifier.notify(success("Saved", "Hourly rate updated."))
        await self.signal.emit(user.user_id)
        return record
