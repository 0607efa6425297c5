"""
Review workflow for a single selected event.

States:

    IDLE --select_for_review--> EDITING --request_*--> PENDING_CONFIRMATION
      ^                            ^                          |
      |                            +----cancel_confirmation---+
      +------- confirm() succeeded / close_review() ----------+

An event whose original status is 'approved' opens in EDIT mode (only "save"
is offered); everything else opens in REVIEW mode (approve / decline).

Backend failures never escape confirm(): they are turned into a Notice, the
working copy is kept, and the workflow drops back to EDITING so the operator can
retry or cancel. Approve is two sequential calls (status, then fields) with no
rollback; when only the second one fails the outcome is PARTIAL.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Protocol

from eventreview.edits import (
    AddLanguage,
    EditCommand,
    RemoveLanguage,
    SetLocalized,
    apply_edit,
    command_for_field,
    diff_events,
)
from eventreview.errors import NotAuthenticated, TransportError, ValidationGap, WorkflowError
from eventreview.model import APPROVED, DECLINED, DEFAULT_LANGUAGE, Event, normalize_language_code

logger = logging.getLogger(__name__)

# failures that are reported to the operator instead of raised
CATALOG_FAILURES = (TransportError, NotAuthenticated)


class State(str, Enum):
    IDLE = "idle"
    EDITING = "editing"
    PENDING_CONFIRMATION = "pending_confirmation"


class Mode(str, Enum):
    REVIEW = "review"
    EDIT = "edit"


class Action(str, Enum):
    APPROVE = "approve"
    DECLINE = "decline"
    SAVE = "save"


class Outcome(str, Enum):
    DONE = "done"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class Notice:
    """A short message for the operator (the console shows it as a transient line)."""

    level: str
    title: str
    message: str


class Catalog(Protocol):
    def set_status(self, event_id: int, decision: str) -> None: ...

    def update_fields(self, event_id: int, patch: dict[str, Any]) -> None: ...

    def delete_event(self, event_id: int) -> None: ...


def ignore_notice(_notice: Notice) -> None:
    return None


class ReviewWorkflow:
    """
    State machine driving approve / decline / save for one event at a time.

    `reload` is called (no arguments) after every successful mutation and is
    expected to refetch both collections. `notify` receives Notice objects.
    """

    def __init__(
        self,
        catalog: Catalog,
        reload: Callable[[], Any],
        notify: Callable[[Notice], Any] = ignore_notice,
    ) -> None:
        self.catalog = catalog
        self._reload = reload
        self._notify = notify
        self._state = State.IDLE
        self._mode: Optional[Mode] = None
        self._action: Optional[Action] = None
        self._original: Optional[Event] = None
        self._working: Optional[Event] = None

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def state(self) -> State:
        return self._state

    @property
    def mode(self) -> Optional[Mode]:
        return self._mode

    @property
    def pending_action(self) -> Optional[Action]:
        return self._action

    @property
    def working_copy(self) -> Optional[Event]:
        return self._working

    @property
    def original(self) -> Optional[Event]:
        return self._original

    def diff(self) -> dict[str, Any]:
        if self._original is None or self._working is None:
            return {}
        return diff_events(self._original, self._working)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_for_review(self, event: Event) -> Mode:
        """
        Stage an event: keep a private clone as the original and another as the working copy.
        """
        if self._state is not State.IDLE:
            raise WorkflowError(f"Cannot select an event while {self._state.value}; close the current review first.")
        self._original = event.copy()
        self._working = event.copy()
        self._mode = Mode.EDIT if event.status == APPROVED else Mode.REVIEW
        self._action = None
        self._state = State.EDITING
        logger.debug("Reviewing event %s (%s mode)", event.id, self._mode.value)
        return self._mode

    def close_review(self) -> None:
        """Drop the working copy unconditionally and go back to IDLE."""
        self._reset()

    def _reset(self) -> None:
        self._state = State.IDLE
        self._mode = None
        self._action = None
        self._original = None
        self._working = None

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def edit(self, command: EditCommand) -> Event:
        """
        Apply one edit command to the working copy and return the new working copy.
        """
        if isinstance(command, RemoveLanguage) and normalize_language_code(command.code) == DEFAULT_LANGUAGE:
            # checked before the state so it is refused in every state, IDLE included
            raise ValidationGap(f"The default language '{DEFAULT_LANGUAGE}' cannot be removed.")
        if self._working is None:
            raise WorkflowError("No event selected for review.")
        self._working = apply_edit(self._working, command)
        return self._working

    def edit_field(self, name: str, value: Any) -> Event:
        return self.edit(command_for_field(name, value))

    def edit_localized_field(self, lang: str, name: str, value: str) -> Event:
        return self.edit(SetLocalized(lang, name, value))

    def add_language(self, code: str) -> Event:
        return self.edit(AddLanguage(code))

    def remove_language(self, code: str) -> Event:
        return self.edit(RemoveLanguage(code))

    # ------------------------------------------------------------------
    # Requesting / confirming
    # ------------------------------------------------------------------

    def request_approve(self) -> None:
        self._request(Action.APPROVE, Mode.REVIEW)

    def request_decline(self) -> None:
        self._request(Action.DECLINE, Mode.REVIEW)

    def request_save(self) -> None:
        self._request(Action.SAVE, Mode.EDIT)

    def _request(self, action: Action, mode: Mode) -> None:
        if self._state is not State.EDITING:
            raise WorkflowError(f"Cannot request {action.value} while {self._state.value}.")
        if self._mode is not mode:
            raise WorkflowError(f"'{action.value}' is not available for this event.")
        self._action = action
        self._state = State.PENDING_CONFIRMATION

    def cancel_confirmation(self) -> None:
        if self._state is not State.PENDING_CONFIRMATION:
            raise WorkflowError("Nothing to cancel.")
        self._action = None
        self._state = State.EDITING

    def confirm(self) -> Outcome:
        """
        Execute the requested action against the catalog.

        DONE and PARTIAL end the review and trigger a reload.
        FAILED leaves the working copy untouched and returns to EDITING.
        """
        if self._state is not State.PENDING_CONFIRMATION or self._action is None:
            raise WorkflowError("No action awaiting confirmation.")
        assert self._original is not None and self._working is not None

        action = self._action
        if action is Action.APPROVE:
            outcome = self._confirm_approve()
        elif action is Action.DECLINE:
            outcome = self._confirm_decline()
        else:
            outcome = self._confirm_save()

        if outcome is Outcome.FAILED:
            self._action = None
            self._state = State.EDITING
            return outcome

        self._reset()
        self._reload()
        return outcome

    def _confirm_approve(self) -> Outcome:
        event_id = self._original.id
        changes = self.diff()
        try:
            self.catalog.set_status(event_id, APPROVED)
        except CATALOG_FAILURES as e:
            logger.error("Approving event %s failed: %s", event_id, e)
            self._notify(Notice("error", "Error", f"Could not approve event: {e}"))
            return Outcome.FAILED

        if changes:
            try:
                self.catalog.update_fields(event_id, changes)
            except CATALOG_FAILURES as e:
                # status already changed server-side; nothing is rolled back
                logger.error("Event %s approved but update failed: %s", event_id, e)
                self._notify(
                    Notice("warning", "Partially applied", f"Event was approved, but the edits were not saved: {e}")
                )
                return Outcome.PARTIAL

        self._notify(Notice("success", "Event approved", "The event was approved successfully!"))
        return Outcome.DONE

    def _confirm_decline(self) -> Outcome:
        event_id = self._original.id
        try:
            self.catalog.set_status(event_id, DECLINED)
        except CATALOG_FAILURES as e:
            logger.error("Declining event %s failed: %s", event_id, e)
            self._notify(Notice("error", "Error", f"Could not decline event: {e}"))
            return Outcome.FAILED
        self._notify(Notice("info", "Event declined", "The event was declined."))
        return Outcome.DONE

    def _confirm_save(self) -> Outcome:
        event_id = self._original.id
        changes = self.diff()
        if not changes:
            self._notify(Notice("info", "No changes", "Nothing to save."))
            return Outcome.DONE
        try:
            self.catalog.update_fields(event_id, changes)
        except CATALOG_FAILURES as e:
            logger.error("Saving event %s failed: %s", event_id, e)
            self._notify(Notice("error", "Error", f"Could not save event: {e}"))
            return Outcome.FAILED
        self._notify(Notice("success", "Event saved", "The event was updated successfully."))
        return Outcome.DONE

    # ------------------------------------------------------------------
    # Dashboard-level action
    # ------------------------------------------------------------------

    def delete(self, event_id: int) -> bool:
        """
        Delete an event outright. Only allowed while no review is open.
        """
        if self._state is not State.IDLE:
            raise WorkflowError("Close the current review before deleting an event.")
        try:
            self.catalog.delete_event(event_id)
        except CATALOG_FAILURES as e:
            logger.error("Deleting event %s failed: %s", event_id, e)
            self._notify(Notice("error", "Error", f"Could not delete event: {e}"))
            return False
        self._notify(Notice("success", "Success", "Event deleted."))
        self._reload()
        return True
