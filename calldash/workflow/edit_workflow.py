"""
Edit workflow behind the "Customize" modal.

    IDLE -> COLLECTING_KEY -> CHECKING_EXISTING -> CONFIRM_OVERWRITE | EDITING
         -> SAVING -> IDLE (saved) | EDITING (failed)

`cancel()` closes the modal from any state and drops the draft. The workflow
never touches the displayed dataset itself: `save()` hands the saved dataset
back and the shell decides whether to apply it.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from calldash.data.models import ChartDataset, clone_dataset, is_valid_email, parse_count
from calldash.persistence.interface import FetchStatus, PersistenceGateway
from calldash.utils import get_logger

logger = get_logger(__name__)

class WorkflowState(Enum):
    IDLE = "idle"
    COLLECTING_KEY = "collecting_key"
    CHECKING_EXISTING = "checking_existing"
    CONFIRM_OVERWRITE = "confirm_overwrite"
    EDITING = "editing"
    SAVING = "saving"


MODAL_TITLES = {
    WorkflowState.COLLECTING_KEY: "Enter Email",
    WorkflowState.CHECKING_EXISTING: "Enter Email",
    WorkflowState.CONFIRM_OVERWRITE: "Confirm Overwrite",
    WorkflowState.EDITING: "Edit Chart Data",
    WorkflowState.SAVING: "Edit Chart Data",
}


class CancellationToken:
    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class SaveResult:
    saved: bool
    dataset: Optional[ChartDataset] = None
    # False when the caller's token was cancelled before the save resolved
    apply: bool = False


class WorkflowError(Exception):
    """An action was requested in a state that does not accept it."""


class EditWorkflow:
    def __init__(self, gateway: PersistenceGateway, confirm_on_fetch_failure: bool = False):
        self.gateway = gateway
        self.confirm_on_fetch_failure = confirm_on_fetch_failure
        self.state = WorkflowState.IDLE
        self.key = ""
        self.draft: ChartDataset = []
        self.previous: Optional[ChartDataset] = None
        # True when the existence check failed, so previous values are unknown
        self.previous_unknown = False
        self.error: Optional[str] = None
        self.notification: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.state is not WorkflowState.IDLE

    @property
    def title(self) -> str:
        return MODAL_TITLES.get(self.state, "")

    def _require(self, *states: WorkflowState):
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise WorkflowError(f"cannot do this in state '{self.state.value}' (expected {allowed})")

    def _reset(self):
        self.key = ""
        self.draft = []
        self.previous = None
        self.previous_unknown = False
        self.error = None
        self.notification = None

    def open_edit(self, displayed: ChartDataset):
        self._require(WorkflowState.IDLE)
        self._reset()
        self.draft = clone_dataset(displayed)
        self.state = WorkflowState.COLLECTING_KEY

    def submit_key(self, key: str) -> WorkflowState:
        self._require(WorkflowState.COLLECTING_KEY)
        key = (key or "").strip()
        self.key = key
        if not is_valid_email(key):
            self.error = "Please enter a valid email address."
            return self.state

        self.error = None
        self.state = WorkflowState.CHECKING_EXISTING
        result = self.gateway.fetch_result(key)

        if self.state is not WorkflowState.CHECKING_EXISTING:
            # cancelled while the check was running
            return self.state

        if result.status is FetchStatus.FOUND:
            self.previous = result.dataset
            self.state = WorkflowState.CONFIRM_OVERWRITE
        elif result.status is FetchStatus.FAILED and self.confirm_on_fetch_failure:
            logger.warning(f"Existence check for {key} failed ({result.reason}), asking before overwrite.")
            self.previous = None
            self.previous_unknown = True
            self.state = WorkflowState.CONFIRM_OVERWRITE
        else:
            self.previous = None
            self.state = WorkflowState.EDITING
        return self.state

    def reject_overwrite(self):
        self._require(WorkflowState.CONFIRM_OVERWRITE)
        self.previous = None
        self.previous_unknown = False
        self.state = WorkflowState.COLLECTING_KEY

    def confirm_overwrite(self):
        self._require(WorkflowState.CONFIRM_OVERWRITE)
        self.state = WorkflowState.EDITING

    def change_field(self, index: int, raw_value) -> int:
        self._require(WorkflowState.EDITING, WorkflowState.SAVING)
        if not 0 <= index < len(self.draft):
            raise WorkflowError(f"no bucket at index {index} (draft has {len(self.draft)})")
        count = parse_count(raw_value)
        self.draft[index].set_count(count)
        return count

    def draft_counts(self) -> List[int]:
        return [datum.count for datum in self.draft]

    def save(self, token: Optional[CancellationToken] = None) -> SaveResult:
        if self.state is WorkflowState.SAVING:
            logger.warning("Save already in flight, ignoring.")
            return SaveResult(saved=False)
        self._require(WorkflowState.EDITING)
        if not self.key:
            self.notification = "Enter an email before saving."
            return SaveResult(saved=False)

        to_save = clone_dataset(self.draft)
        self.state = WorkflowState.SAVING
        self.notification = None
        ok = self.gateway.save(self.key, to_save)
        closed = self.state is not WorkflowState.SAVING
        apply = ok and not (token is not None and token.cancelled)

        if ok:
            logger.info(f"Custom chart data saved for {self.key}")
            if not closed:
                self.state = WorkflowState.IDLE
                self._reset()
            return SaveResult(saved=True, dataset=to_save, apply=apply)

        logger.error(f"Saving custom chart data for {self.key} failed.")
        if not closed:
            self.state = WorkflowState.EDITING
            self.notification = "Failed to save custom data. Check the logs for details."
        return SaveResult(saved=False)

    def cancel(self):
        """Close the modal. An in-flight save still resolves through `save()`."""
        if self.state is WorkflowState.IDLE:
            return
        self.state = WorkflowState.IDLE
        self._reset()
