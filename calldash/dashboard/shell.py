from typing import Dict, List, Optional

import pandas as pd

from calldash.data.defaults import DEFAULT_CALL_DURATION, HOSTILITY_DATA, SAD_PATH_DATA
from calldash.data.models import ChartDataset, clone_dataset, percentage_view
from calldash.persistence.interface import PersistenceGateway, Session
from calldash.utils import get_logger
from calldash.workflow.edit_workflow import CancellationToken, EditWorkflow, SaveResult

logger = get_logger(__name__)

SESSION_ID_PREVIEW = 8

class DashboardShell:
    """
    Top-level dashboard state: connection status, the displayed call-duration
    dataset, and the edit modal. UI surfaces (Streamlit, Flask) drive this object
    and render what it exposes.
    """

    def __init__(self, gateway: PersistenceGateway, confirm_on_fetch_failure: bool = False):
        self.gateway = gateway
        self.session: Optional[Session] = None
        self.displayed: ChartDataset = clone_dataset(DEFAULT_CALL_DURATION)
        self.workflow = EditWorkflow(gateway, confirm_on_fetch_failure=confirm_on_fetch_failure)
        self._save_token: Optional[CancellationToken] = None
        self.mounted = False

    def start(self) -> Session:
        if self.session is None:
            self.session = self.gateway.initialize()
            if self.session.offline:
                logger.warning("Running in DUMMY mode, database writes will not persist.")
        self.mounted = True
        return self.session

    @property
    def ready(self) -> bool:
        return self.session is not None

    @property
    def connected(self) -> bool:
        return self.session is not None and not self.session.offline

    @property
    def status_label(self) -> str:
        if self.session is None:
            return "Not Connected"
        preview = f"{self.session.session_id[:SESSION_ID_PREVIEW]}..."
        if self.session.offline:
            return f"Not Connected ({preview})"
        return f"Connected: {preview}"

    @property
    def edit_enabled(self) -> bool:
        return self.ready and not self.workflow.is_open

    # --- derived chart views ---

    def duration_view(self) -> pd.DataFrame:
        return percentage_view(self.displayed)

    @staticmethod
    def sad_path_view() -> pd.DataFrame:
        return pd.DataFrame([d.model_dump() for d in SAD_PATH_DATA])

    @staticmethod
    def hostility_view() -> pd.DataFrame:
        return pd.DataFrame([d.model_dump() for d in HOSTILITY_DATA])

    def chart_records(self) -> Dict[str, List[dict]]:
        return {
            "call_duration": self.duration_view().to_dict(orient="records"),
            "sad_path": self.sad_path_view().to_dict(orient="records"),
            "hostility": self.hostility_view().to_dict(orient="records"),
        }

    # --- edit modal ---

    def open_edit(self):
        if not self.ready:
            logger.warning("Edit requested before persistence is initialized.")
            return
        self.workflow.open_edit(self.displayed)

    def close_edit(self):
        self.workflow.cancel()

    def save_edit(self) -> SaveResult:
        token = CancellationToken()
        self._save_token = token
        try:
            result = self.workflow.save(token)
        finally:
            if self._save_token is token:
                self._save_token = None

        if result.apply and self.mounted:
            self.displayed = result.dataset
        elif result.saved:
            logger.info("Save finished after the dashboard was torn down, result ignored.")
        return result

    def teardown(self):
        self.mounted = False
        if self._save_token is not None:
            self._save_token.cancel()
        self.workflow.cancel()
