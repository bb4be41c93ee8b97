import uuid
from typing import Any, Callable, Dict, Optional

import firebase_admin
from firebase_admin import credentials, firestore

from calldash.config import AppConfig
from calldash.persistence.interface import PersistenceGateway, Unsubscribe
from calldash.utils import get_logger

logger = get_logger(__name__)

class FirestoreGateway(PersistenceGateway):
    """Saved charts in Cloud Firestore, one document per encoded email."""

    APP_NAME = "calldash"

    def __init__(self, config: AppConfig, client=None):
        super().__init__()
        self.config = config
        self.collection = config.collection
        self._db = client

    def _credential(self):
        if self.config.firebase_credentials_path:
            return credentials.Certificate(self.config.firebase_credentials_path)
        account = self.config.firebase_service_account()
        if account:
            return credentials.Certificate(account)
        return credentials.ApplicationDefault()

    def _connect(self) -> Optional[str]:
        if self.config.use_dummy:
            logger.info("Firestore disabled via use_dummy.")
            return None

        if self._db is None:
            if not self.config.firebase_configured:
                logger.warning("No Firebase credentials configured.")
                return None
            try:
                app = firebase_admin.get_app(self.APP_NAME)
            except ValueError:
                options = {"projectId": self.config.firebase_project_id} if self.config.firebase_project_id else None
                logger.info(f"Initializing Firebase app '{self.APP_NAME}'")
                app = firebase_admin.initialize_app(self._credential(), options, name=self.APP_NAME)
            self._db = firestore.client(app)

        return uuid.uuid4().hex

    def _document(self, doc_id: str):
        return self._db.collection(self.collection).document(doc_id)

    def _write(self, doc_id: str, document: Dict[str, Any]) -> None:
        # set() without merge replaces the document in one write
        self._document(doc_id).set(document)

    def _read(self, doc_id: str) -> Optional[Dict[str, Any]]:
        snap = self._document(doc_id).get()
        if not snap.exists:
            return None
        return snap.to_dict()

    def _watch(self, doc_id: str, deliver: Callable[[Optional[Dict[str, Any]]], None]) -> Unsubscribe:
        def on_snapshot(doc_snapshots, changes, read_time):
            snap = doc_snapshots[0] if doc_snapshots else None
            deliver(snap.to_dict() if snap is not None and snap.exists else None)

        watch = self._document(doc_id).on_snapshot(on_snapshot)
        return watch.unsubscribe
