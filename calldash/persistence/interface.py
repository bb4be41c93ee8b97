"""
Persistence gateway contract.

Concrete backends only implement the raw document operations (`_connect`,
`_write`, `_read`, `_watch`). Everything the rest of the dashboard relies on
lives here: offline mode, key encoding, payload validation, and the rule that
backend exceptions never escape `save`, `fetch` or `subscribe`.
"""

import random
import string
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional
from urllib.parse import quote

from calldash.data.models import ChartDataset, PersistedRecord
from calldash.utils import get_logger

logger = get_logger(__name__)

Unsubscribe = Callable[[], None]


def normalize_key(email: str) -> str:
    return email.strip().lower()


def encode_key(email: str) -> str:
    """Map an email to a document id. Equal emails (after normalization) share one id."""
    return quote(normalize_key(email), safe="")


def dummy_session_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=7))
    return "DUMMY_USER_" + suffix


@dataclass(frozen=True)
class Session:
    session_id: str
    offline: bool


class FetchStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass
class FetchResult:
    status: FetchStatus
    record: Optional[PersistedRecord] = None
    reason: Optional[str] = None

    @property
    def dataset(self) -> Optional[ChartDataset]:
        return self.record.dataset if self.record is not None else None

    @classmethod
    def found(cls, record: PersistedRecord) -> "FetchResult":
        return cls(FetchStatus.FOUND, record=record)

    @classmethod
    def not_found(cls) -> "FetchResult":
        return cls(FetchStatus.NOT_FOUND)

    @classmethod
    def failed(cls, reason: str) -> "FetchResult":
        return cls(FetchStatus.FAILED, reason=reason)


class _Subscription:
    """Delivers change callbacks until cancelled; never after `cancel()` returns."""

    def __init__(self, key: str, on_change: Callable[[Optional[ChartDataset]], None]):
        self.key = key
        self.on_change = on_change
        self.active = True
        self.stop: Optional[Unsubscribe] = None
        self._lock = threading.RLock()

    def deliver(self, payload: Optional[Dict[str, Any]]):
        with self._lock:
            if not self.active:
                return
            dataset = None
            if payload is not None:
                try:
                    dataset = PersistedRecord.from_document(payload).dataset
                except ValueError as e:
                    logger.error(f"Ignoring malformed snapshot for {self.key}: {e}")
            try:
                self.on_change(dataset)
            except Exception as e:
                logger.error(f"Change callback for {self.key} failed: {e}")

    def cancel(self):
        with self._lock:
            if not self.active:
                return
            self.active = False
            stop = self.stop
        if stop is not None:
            try:
                stop()
            except Exception as e:
                logger.warning(f"Stopping listener for {self.key} failed: {e}")


class PersistenceGateway(ABC):
    def __init__(self):
        self._session: Optional[Session] = None

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def ready(self) -> bool:
        return self._session is not None

    @property
    def offline(self) -> bool:
        return self._session is None or self._session.offline

    # --- backend hooks ---

    @abstractmethod
    def _connect(self) -> Optional[str]:
        """
        Open the backing connection.
        Returns the session id, or None when the backend is unconfigured or disabled.
        """
        pass

    @abstractmethod
    def _write(self, doc_id: str, document: Dict[str, Any]) -> None:
        """Replace the whole document `doc_id`."""
        pass

    @abstractmethod
    def _read(self, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return the stored document, or None if it does not exist."""
        pass

    @abstractmethod
    def _watch(self, doc_id: str, deliver: Callable[[Optional[Dict[str, Any]]], None]) -> Unsubscribe:
        pass

    # --- public contract ---

    def initialize(self) -> Session:
        if self._session is not None:
            return self._session

        try:
            session_id = self._connect()
        except Exception as e:
            logger.error(f"Persistence backend failed to initialize: {e}")
            session_id = None

        if session_id is None:
            logger.warning("Persistence running in DUMMY mode. Saved charts will not persist.")
            self._session = Session(session_id=dummy_session_id(), offline=True)
        else:
            logger.info(f"Persistence connected, session {session_id[:8]}...")
            self._session = Session(session_id=session_id, offline=False)
        return self._session

    def save(self, key: str, dataset: ChartDataset) -> bool:
        if self.offline:
            logger.warning("Attempt to save while offline, ignored.")
            return False

        try:
            record = PersistedRecord(
                key=normalize_key(key),
                dataset=dataset,
                saved_at=datetime.now(timezone.utc),
            )
            self._write(encode_key(key), record.to_document())
        except Exception as e:
            logger.error(f"Saving chart data for {key} failed: {e}")
            return False
        logger.info(f"Saved {len(dataset)} buckets for {key}")
        return True

    def fetch_result(self, key: str) -> FetchResult:
        if self.offline:
            logger.warning("Attempt to fetch while offline, returning nothing.")
            return FetchResult.not_found()

        try:
            document = self._read(encode_key(key))
        except Exception as e:
            logger.error(f"Fetching chart data for {key} failed: {e}")
            return FetchResult.failed(str(e))

        if document is None:
            return FetchResult.not_found()

        try:
            record = PersistedRecord.from_document(document)
        except ValueError as e:
            logger.error(f"Stored chart data for {key} is malformed: {e}")
            return FetchResult.failed(str(e))
        return FetchResult.found(record)

    def fetch(self, key: str) -> Optional[ChartDataset]:
        result = self.fetch_result(key)
        return result.dataset if result.status is FetchStatus.FOUND else None

    def subscribe(self, key: str, on_change: Callable[[Optional[ChartDataset]], None]) -> Unsubscribe:
        if self.offline:
            logger.warning("subscribe called while offline, returning a no-op unsubscribe.")
            return lambda: None

        subscription = _Subscription(key, on_change)
        try:
            subscription.stop = self._watch(encode_key(key), subscription.deliver)
        except Exception as e:
            logger.error(f"Listening for chart data for {key} failed: {e}")
            subscription.active = False
            return lambda: None
        return subscription.cancel
