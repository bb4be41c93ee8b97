import copy
import threading
import uuid
from typing import Any, Callable, Dict, List, Optional

from calldash.persistence.interface import PersistenceGateway, Unsubscribe

Deliver = Callable[[Optional[Dict[str, Any]]], None]

class InMemoryGateway(PersistenceGateway):
    """
    Process-local document store with the same observable behavior as Firestore.
    Listeners receive the current document on registration and after every write.
    """

    def __init__(self):
        super().__init__()
        self.documents: Dict[str, Dict[str, Any]] = {}
        self._listeners: Dict[str, List[Deliver]] = {}
        self._lock = threading.Lock()

    def _connect(self) -> Optional[str]:
        return "memory-" + uuid.uuid4().hex

    def _write(self, doc_id: str, document: Dict[str, Any]) -> None:
        stored = copy.deepcopy(document)
        with self._lock:
            self.documents[doc_id] = stored
            listeners = list(self._listeners.get(doc_id, []))
        for deliver in listeners:
            deliver(copy.deepcopy(stored))

    def _read(self, doc_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            document = self.documents.get(doc_id)
        return copy.deepcopy(document) if document is not None else None

    def _watch(self, doc_id: str, deliver: Deliver) -> Unsubscribe:
        with self._lock:
            self._listeners.setdefault(doc_id, []).append(deliver)
        deliver(self._read(doc_id))

        def stop():
            with self._lock:
                listeners = self._listeners.get(doc_id, [])
                if deliver in listeners:
                    listeners.remove(deliver)

        return stop
