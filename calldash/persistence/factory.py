from calldash.config import AppConfig
from calldash.persistence.interface import PersistenceGateway
from calldash.utils import get_logger

logger = get_logger(__name__)

def build_gateway(config: AppConfig) -> PersistenceGateway:
    """Construct (but do not initialize) the gateway selected by `config.backend`."""
    if config.backend == "memory":
        from calldash.persistence.memory_gateway import InMemoryGateway
        return InMemoryGateway()

    if config.backend != "firestore":
        logger.warning(f"Persistence backend '{config.backend}' not supported, using Firestore.")

    from calldash.persistence.firestore_gateway import FirestoreGateway
    return FirestoreGateway(config)
