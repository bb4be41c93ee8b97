import json
import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from calldash.utils import get_logger

logger = get_logger(__name__)

ENV_PREFIX = "CALLDASH_"

# env var suffix -> config field
ENV_FIELDS = {
    "BACKEND": "backend",
    "USE_DUMMY": "use_dummy",
    "FIREBASE_CREDENTIALS": "firebase_credentials_path",
    "FIREBASE_CONFIG": "firebase_config",
    "FIREBASE_PROJECT_ID": "firebase_project_id",
    "COLLECTION": "collection",
    "CONFIRM_ON_FETCH_FAILURE": "confirm_on_fetch_failure",
    "LOG_LEVEL": "log_level",
}

class AppConfig(BaseModel):
    backend: str = Field(default="firestore", description="Persistence backend: firestore, memory")
    use_dummy: bool = Field(default=False, description="Force offline mode even when Firebase is configured")
    firebase_credentials_path: Optional[str] = Field(default=None, description="Path to a service account JSON file")
    firebase_config: Optional[str] = Field(default=None, description="Inline service account JSON")
    firebase_project_id: Optional[str] = Field(default=None, description="Project id, used with application default credentials")
    collection: str = Field(default="user_charts", description="Firestore collection holding saved charts")

    # Route a failed existence check to the overwrite prompt instead of straight to editing
    confirm_on_fetch_failure: bool = False
    log_level: str = "INFO"

    def firebase_service_account(self) -> Optional[Dict[str, Any]]:
        """Parsed inline service account, or None when absent or malformed."""
        if not self.firebase_config:
            return None
        try:
            parsed = json.loads(self.firebase_config)
        except ValueError as e:
            logger.warning(f"{ENV_PREFIX}FIREBASE_CONFIG is present but not valid JSON: {e}")
            return None
        if not isinstance(parsed, dict):
            logger.warning(f"{ENV_PREFIX}FIREBASE_CONFIG must be a JSON object.")
            return None
        return parsed

    @property
    def firebase_configured(self) -> bool:
        return bool(
            self.firebase_credentials_path
            or self.firebase_service_account()
            or self.firebase_project_id
        )

def load_config(json_path: str = "calldash_config.json") -> AppConfig:
    config_data = {}
    if os.path.exists(json_path):
        try:
            with open(json_path, "r", encoding="utf-8") as f:
                config_data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not load {json_path}: {e}")
            config_data = {}

    # Environment variables override the config file
    for suffix, field_name in ENV_FIELDS.items():
        value = os.environ.get(ENV_PREFIX + suffix)
        if value:
            config_data[field_name] = value

    return AppConfig(**config_data)

CONFIG = load_config()
