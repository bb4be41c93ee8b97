import sys
import os
import json
import tempfile

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from calldash.config import AppConfig, load_config

def test_defaults_are_unconfigured():
    config = load_config("does-not-exist.json")
    assert config.collection == "user_charts"
    assert AppConfig().firebase_configured is False

def test_file_then_env_override():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "config.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"backend": "memory", "collection": "from_file"}, f)

        os.environ["CALLDASH_COLLECTION"] = "from_env"
        os.environ["CALLDASH_USE_DUMMY"] = "true"
        try:
            config = load_config(path)
        finally:
            del os.environ["CALLDASH_COLLECTION"]
            del os.environ["CALLDASH_USE_DUMMY"]

    assert config.backend == "memory"
    assert config.collection == "from_env"
    assert config.use_dummy is True

def test_broken_file_is_ignored():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "config.json")
        with open(path, "w", encoding="utf-8") as f:
            f.write("{not json")
        config = load_config(path)
    assert config.backend == "firestore"

def test_inline_service_account():
    assert AppConfig(firebase_config="not json").firebase_service_account() is None
    assert AppConfig(firebase_config="[1, 2]").firebase_service_account() is None
    config = AppConfig(firebase_config=json.dumps({"type": "service_account", "project_id": "p"}))
    assert config.firebase_service_account()["project_id"] == "p"
    assert config.firebase_configured
