"""
Config test fixtures: clean environment via monkeypatch.
"""

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all env vars that config modules might read, for isolation."""
    env_vars_to_clear = [
        "ENVIRONMENT", "LOG_LEVEL", "DEBUG_MODE",
        "REPACKAGE_DELIVERY_MODE", "REPACKAGE_FETCH_TIMEOUT_SECONDS",
        "REPACKAGE_CHUNK_SIZE_BYTES", "REPACKAGE_ZIP_COMPRESSLEVEL",
        "STORAGE_BACKEND", "STORAGE_ACCOUNT_NAME", "STORAGE_CONNECTION_STRING",
        "REPACKAGE_OUTPUT_CONTAINER", "REPACKAGE_KEY_PREFIX", "PRESIGN_EXPIRY_SECONDS",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
