"""
Root conftest.py: sys.path, env vars, shared fixtures.

Sets up the test environment so all production code can be imported
without Azure credentials or network access.
"""

import os
import sys

import pytest

# Add project root to sys.path so 'core', 'services', 'config', etc. are importable
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture(autouse=True, scope="session")
def set_minimal_env_vars():
    """
    Set minimal environment variables to prevent import crashes.

    function_app.py and the config package read the environment on first
    use. These defaults keep everything in-process.
    """
    defaults = {
        "ENVIRONMENT": "dev",
        "STORAGE_BACKEND": "memory",
        "REPACKAGE_DELIVERY_MODE": "inline",
        "LOG_LEVEL": "WARNING",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


@pytest.fixture(autouse=True)
def reset_cached_config():
    """Drop the cached AppConfig between tests."""
    from config import reset_config
    reset_config()
    yield
    reset_config()


@pytest.fixture
def tar_zst():
    """Factory fixture: build a .tar.zst payload from (name, data) members."""
    from tests.factories.archive_factories import build_tar_zst
    return build_tar_zst
