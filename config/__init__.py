# ============================================================================
# CLAUDE CONTEXT - CONFIG PACKAGE INIT
# ============================================================================
# STATUS: Configuration package exports
# PURPOSE: Expose config models and the composition-root accessor
# EXPORTS: AppConfig, StorageConfig, RepackageConfig, enums, get_config, debug_config
# INTERFACES: Pydantic BaseModel
# PYDANTIC_MODELS: AppConfig, StorageConfig, RepackageConfig
# DEPENDENCIES: domain config modules
# VALIDATION: Pydantic v2 validation
# ENTRY_POINTS: from config import get_config, DeliveryMode
# ============================================================================

"""
Configuration Package - Domain-Specific Configuration Modules

Structure:
    config/
    ├── __init__.py              # This file - exports and accessor
    ├── app_config.py            # Main config (composes domain configs)
    ├── storage_config.py        # Object storage backend, container, SAS lifetime
    ├── repackage_config.py      # Fetch/transcode/delivery settings
    └── defaults.py              # Default values

Usage:
    # Composition root only (function_app.py). Everything below the
    # triggers receives its configuration explicitly.
    from config import get_config
    config = get_config()
    mode = config.repackage.delivery_mode

    # Debug output
    from config import debug_config
    info = debug_config()  # Secrets masked
"""

from typing import Optional

from .storage_config import StorageBackend, StorageConfig
from .repackage_config import DeliveryMode, RepackageConfig
from .app_config import AppConfig


_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get the process configuration, loading it from the environment once.

    Returns:
        AppConfig instance loaded from environment
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = AppConfig.from_environment()
    return _config_instance


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() re-reads the environment."""
    global _config_instance
    _config_instance = None


def debug_config() -> dict:
    """
    Get sanitized configuration for debugging (masks sensitive values).

    Returns:
        Dictionary with configuration values, secrets masked
    """
    try:
        return get_config().debug_dict()
    except Exception as e:
        return {'error': f'Configuration validation failed: {e}'}


__all__ = [
    'AppConfig',
    'get_config',
    'reset_config',
    'debug_config',
    'StorageConfig',
    'StorageBackend',
    'RepackageConfig',
    'DeliveryMode',
]
