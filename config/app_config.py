"""
Main Application Configuration.

Composes domain-specific configuration modules:
    - StorageConfig (object storage backend, container, SAS lifetime)
    - RepackageConfig (fetch, transcode and delivery settings)

Exports:
    AppConfig: Main configuration class

Dependencies:
    pydantic: BaseModel for configuration validation
    config.storage_config: StorageConfig
    config.repackage_config: RepackageConfig
    config.defaults: Default value constants

Pattern:
    Composition over inheritance - domain configs are composed, not inherited.
"""

import os

from pydantic import BaseModel, Field

from exceptions import ConfigurationError
from .storage_config import StorageBackend, StorageConfig
from .repackage_config import DeliveryMode, RepackageConfig
from .defaults import AppDefaults


class AppConfig(BaseModel):
    """
    Application configuration - composition of domain configs.
    """

    # ========================================================================
    # Core Application Settings
    # ========================================================================

    debug_mode: bool = Field(
        default_factory=lambda: os.getenv("DEBUG_MODE", str(AppDefaults.DEBUG_MODE)).lower() == "true",
        description="Enable debug mode for verbose diagnostics. "
                    "Set DEBUG_MODE=true in environment to enable.",
        examples=[True, False]
    )

    environment: str = Field(
        default_factory=lambda: os.getenv("ENVIRONMENT", AppDefaults.ENVIRONMENT),
        description="Environment name (dev, qa, prod)",
        examples=["dev", "qa", "prod"]
    )

    log_level: str = Field(
        default_factory=lambda: os.getenv("LOG_LEVEL", AppDefaults.LOG_LEVEL).upper(),
        description="Logging level for application diagnostics",
        examples=["DEBUG", "INFO", "WARNING", "ERROR"]
    )

    # ========================================================================
    # Domain Configurations
    # ========================================================================

    storage: StorageConfig = Field(
        default_factory=StorageConfig.from_environment,
        description="Object storage for published archives"
    )

    repackage: RepackageConfig = Field(
        default_factory=RepackageConfig.from_environment,
        description="Fetch, transcode and delivery settings"
    )

    @classmethod
    def from_environment(cls) -> "AppConfig":
        """
        Load and validate configuration from environment variables.

        Raises:
            ConfigurationError: If values are malformed or inconsistent
        """
        try:
            config = cls()
        except ValueError as e:
            # pydantic.ValidationError is a ValueError subclass
            raise ConfigurationError(f"Invalid configuration: {e}") from e
        config.validate_deployment()
        return config

    def validate_deployment(self) -> None:
        """
        Fail fast on combinations that cannot work at request time.

        Raises:
            ConfigurationError: Presigned delivery on the azure backend
                without any way to authenticate
        """
        storage = self.storage
        if (
            self.repackage.delivery_mode == DeliveryMode.PRESIGNED_URL
            and storage.backend == StorageBackend.AZURE
            and not storage.uses_connection_string
            and storage.account_is_placeholder
        ):
            raise ConfigurationError(
                "STORAGE_ACCOUNT_NAME or STORAGE_CONNECTION_STRING must be set "
                "when REPACKAGE_DELIVERY_MODE=presigned_url"
            )

    def debug_dict(self) -> dict:
        return {
            "debug_mode": self.debug_mode,
            "environment": self.environment,
            "log_level": self.log_level,
            "storage": self.storage.debug_dict(),
            "repackage": self.repackage.debug_dict(),
        }
