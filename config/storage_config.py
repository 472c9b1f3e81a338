# ============================================================================
# CLAUDE CONTEXT - STORAGE CONFIGURATION
# ============================================================================
# STATUS: Configuration - object storage for published archives
# PURPOSE: Blob storage backend, account, container, key layout and SAS lifetime
# EXPORTS: StorageBackend, StorageConfig
# INTERFACES: Pydantic BaseModel
# PYDANTIC_MODELS: StorageConfig
# DEPENDENCIES: pydantic, os, typing, enum
# SOURCE: Environment variables (STORAGE_BACKEND, STORAGE_ACCOUNT_NAME, STORAGE_CONNECTION_STRING, ...)
# SCOPE: Storage-specific configuration
# VALIDATION: Pydantic v2 validation
# ENTRY_POINTS: from config import StorageConfig, StorageBackend
# ============================================================================

"""
Object Storage Configuration

Provides configuration for:
- Storage backend selection (Azure Blob Storage or in-process memory)
- Account authentication (connection string or DefaultAzureCredential)
- Output container and object key prefix
- Presigned (SAS) URL lifetime
"""

import os
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .defaults import StorageDefaults


class StorageBackend(str, Enum):
    """Object publisher implementations."""
    AZURE = "azure"
    MEMORY = "memory"


class StorageConfig(BaseModel):
    """
    Object storage configuration.

    Authentication precedence for the azure backend:
        1. STORAGE_CONNECTION_STRING (account key - SAS signed with the key)
        2. STORAGE_ACCOUNT_NAME + DefaultAzureCredential (user delegation SAS)
    """

    backend: StorageBackend = Field(
        default_factory=lambda: StorageBackend(
            os.getenv("STORAGE_BACKEND", StorageDefaults.BACKEND).strip().lower()
        ),
        description="Object publisher backend (azure, memory)"
    )

    account_name: str = Field(
        default_factory=lambda: os.getenv(
            "STORAGE_ACCOUNT_NAME",
            StorageDefaults.DEFAULT_ACCOUNT_NAME
        ),
        description="Azure storage account name (used with DefaultAzureCredential)"
    )

    connection_string: Optional[str] = Field(
        default_factory=lambda: os.getenv("STORAGE_CONNECTION_STRING") or None,
        description="Azure storage connection string (takes precedence over account_name)"
    )

    container: str = Field(
        default_factory=lambda: os.getenv(
            "REPACKAGE_OUTPUT_CONTAINER",
            StorageDefaults.OUTPUT_CONTAINER
        ),
        min_length=3,
        max_length=63,
        description="Container receiving repackaged archives"
    )

    key_prefix: str = Field(
        default_factory=lambda: os.getenv(
            "REPACKAGE_KEY_PREFIX",
            StorageDefaults.KEY_PREFIX
        ),
        description="Virtual folder prepended to every object key"
    )

    presign_expiry_seconds: int = Field(
        default_factory=lambda: int(os.getenv(
            "PRESIGN_EXPIRY_SECONDS",
            str(StorageDefaults.PRESIGN_EXPIRY_SECONDS)
        )),
        ge=1,
        le=StorageDefaults.PRESIGN_EXPIRY_MAX_SECONDS,
        description="Lifetime of presigned download URLs in seconds"
    )

    @field_validator("key_prefix")
    @classmethod
    def _strip_slashes(cls, value: str) -> str:
        return value.strip("/")

    @property
    def uses_connection_string(self) -> bool:
        return bool(self.connection_string)

    @property
    def account_is_placeholder(self) -> bool:
        return self.account_name == StorageDefaults.DEFAULT_ACCOUNT_NAME

    @classmethod
    def from_environment(cls) -> "StorageConfig":
        """Load storage configuration from environment variables."""
        return cls()  # Uses default_factory for each field

    def debug_dict(self) -> dict:
        """Return debug-friendly configuration with secrets masked."""
        return {
            "backend": self.backend.value,
            "account_name": self.account_name,
            "connection_string": "***MASKED***" if self.connection_string else None,
            "container": self.container,
            "key_prefix": self.key_prefix,
            "presign_expiry_seconds": self.presign_expiry_seconds,
        }
