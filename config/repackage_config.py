"""
Repackage Pipeline Configuration.

Settings for fetching the source archive, transcoding it and delivering the
result.

Exports:
    DeliveryMode: How a finished archive reaches the caller
    RepackageConfig: Pipeline configuration model
"""

import os
from enum import Enum

from pydantic import BaseModel, Field

from .defaults import RepackageDefaults


class DeliveryMode(str, Enum):
    """
    How a repackaged archive is handed back.

    INLINE: base64 encoded bytes inside the JSON response
    PRESIGNED_URL: uploaded to object storage, time-limited URL returned
    """
    INLINE = "inline"
    PRESIGNED_URL = "presigned_url"


class RepackageConfig(BaseModel):
    """Fetch, transcode and delivery settings."""

    delivery_mode: DeliveryMode = Field(
        default_factory=lambda: DeliveryMode(
            os.getenv("REPACKAGE_DELIVERY_MODE", RepackageDefaults.DELIVERY_MODE).strip().lower()
        ),
        description="inline (base64 response body) or presigned_url (upload + SAS URL)"
    )

    fetch_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv(
            "REPACKAGE_FETCH_TIMEOUT_SECONDS",
            str(RepackageDefaults.FETCH_TIMEOUT_SECONDS)
        )),
        gt=0,
        description="Connect/read timeout for the source download"
    )

    chunk_size_bytes: int = Field(
        default_factory=lambda: int(os.getenv(
            "REPACKAGE_CHUNK_SIZE_BYTES",
            str(RepackageDefaults.CHUNK_SIZE_BYTES)
        )),
        ge=4096,
        le=64 * 1024 * 1024,
        description="Chunk size for reading the source and copying entry bodies"
    )

    zip_compresslevel: int = Field(
        default_factory=lambda: int(os.getenv(
            "REPACKAGE_ZIP_COMPRESSLEVEL",
            str(RepackageDefaults.ZIP_COMPRESSLEVEL)
        )),
        ge=0,
        le=9,
        description="DEFLATE level for output entries (0 = fastest)"
    )

    @classmethod
    def from_environment(cls) -> "RepackageConfig":
        """Load pipeline configuration from environment variables."""
        return cls()

    def debug_dict(self) -> dict:
        return {
            "delivery_mode": self.delivery_mode.value,
            "fetch_timeout_seconds": self.fetch_timeout_seconds,
            "chunk_size_bytes": self.chunk_size_bytes,
            "zip_compresslevel": self.zip_compresslevel,
        }
