"""
Configuration Defaults - Single source of truth for all default values.

FAIL-FAST DESIGN:
The storage account default is an INTENTIONALLY INVALID placeholder value.
Deployments using the azure storage backend fail loudly if
STORAGE_ACCOUNT_NAME (or STORAGE_CONNECTION_STRING) isn't set.

Organization:
    - StorageDefaults: Blob storage backend, container and key layout
    - RepackageDefaults: Fetch/transcode/delivery settings
    - AppDefaults: Environment, logging, debug mode

Usage:
    from config.defaults import StorageDefaults

    # In Pydantic Field definitions:
    container: str = Field(default=StorageDefaults.OUTPUT_CONTAINER, ...)
"""


# =============================================================================
# STORAGE DEFAULTS
# =============================================================================

class StorageDefaults:
    """
    Object storage defaults for published archives.
    """

    # Backend selection ("azure" or "memory")
    BACKEND = "azure"

    # Default storage account (INTENTIONALLY INVALID - must be overridden)
    DEFAULT_ACCOUNT_NAME = "your-storage-account-name"

    # Where repackaged archives land
    OUTPUT_CONTAINER = "repackaged"
    KEY_PREFIX = "zips"

    # Presigned (SAS) URL lifetime
    PRESIGN_EXPIRY_SECONDS = 3600
    PRESIGN_EXPIRY_MAX_SECONDS = 7 * 24 * 3600  # User delegation keys last 7 days max


# =============================================================================
# REPACKAGE DEFAULTS
# =============================================================================

class RepackageDefaults:
    """
    Defaults for the fetch -> transcode -> deliver pipeline.
    """

    # "inline" returns base64 bytes, "presigned_url" uploads and returns a SAS URL
    DELIVERY_MODE = "inline"

    FETCH_TIMEOUT_SECONDS = 60.0
    CHUNK_SIZE_BYTES = 1024 * 1024  # 1 MB copy/read chunks
    ZIP_COMPRESSLEVEL = 6  # zlib level for DEFLATE entries

    COMPRESSED_TAR_SUFFIX = ".tar.zst"
    OUTPUT_SUFFIX = ".zip"
    FALLBACK_BASE_NAME = "archive"


# =============================================================================
# APPLICATION DEFAULTS
# =============================================================================

class AppDefaults:
    """
    Application-wide defaults.
    """

    DEBUG_MODE = False
    ENVIRONMENT = "dev"
    LOG_LEVEL = "INFO"


__all__ = [
    "StorageDefaults",
    "RepackageDefaults",
    "AppDefaults",
]
