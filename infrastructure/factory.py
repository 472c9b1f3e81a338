# ============================================================================
# CLAUDE CONTEXT - PUBLISHER FACTORY
# ============================================================================
# STATUS: Infrastructure - creation point for object publishers
# PURPOSE: Build the IObjectPublisher selected by StorageConfig.backend
# EXPORTS: create_object_publisher
# DEPENDENCIES: infrastructure.blob, infrastructure.memory_store, config
# PATTERNS: Factory pattern, Dependency Injection
# ENTRY_POINTS: create_object_publisher(config.storage)
# ============================================================================

"""
Publisher Factory - Central Creation Point

Creates the object publisher for a storage configuration. Each call builds
a new instance; the composition root decides how long it lives.
"""

from config import StorageBackend, StorageConfig
from exceptions import ConfigurationError
from util_logger import LoggerFactory, ComponentType

from .blob import BlobObjectPublisher, IObjectPublisher
from .memory_store import InMemoryObjectPublisher

logger = LoggerFactory.create_logger(ComponentType.FACTORY, "PublisherFactory")


def create_object_publisher(storage_config: StorageConfig) -> IObjectPublisher:
    """
    Create the publisher for the configured backend.

    Args:
        storage_config: StorageConfig (backend, container, credentials)

    Returns:
        IObjectPublisher implementation

    Raises:
        ConfigurationError: azure backend without usable credentials
        PublishError: Azure client could not be constructed

    Example:
        publisher = create_object_publisher(get_config().storage)
    """
    logger.info(
        f"🏭 Creating object publisher (backend={storage_config.backend.value}, "
        f"container={storage_config.container})"
    )

    if storage_config.backend == StorageBackend.MEMORY:
        return InMemoryObjectPublisher(container=storage_config.container)

    if storage_config.uses_connection_string:
        return BlobObjectPublisher(
            container=storage_config.container,
            connection_string=storage_config.connection_string,
        )

    if storage_config.account_is_placeholder:
        raise ConfigurationError(
            "STORAGE_ACCOUNT_NAME or STORAGE_CONNECTION_STRING must be set for the azure backend"
        )

    return BlobObjectPublisher(
        container=storage_config.container,
        account_name=storage_config.account_name,
    )
