# ============================================================================
# CLAUDE CONTEXT - BLOB OBJECT PUBLISHER
# ============================================================================
# STATUS: Infrastructure - Azure Blob Storage publisher
# PURPOSE: Upload repackaged archives and issue time-limited read URLs (SAS)
# EXPORTS: IObjectPublisher, BlobObjectPublisher
# INTERFACES: IObjectPublisher for dependency injection
# PYDANTIC_MODELS: None - operates on raw bytes
# DEPENDENCIES: azure-storage-blob, azure-identity, azure-core
# SOURCE: Output container configured by REPACKAGE_OUTPUT_CONTAINER
# PATTERNS: Repository, DefaultAzureCredential
# ENTRY_POINTS: infrastructure.create_object_publisher(storage_config)
# ============================================================================

"""
Blob Object Publisher

Publishes finished ZIP archives to Azure Blob Storage and hands out
read-only SAS URLs for them.

Authentication:
1. Connection string (local development, Azurite) - SAS signed with the
   account key it carries
2. Storage account name + DefaultAzureCredential (managed identity in
   Azure) - SAS signed with a user delegation key

Every Azure SDK failure is raised as PublishError; callers never see SDK
exception types.

Usage:
    from infrastructure import create_object_publisher

    publisher = create_object_publisher(config.storage)
    publisher.put_object("zips/file1-20250102T030405Z.zip", data, "application/zip")
    url = publisher.presign_get("zips/file1-20250102T030405Z.zip", 3600)
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from azure.core.exceptions import AzureError
from azure.identity import DefaultAzureCredential
from azure.storage.blob import (
    BlobSasPermissions,
    BlobServiceClient,
    ContainerClient,
    ContentSettings,
    generate_blob_sas,
)

from exceptions import PublishError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "BlobObjectPublisher")

ZIP_CONTENT_TYPE = "application/zip"

# Clock skew allowance for SAS start time
SAS_START_SKEW = timedelta(minutes=5)


# ============================================================================
# PUBLISHER INTERFACE
# ============================================================================

class IObjectPublisher(ABC):
    """
    Interface for object storage used by the repackage service.

    Enables dependency injection and testing with an in-memory backend.
    """

    @abstractmethod
    def put_object(self, key: str, data: bytes,
                   content_type: str = ZIP_CONTENT_TYPE) -> Dict[str, Any]:
        """Store data under key, replacing any existing object."""
        pass

    @abstractmethod
    def presign_get(self, key: str, expires_in_seconds: int) -> str:
        """Return a URL granting read access to key for expires_in_seconds."""
        pass


# ============================================================================
# AZURE BLOB IMPLEMENTATION
# ============================================================================

class BlobObjectPublisher(IObjectPublisher):
    """
    Azure Blob Storage publisher bound to one output container.

    Not a singleton: the composition root builds one per configuration.
    A pre-built BlobServiceClient may be passed in (tests).
    """

    def __init__(self, container: str, account_name: Optional[str] = None,
                 connection_string: Optional[str] = None,
                 blob_service: Optional[BlobServiceClient] = None):
        """
        Args:
            container: Output container name
            account_name: Storage account (DefaultAzureCredential auth)
            connection_string: Takes precedence over account_name
            blob_service: Pre-built client, skips credential setup
        """
        self.container = container

        try:
            if blob_service is not None:
                self.blob_service = blob_service
            elif connection_string:
                logger.info("Initializing BlobObjectPublisher with connection string")
                self.blob_service = BlobServiceClient.from_connection_string(connection_string)
            elif account_name:
                account_url = f"https://{account_name}.blob.core.windows.net"
                logger.info(
                    f"Initializing BlobObjectPublisher with DefaultAzureCredential "
                    f"for account: {account_name}"
                )
                self.blob_service = BlobServiceClient(
                    account_url=account_url,
                    credential=DefaultAzureCredential()
                )
            else:
                raise PublishError("Either connection_string or account_name is required")
        except (AzureError, ValueError) as e:
            logger.warning(f"Failed to initialize BlobObjectPublisher: {e}")
            raise PublishError(f"Cannot create blob service client: {e}") from e

        self.storage_account = self.blob_service.account_name
        self._account_key = getattr(self.blob_service.credential, "account_key", None)
        self._uses_account_key = self._account_key is not None
        self._container_client: Optional[ContainerClient] = None

        logger.info(
            f"✅ BlobObjectPublisher ready: {self.storage_account}/{self.container} "
            f"(sas={'account key' if self._uses_account_key else 'user delegation'})"
        )

    def _get_container_client(self) -> ContainerClient:
        if self._container_client is None:
            self._container_client = self.blob_service.get_container_client(self.container)
        return self._container_client

    def put_object(self, key: str, data: bytes,
                   content_type: str = ZIP_CONTENT_TYPE) -> Dict[str, Any]:
        """
        Upload data as a block blob, overwriting any existing blob.

        Returns:
            Dict with container, key, size and etag

        Raises:
            PublishError: Upload rejected or transport failure
        """
        try:
            blob_client = self._get_container_client().get_blob_client(key)
            logger.debug(f"Writing blob: {self.container}/{key} ({len(data)} bytes)")

            response = blob_client.upload_blob(
                data,
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type),
            )
        except AzureError as e:
            logger.warning(f"Failed to write blob {self.container}/{key}: {e}")
            raise PublishError(f"Upload of {key} failed: {e}") from e

        logger.info(f"✅ Wrote blob: {self.container}/{key} ({len(data)} bytes)")
        return {
            'container': self.container,
            'key': key,
            'size': len(data),
            'etag': (response or {}).get('etag'),
        }

    def presign_get(self, key: str, expires_in_seconds: int) -> str:
        """
        Generate a read-only SAS URL for a blob.

        Raises:
            PublishError: Delegation key or SAS could not be issued
        """
        start_time = datetime.now(timezone.utc) - SAS_START_SKEW
        expiry_time = datetime.now(timezone.utc) + timedelta(seconds=expires_in_seconds)

        try:
            blob_client = self._get_container_client().get_blob_client(key)

            if self._uses_account_key:
                sas_token = generate_blob_sas(
                    account_name=self.storage_account,
                    container_name=self.container,
                    blob_name=key,
                    account_key=self._account_key,
                    permission=BlobSasPermissions(read=True),
                    expiry=expiry_time,
                    start=start_time
                )
            else:
                # Requires the 'Storage Blob Delegator' role
                user_delegation_key = self.blob_service.get_user_delegation_key(
                    key_start_time=start_time,
                    key_expiry_time=expiry_time
                )
                sas_token = generate_blob_sas(
                    account_name=self.storage_account,
                    container_name=self.container,
                    blob_name=key,
                    user_delegation_key=user_delegation_key,
                    permission=BlobSasPermissions(read=True),
                    expiry=expiry_time,
                    start=start_time
                )
        except (AzureError, ValueError, TypeError) as e:
            logger.warning(f"Failed to generate SAS URL for {self.container}/{key}: {e}")
            raise PublishError(f"Presigned URL for {key} could not be issued: {e}") from e

        logger.debug(f"✅ SAS URL generated (expires: {expiry_time.isoformat()})")
        return f"{blob_client.url}?{sas_token}"
