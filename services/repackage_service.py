# ============================================================================
# CLAUDE CONTEXT - REPACKAGE SERVICE
# ============================================================================
# STATUS: Service layer - fetch -> transcode -> deliver orchestration
# PURPOSE: Turn a .tar.zst URL into a ZIP delivered inline or via presigned URL
# EXPORTS: RepackageService
# DEPENDENCIES: services.source_fetcher, services.archive_transcoder,
#               infrastructure.blob (IObjectPublisher), config
# ENTRY_POINTS: RepackageTrigger via function_app.py
# ============================================================================
"""
Repackage Service.

One request runs strictly in sequence:

    1. SourceFetcher.open(url)           -> FetchError
    2. ArchiveTranscoder.transcode(body) -> TranscodeError subclasses
    3. delivery
         inline:        base64 of the ZIP bytes
         presigned_url: put_object + presign_get -> PublishError

Errors are not caught or logged here; the HTTP trigger logs each one once
and maps it to a response. Nothing is retried and nothing is published
unless the ZIP was finalized.
"""

import base64
from datetime import datetime
from typing import Optional

from config import DeliveryMode, StorageConfig
from exceptions import ConfigurationError
from core.models import RepackageResult
from infrastructure.blob import IObjectPublisher, ZIP_CONTENT_TYPE
from services.archive_transcoder import ArchiveTranscoder
from services.naming import build_object_key, build_output_filename
from services.source_fetcher import SourceFetcher
from util_logger import LoggerFactory, ComponentType


class RepackageService:
    """
    Orchestrates one repackage request.

    All collaborators are injected; the service reads no configuration of
    its own. The publisher is only required for presigned delivery.
    """

    def __init__(self, fetcher: SourceFetcher, transcoder: ArchiveTranscoder,
                 publisher: Optional[IObjectPublisher] = None,
                 storage_config: Optional[StorageConfig] = None,
                 delivery_mode: DeliveryMode = DeliveryMode.INLINE):
        if delivery_mode == DeliveryMode.PRESIGNED_URL and (publisher is None or storage_config is None):
            raise ConfigurationError("presigned_url delivery requires a publisher and storage_config")
        self.fetcher = fetcher
        self.transcoder = transcoder
        self.publisher = publisher
        self.storage_config = storage_config
        self.delivery_mode = delivery_mode
        self.logger = LoggerFactory.create_logger(ComponentType.SERVICE, "RepackageService")
        self.logger.debug(f"RepackageService ready (delivery={delivery_mode.value})")

    def repackage(self, url: str, request_id: Optional[str] = None,
                  now: Optional[datetime] = None) -> RepackageResult:
        """
        Fetch url, convert it to ZIP and deliver it.

        Args:
            url: Validated http(s) URL of a .tar.zst archive
            request_id: Correlation id for log records
            now: Clock override for the object key timestamp

        Returns:
            RepackageResult for the configured delivery mode

        Raises:
            FetchError, TranscodeError, PublishError
        """
        log = LoggerFactory.create_with_context(
            ComponentType.SERVICE, "RepackageService", request_id=request_id, source_url=url
        )
        log.info(f"📦 Repackaging {url} (delivery={self.delivery_mode.value})")

        fetched = self.fetcher.open(url)
        transcoded = self.transcoder.transcode(fetched.stream)

        base_name = fetched.base_name
        result = RepackageResult(
            base_name=base_name,
            filename=build_output_filename(base_name),
            delivery_mode=self.delivery_mode,
            size_bytes=transcoded.size_bytes,
            entry_count=transcoded.entries_written,
            directories_skipped=transcoded.directories_skipped,
        )

        if self.delivery_mode == DeliveryMode.INLINE:
            result.content_base64 = base64.b64encode(transcoded.content).decode("ascii")
        else:
            key = build_object_key(base_name, self.storage_config.key_prefix, now=now)
            log = log.bind(object_key=key)
            expires_in = self.storage_config.presign_expiry_seconds
            self.publisher.put_object(key, transcoded.content, ZIP_CONTENT_TYPE)
            log.info(f"☁️ Uploaded {transcoded.size_bytes} bytes")
            result.object_key = key
            result.download_url = self.publisher.presign_get(key, expires_in)
            result.expires_in_seconds = expires_in

        log.info(
            f"✅ Repackaged {url} -> {result.filename} "
            f"({result.size_bytes} bytes, {result.entry_count} entries)"
        )
        return result
