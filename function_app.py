"""
Azure Functions entry point for the tar.zst -> zip repackager.

Architecture:
    HTTP POST /api/repackage
        -> RepackageTrigger (request parsing, error mapping)
        -> RepackageService
             SourceFetcher (httpx streaming GET)
             ArchiveTranscoder (zstandard -> tarfile -> zipfile)
             IObjectPublisher (Azure Blob Storage or in-memory, presigned mode)

This module is the composition root: it is the only place that reads the
process configuration. Everything below receives its settings explicitly.

Exports:
    app: Azure Function App instance
    build_repackage_service: Builds the service from an AppConfig

Endpoints:
    POST /api/repackage - Convert {"url": "..."} to a ZIP
    GET  /api/health    - Configuration and codec health
    GET  /api/livez     - Liveness probe, no dependencies

Environment Variables:
    REPACKAGE_DELIVERY_MODE: inline | presigned_url
    REPACKAGE_FETCH_TIMEOUT_SECONDS, REPACKAGE_CHUNK_SIZE_BYTES, REPACKAGE_ZIP_COMPRESSLEVEL
    STORAGE_BACKEND: azure | memory
    STORAGE_ACCOUNT_NAME / STORAGE_CONNECTION_STRING: Blob storage auth
    REPACKAGE_OUTPUT_CONTAINER, REPACKAGE_KEY_PREFIX, PRESIGN_EXPIRY_SECONDS
    LOG_LEVEL, DEBUG_LOGGING, ENVIRONMENT
"""

# ========================================================================
# IMPORTS - Categorized by source for maintainability
# ========================================================================

# Native Python modules
import logging
from typing import Optional

# Azure SDK modules (3rd party - Microsoft)
import azure.functions as func

# Suppress Azure Identity and Azure SDK authentication/HTTP logging
logging.getLogger("azure.identity").setLevel(logging.WARNING)
logging.getLogger("azure.core.pipeline.policies.http_logging_policy").setLevel(logging.WARNING)
logging.getLogger("azure.storage").setLevel(logging.WARNING)
logging.getLogger("azure.core").setLevel(logging.WARNING)
logging.getLogger("msal").setLevel(logging.WARNING)  # Microsoft Authentication Library
logging.getLogger("httpx").setLevel(logging.WARNING)

# Application modules (our code)
from config import AppConfig, DeliveryMode, get_config
from services.archive_transcoder import ArchiveTranscoder
from services.repackage_service import RepackageService
from services.source_fetcher import SourceFetcher
from triggers.health import HealthCheckTrigger
from triggers.livez import livez_trigger
from triggers.repackage import RepackageTrigger
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "FunctionApp")


def build_repackage_service(config: Optional[AppConfig] = None) -> RepackageService:
    """
    Wire the repackage pipeline from configuration.

    The publisher is only created for presigned delivery, so inline
    deployments never touch storage credentials.
    """
    config = config or get_config()
    settings = config.repackage

    publisher = None
    if settings.delivery_mode == DeliveryMode.PRESIGNED_URL:
        from infrastructure import create_object_publisher
        publisher = create_object_publisher(config.storage)

    logger.info(
        f"🏭 Building RepackageService (delivery={settings.delivery_mode.value}, "
        f"environment={config.environment})"
    )
    return RepackageService(
        fetcher=SourceFetcher(
            timeout_seconds=settings.fetch_timeout_seconds,
            chunk_size=settings.chunk_size_bytes,
        ),
        transcoder=ArchiveTranscoder(
            chunk_size=settings.chunk_size_bytes,
            compresslevel=settings.zip_compresslevel,
        ),
        publisher=publisher,
        storage_config=config.storage,
        delivery_mode=settings.delivery_mode,
    )


repackage_trigger = RepackageTrigger(service_factory=build_repackage_service)
health_check_trigger = HealthCheckTrigger(config_loader=get_config)

# Initialize function app with HTTP auth level
app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)


@app.route(route="repackage", methods=["POST"])
def repackage(req: func.HttpRequest) -> func.HttpResponse:
    """Convert the .tar.zst at the posted URL into a ZIP."""
    return repackage_trigger.handle_request(req)


@app.route(route="health", methods=["GET"])
def health(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint using HTTP trigger base class."""
    return health_check_trigger.handle_request(req)


@app.route(route="livez", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def livez(req: func.HttpRequest) -> func.HttpResponse:
    """Liveness probe - is the app alive? No dependencies checked."""
    return livez_trigger.handle_request(req)
