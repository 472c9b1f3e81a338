"""
Health Check HTTP Trigger.

Configuration and codec health endpoint for GET /api/health.

Components Monitored:
    - Configuration (environment parses, deployment combination is usable)
    - Codecs (zstandard and zlib importable and working)
    - Storage (publisher backend selection, no network calls)

Exports:
    HealthCheckTrigger: Health check trigger class
"""

from typing import Any, Callable, Dict, List
import json
import sys
import zlib

import azure.functions as func
import zstandard

from config import AppConfig, DeliveryMode, StorageBackend
from .http_base import SystemMonitoringTrigger


HEALTH_PROBE_PAYLOAD = b"repackage health probe"


class HealthCheckTrigger(SystemMonitoringTrigger):
    """Health check HTTP trigger implementation."""

    def __init__(self, config_loader: Callable[[], AppConfig]):
        """
        Args:
            config_loader: Returns the process AppConfig (raises on bad config)
        """
        super().__init__("health_check")
        self._config_loader = config_loader

    def get_allowed_methods(self) -> List[str]:
        """Health check only supports GET."""
        return ["GET"]

    def process_request(self, req: func.HttpRequest, request_id: str) -> Dict[str, Any]:
        """
        Perform the health check.

        Returns:
            Health status data with per-component results
        """
        health_data = {
            "status": "healthy",
            "components": {},
            "environment": {
                "python_version": sys.version.split()[0],
                "function_runtime": "python",
            },
            "errors": []
        }

        for component in (self._check_configuration(), self._check_codecs(), self._check_storage()):
            health_data["components"][component["component"]] = component
            if component["status"] == "unhealthy":
                health_data["status"] = "unhealthy"
                error = component.get("error") or component.get("details", {}).get("error")
                if error:
                    health_data["errors"].append(f"{component['component']}: {error}")

        return health_data

    def handle_request(self, req: func.HttpRequest) -> func.HttpResponse:
        """
        Override to provide proper HTTP status codes for health checks.

        Returns:
            - 200 OK when all components are healthy
            - 503 Service Unavailable when any component is unhealthy
        """
        response = super().handle_request(req)
        if response.status_code != 200:
            return response

        body = json.loads(response.get_body())
        if body.get("status") != "healthy":
            return func.HttpResponse(
                response.get_body(),
                status_code=503,
                mimetype="application/json",
                headers=dict(response.headers)
            )
        return response

    def get_response_headers(self, response_data: Dict[str, Any]) -> Dict[str, str]:
        return {"Cache-Control": "no-cache, no-store, must-revalidate"}

    # ========================================================================
    # COMPONENT CHECKS
    # ========================================================================

    def _check_configuration(self) -> Dict[str, Any]:
        def check_config():
            config = self._config_loader()
            return {
                "environment": config.environment,
                "delivery_mode": config.repackage.delivery_mode.value,
                "config": config.debug_dict(),
            }

        return self.check_component_health(
            "configuration",
            check_config,
            "Environment configuration parses and is deployable"
        )

    def _check_codecs(self) -> Dict[str, Any]:
        def check_codecs():
            compressed = zstandard.ZstdCompressor().compress(HEALTH_PROBE_PAYLOAD)
            round_trip = zstandard.ZstdDecompressor().decompress(compressed)
            return {
                "installed": round_trip == HEALTH_PROBE_PAYLOAD,
                "zstandard_version": zstandard.__version__,
                "zstd_library_version": ".".join(str(part) for part in zstandard.ZSTD_VERSION),
                "zlib_version": zlib.ZLIB_RUNTIME_VERSION,
            }

        return self.check_component_health(
            "codecs",
            check_codecs,
            "Zstandard decompression and DEFLATE compression"
        )

    def _check_storage(self) -> Dict[str, Any]:
        def check_storage():
            config = self._config_loader()
            storage = config.storage
            result = {
                "backend": storage.backend.value,
                "container": storage.container,
                "required": config.repackage.delivery_mode == DeliveryMode.PRESIGNED_URL,
            }
            if storage.backend == StorageBackend.AZURE:
                result["auth"] = "connection_string" if storage.uses_connection_string else "default_credential"
                if result["required"] and not storage.uses_connection_string and storage.account_is_placeholder:
                    result["error"] = "No storage account configured"
            return result

        return self.check_component_health(
            "storage",
            check_storage,
            "Object storage used for presigned delivery"
        )
