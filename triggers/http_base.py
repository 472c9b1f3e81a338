"""
HTTP Trigger Base Class.

Abstract base class for all Azure Functions HTTP triggers providing consistent
infrastructure patterns for request/response handling.

Failures never leak exception text to the caller: every exception is mapped
through core.errors to a fixed public message and status code, and the
detail goes to the log together with the request id.

Specialized Trigger Types:
    BaseHttpTrigger: Generic HTTP endpoint
    SystemMonitoringTrigger: Health and diagnostics

Exports:
    BaseHttpTrigger: Base class for HTTP triggers
    SystemMonitoringTrigger: Base class for monitoring
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, List
import uuid
import json
from datetime import datetime, timezone

import azure.functions as func

from core.errors import (
    ErrorCode,
    classify_exception,
    get_http_status_code,
    get_public_message,
    is_retryable,
)
from exceptions import InvalidRequestError, RepackageError
from util_logger import LoggerFactory, ComponentType


class BaseHttpTrigger(ABC):
    """
    Abstract base class for Azure Functions HTTP triggers.

    Provides consistent infrastructure for HTTP request/response handling,
    body extraction, error handling, and logging patterns.
    """

    def __init__(self, trigger_name: str):
        """
        Initialize HTTP trigger with name for logging context.

        Args:
            trigger_name: Name of the trigger for logging (e.g., "repackage", "livez")
        """
        self.trigger_name = trigger_name
        self.logger = LoggerFactory.create_logger(ComponentType.TRIGGER, f"HttpTrigger.{trigger_name}")

    # ========================================================================
    # ABSTRACT METHODS - Must be implemented by concrete triggers
    # ========================================================================

    @abstractmethod
    def process_request(self, req: func.HttpRequest, request_id: str) -> Dict[str, Any]:
        """
        Process the HTTP request and return response data.

        This is where business logic goes. Exceptions are handled by the base
        class.

        Args:
            req: Azure Functions HTTP request object
            request_id: Id echoed in the X-Request-ID header

        Returns:
            Dictionary to be serialized as JSON response

        Raises:
            InvalidRequestError: Malformed request (400)
            RepackageError: Pipeline failure (500)
            Exception: Anything else (500)
        """
        pass

    @abstractmethod
    def get_allowed_methods(self) -> List[str]:
        """
        Return list of allowed HTTP methods for this trigger.

        Returns:
            List of HTTP methods (e.g., ["GET"], ["POST"])
        """
        pass

    def get_response_headers(self, response_data: Dict[str, Any]) -> Dict[str, str]:
        """Extra headers for a successful response. None by default."""
        return {}

    # ========================================================================
    # CONCRETE INFRASTRUCTURE METHODS
    # ========================================================================

    def handle_request(self, req: func.HttpRequest) -> func.HttpResponse:
        """
        Main entry point for HTTP request handling.

        Provides consistent error handling, logging, and response formatting.

        Args:
            req: Azure Functions HTTP request object

        Returns:
            Azure Functions HTTP response with JSON content
        """
        request_id = self._generate_request_id(req)

        self.logger.info(
            f"🌐 [{self.trigger_name}] Request {request_id} started: "
            f"{req.method} {req.url}"
        )

        if req.method not in self.get_allowed_methods():
            return self._create_error_response(
                error="Method not allowed",
                status_code=405,
                request_id=request_id
            )

        try:
            response_data = self.process_request(req, request_id)
        except Exception as e:
            return self._handle_exception(e, request_id)

        response = self._create_success_response(
            response_data,
            request_id,
            headers=self.get_response_headers(response_data)
        )
        self.logger.info(
            f"✅ [{self.trigger_name}] Request {request_id} completed successfully"
        )
        return response

    def _handle_exception(self, error: Exception, request_id: str) -> func.HttpResponse:
        """Log the failure in full and answer with its fixed public message."""
        error_code = classify_exception(error)
        status_code = get_http_status_code(error_code)
        dimensions = {
            'request_id': request_id,
            'error_code': error_code.value,
            'error_type': type(error).__name__,
            'retryable': is_retryable(error_code),
        }
        if isinstance(error, RepackageError):
            dimensions['stage'] = error.stage.value
            if error.entry_name is not None:
                dimensions['entry_name'] = error.entry_name

        if error_code == ErrorCode.INVALID_REQUEST:
            self.logger.warning(
                f"❌ [{self.trigger_name}] Client error: {error}",
                extra={'custom_dimensions': dimensions}
            )
        elif error_code == ErrorCode.UNEXPECTED_ERROR:
            self.logger.error(
                f"💥 [{self.trigger_name}] Internal error: {error}",
                extra={'custom_dimensions': dimensions},
                exc_info=error
            )
        else:
            self.logger.error(
                f"❌ [{self.trigger_name}] {error_code.value}: {error}",
                extra={'custom_dimensions': dimensions},
                exc_info=error
            )

        return self._create_error_response(
            error=get_public_message(error_code),
            status_code=status_code,
            request_id=request_id
        )

    # ========================================================================
    # UTILITY METHODS FOR SUBCLASSES
    # ========================================================================

    def extract_json_body(self, req: func.HttpRequest, required: bool = True) -> Optional[Dict[str, Any]]:
        """
        Extract and parse JSON request body.

        Args:
            req: HTTP request object
            required: Whether body is required

        Returns:
            Parsed JSON object or None if not required and missing

        Raises:
            InvalidRequestError: If body is required but missing, invalid JSON or not an object
        """
        try:
            body = req.get_json()
        except ValueError as e:
            raise InvalidRequestError(f"Invalid JSON in request body: {e}") from e

        if body is None:
            if required:
                raise InvalidRequestError("Request body is required")
            return None

        if not isinstance(body, dict):
            raise InvalidRequestError("Request body must be a JSON object")

        return body

    # ========================================================================
    # PRIVATE INFRASTRUCTURE METHODS
    # ========================================================================

    def _generate_request_id(self, req: Optional[func.HttpRequest] = None) -> str:
        """Reuse the caller's X-Request-ID when present, else generate one."""
        if req is not None:
            incoming = (req.headers.get("X-Request-ID") or "").strip()
            if incoming and len(incoming) <= 128:
                return incoming
        return str(uuid.uuid4())[:8]

    def _create_success_response(self, data: Dict[str, Any], request_id: str,
                                 headers: Optional[Dict[str, str]] = None) -> func.HttpResponse:
        """Create standardized success response."""
        response_data = {
            **data,
            "request_id": request_id,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

        return func.HttpResponse(
            json.dumps(response_data, default=str),
            status_code=200,
            mimetype="application/json",
            headers={**(headers or {}), "X-Request-ID": request_id}
        )

    def _create_error_response(self, error: str, status_code: int,
                               request_id: str) -> func.HttpResponse:
        """Create standardized error response. Only fixed text reaches the caller."""
        response_data = {
            "error": error,
            "request_id": request_id,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

        return func.HttpResponse(
            json.dumps(response_data),
            status_code=status_code,
            mimetype="application/json",
            headers={"X-Request-ID": request_id}
        )


# ============================================================================
# SPECIALIZED BASE CLASSES FOR COMMON PATTERNS
# ============================================================================

class SystemMonitoringTrigger(BaseHttpTrigger):
    """Base class for system monitoring triggers (health, liveness)"""

    def get_system_timestamp(self) -> str:
        """Get standardized system timestamp."""
        return datetime.now(timezone.utc).isoformat()

    def check_component_health(
        self,
        component_name: str,
        check_function,
        description: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Standard pattern for checking component health.

        Status determination (in priority order):
        1. If check_function raises exception → "unhealthy"
        2. If result contains "_status" key → use that value (explicit override)
        3. If result contains "error" key with truthy value → "unhealthy"
        4. If result contains "installed": False → "unhealthy"
        5. Otherwise → "healthy"

        Args:
            component_name: Name of the component
            check_function: Function that returns health status dict
            description: Human-readable description of what this component does

        Returns:
            Health check result dictionary with component, description, status, details
        """
        try:
            result = check_function()

            if isinstance(result, dict):
                if "_status" in result:
                    status = result.pop("_status")
                elif result.get("error"):
                    status = "unhealthy"
                elif result.get("installed") is False:
                    status = "unhealthy"
                else:
                    status = "healthy"
            else:
                status = "healthy"

            return {
                "component": component_name,
                "description": description or f"{component_name} health check",
                "status": status,
                "details": result,
                "checked_at": self.get_system_timestamp()
            }
        except Exception as e:
            return {
                "component": component_name,
                "description": description or f"{component_name} health check",
                "status": "unhealthy",
                "error": str(e),
                "checked_at": self.get_system_timestamp()
            }
