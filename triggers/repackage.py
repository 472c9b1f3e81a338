# ============================================================================
# CLAUDE CONTEXT - REPACKAGE HTTP TRIGGER
# ============================================================================
# STATUS: HTTP Trigger - POST /api/repackage
# PURPOSE: Convert the .tar.zst at a caller-supplied URL into a ZIP
# EXPORTS: RepackageTrigger
# INTERFACES: BaseHttpTrigger (http_base.py)
# DEPENDENCIES: azure.functions, services.repackage_service
# ENTRY_POINTS: function_app.py route "repackage"
# ============================================================================
"""
Repackage HTTP Trigger.

Request:
    POST /api/repackage
    {"url": "https://example.com/data/file1.tar.zst"}

Response (inline delivery):
    200, Content-Disposition: attachment; filename="file1.zip"
    {"filename": "file1.zip", "content_base64": "...", "size_bytes": ..., ...}

Response (presigned_url delivery):
    200
    {"filename": "file1.zip", "download_url": "https://...", "object_key": "...",
     "expires_in_seconds": 3600, ...}

Failures carry only fixed text ("Invalid request payload", "Failed to
download file", "Failed to repackage file", "Failed to publish file",
"Internal server error").
"""

from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import azure.functions as func
from pydantic import ValidationError

from config import DeliveryMode
from core.models import RepackageRequest
from exceptions import InvalidRequestError
from services.repackage_service import RepackageService
from .http_base import BaseHttpTrigger


class RepackageTrigger(BaseHttpTrigger):
    """
    POST endpoint for tar.zst -> zip conversion.

    The service is built on first use by service_factory so configuration
    problems surface as a request failure rather than an import failure.
    """

    def __init__(self, service_factory: Callable[[], RepackageService]):
        super().__init__("repackage")
        self._service_factory = service_factory
        self._service: Optional[RepackageService] = None

    @property
    def service(self) -> RepackageService:
        if self._service is None:
            self._service = self._service_factory()
        return self._service

    def get_allowed_methods(self) -> List[str]:
        return ["POST"]

    def process_request(self, req: func.HttpRequest, request_id: str) -> Dict[str, Any]:
        body = self.extract_json_body(req)
        try:
            request = RepackageRequest.model_validate(body)
        except ValidationError as e:
            raise InvalidRequestError(f"Invalid repackage request: {e}") from e

        result = self.service.repackage(request.url, request_id=request_id)
        return result.model_dump(mode="json", exclude_none=True)

    def get_response_headers(self, response_data: Dict[str, Any]) -> Dict[str, str]:
        if response_data.get("delivery_mode") != DeliveryMode.INLINE.value:
            return {}
        return {"Content-Disposition": content_disposition(response_data["filename"])}


def content_disposition(filename: str) -> str:
    """
    RFC 6266 attachment header for filename.

    The quoted filename= form holds printable ASCII only; quotes, backslashes
    and everything else become "_". When that changes the name, the exact
    name follows as a percent-encoded UTF-8 filename*= parameter.
    """
    fallback = "".join(
        ch if " " <= ch <= "~" and ch not in '"\\' else "_" for ch in filename
    )
    header = f'attachment; filename="{fallback}"'
    if fallback != filename:
        header += f"; filename*=UTF-8''{quote(filename, safe='')}"
    return header
