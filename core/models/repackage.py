"""
Repackage Request/Response Models.

Boundary models for POST /api/repackage.

Exports:
    RepackageRequest: Validated request body
    RepackageResult: Outcome handed back to the trigger
"""

from typing import Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator

from config.repackage_config import DeliveryMode


ALLOWED_URL_SCHEMES = ("http", "https")


class RepackageRequest(BaseModel):
    """
    Request body: a single URL pointing at a .tar.zst archive.

    Example:
        RepackageRequest(url="https://example.com/data/file1.tar.zst")
    """

    url: str = Field(..., min_length=1, max_length=8192, description="Source archive URL")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        v = v.strip()
        parts = urlsplit(v)
        if parts.scheme.lower() not in ALLOWED_URL_SCHEMES:
            raise ValueError(f"url scheme must be one of {ALLOWED_URL_SCHEMES}")
        if not parts.netloc:
            raise ValueError("url must include a host")
        return v


class RepackageResult(BaseModel):
    """
    Result of a successful repackage.

    Inline delivery fills content_base64; presigned delivery fills
    object_key, download_url and expires_in_seconds.
    """

    base_name: str = Field(..., description="Base name derived from the source URL")
    filename: str = Field(..., description="Suggested filename for the ZIP")
    delivery_mode: DeliveryMode
    size_bytes: int = Field(..., ge=0)
    entry_count: int = Field(..., ge=0)
    directories_skipped: int = Field(default=0, ge=0)

    content_base64: Optional[str] = Field(default=None, repr=False)

    object_key: Optional[str] = None
    download_url: Optional[str] = Field(default=None, repr=False)
    expires_in_seconds: Optional[int] = None
