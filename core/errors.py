"""
Error Code Definitions and Classification.

Centralized error code management with retry classification and the fixed,
detail-free messages returned to HTTP callers.

Key Features:
    - Explicit error codes for all failure modes of a repackage request
    - Retry classification (PERMANENT, TRANSIENT)
    - Exception -> error code mapping used by the HTTP trigger

Exports:
    ErrorCode: Standardized error codes enum
    ErrorClassification: Error category enum
    classify_exception: Map an exception to its ErrorCode
    is_retryable: Helper to check if error should be retried
    get_http_status_code: Status category for an error code
    get_public_message: Fixed response text for an error code
"""

from enum import Enum
from typing import Dict

from exceptions import (
    ArchiveFormatError,
    ConfigurationError,
    DecompressionError,
    FetchError,
    InvalidRequestError,
    OutputWriteError,
    PublishError,
    TranscodeError,
    TruncatedInputError,
)


class ErrorCode(str, Enum):
    """
    Standardized error codes for all application errors.

    These codes are logged with every failure so operators can see the
    failing stage; callers only ever see the public message.
    """

    # Client input (HTTP 400, NOT RETRYABLE)
    INVALID_REQUEST = "INVALID_REQUEST"  # Body not JSON, url missing or not http(s)

    # Fetch (HTTP 500, RETRYABLE)
    DOWNLOAD_FAILED = "DOWNLOAD_FAILED"  # Source unreachable or non-2xx

    # Transcode (HTTP 500)
    INVALID_FORMAT = "INVALID_FORMAT"  # Not Zstandard framing
    CORRUPTED_FILE = "CORRUPTED_FILE"  # Tar framing malformed
    TRUNCATED_INPUT = "TRUNCATED_INPUT"  # Source ended mid-entry
    OUTPUT_WRITE_FAILED = "OUTPUT_WRITE_FAILED"  # ZIP entry/finalize failure
    PROCESSING_FAILED = "PROCESSING_FAILED"  # Other transcode failure

    # Publish (HTTP 500, RETRYABLE)
    UPLOAD_FAILED = "UPLOAD_FAILED"  # Upload or SAS issuance failed

    # Generic
    CONFIG_ERROR = "CONFIG_ERROR"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


class ErrorClassification(str, Enum):
    """
    Error classification for retry logic.

    The service itself never retries; the classification is reported so the
    caller or operator can decide.
    """

    PERMANENT = "PERMANENT"  # Never retry (bad input, won't fix itself)
    TRANSIENT = "TRANSIENT"  # May succeed if repeated later


_ERROR_CLASSIFICATION: Dict[ErrorCode, ErrorClassification] = {
    ErrorCode.INVALID_REQUEST: ErrorClassification.PERMANENT,
    ErrorCode.INVALID_FORMAT: ErrorClassification.PERMANENT,
    ErrorCode.CORRUPTED_FILE: ErrorClassification.PERMANENT,
    ErrorCode.OUTPUT_WRITE_FAILED: ErrorClassification.PERMANENT,
    ErrorCode.CONFIG_ERROR: ErrorClassification.PERMANENT,

    # A truncated body is usually a dropped connection
    ErrorCode.TRUNCATED_INPUT: ErrorClassification.TRANSIENT,
    ErrorCode.DOWNLOAD_FAILED: ErrorClassification.TRANSIENT,
    ErrorCode.UPLOAD_FAILED: ErrorClassification.TRANSIENT,
    ErrorCode.PROCESSING_FAILED: ErrorClassification.TRANSIENT,
    ErrorCode.UNEXPECTED_ERROR: ErrorClassification.TRANSIENT,
}

_PUBLIC_MESSAGES: Dict[ErrorCode, str] = {
    ErrorCode.INVALID_REQUEST: "Invalid request payload",
    ErrorCode.DOWNLOAD_FAILED: "Failed to download file",
    ErrorCode.INVALID_FORMAT: "Failed to repackage file",
    ErrorCode.CORRUPTED_FILE: "Failed to repackage file",
    ErrorCode.TRUNCATED_INPUT: "Failed to repackage file",
    ErrorCode.OUTPUT_WRITE_FAILED: "Failed to repackage file",
    ErrorCode.PROCESSING_FAILED: "Failed to repackage file",
    ErrorCode.UPLOAD_FAILED: "Failed to publish file",
    ErrorCode.CONFIG_ERROR: "Internal server error",
    ErrorCode.UNEXPECTED_ERROR: "Internal server error",
}


def classify_exception(error: BaseException) -> ErrorCode:
    """
    Map an exception raised anywhere in a repackage request to an ErrorCode.

    Order matters: specific transcode errors are checked before the
    TranscodeError base class. Only InvalidRequestError is a client error;
    any other exception, ValueError included, is an internal failure.
    """
    if isinstance(error, FetchError):
        return ErrorCode.DOWNLOAD_FAILED
    if isinstance(error, DecompressionError):
        return ErrorCode.INVALID_FORMAT
    if isinstance(error, ArchiveFormatError):
        return ErrorCode.CORRUPTED_FILE
    if isinstance(error, TruncatedInputError):
        return ErrorCode.TRUNCATED_INPUT
    if isinstance(error, OutputWriteError):
        return ErrorCode.OUTPUT_WRITE_FAILED
    if isinstance(error, TranscodeError):
        return ErrorCode.PROCESSING_FAILED
    if isinstance(error, PublishError):
        return ErrorCode.UPLOAD_FAILED
    if isinstance(error, ConfigurationError):
        return ErrorCode.CONFIG_ERROR
    if isinstance(error, InvalidRequestError):
        return ErrorCode.INVALID_REQUEST
    return ErrorCode.UNEXPECTED_ERROR


def is_retryable(error_code: ErrorCode) -> bool:
    """
    Determine if an error code could succeed on a later attempt.

    Example:
        >>> is_retryable(ErrorCode.INVALID_REQUEST)
        False
        >>> is_retryable(ErrorCode.DOWNLOAD_FAILED)
        True
    """
    classification = _ERROR_CLASSIFICATION.get(error_code, ErrorClassification.TRANSIENT)
    return classification != ErrorClassification.PERMANENT


def get_error_classification(error_code: ErrorCode) -> ErrorClassification:
    """Get the classification for an error code."""
    return _ERROR_CLASSIFICATION.get(error_code, ErrorClassification.TRANSIENT)


def get_http_status_code(error_code: ErrorCode) -> int:
    """
    Get the HTTP status category for an error code.

    Only malformed requests are client errors; every fetch, transcode and
    publish failure is reported as a server-side failure.

    Example:
        >>> get_http_status_code(ErrorCode.INVALID_REQUEST)
        400
        >>> get_http_status_code(ErrorCode.TRUNCATED_INPUT)
        500
    """
    if error_code == ErrorCode.INVALID_REQUEST:
        return 400
    return 500


def get_public_message(error_code: ErrorCode) -> str:
    """Fixed response text for an error code; never contains exception detail."""
    return _PUBLIC_MESSAGES.get(error_code, _PUBLIC_MESSAGES[ErrorCode.UNEXPECTED_ERROR])
