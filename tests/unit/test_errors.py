"""
Exception hierarchy and error code mapping.

The HTTP layer relies on these mappings to return fixed text only.
"""

import pytest
from pydantic import ValidationError

from core.errors import (
    ErrorClassification,
    ErrorCode,
    classify_exception,
    get_error_classification,
    get_http_status_code,
    get_public_message,
    is_retryable,
)
from core.models import RepackageRequest
from exceptions import (
    ArchiveFormatError,
    BusinessLogicError,
    ConfigurationError,
    ContractViolationError,
    DecompressionError,
    FetchError,
    InvalidRequestError,
    OutputWriteError,
    PipelineStage,
    PublishError,
    RepackageError,
    TranscodeError,
    TruncatedInputError,
)


class TestExceptionHierarchy:

    @pytest.mark.parametrize("error_cls", [
        DecompressionError, ArchiveFormatError, TruncatedInputError, OutputWriteError,
    ])
    def test_transcode_errors_share_a_base(self, error_cls):
        assert issubclass(error_cls, TranscodeError)
        assert issubclass(error_cls, RepackageError)
        assert issubclass(error_cls, BusinessLogicError)

    def test_contract_violation_is_type_error(self):
        assert issubclass(ContractViolationError, TypeError)
        assert not issubclass(ContractViolationError, BusinessLogicError)

    def test_invalid_request_is_not_a_value_error(self):
        assert issubclass(InvalidRequestError, BusinessLogicError)
        assert not issubclass(InvalidRequestError, (ValueError, RepackageError))

    @pytest.mark.parametrize("error_cls, stage", [
        (FetchError, PipelineStage.FETCH),
        (DecompressionError, PipelineStage.DECOMPRESS),
        (ArchiveFormatError, PipelineStage.DEMULTIPLEX),
        (TruncatedInputError, PipelineStage.DEMULTIPLEX),
        (OutputWriteError, PipelineStage.ENCODE),
        (PublishError, PipelineStage.PUBLISH),
    ])
    def test_default_stage(self, error_cls, stage):
        assert error_cls("boom").stage == stage

    def test_explicit_stage_wins(self):
        error = OutputWriteError("seal failed", stage=PipelineStage.FINALIZE)
        assert error.stage == PipelineStage.FINALIZE

    def test_annotate_keeps_first_entry_name(self):
        error = TruncatedInputError("short", entry_name="inner.bin")
        assert error.annotate("outer.bin").entry_name == "inner.bin"
        assert TruncatedInputError("short").annotate("outer.bin").entry_name == "outer.bin"

    def test_str_includes_stage_and_entry(self):
        error = TruncatedInputError("short body", entry_name="a.txt")
        assert str(error) == "[demultiplex] short body (entry: 'a.txt')"


class TestClassifyException:

    @pytest.mark.parametrize("error, code", [
        (FetchError("x"), ErrorCode.DOWNLOAD_FAILED),
        (DecompressionError("x"), ErrorCode.INVALID_FORMAT),
        (ArchiveFormatError("x"), ErrorCode.CORRUPTED_FILE),
        (TruncatedInputError("x"), ErrorCode.TRUNCATED_INPUT),
        (OutputWriteError("x"), ErrorCode.OUTPUT_WRITE_FAILED),
        (TranscodeError("x"), ErrorCode.PROCESSING_FAILED),
        (PublishError("x"), ErrorCode.UPLOAD_FAILED),
        (ConfigurationError("x"), ErrorCode.CONFIG_ERROR),
        (InvalidRequestError("x"), ErrorCode.INVALID_REQUEST),
        (ValueError("x"), ErrorCode.UNEXPECTED_ERROR),
        (KeyError("x"), ErrorCode.UNEXPECTED_ERROR),
        (RuntimeError("x"), ErrorCode.UNEXPECTED_ERROR),
        (ContractViolationError("x"), ErrorCode.UNEXPECTED_ERROR),
    ])
    def test_mapping(self, error, code):
        assert classify_exception(error) == code

    def test_internal_validation_error_is_not_a_client_error(self):
        # Only the trigger turns a bad request body into InvalidRequestError
        with pytest.raises(ValidationError) as exc_info:
            RepackageRequest(url="ftp://example.com/a.tar.zst")
        assert classify_exception(exc_info.value) == ErrorCode.UNEXPECTED_ERROR


class TestHttpMapping:

    def test_only_invalid_request_is_client_error(self):
        for code in ErrorCode:
            expected = 400 if code == ErrorCode.INVALID_REQUEST else 500
            assert get_http_status_code(code) == expected

    @pytest.mark.parametrize("code, message", [
        (ErrorCode.INVALID_REQUEST, "Invalid request payload"),
        (ErrorCode.DOWNLOAD_FAILED, "Failed to download file"),
        (ErrorCode.INVALID_FORMAT, "Failed to repackage file"),
        (ErrorCode.CORRUPTED_FILE, "Failed to repackage file"),
        (ErrorCode.TRUNCATED_INPUT, "Failed to repackage file"),
        (ErrorCode.OUTPUT_WRITE_FAILED, "Failed to repackage file"),
        (ErrorCode.UPLOAD_FAILED, "Failed to publish file"),
        (ErrorCode.UNEXPECTED_ERROR, "Internal server error"),
    ])
    def test_public_messages(self, code, message):
        assert get_public_message(code) == message

    def test_every_code_has_a_public_message_and_classification(self):
        for code in ErrorCode:
            assert get_public_message(code)
            assert isinstance(get_error_classification(code), ErrorClassification)

    def test_retryability(self):
        assert not is_retryable(ErrorCode.INVALID_REQUEST)
        assert not is_retryable(ErrorCode.INVALID_FORMAT)
        assert is_retryable(ErrorCode.DOWNLOAD_FAILED)
        assert is_retryable(ErrorCode.UPLOAD_FAILED)
