# ============================================================================
# CLAUDE CONTEXT - EXCEPTIONS
# ============================================================================
# STATUS: Shared - used by services, infrastructure and triggers
# PURPOSE: Custom exception hierarchy for distinguishing contract violations from pipeline failures
# EXPORTS: ContractViolationError, BusinessLogicError, PipelineStage, RepackageError,
#          FetchError, TranscodeError, DecompressionError, ArchiveFormatError,
#          TruncatedInputError, OutputWriteError, PublishError, InvalidRequestError,
#          ConfigurationError
# INTERFACES: Standard Python exception hierarchy
# DEPENDENCIES: None (standard library only)
# SCOPE: Application-wide exception handling
# PATTERNS: Exception hierarchy for error categorization
# ENTRY_POINTS: Raised at component boundaries (fetch, transcode, publish)
# ============================================================================

"""
Custom Exception Hierarchy

Distinguishes between:
1. Contract Violations (programming bugs that need fixing)
2. Business Logic Failures (expected runtime issues)

Repackage pipeline failures are business failures. Each one records the
pipeline stage it came from and, when raised while an archive entry was being
copied, the name of that entry.

"""

from enum import Enum
from typing import Optional


class ContractViolationError(TypeError):
    """
    Raised when component contracts are violated (programming bugs).

    These indicate:
    - Wrong types passed to functions
    - Reading an archive entry after the cursor moved past it
    - Adding entries to an output archive that was already finalized

    These should NEVER be caught and handled - they indicate bugs
    that need to be fixed in the code.
    """
    pass


class BusinessLogicError(Exception):
    """
    Base class for expected runtime business logic failures.

    These are normal failures that occur during system operation
    and should be handled gracefully without crashing.
    """
    pass


class PipelineStage(str, Enum):
    """Stage of the fetch -> transcode -> publish pipeline an error came from."""
    FETCH = "fetch"
    DECOMPRESS = "decompress"
    DEMULTIPLEX = "demultiplex"
    ENCODE = "encode"
    FINALIZE = "finalize"
    PUBLISH = "publish"


class RepackageError(BusinessLogicError):
    """
    Base class for every failure of a repackage request.

    Attributes:
        stage: PipelineStage where the failure happened
        entry_name: Archive entry being processed, if any
    """

    default_stage: PipelineStage = PipelineStage.FETCH

    def __init__(self, message: str, stage: Optional[PipelineStage] = None,
                 entry_name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage or self.default_stage
        self.entry_name = entry_name

    def annotate(self, entry_name: str) -> "RepackageError":
        """Attach the entry name unless a more specific one is already set."""
        if self.entry_name is None:
            self.entry_name = entry_name
        return self

    def __str__(self) -> str:
        detail = f"[{self.stage.value}] {self.message}"
        if self.entry_name is not None:
            detail += f" (entry: {self.entry_name!r})"
        return detail


class FetchError(RepackageError):
    """
    Source archive could not be retrieved.

    Examples:
        - DNS failure or connection refused
        - Origin answered with a non-2xx status
        - Connection dropped while the body was being read
    """
    default_stage = PipelineStage.FETCH


class TranscodeError(RepackageError):
    """Base class for failures inside the archive transcoder."""
    default_stage = PipelineStage.DEMULTIPLEX


class DecompressionError(TranscodeError):
    """
    Compression framing is malformed. Not retryable.

    Examples:
        - Input is not Zstandard at all
        - Corrupted frame header or checksum
    """
    default_stage = PipelineStage.DECOMPRESS


class ArchiveFormatError(TranscodeError):
    """
    Tar framing is malformed.

    Examples:
        - Header checksum mismatch
        - Broken pax/GNU extended header
    """
    default_stage = PipelineStage.DEMULTIPLEX


class TruncatedInputError(TranscodeError):
    """
    Underlying stream ended in the middle of an entry.

    Examples:
        - Partial 512-byte header
        - Entry body shorter than its declared size
        - Missing block padding after the last body
    """
    default_stage = PipelineStage.DEMULTIPLEX


class OutputWriteError(TranscodeError):
    """
    Output archive could not accept an entry or could not be sealed.

    Examples:
        - Entry name is empty or not encodable
        - Central directory could not be written
    """
    default_stage = PipelineStage.ENCODE


class PublishError(RepackageError):
    """
    Storage collaborator failed.

    Examples:
        - Upload rejected (auth, missing container)
        - Presigned URL could not be issued
    """
    default_stage = PipelineStage.PUBLISH


class InvalidRequestError(BusinessLogicError):
    """
    Caller sent a malformed request. The only failure reported as a 400.

    Examples:
        - Body is not JSON or not a JSON object
        - url missing, not a string, or not an absolute http(s) URL
    """
    pass


class ConfigurationError(Exception):
    """
    System configuration error.

    These are typically fatal and indicate misconfiguration
    that prevents the system from operating.

    Examples:
        - Missing storage account for the azure backend
        - Unknown delivery mode
    """
    pass
