"""
Archive Data Models.

Entry classification and transcode outcome for the tar.zst -> zip pipeline.
No business logic - pure data structures.

Exports:
    EntryKind: Classification of a tar entry's type flag
    TranscodeResult: Finalized output archive plus statistics
"""

from enum import Enum

from pydantic import BaseModel, Field


class EntryKind(str, Enum):
    """
    Tar entry classification.

    FILE covers regular, old-style regular, contiguous and GNU sparse entries.
    OTHER covers links, devices and FIFOs.
    """
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


class TranscodeResult(BaseModel):
    """
    Output of one transcode pass.

    The content is a sealed ZIP archive; it is never partially built.
    """

    content: bytes = Field(..., repr=False, description="Finalized ZIP archive bytes")
    entries_written: int = Field(default=0, ge=0, description="Output entries created")
    directories_skipped: int = Field(default=0, ge=0, description="Directory entries dropped")
    duplicate_names: int = Field(default=0, ge=0, description="Entries whose name was already written")
    content_bytes: int = Field(default=0, ge=0, description="Entry body bytes copied")
    duration_ms: float = Field(default=0.0, ge=0, description="Wall-clock transcode time")

    @property
    def size_bytes(self) -> int:
        return len(self.content)
