# ============================================================================
# ARCHIVE TRANSCODER
# ============================================================================
# STATUS: Service layer - tar.zst stream to in-memory ZIP
# PURPOSE: Re-encode a Zstandard-compressed tar stream into a ZIP archive
#          without materializing the decompressed tar
# EXPORTS: ArchiveTranscoder, TarEntryCursor, TarEntry, ZipOutputArchive
# DEPENDENCIES: zstandard, tarfile, zipfile
# ============================================================================
"""
Archive Transcoder.

Reads a .tar.zst byte stream strictly forward and writes every non-directory
entry into a ZIP archive held in memory.

Pipeline:
    source stream -> zstandard stream reader (_DecompressedSource)
                  -> tarfile stream mode "r|" (TarEntryCursor)
                  -> zipfile writer over BytesIO (ZipOutputArchive)

Memory:
    Only one read chunk of decompressed tar data is in flight at a time. The
    ZIP output is fully buffered, so peak memory grows with the compressed
    size of the output archive.

Error mapping:
    zstandard.ZstdError                 -> DecompressionError
    bad header checksum / bad pax data  -> ArchiveFormatError
    partial header, short body, EOF     -> TruncatedInputError
    bad entry name, zipfile failures    -> OutputWriteError

Exports:
    ArchiveTranscoder: Transcode entry point
    TarEntryCursor: Forward-only cursor over tar entries
    TarEntry: One entry with a content reader valid until the cursor advances
    ZipOutputArchive: In-memory ZIP, finalized exactly once
"""

import io
import stat
import tarfile
import time
import zipfile
from contextlib import closing
from dataclasses import dataclass, field
from typing import BinaryIO, Optional, Tuple

import zstandard

from core.models.archive import EntryKind, TranscodeResult
from exceptions import (
    ArchiveFormatError,
    ContractViolationError,
    DecompressionError,
    OutputWriteError,
    PipelineStage,
    RepackageError,
    TruncatedInputError,
)
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "ArchiveTranscoder")

DEFAULT_CHUNK_SIZE = 1024 * 1024
DEFAULT_COMPRESSLEVEL = 6

# ZIP stores MS-DOS timestamps
ZIP_MIN_DATE_TIME = (1980, 1, 1, 0, 0, 0)
ZIP_MAX_DATE_TIME = (2107, 12, 31, 23, 59, 58)


# ============================================================================
# DECOMPRESSION
# ============================================================================

class _DecompressedSource(io.RawIOBase):
    """
    Readable view over the decompressed tar bytes.

    Tracks how much was produced and whether the end was reached, so the
    cursor can tell a damaged archive from a cut-off one.
    """

    def __init__(self, compressed: BinaryIO, read_size: int = DEFAULT_CHUNK_SIZE):
        super().__init__()
        self._reader = zstandard.ZstdDecompressor().stream_reader(
            compressed,
            read_size=read_size,
            read_across_frames=True,
            closefd=False,
        )
        self.bytes_read = 0
        self.exhausted = False

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        try:
            count = self._reader.readinto(buffer)
        except zstandard.ZstdError as e:
            raise DecompressionError(f"Invalid Zstandard stream: {e}") from e
        if count == 0 and len(buffer) > 0:
            self.exhausted = True
        self.bytes_read += count
        return count

    def close(self) -> None:
        if not self.closed:
            self._reader.close()
        super().close()


# ============================================================================
# DEMULTIPLEXING
# ============================================================================

class _StrictTarInfo(tarfile.TarInfo):
    """
    TarInfo that reports header damage after the first member.

    tarfile ends iteration quietly when a later header is invalid or cut
    short. Raising our own errors here surfaces them instead.
    """

    @classmethod
    def fromtarfile(cls, tarfile_obj):
        try:
            return super().fromtarfile(tarfile_obj)
        except tarfile.TruncatedHeaderError as e:
            raise TruncatedInputError(
                f"Partial tar header at offset {tarfile_obj.offset}: {e}"
            ) from e
        except tarfile.InvalidHeaderError as e:
            raise ArchiveFormatError(
                f"Invalid tar header at offset {tarfile_obj.offset}: {e}"
            ) from e


def _classify_entry(member: tarfile.TarInfo) -> EntryKind:
    if member.isdir():
        return EntryKind.DIRECTORY
    if member.isreg():
        return EntryKind.FILE
    return EntryKind.OTHER


@dataclass
class TarEntry:
    """
    One tar entry.

    The content reader is only valid until the cursor advances; reading after
    that raises ContractViolationError.
    """

    name: str
    kind: EntryKind
    size: int
    mtime: float
    mode: int
    position: int
    _content: Optional[BinaryIO] = field(default=None, repr=False)
    _expired: bool = field(default=False, repr=False)

    @property
    def is_directory(self) -> bool:
        return self.kind == EntryKind.DIRECTORY

    def read(self, size: int = -1) -> bytes:
        """Read up to size bytes of the entry body (b"" once exhausted)."""
        if self._expired:
            raise ContractViolationError(
                f"Entry {self.name!r} was read after the cursor advanced past it"
            )
        if self._content is None:
            return b""
        try:
            return self._content.read(size)
        except tarfile.TarError as e:
            # Stream-mode body reads only fail when data runs out
            raise TruncatedInputError(
                f"Entry body ended before its declared size of {self.size} bytes: {e}",
                entry_name=self.name
            ) from e

    def expire(self) -> None:
        self._expired = True
        self._content = None


class TarEntryCursor:
    """
    Forward-only cursor over the entries of a decompressed tar stream.

    Advancing (next()) is the only operation. StopIteration marks a clean end
    of archive; damage raises a TranscodeError subclass. Entry i expires when
    entry i+1 is requested, matching the sequential layout of tar.
    """

    def __init__(self, source: _DecompressedSource):
        self._source = source
        self._tar: Optional[tarfile.TarFile] = None
        self._current: Optional[TarEntry] = None
        self._finished = False
        self.position = 0

    def __iter__(self) -> "TarEntryCursor":
        return self

    def __next__(self) -> TarEntry:
        if self._current is not None:
            self._current.expire()
            self._current = None

        if self._finished:
            raise StopIteration

        member = self._advance()
        if member is None:
            self._finished = True
            raise StopIteration

        self.position += 1
        kind = _classify_entry(member)
        content = None
        # Links cannot be opened in stream mode; devices and FIFOs return None
        if kind != EntryKind.DIRECTORY and not (member.issym() or member.islnk()):
            content = self._tar.extractfile(member)

        self._current = TarEntry(
            name=member.name,
            kind=kind,
            size=member.size,
            mtime=member.mtime,
            mode=member.mode,
            position=self.position,
            _content=content,
        )
        return self._current

    def _advance(self) -> Optional[tarfile.TarInfo]:
        try:
            if self._tar is None:
                self._tar = tarfile.open(
                    fileobj=self._source,
                    mode="r|",
                    tarinfo=_StrictTarInfo,
                )
            return self._tar.next()
        except RepackageError:
            raise
        except tarfile.TarError as e:
            if self._tar is None and self._source.exhausted and self._source.bytes_read == 0:
                # Zero decompressed bytes: an archive with no entries
                logger.debug("Decompressed payload is empty - treating as empty archive")
                return None
            if self._source.exhausted:
                raise TruncatedInputError(
                    f"Tar stream ended unexpectedly after {self._source.bytes_read} bytes: {e}"
                ) from e
            raise ArchiveFormatError(f"Malformed tar stream: {e}") from e

    def close(self) -> None:
        if self._current is not None:
            self._current.expire()
            self._current = None
        if self._tar is not None:
            self._tar.close()
        self._finished = True


# ============================================================================
# RE-ENCODING
# ============================================================================

def _zip_date_time(mtime: float) -> Tuple[int, int, int, int, int, int]:
    """UTC timestamp clamped to the range a ZIP header can store."""
    try:
        stamp = tuple(time.gmtime(max(mtime, 0))[:6])
    except (OverflowError, OSError, ValueError):
        return ZIP_MAX_DATE_TIME
    if stamp < ZIP_MIN_DATE_TIME:
        return ZIP_MIN_DATE_TIME
    if stamp > ZIP_MAX_DATE_TIME:
        return ZIP_MAX_DATE_TIME
    return stamp


class ZipOutputArchive:
    """
    ZIP archive built in memory, one entry at a time.

    Names are used verbatim and never deduplicated. finalize() seals the
    archive exactly once; discard() drops a partial one.
    """

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED,
                 compresslevel: Optional[int] = DEFAULT_COMPRESSLEVEL):
        self._buffer = io.BytesIO()
        self._compression = compression
        self._compresslevel = compresslevel
        self._zip = zipfile.ZipFile(
            self._buffer,
            mode="w",
            compression=compression,
            compresslevel=compresslevel,
        )
        self._names = set()
        self._finalized = False
        self.entries_written = 0
        self.duplicate_names = 0

    @property
    def finalized(self) -> bool:
        return self._finalized

    def _check_writable(self) -> None:
        if self._finalized:
            raise ContractViolationError("Output archive is already finalized")

    @staticmethod
    def _validate_name(name: str) -> None:
        if not name:
            raise OutputWriteError("Entry name is empty")
        if "\x00" in name:
            raise OutputWriteError("Entry name contains a NUL byte", entry_name=name)
        try:
            name.encode("utf-8")
        except UnicodeEncodeError as e:
            raise OutputWriteError(f"Entry name is not valid UTF-8: {e}", entry_name=name) from e

    def open_entry(self, name: str, size: int = 0, mtime: float = 0,
                   mode: int = 0o644) -> BinaryIO:
        """
        Start a new entry and return its writable stream.

        Raises:
            OutputWriteError: Name rejected or ZIP refused the entry
            ContractViolationError: Archive already finalized
        """
        self._check_writable()
        self._validate_name(name)

        if name in self._names:
            self.duplicate_names += 1
            logger.warning(f"⚠️ Duplicate entry name written again: {name!r}")
        self._names.add(name)

        info = zipfile.ZipInfo(filename=name, date_time=_zip_date_time(mtime))
        info.compress_type = self._compression
        # zipfile only applies the archive-wide level to entries it names itself
        if hasattr(info, "compress_level"):
            info.compress_level = self._compresslevel
        else:
            info._compresslevel = self._compresslevel
        info.external_attr = (stat.S_IFREG | (mode & 0o7777)) << 16
        info.file_size = size  # lets zipfile pick ZIP64 up front for large bodies

        try:
            writer = self._zip.open(info, mode="w")
        except (ValueError, RuntimeError, OSError, zipfile.LargeZipFile) as e:
            raise OutputWriteError(f"Cannot create output entry: {e}", entry_name=name) from e

        self.entries_written += 1
        return writer

    def close_entry(self, writer: BinaryIO, name: str) -> None:
        try:
            writer.close()
        except (ValueError, RuntimeError, OSError) as e:
            raise OutputWriteError(f"Cannot complete output entry: {e}", entry_name=name) from e

    def finalize(self) -> bytes:
        """
        Write the central directory and return the archive bytes.

        Raises:
            OutputWriteError: Sealing failed - the partial buffer is released
        """
        self._check_writable()
        self._finalized = True
        try:
            self._zip.close()
        except (ValueError, RuntimeError, OSError, zipfile.LargeZipFile) as e:
            self._buffer.close()
            raise OutputWriteError(
                f"Failed to write ZIP central directory: {e}",
                stage=PipelineStage.FINALIZE
            ) from e
        content = self._buffer.getvalue()
        self._buffer.close()
        return content

    def discard(self) -> None:
        """Release a partially built archive. No-op once finalized."""
        if self._buffer.closed:
            return
        self._finalized = True
        try:
            self._zip.close()
        except (ValueError, RuntimeError, OSError) as e:
            logger.debug(f"Ignoring error while discarding partial archive: {e}")
        finally:
            self._buffer.close()


# ============================================================================
# TRANSCODER
# ============================================================================

class ArchiveTranscoder:
    """
    Converts a .tar.zst stream into an in-memory ZIP archive.

    Sequential and single-use per call: the source stream is owned by
    transcode() and closed before it returns or raises. No retries, no
    partial results.

    Usage:
        transcoder = ArchiveTranscoder(chunk_size=1024 * 1024)
        result = transcoder.transcode(open("data.tar.zst", "rb"))
        Path("data.zip").write_bytes(result.content)
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE,
                 compresslevel: Optional[int] = DEFAULT_COMPRESSLEVEL,
                 compression: int = zipfile.ZIP_DEFLATED):
        if chunk_size <= 0:
            raise ContractViolationError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size
        self.compresslevel = compresslevel
        self.compression = compression

    def transcode(self, source: BinaryIO) -> TranscodeResult:
        """
        Re-encode every non-directory entry of source into a new ZIP.

        Args:
            source: Readable Zstandard-compressed tar stream; closed on return

        Returns:
            TranscodeResult with the sealed archive bytes and statistics

        Raises:
            DecompressionError, ArchiveFormatError, TruncatedInputError,
            OutputWriteError: conversion aborted, no output produced
            FetchError: the source itself failed while being read
        """
        started = time.monotonic()
        output = ZipOutputArchive(compression=self.compression, compresslevel=self.compresslevel)
        directories_skipped = 0
        content_bytes = 0

        with closing(source):
            decompressed = _DecompressedSource(source, read_size=self.chunk_size)
            cursor = TarEntryCursor(decompressed)
            try:
                for entry in cursor:
                    if entry.is_directory:
                        directories_skipped += 1
                        logger.debug(f"Skipping directory entry: {entry.name}")
                        continue
                    content_bytes += self._copy_entry(entry, output)
                content = output.finalize()
            except Exception as e:
                output.discard()
                stage = e.stage.value if isinstance(e, RepackageError) else "unknown"
                logger.warning(
                    f"❌ Transcode aborted at entry #{cursor.position} "
                    f"(stage={stage}): {e}"
                )
                raise
            finally:
                cursor.close()
                decompressed.close()

        duration_ms = (time.monotonic() - started) * 1000
        logger.info(
            f"✅ Transcoded {output.entries_written} entries "
            f"({content_bytes} content bytes, {directories_skipped} directories skipped) "
            f"into {len(content)} byte ZIP in {duration_ms:.1f}ms"
        )

        return TranscodeResult(
            content=content,
            entries_written=output.entries_written,
            directories_skipped=directories_skipped,
            duplicate_names=output.duplicate_names,
            content_bytes=content_bytes,
            duration_ms=duration_ms,
        )

    def _copy_entry(self, entry: TarEntry, output: ZipOutputArchive) -> int:
        """Stream one entry body into a new ZIP entry. Returns bytes copied."""
        writer = output.open_entry(entry.name, size=entry.size, mtime=entry.mtime, mode=entry.mode)
        copied = 0
        try:
            while True:
                chunk = entry.read(self.chunk_size)
                if not chunk:
                    break
                try:
                    writer.write(chunk)
                except (ValueError, RuntimeError, OSError) as e:
                    raise OutputWriteError(f"Failed writing entry data: {e}") from e
                copied += len(chunk)
        except RepackageError as e:
            raise e.annotate(entry.name)
        finally:
            output.close_entry(writer, entry.name)

        logger.debug(f"Copied entry #{entry.position} {entry.name!r} ({copied} bytes)")
        return copied
