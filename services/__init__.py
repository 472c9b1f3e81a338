"""
Service Layer.

Business logic of the repackager. Services receive their collaborators
and settings explicitly and never read the environment.

Modules:
    archive_transcoder: tar.zst stream -> in-memory ZIP
    source_fetcher: Streaming HTTP(S) download of the source archive
    naming: Base name, output filename and object key derivation
    repackage_service: fetch -> transcode -> deliver orchestration

Exports:
    ArchiveTranscoder, SourceFetcher, RepackageService
"""

from .archive_transcoder import ArchiveTranscoder
from .source_fetcher import SourceFetcher, FetchedSource
from .repackage_service import RepackageService

__all__ = [
    'ArchiveTranscoder',
    'SourceFetcher',
    'FetchedSource',
    'RepackageService',
]
