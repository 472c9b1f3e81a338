"""
Core Data Models Package.

Contains pure data structures without business logic.

Exports:
    EntryKind, TranscodeResult: Archive models
    RepackageRequest, RepackageResult: Request boundary models
"""

from .archive import EntryKind, TranscodeResult
from .repackage import RepackageRequest, RepackageResult

__all__ = [
    'EntryKind',
    'TranscodeResult',
    'RepackageRequest',
    'RepackageResult',
]
