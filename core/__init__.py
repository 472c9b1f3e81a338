"""
Core Components.

Structure:
    models/: Pure data structures (no business logic)
    errors: Error codes, retry classification and HTTP status mapping
"""

from . import models

__all__ = [
    'models',
]
