"""
Infrastructure Package - Lazy Loading Implementation.

Provides the object publisher implementations with lazy loading so that
importing function_app.py does not pull in the Azure SDK or read
environment variables before the Functions host is ready.

    Cold Start -> Import Modules -> Runtime Init -> Ready for Triggers
                        |                |
                  NO ENV VARS!     ENV VARS SET

__getattr__ intercepts access to the exported names and imports the
implementing module only on first use, which is normally the first request.
"""

from typing import TYPE_CHECKING

# For type checking only - doesn't actually import at runtime
if TYPE_CHECKING:
    from .blob import IObjectPublisher as _IObjectPublisher
    from .blob import BlobObjectPublisher as _BlobObjectPublisher
    from .memory_store import InMemoryObjectPublisher as _InMemoryObjectPublisher
    from .factory import create_object_publisher as _create_object_publisher


def __getattr__(name: str):
    """
    Lazy import mechanism - only imports when actually accessed.
    """
    # Factory - most common import
    if name == "create_object_publisher":
        from .factory import create_object_publisher
        return create_object_publisher

    # Interface and implementations
    elif name == "IObjectPublisher":
        from .blob import IObjectPublisher
        return IObjectPublisher
    elif name == "BlobObjectPublisher":
        from .blob import BlobObjectPublisher
        return BlobObjectPublisher
    elif name == "InMemoryObjectPublisher":
        from .memory_store import InMemoryObjectPublisher
        return InMemoryObjectPublisher

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "create_object_publisher",
    "IObjectPublisher",
    "BlobObjectPublisher",
    "InMemoryObjectPublisher",
]
