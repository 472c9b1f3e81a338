"""
In-Memory Object Publisher.

Dict-backed IObjectPublisher for local development (STORAGE_BACKEND=memory)
and tests. Presigned URLs use a memory:// scheme and carry their expiry.
"""

import threading
import time
from typing import Any, Dict, Optional
from urllib.parse import quote

from exceptions import PublishError
from infrastructure.blob import IObjectPublisher, ZIP_CONTENT_TYPE
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "InMemoryObjectPublisher")


class InMemoryObjectPublisher(IObjectPublisher):
    """Stores objects in a process-local dict keyed by object key."""

    def __init__(self, container: str = "memory"):
        self.container = container
        self._objects: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def put_object(self, key: str, data: bytes,
                   content_type: str = ZIP_CONTENT_TYPE) -> Dict[str, Any]:
        if not key:
            raise PublishError("Object key is empty")
        with self._lock:
            self._objects[key] = {'data': bytes(data), 'content_type': content_type}
        logger.debug(f"Stored object {self.container}/{key} ({len(data)} bytes)")
        return {'container': self.container, 'key': key, 'size': len(data), 'etag': None}

    def presign_get(self, key: str, expires_in_seconds: int) -> str:
        with self._lock:
            if key not in self._objects:
                raise PublishError(f"Object {key} does not exist")
        expires_at = int(time.time()) + expires_in_seconds
        return f"memory://{self.container}/{quote(key)}?expires={expires_at}"

    def get_object(self, key: str) -> Optional[bytes]:
        with self._lock:
            stored = self._objects.get(key)
        return stored['data'] if stored else None

    def content_type_of(self, key: str) -> Optional[str]:
        with self._lock:
            stored = self._objects.get(key)
        return stored['content_type'] if stored else None

    def keys(self):
        with self._lock:
            return sorted(self._objects)
