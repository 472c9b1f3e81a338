# ============================================================================
# CLAUDE CONTEXT - SOURCE FETCHER
# ============================================================================
# STATUS: Service layer - remote archive retrieval
# PURPOSE: Open a streaming HTTP GET on the source URL and expose the body
#          as a readable file object for the transcoder
# EXPORTS: SourceFetcher, FetchedSource, HttpSourceStream
# DEPENDENCIES: httpx
# ============================================================================
"""
Source Fetcher.

Streams the source archive over HTTP(S) with httpx. The body is never
buffered as a whole; the transcoder pulls it one chunk at a time.

Usage:
    fetcher = SourceFetcher(timeout_seconds=60)
    fetched = fetcher.open("https://example.com/data/file1.tar.zst")
    with fetched.stream as stream:
        first = stream.read(1024)
"""

import io
from dataclasses import dataclass
from typing import Iterator, Optional

import httpx

from exceptions import FetchError
from services.naming import derive_base_name
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "SourceFetcher")


class HttpSourceStream(io.RawIOBase):
    """
    Readable, forward-only view over a streaming httpx response body.

    Owns the response and its client; close() releases both.
    """

    def __init__(self, client: httpx.Client, response: httpx.Response,
                 chunk_size: Optional[int] = None):
        super().__init__()
        self._client = client
        self._response = response
        self._chunks: Iterator[bytes] = response.iter_bytes(chunk_size=chunk_size)
        self._pending = b""
        self.bytes_received = 0

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed stream")

        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
            except httpx.HTTPError as e:
                raise FetchError(
                    f"Source body read failed after {self.bytes_received} bytes: {e}"
                ) from e

        count = min(len(buffer), len(self._pending))
        buffer[:count] = self._pending[:count]
        self._pending = self._pending[count:]
        self.bytes_received += count
        return count

    def close(self) -> None:
        if not self.closed:
            try:
                self._response.close()
            finally:
                self._client.close()
                logger.debug(f"Closed source stream ({self.bytes_received} bytes received)")
        super().close()


@dataclass
class FetchedSource:
    """An opened source: its body stream and the base name derived from the URL."""
    stream: HttpSourceStream
    base_name: str
    url: str
    content_length: Optional[int] = None


class SourceFetcher:
    """
    Opens source archives over HTTP(S).

    Redirects are followed; any non-2xx final status is a FetchError. A
    custom httpx transport can be supplied (httpx.MockTransport in tests).
    """

    def __init__(self, timeout_seconds: float = 60.0, chunk_size: Optional[int] = None,
                 transport: Optional[httpx.BaseTransport] = None):
        self.timeout_seconds = timeout_seconds
        self.chunk_size = chunk_size
        self._transport = transport

    def _create_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self.timeout_seconds,
            follow_redirects=True,
            transport=self._transport,
        )

    def open(self, url: str) -> FetchedSource:
        """
        Start the download and return the body stream.

        Raises:
            FetchError: Connection failed or the origin answered non-2xx
        """
        logger.info(f"Fetching source archive: {url}")
        client = self._create_client()
        response = None
        try:
            request = client.build_request("GET", url)
            response = client.send(request, stream=True)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            response.close()
            client.close()
            raise FetchError(
                f"Source responded with status {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            if response is not None:
                response.close()
            client.close()
            raise FetchError(f"Source request failed: {e}") from e

        length = response.headers.get("content-length")
        content_length = int(length) if length and length.isdigit() else None
        logger.debug(
            f"Source responded {response.status_code} "
            f"(content-length={content_length})"
        )

        return FetchedSource(
            stream=HttpSourceStream(client, response, chunk_size=self.chunk_size),
            base_name=derive_base_name(url),
            url=url,
            content_length=content_length,
        )
