"""
Output Naming.

Derives the base name of a source archive from its URL and builds the
filename and object key of the repackaged ZIP.

Exports:
    derive_base_name: URL -> base name without the .tar.zst suffix
    build_output_filename: base name -> "<base>.zip"
    build_object_key: base name -> "<prefix>/<base>-<timestamp>.zip"
"""

import posixpath
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import unquote, urlsplit

from config.defaults import RepackageDefaults


OBJECT_KEY_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%SZ"


def derive_base_name(url: str) -> str:
    """
    Last path segment of the URL with the .tar.zst suffix removed.

    Query string and fragment are ignored; percent-escapes are decoded and
    any non-printable characters they produce (CR, LF, NUL) are dropped.
    Only the exact lowercase suffix is stripped, so "data.TAR.ZST" keeps
    its name.

    Example:
        >>> derive_base_name("https://example.com/a/file1.tar.zst?sig=x")
        'file1'
    """
    path = unquote(urlsplit(url).path).rstrip("/")
    name = "".join(ch for ch in posixpath.basename(path) if ch.isprintable())
    suffix = RepackageDefaults.COMPRESSED_TAR_SUFFIX
    if name.endswith(suffix):
        name = name[:-len(suffix)]
    return name or RepackageDefaults.FALLBACK_BASE_NAME


def build_output_filename(base_name: str) -> str:
    return f"{base_name}{RepackageDefaults.OUTPUT_SUFFIX}"


def build_object_key(base_name: str, prefix: str = "", now: Optional[datetime] = None) -> str:
    """
    Object key for a published archive.

    The UTC timestamp keeps repeated requests for the same source from
    overwriting each other.

    Example:
        >>> build_object_key("file1", "zips", datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
        'zips/file1-20250102T030405Z.zip'
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    stamp = now.strftime(OBJECT_KEY_TIMESTAMP_FORMAT)
    key = f"{base_name}-{stamp}{RepackageDefaults.OUTPUT_SUFFIX}"
    prefix = prefix.strip("/")
    return f"{prefix}/{key}" if prefix else key
