"""GZip compression of request bodies."""

from __future__ import annotations

import gzip
import io
from typing import Any

_CHUNK = 64 * 1024


def compress_with_gzip(data: Any) -> bytes:
    """Compress bytes, text or the contents of a readable stream with gzip.

    Raises TypeError for any other input.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    out = io.BytesIO()
    if isinstance(data, (bytes, bytearray, memoryview)):
        with gzip.GzipFile(fileobj=out, mode="wb") as gz:
            gz.write(data)
        return out.getvalue()
    if not hasattr(data, "read"):
        raise TypeError(f"cannot compress object of type {type(data).__name__}")
    with gzip.GzipFile(fileobj=out, mode="wb") as gz:
        while chunk := data.read(_CHUNK):
            if isinstance(chunk, str):
                chunk = chunk.encode("utf-8")
            gz.write(chunk)
    return out.getvalue()