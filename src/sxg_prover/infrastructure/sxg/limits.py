"""Size-capped reads of streamed HTTP bodies."""

from __future__ import annotations

import httpx


class BodyTooLargeError(Exception):
    """Raised when a response body exceeds the caller's byte limit."""

    def __init__(self, limit: int) -> None:
        super().__init__(f"response body exceeds {limit} bytes")
        self.limit = limit


def read_capped(response: httpx.Response, max_bytes: int) -> bytes:
    """Read a streamed body, stopping as soon as it grows past ``max_bytes``."""

    declared = response.headers.get("content-length")
    if declared is not None and declared.strip().isdigit() and int(declared) > max_bytes:
        raise BodyTooLargeError(max_bytes)

    chunks: list[bytes] = []
    total = 0
    for chunk in response.iter_bytes():
        total += len(chunk)
        if total > max_bytes:
            raise BodyTooLargeError(max_bytes)
        chunks.append(chunk)
    return b"".join(chunks)


__all__ = ["BodyTooLargeError", "read_capped"]
