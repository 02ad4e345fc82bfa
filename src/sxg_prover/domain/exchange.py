"""Verified signed exchange as seen by the witness pipeline."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Exchange:
    """Decoded, signature-checked exchange. Read-only to the core."""

    payload: bytes
    signed_message: bytes
    response_headers: tuple[tuple[str, str], ...]
    signature_r: int
    signature_s: int
    public_key_x: int
    public_key_y: int
    version: str = "1b3"
    request_url: str = ""

    def header(self, name: str) -> str | None:
        """Return the first response header named ``name`` (case-insensitive)."""

        wanted = name.lower()
        for key, value in self.response_headers:
            if key.lower() == wanted:
                return value
        return None


__all__ = ["Exchange"]
