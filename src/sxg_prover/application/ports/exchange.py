"""Ports for retrieving verified exchanges and integrity-encoding payloads."""

from __future__ import annotations

from typing import Protocol

from sxg_prover.domain.exchange import Exchange


class ExchangeSourcePort(Protocol):
    """Fetches and authenticates the signed exchange served at a URL."""

    def fetch_and_verify(self, source_url: str) -> Exchange:
        """Return the verified exchange or raise FetchError/VerificationError."""


class IntegrityEncoderPort(Protocol):
    """Chunked integrity encoding producing a digest header value."""

    def encode(self, payload: bytes, record_size: int) -> tuple[bytes, str]:
        ...


__all__ = ["ExchangeSourcePort", "IntegrityEncoderPort"]
