"""Reader for ``application/signed-exchange`` b2/b3 framing."""

from __future__ import annotations

from dataclasses import dataclass

import cbor2

from sxg_prover.infrastructure.sxg.signature_header import (
    SignatureEntry,
    SignatureHeaderError,
    parse_signature_header,
)
from sxg_prover.infrastructure.sxg.version import SxgVersion, version_from_magic

MAX_SIGNATURE_HEADER_LENGTH = 16 * 1024
MAX_RESPONSE_HEADERS_LENGTH = 512 * 1024
_MAGIC_LENGTH = 8


class SxgFormatError(ValueError):
    """Raised when bytes are not a well-formed signed exchange."""


@dataclass(frozen=True, slots=True)
class SignedExchange:
    """Parsed exchange before signature verification."""

    version: SxgVersion
    request_url: str
    signature_header: str
    signatures: tuple[SignatureEntry, ...]
    response_status: int
    response_headers: tuple[tuple[str, str], ...]
    raw_response_headers: bytes
    payload: bytes

    def header(self, name: str) -> str | None:
        wanted = name.lower()
        for key, value in self.response_headers:
            if key == wanted:
                return value
        return None

    def signed_message(self, signature: SignatureEntry) -> bytes:
        """Serialise the exact bytes covered by ``signature``."""

        validity_url = signature.validity_url.encode("utf-8")
        request_url = self.request_url.encode("utf-8")
        parts = [
            b"\x20" * 64,
            self.version.signature_context,
            b"\x00",
        ]
        if signature.cert_sha256 is not None:
            parts += [bytes([len(signature.cert_sha256)]), signature.cert_sha256]
        else:
            parts.append(b"\x00")
        parts += [
            _u64(len(validity_url)),
            validity_url,
            _u64(signature.date),
            _u64(signature.expires),
            _u64(len(request_url)),
            request_url,
            _u64(len(self.raw_response_headers)),
            self.raw_response_headers,
        ]
        return b"".join(parts)


class _Cursor:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    def take(self, size: int, what: str) -> bytes:
        end = self._pos + size
        if size < 0 or end > len(self._data):
            raise SxgFormatError(f"truncated exchange while reading {what}")
        chunk = self._data[self._pos : end]
        self._pos = end
        return chunk

    def uint(self, size: int, what: str) -> int:
        return int.from_bytes(self.take(size, what), "big")

    def rest(self) -> bytes:
        chunk = self._data[self._pos :]
        self._pos = len(self._data)
        return chunk


def read_exchange(data: bytes) -> SignedExchange:
    """Parse a serialised signed exchange."""

    cursor = _Cursor(data)
    version = version_from_magic(cursor.take(_MAGIC_LENGTH, "magic"))
    if version is None:
        raise SxgFormatError("unsupported signed exchange magic string")

    fallback_url = cursor.take(cursor.uint(2, "fallback URL length"), "fallback URL")
    try:
        request_url = fallback_url.decode("ascii")
    except UnicodeDecodeError as exc:
        raise SxgFormatError("fallback URL is not ASCII") from exc

    sig_length = cursor.uint(3, "signature length")
    if sig_length > MAX_SIGNATURE_HEADER_LENGTH:
        raise SxgFormatError(f"signature header length {sig_length} is too big")
    header_length = cursor.uint(3, "header length")
    if header_length > MAX_RESPONSE_HEADERS_LENGTH:
        raise SxgFormatError(f"response headers length {header_length} is too big")

    signature_raw = cursor.take(sig_length, "signature header")
    raw_headers = cursor.take(header_length, "response headers")
    payload = cursor.rest()

    try:
        signature_header = signature_raw.decode("ascii")
        signatures = parse_signature_header(signature_header)
    except (UnicodeDecodeError, SignatureHeaderError) as exc:
        raise SxgFormatError(f"invalid signature header: {exc}") from exc

    status, headers = _decode_response_headers(raw_headers, version)
    return SignedExchange(
        version=version,
        request_url=request_url,
        signature_header=signature_header,
        signatures=signatures,
        response_status=status,
        response_headers=headers,
        raw_response_headers=raw_headers,
        payload=payload,
    )


def _decode_response_headers(
    raw: bytes, version: SxgVersion
) -> tuple[int, tuple[tuple[str, str], ...]]:
    try:
        decoded = cbor2.loads(raw)
    except (cbor2.CBORDecodeError, ValueError) as exc:
        raise SxgFormatError("response headers are not valid CBOR") from exc
    if version.name == "1b2":
        # b2 carries [request map, response map].
        if not isinstance(decoded, list) or len(decoded) != 2:
            raise SxgFormatError("b2 headers must be a two-element CBOR array")
        decoded = decoded[1]
    if not isinstance(decoded, dict):
        raise SxgFormatError("response headers must be a CBOR map")

    status: int | None = None
    headers: list[tuple[str, str]] = []
    for key, value in decoded.items():
        if not isinstance(key, bytes) or not isinstance(value, bytes):
            raise SxgFormatError("response header names and values must be byte strings")
        try:
            name, text = key.decode("ascii"), value.decode("latin-1")
        except UnicodeDecodeError as exc:
            raise SxgFormatError("response header name is not ASCII") from exc
        if name != name.lower():
            raise SxgFormatError(f"response header name {name!r} is not lowercase")
        if name == ":status":
            if not text.isdigit():
                raise SxgFormatError("invalid :status pseudo-header")
            status = int(text)
            continue
        if name.startswith(":"):
            raise SxgFormatError(f"unexpected pseudo-header {name!r}")
        headers.append((name, text))
    if status is None:
        raise SxgFormatError("response headers are missing :status")
    return status, tuple(headers)


def _u64(value: int) -> bytes:
    return value.to_bytes(8, "big")


__all__ = [
    "MAX_RESPONSE_HEADERS_LENGTH",
    "MAX_SIGNATURE_HEADER_LENGTH",
    "SignedExchange",
    "SxgFormatError",
    "read_exchange",
]
