"""Merkle integrity content encoding (``mi-sha256-03``)."""

from __future__ import annotations

import base64
import binascii
import hashlib

MI_SHA256_03 = "mi-sha256-03"
_RECORD_SIZE_BYTES = 8
_PROOF_BYTES = 32


class MiceError(ValueError):
    """Raised when an encoded payload does not match its integrity proof."""


def _proof(record: bytes, next_proof: bytes | None) -> bytes:
    digest = hashlib.sha256(record)
    if next_proof is None:
        digest.update(b"\x00")
    else:
        digest.update(next_proof)
        digest.update(b"\x01")
    return digest.digest()


class MiSha256Encoding:
    """Encode payloads into proof-interleaved records and verify them back."""

    content_encoding = MI_SHA256_03

    def encode(self, payload: bytes, record_size: int) -> tuple[bytes, str]:
        """Return the encoded body and its ``Digest`` header value."""

        if record_size <= 0:
            raise ValueError("record size must be positive")
        header = record_size.to_bytes(_RECORD_SIZE_BYTES, "big")
        if not payload:
            return header, self._digest_value(_proof(b"", None))

        records = [payload[i : i + record_size] for i in range(0, len(payload), record_size)]
        proofs: list[bytes] = [b""] * len(records)
        next_proof: bytes | None = None
        for index in range(len(records) - 1, -1, -1):
            next_proof = _proof(records[index], next_proof)
            proofs[index] = next_proof

        parts = [header]
        for index, record in enumerate(records):
            if index > 0:
                parts.append(proofs[index])
            parts.append(record)
        return b"".join(parts), self._digest_value(proofs[0])

    def decode(self, encoded: bytes, digest_value: str) -> bytes:
        """Verify ``encoded`` against ``digest_value`` and return the original payload."""

        expected = self.parse_digest(digest_value)
        if len(encoded) < _RECORD_SIZE_BYTES:
            raise MiceError("encoded payload is shorter than its record-size header")
        record_size = int.from_bytes(encoded[:_RECORD_SIZE_BYTES], "big")
        body = encoded[_RECORD_SIZE_BYTES:]
        if not body:
            if _proof(b"", None) != expected:
                raise MiceError("integrity proof mismatch for empty payload")
            return b""
        if record_size == 0:
            raise MiceError("record size must be positive")

        out = bytearray()
        pos = 0
        while True:
            remaining = len(body) - pos
            if remaining <= record_size:
                record = body[pos:]
                if _proof(record, None) != expected:
                    raise MiceError("integrity proof mismatch in final record")
                out += record
                return bytes(out)
            if remaining < record_size + _PROOF_BYTES + 1:
                raise MiceError("truncated record in encoded payload")
            record = body[pos : pos + record_size]
            next_proof = body[pos + record_size : pos + record_size + _PROOF_BYTES]
            if _proof(record, next_proof) != expected:
                raise MiceError(f"integrity proof mismatch at offset {pos}")
            out += record
            expected = next_proof
            pos += record_size + _PROOF_BYTES

    def parse_digest(self, digest_value: str) -> bytes:
        """Extract the top-level proof from a ``Digest`` header value."""

        for item in digest_value.split(","):
            name, sep, value = item.strip().partition("=")
            if not sep or name.strip().lower() != MI_SHA256_03:
                continue
            try:
                proof = base64.b64decode(value.strip(), validate=True)
            except (binascii.Error, ValueError) as exc:
                raise MiceError("digest value is not valid base64") from exc
            if len(proof) != _PROOF_BYTES:
                raise MiceError("digest proof must be 32 bytes")
            return proof
        raise MiceError(f"digest header has no {MI_SHA256_03} value")

    def _digest_value(self, proof: bytes) -> str:
        return f"{MI_SHA256_03}={base64.b64encode(proof).decode('ascii')}"


__all__ = ["MI_SHA256_03", "MiSha256Encoding", "MiceError"]
