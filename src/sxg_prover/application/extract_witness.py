"""Turn a verified exchange into the witness record consumed by the prover."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sxg_prover.application.ports.exchange import IntegrityEncoderPort
from sxg_prover.domain.claim import Claim
from sxg_prover.domain.exceptions import WitnessExtractionError
from sxg_prover.domain.exchange import Exchange
from sxg_prover.domain.witness import Witness, encode_scalar

logger = logging.getLogger("sxg_prover.witness")

MI_RECORD_SIZE = 16384
DIGEST_HEADER = "Digest"


def find_byte_offset(needle: bytes, haystack: bytes) -> int:
    """Return the start offset of ``needle`` in ``haystack``, 0 for empty needles, -1 when absent."""

    if not needle:
        return 0
    if len(needle) > len(haystack):
        return -1
    return haystack.find(needle)


@dataclass(slots=True)
class WitnessExtractor:
    """Locate the claimed data and integrity digest and pack the signature scalars."""

    encoder: IntegrityEncoderPort
    record_size: int = MI_RECORD_SIZE

    def extract(self, claim: Claim, exchange: Exchange) -> Witness:
        payload, integrity = self._resolve_integrity(exchange)

        # Offsets must index the payload bytes that end up in the witness.
        data_start = find_byte_offset(claim.data, payload)
        if data_start <= 0:
            raise WitnessExtractionError("data not found in payload")

        integrity_start = find_byte_offset(integrity, exchange.signed_message)
        if integrity_start <= 0:
            raise WitnessExtractionError("integrity digest not found in signed message")

        try:
            r, s, px, py = (
                encode_scalar(exchange.signature_r),
                encode_scalar(exchange.signature_s),
                encode_scalar(exchange.public_key_x),
                encode_scalar(exchange.public_key_y),
            )
        except ValueError as exc:
            raise WitnessExtractionError(f"invalid signature scalar: {exc}") from exc

        logger.debug(
            "witness extracted",
            extra={
                "data": {
                    "data_start": data_start,
                    "integrity_start": integrity_start,
                    "payload_len": len(payload),
                    "signed_message_len": len(exchange.signed_message),
                }
            },
        )
        return Witness(
            final_payload=exchange.signed_message,
            data_to_verify=claim.data,
            data_to_verify_start_index=data_start,
            integrity_start_index=integrity_start,
            payload=payload,
            r=r,
            s=s,
            px=px,
            py=py,
        )

    def _resolve_integrity(self, exchange: Exchange) -> tuple[bytes, bytes]:
        digest = exchange.header(DIGEST_HEADER)
        if digest:
            return exchange.payload, digest.encode("ascii")
        encoded, digest = self.encoder.encode(exchange.payload, self.record_size)
        return encoded, digest.encode("ascii")


__all__ = ["MI_RECORD_SIZE", "WitnessExtractor", "find_byte_offset"]
