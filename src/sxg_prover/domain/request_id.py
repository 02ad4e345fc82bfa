"""Deterministic request identifiers derived from claims."""

from __future__ import annotations

import hashlib
import re

from sxg_prover.domain.claim import Claim

REQUEST_ID_DOMAIN = b"sxg-prover/request-id/v1"
REQUEST_ID_PATTERN = re.compile(r"^[0-9a-f]{64}$")


def canonical_claim_bytes(claim: Claim) -> bytes:
    """Return the versioned, length-prefixed encoding hashed into a request id."""

    url = claim.source_url.encode("utf-8")
    return b"".join(
        (
            REQUEST_ID_DOMAIN,
            len(claim.data).to_bytes(8, "big"),
            claim.data,
            len(url).to_bytes(8, "big"),
            url,
        )
    )


def compute_request_id(claim: Claim) -> str:
    """Return the lowercase hex SHA-256 content address of ``claim``."""

    return hashlib.sha256(canonical_claim_bytes(claim)).hexdigest()


def normalize_request_id(value: str) -> str | None:
    """Return the canonical form of ``value`` or None when it is not a request id."""

    candidate = value.strip().lower()
    if not REQUEST_ID_PATTERN.match(candidate):
        return None
    return candidate


__all__ = [
    "REQUEST_ID_DOMAIN",
    "REQUEST_ID_PATTERN",
    "canonical_claim_bytes",
    "compute_request_id",
    "normalize_request_id",
]
