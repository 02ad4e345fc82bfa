"""Certificate-chain retrieval and decoding for signed exchanges."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

import cbor2
import httpx
from cryptography import x509

from sxg_prover.infrastructure.sxg.limits import BodyTooLargeError, read_capped

logger = logging.getLogger("sxg_prover.sxg")

CERT_CHAIN_MIME_TYPE = "application/cert-chain+cbor"
CERT_CHAIN_MAGIC = "\U0001f4dc⛓"

CertificateFetcher = Callable[[str], bytes]


class CertificateChainError(ValueError):
    """Raised when a certificate chain cannot be fetched or decoded."""


@dataclass(frozen=True, slots=True)
class CertificateChainEntry:
    der: bytes
    certificate: x509.Certificate
    ocsp: bytes | None = None
    sct: bytes | None = None


def parse_cert_chain(data: bytes) -> tuple[CertificateChainEntry, ...]:
    """Decode an ``application/cert-chain+cbor`` body, leaf first."""

    try:
        decoded = cbor2.loads(data)
    except (cbor2.CBORDecodeError, ValueError) as exc:
        raise CertificateChainError("certificate chain is not valid CBOR") from exc
    if not isinstance(decoded, list) or len(decoded) < 2 or decoded[0] != CERT_CHAIN_MAGIC:
        raise CertificateChainError("certificate chain has an unexpected structure")

    entries: list[CertificateChainEntry] = []
    for item in decoded[1:]:
        if not isinstance(item, dict) or not isinstance(item.get("cert"), bytes):
            raise CertificateChainError("certificate chain item is missing 'cert'")
        der = item["cert"]
        try:
            certificate = x509.load_der_x509_certificate(der)
        except ValueError as exc:
            raise CertificateChainError("certificate chain item is not a DER certificate") from exc
        entries.append(
            CertificateChainEntry(
                der=der,
                certificate=certificate,
                ocsp=item.get("ocsp") if isinstance(item.get("ocsp"), bytes) else None,
                sct=item.get("sct") if isinstance(item.get("sct"), bytes) else None,
            )
        )
    return tuple(entries)


@dataclass
class HttpCertificateFetcher:
    """Fetch certificate chains over HTTP."""

    timeout_seconds: float = 10.0
    max_bytes: int = 1024 * 1024
    transport: httpx.BaseTransport | None = None

    def __call__(self, url: str) -> bytes:
        try:
            with (
                httpx.Client(
                    timeout=self.timeout_seconds,
                    transport=self.transport,
                    follow_redirects=True,
                ) as client,
                client.stream("GET", url, headers={"Accept": CERT_CHAIN_MIME_TYPE}) as response,
            ):
                if response.status_code != httpx.codes.OK:
                    raise CertificateChainError(
                        f"certificate chain fetch returned {response.status_code} for GET {url}"
                    )
                body = read_capped(response, self.max_bytes)
        except BodyTooLargeError as exc:
            raise CertificateChainError("certificate chain exceeds the size limit") from exc
        except httpx.HTTPError as exc:
            raise CertificateChainError(f"failed to fetch certificate chain from {url}: {exc}") from exc
        logger.debug(
            "fetched certificate chain",
            extra={"data": {"url": url, "bytes": len(body)}},
        )
        return body


__all__ = [
    "CERT_CHAIN_MAGIC",
    "CERT_CHAIN_MIME_TYPE",
    "CertificateChainEntry",
    "CertificateChainError",
    "CertificateFetcher",
    "HttpCertificateFetcher",
    "parse_cert_chain",
]
