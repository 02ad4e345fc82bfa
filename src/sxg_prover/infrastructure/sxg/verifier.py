"""Signature and certificate checks for parsed signed exchanges."""

from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature

from sxg_prover.domain.exceptions import VerificationError
from sxg_prover.domain.exchange import Exchange
from sxg_prover.infrastructure.sxg.certs import (
    CertificateChainError,
    CertificateFetcher,
    parse_cert_chain,
)
from sxg_prover.infrastructure.sxg.mice import MiceError, MiSha256Encoding
from sxg_prover.infrastructure.sxg.reader import SignedExchange
from sxg_prover.infrastructure.sxg.signature_header import SignatureEntry

logger = logging.getLogger("sxg_prover.sxg")

MAX_SIGNATURE_VALIDITY = timedelta(days=7)


class _SignatureRejected(Exception):
    """One signature failed; another in the header may still verify."""


@dataclass
class SignedExchangeVerifier:
    """Verify a signed exchange against its certificate chain and decode its payload."""

    cert_fetcher: CertificateFetcher
    encoding: MiSha256Encoding = field(default_factory=MiSha256Encoding)

    def verify(self, exchange: SignedExchange, now: datetime | None = None) -> Exchange:
        verification_time = now or datetime.now(UTC)
        reasons: list[str] = []
        for signature in exchange.signatures:
            try:
                return self._verify_signature(exchange, signature, verification_time)
            except _SignatureRejected as exc:
                reasons.append(f"{signature.label}: {exc}")
        logger.warning(
            "signed exchange rejected",
            extra={"data": {"request_url": exchange.request_url, "reasons": reasons}},
        )
        raise VerificationError(
            "The exchange has an invalid signature: " + "; ".join(reasons)
        )

    def _verify_signature(
        self, exchange: SignedExchange, signature: SignatureEntry, now: datetime
    ) -> Exchange:
        if signature.integrity != exchange.version.integrity_parameter:
            raise _SignatureRejected(f"unsupported integrity {signature.integrity!r}")
        self._check_validity_window(signature, now)

        public_key = self._leaf_public_key(signature, now)
        message = exchange.signed_message(signature)
        try:
            public_key.verify(signature.sig, message, ec.ECDSA(hashes.SHA256()))
            r, s = decode_dss_signature(signature.sig)
        except (InvalidSignature, ValueError) as exc:
            raise _SignatureRejected("signature does not match the signed message") from exc

        payload = self._decode_payload(exchange)
        numbers = public_key.public_numbers()
        return Exchange(
            payload=payload,
            signed_message=message,
            response_headers=exchange.response_headers,
            signature_r=r,
            signature_s=s,
            public_key_x=numbers.x,
            public_key_y=numbers.y,
            version=exchange.version.name,
            request_url=exchange.request_url,
        )

    @staticmethod
    def _check_validity_window(signature: SignatureEntry, now: datetime) -> None:
        try:
            date = datetime.fromtimestamp(signature.date, UTC)
            expires = datetime.fromtimestamp(signature.expires, UTC)
        except (ValueError, OverflowError, OSError) as exc:
            raise _SignatureRejected("signature date/expires out of range") from exc
        if expires - date > MAX_SIGNATURE_VALIDITY:
            raise _SignatureRejected("signature validity exceeds 7 days")
        if now < date:
            raise _SignatureRejected("signature date is in the future")
        if now > expires:
            raise _SignatureRejected("signature has expired")

    def _leaf_public_key(self, signature: SignatureEntry, now: datetime) -> ec.EllipticCurvePublicKey:
        try:
            chain = parse_cert_chain(self.cert_fetcher(signature.cert_url))
        except CertificateChainError as exc:
            raise _SignatureRejected(str(exc)) from exc
        leaf = chain[0]
        if signature.cert_sha256 is None:
            raise _SignatureRejected("signature has no cert-sha256")
        if not hmac.compare_digest(hashlib.sha256(leaf.der).digest(), signature.cert_sha256):
            raise _SignatureRejected("cert-sha256 does not match the leaf certificate")
        if not leaf.certificate.not_valid_before_utc <= now <= leaf.certificate.not_valid_after_utc:
            raise _SignatureRejected("leaf certificate is not valid at verification time")
        public_key = leaf.certificate.public_key()
        if not isinstance(public_key, ec.EllipticCurvePublicKey) or not isinstance(
            public_key.curve, ec.SECP256R1
        ):
            raise _SignatureRejected("leaf certificate key is not ECDSA P-256")
        return public_key

    def _decode_payload(self, exchange: SignedExchange) -> bytes:
        content_encoding = exchange.header("content-encoding")
        if content_encoding is None or content_encoding.strip().lower() != self.encoding.content_encoding:
            raise _SignatureRejected("response is not mi-sha256-03 encoded")
        digest = exchange.header("digest")
        if not digest:
            raise _SignatureRejected("response has no digest header")
        try:
            return self.encoding.decode(exchange.payload, digest)
        except MiceError as exc:
            raise _SignatureRejected(f"payload integrity check failed: {exc}") from exc


__all__ = ["MAX_SIGNATURE_VALIDITY", "SignedExchangeVerifier"]
