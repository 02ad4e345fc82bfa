"""HTTP retrieval of signed exchanges."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import httpx

from sxg_prover.domain.exceptions import FetchError, VerificationError
from sxg_prover.domain.exchange import Exchange
from sxg_prover.infrastructure.sxg.limits import BodyTooLargeError, read_capped
from sxg_prover.infrastructure.sxg.reader import SxgFormatError, read_exchange
from sxg_prover.infrastructure.sxg.verifier import SignedExchangeVerifier
from sxg_prover.infrastructure.sxg.version import LATEST_VERSION, SxgVersion

logger = logging.getLogger("sxg_prover.sxg")

DEFAULT_MAX_EXCHANGE_BYTES = 8 * 1024 * 1024


@dataclass
class HttpExchangeSource:
    """Fetch the exchange served at a URL and verify it before handing it to the core."""

    verifier: SignedExchangeVerifier
    version: SxgVersion = LATEST_VERSION
    timeout_seconds: float = 10.0
    max_bytes: int = DEFAULT_MAX_EXCHANGE_BYTES
    transport: httpx.BaseTransport | None = None
    clock: Callable[[], datetime] | None = None

    def fetch_and_verify(self, source_url: str) -> Exchange:
        body = self._fetch(source_url)
        try:
            parsed = read_exchange(body)
        except SxgFormatError as exc:
            raise VerificationError(f"malformed signed exchange: {exc}") from exc
        if parsed.version != self.version:
            raise VerificationError(
                f"signed exchange version {parsed.version} does not match {self.version}"
            )
        now = self.clock() if self.clock is not None else None
        exchange = self.verifier.verify(parsed, now)
        logger.info(
            "signed exchange verified",
            extra={
                "data": {
                    "source_url": source_url,
                    "request_url": exchange.request_url,
                    "payload_len": len(exchange.payload),
                }
            },
        )
        return exchange

    def _fetch(self, source_url: str) -> bytes:
        mime_type = self.version.mime_type
        try:
            with (
                httpx.Client(
                    timeout=self.timeout_seconds,
                    transport=self.transport,
                    follow_redirects=True,
                ) as client,
                client.stream("GET", source_url, headers={"Accept": mime_type}) as response,
            ):
                if response.status_code != httpx.codes.OK:
                    raise FetchError(
                        f"GET {source_url!r} responded with status {response.status_code}"
                    )
                content_type = response.headers.get("content-type", "")
                if content_type != mime_type:
                    raise FetchError(
                        f"GET {source_url!r} responded with unexpected content type {content_type!r}"
                    )
                return read_capped(response, self.max_bytes)
        except BodyTooLargeError as exc:
            raise FetchError(f"GET {source_url!r} returned more than {self.max_bytes} bytes") from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"GET {source_url!r} failed: {exc}") from exc


__all__ = ["DEFAULT_MAX_EXCHANGE_BYTES", "HttpExchangeSource"]
