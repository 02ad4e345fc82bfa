"""Runtime wiring for the prover service."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from sxg_prover.application.extract_witness import WitnessExtractor
from sxg_prover.application.resolve_status import StatusResolver
from sxg_prover.application.submit_claim import SubmitClaim
from sxg_prover.infrastructure.http.routes import ProofRouteDeps
from sxg_prover.infrastructure.prover.dispatcher import ProverCommand, SubprocessProverDispatcher
from sxg_prover.infrastructure.prover.tracking import ExplorerLogTrackingParser
from sxg_prover.infrastructure.state.job_store import FileJobStore
from sxg_prover.infrastructure.sxg.certs import HttpCertificateFetcher
from sxg_prover.infrastructure.sxg.fetcher import HttpExchangeSource
from sxg_prover.infrastructure.sxg.mice import MiSha256Encoding
from sxg_prover.infrastructure.sxg.verifier import SignedExchangeVerifier
from sxg_prover.runtime.settings import Settings

logger = logging.getLogger("sxg_prover.runtime")


@dataclass(frozen=True, slots=True)
class RuntimeContext:
    """Aggregated runtime components for the prover service."""

    settings: Settings
    store: FileJobStore
    exchange_source: HttpExchangeSource
    dispatcher: SubprocessProverDispatcher
    submit: SubmitClaim
    status: StatusResolver
    route_deps_provider: Callable[[], ProofRouteDeps]


def build_runtime(settings: Settings | None = None) -> RuntimeContext:
    """Construct the components shared by the HTTP routes."""

    resolved = settings or Settings.load()
    state_dir = resolved.prover.state_dir.resolve()
    state_dir.mkdir(parents=True, exist_ok=True)
    logger.info(
        "building prover runtime",
        extra={"data": {"state_dir": str(state_dir), "binary": resolved.prover.prover_binary}},
    )

    store = FileJobStore(state_dir)
    encoding = MiSha256Encoding()
    exchange_source = HttpExchangeSource(
        verifier=SignedExchangeVerifier(
            cert_fetcher=HttpCertificateFetcher(timeout_seconds=resolved.fetch.timeout_seconds),
            encoding=encoding,
        ),
        timeout_seconds=resolved.fetch.timeout_seconds,
        max_bytes=resolved.fetch.max_exchange_bytes,
    )
    dispatcher = SubprocessProverDispatcher(
        command=ProverCommand(
            binary=resolved.prover.prover_binary,
            proof_system=resolved.prover.proof_system,
            prover_mode=resolved.prover.prover_mode,
            private_key=resolved.prover.private_key_value,
            rust_log=resolved.prover.rust_log,
            working_dir=str(state_dir),
        ),
        store=store,
    )
    submit = SubmitClaim(
        exchanges=exchange_source,
        extractor=WitnessExtractor(encoder=encoding),
        store=store,
        dispatcher=dispatcher,
    )
    status = StatusResolver(store=store, tracking_parser=ExplorerLogTrackingParser())
    deps = ProofRouteDeps(submit=submit, status=status)

    return RuntimeContext(
        settings=resolved,
        store=store,
        exchange_source=exchange_source,
        dispatcher=dispatcher,
        submit=submit,
        status=status,
        route_deps_provider=lambda: deps,
    )


__all__ = ["RuntimeContext", "build_runtime"]
