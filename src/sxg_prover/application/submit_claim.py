"""Use case for accepting a claim and starting its proving job."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sxg_prover.application.extract_witness import WitnessExtractor
from sxg_prover.application.ports.dispatcher import ProverDispatcherPort
from sxg_prover.application.ports.exchange import ExchangeSourcePort
from sxg_prover.application.ports.job_store import JobStorePort
from sxg_prover.domain.claim import Claim
from sxg_prover.domain.exceptions import DispatchError, DuplicateRequestError, PersistenceError
from sxg_prover.domain.job import ArtifactState, ProcessHandle
from sxg_prover.domain.request_id import compute_request_id
from sxg_prover.observability.tracing import get_tracer

logger = logging.getLogger("sxg_prover.submit")
tracer = get_tracer("sxg_prover.submit")


@dataclass(frozen=True, slots=True)
class SubmissionReceipt:
    request_id: str
    process: ProcessHandle


@dataclass(slots=True)
class SubmitClaim:
    """Identify, verify, extract, persist and dispatch a claim."""

    exchanges: ExchangeSourcePort
    extractor: WitnessExtractor
    store: JobStorePort
    dispatcher: ProverDispatcherPort

    def identify(self, claim: Claim) -> str:
        """Return the request id, failing fast when artifacts already exist for it."""

        request_id = compute_request_id(claim)
        if self.store.get_artifact_state(request_id) is not ArtifactState.UNKNOWN:
            raise DuplicateRequestError(request_id)
        return request_id

    def execute(self, claim: Claim) -> SubmissionReceipt:
        request_id = self.identify(claim)
        log_data = {"request_id": request_id, "source_url": claim.source_url}
        logger.info("proof request accepted", extra={"data": log_data})

        with tracer.start_as_current_span("submit_claim") as span:
            span.set_attribute("sxg_prover.request_id", request_id)
            with tracer.start_as_current_span("fetch_and_verify"):
                exchange = self.exchanges.fetch_and_verify(claim.source_url)
            with tracer.start_as_current_span("extract_witness"):
                witness = self.extractor.extract(claim, exchange)
            # Create-exclusive write; concurrent identical claims lose here.
            self.store.put_witness(request_id, witness)
            with tracer.start_as_current_span("dispatch_prover"):
                try:
                    process = self.dispatcher.dispatch(request_id)
                except (DispatchError, PersistenceError):
                    # No prover runs for this id; free it for a retry.
                    self.store.discard_witness(request_id)
                    logger.warning(
                        "prover dispatch failed, witness discarded",
                        extra={"data": log_data},
                    )
                    raise

        logger.info(
            "prover dispatched",
            extra={"data": {**log_data, "pid": process.pid}},
        )
        return SubmissionReceipt(request_id=request_id, process=process)


__all__ = ["SubmissionReceipt", "SubmitClaim"]
