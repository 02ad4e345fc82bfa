"""HTTP route definitions for the prover API."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass

from fastapi import Depends, FastAPI, Query
from fastapi.responses import JSONResponse

from sxg_prover.application.resolve_status import StatusResolver
from sxg_prover.application.submit_claim import SubmitClaim
from sxg_prover.domain.claim import Claim
from sxg_prover.domain.exceptions import (
    DispatchError,
    DuplicateRequestError,
    FetchError,
    PersistenceError,
    ProofRequestError,
    ValidationError,
    VerificationError,
    WitnessExtractionError,
)
from sxg_prover.domain.job import JobStatus, JobStatusKind
from sxg_prover.domain.request_id import normalize_request_id
from sxg_prover.infrastructure.http.schemas import (
    ErrorResponse,
    ProofAcceptedResponse,
    ProofRequestDTO,
    ProofResultModel,
    status_body,
)

logger = logging.getLogger("sxg_prover.http")

_ERROR_STATUS: dict[type[ProofRequestError], int] = {
    ValidationError: 400,
    DuplicateRequestError: 409,
    FetchError: 502,
    VerificationError: 422,
    WitnessExtractionError: 422,
    PersistenceError: 500,
    DispatchError: 500,
}


@dataclass(frozen=True)
class ProofRouteDeps:
    submit: SubmitClaim
    status: StatusResolver


def add_proof_routes(app: FastAPI, dependency_provider: Callable[[], ProofRouteDeps]) -> None:
    def get_dependencies() -> ProofRouteDeps:
        return dependency_provider()

    @app.post(
        "/",
        response_model=ProofAcceptedResponse,
        description="Submit a claim; alias of POST /v1/proofs.",
    )
    @app.post(
        "/v1/proofs",
        response_model=ProofAcceptedResponse,
        description="Verify the signed exchange behind a claim and start its proving job.",
    )
    def submit_proof(
        payload: ProofRequestDTO,
        deps: ProofRouteDeps = Depends(get_dependencies),  # noqa: B008
    ) -> ProofAcceptedResponse | JSONResponse:
        try:
            claim = Claim.create(payload.data, payload.source_url)
            receipt = deps.submit.execute(claim)
        except ProofRequestError as exc:
            return _error_response(exc, source_url=payload.source_url)
        return ProofAcceptedResponse(reqId=receipt.request_id)

    @app.get("/status", description="Poll a proving job; alias of GET /v1/proofs/{request_id}.")
    def status_by_query(
        req_id: str = Query(default="", alias="reqId"),
        deps: ProofRouteDeps = Depends(get_dependencies),  # noqa: B008
    ) -> JSONResponse:
        return _status_response(req_id, deps)

    @app.get("/v1/proofs/{request_id}", description="Return the state of a proving job.")
    def status_by_path(
        request_id: str,
        deps: ProofRouteDeps = Depends(get_dependencies),  # noqa: B008
    ) -> JSONResponse:
        return _status_response(request_id, deps)

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}


# --- Helpers ---


def _status_response(raw_id: str, deps: ProofRouteDeps) -> JSONResponse:
    request_id = normalize_request_id(raw_id)
    if request_id is None:
        return _error_response(ValidationError("reqId must be a 64-character hex request id"))
    try:
        status = deps.status.resolve(request_id)
    except PersistenceError:
        logger.exception("failed to read job result", extra={"data": {"request_id": request_id}})
        return JSONResponse(
            status_code=500,
            content=asdict(ErrorResponse(error="internal server error", category=PersistenceError.code)),
        )
    return _render_status(status)


def _render_status(status: JobStatus) -> JSONResponse:
    if status.kind is JobStatusKind.COMPLETED and status.result is not None:
        result = status.result
        model = ProofResultModel(
            result=result.result,
            vkey=result.vkey,
            publicValues=result.public_values,
            proof=result.proof,
        )
        return JSONResponse(status_code=200, content=status_body("completed", result=model))
    if status.kind is JobStatusKind.PROCESSING:
        code = 200 if status.tracking_ref else 202
        return JSONResponse(
            status_code=code,
            content=status_body("processing", tracking_id=status.tracking_ref),
        )
    return JSONResponse(status_code=404, content=status_body("not_found"))


def _error_response(exc: ProofRequestError, *, source_url: str | None = None) -> JSONResponse:
    status_code = _ERROR_STATUS.get(type(exc), 500)
    log = logger.error if status_code >= 500 else logger.info
    log(
        "proof request rejected",
        extra={"data": {"category": exc.code, "error": exc.message, "source_url": source_url}},
    )
    return JSONResponse(
        status_code=status_code,
        content=asdict(ErrorResponse(error=exc.message, category=exc.code)),
    )


__all__ = ["ProofRouteDeps", "add_proof_routes"]
