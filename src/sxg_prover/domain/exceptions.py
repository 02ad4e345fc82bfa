"""Failure taxonomy for proof submissions and job lookups."""

from __future__ import annotations


class ProofRequestError(Exception):
    """Base class for failures surfaced to callers with a stable category code."""

    code = "proof_request_error"

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class ValidationError(ProofRequestError):
    """Raised when a claim is missing required fields."""

    code = "validation_error"


class DuplicateRequestError(ProofRequestError):
    """Raised when artifacts already exist for the computed request id."""

    code = "duplicate_request"

    def __init__(self, request_id: str):
        super().__init__(
            f"proof request already exists, try getting status, reqId: {request_id}"
        )
        self.request_id = request_id


class FetchError(ProofRequestError):
    """Raised when the signed exchange could not be retrieved."""

    code = "fetch_error"


class VerificationError(ProofRequestError):
    """Raised when the signed exchange fails parsing or signature checks."""

    code = "verification_error"


class WitnessExtractionError(ProofRequestError):
    """Raised when a required byte run is not located at a valid offset."""

    code = "witness_extraction_error"


class PersistenceError(ProofRequestError):
    """Raised when a job artifact cannot be written or read back."""

    code = "persistence_error"


class DispatchError(ProofRequestError):
    """Raised when the external prover process fails to start."""

    code = "dispatch_error"


class NotFoundError(ProofRequestError, LookupError):
    """Raised when a requested job artifact does not exist."""

    code = "not_found"


__all__ = [
    "ProofRequestError",
    "ValidationError",
    "DuplicateRequestError",
    "FetchError",
    "VerificationError",
    "WitnessExtractionError",
    "PersistenceError",
    "DispatchError",
    "NotFoundError",
]
