"""Job lifecycle types inferred from stored artifacts."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class ArtifactState(StrEnum):
    UNKNOWN = "unknown"
    PROCESSING = "processing"
    COMPLETED = "completed"


class JobStatusKind(StrEnum):
    NOT_FOUND = "not_found"
    PROCESSING = "processing"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class ProofResult:
    """Result record written by the external prover."""

    result: int
    vkey: str
    public_values: str
    proof: str

    def to_json_dict(self) -> dict[str, Any]:
        return {
            "result": self.result,
            "vkey": self.vkey,
            "publicValues": self.public_values,
            "proof": self.proof,
        }

    @classmethod
    def from_json_dict(cls, payload: Mapping[str, Any]) -> ProofResult:
        if not isinstance(payload, Mapping):
            raise ValueError("proof result must be a JSON object")
        return cls(
            result=int(payload.get("result", 0)),
            vkey=str(payload.get("vkey", "")),
            public_values=str(payload.get("publicValues", "")),
            proof=str(payload.get("proof", "")),
        )


@dataclass(frozen=True, slots=True)
class JobStatus:
    kind: JobStatusKind
    tracking_ref: str | None = None
    result: ProofResult | None = None

    @classmethod
    def not_found(cls) -> JobStatus:
        return cls(kind=JobStatusKind.NOT_FOUND)

    @classmethod
    def processing(cls, tracking_ref: str | None = None) -> JobStatus:
        return cls(kind=JobStatusKind.PROCESSING, tracking_ref=tracking_ref)

    @classmethod
    def completed(cls, result: ProofResult) -> JobStatus:
        return cls(kind=JobStatusKind.COMPLETED, result=result)


@dataclass(frozen=True, slots=True)
class ProcessHandle:
    """Reference to a started prover process."""

    request_id: str
    pid: int
    log_path: str


__all__ = [
    "ArtifactState",
    "JobStatus",
    "JobStatusKind",
    "ProcessHandle",
    "ProofResult",
]
