"""Wire schemas for the prover HTTP API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProofRequestDTO(BaseModel):
    """Claim submitted by a caller."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    data: str = Field(default="", description="Exact text expected inside the signed content.")
    source_url: str = Field(default="", description="URL serving the signed exchange.")


@dataclass(frozen=True, slots=True)
class ProofAcceptedResponse:
    reqId: str  # noqa: N815 - wire name


@dataclass(frozen=True, slots=True)
class ErrorResponse:
    error: str
    category: str


@dataclass(frozen=True, slots=True)
class ProofResultModel:
    result: int
    vkey: str
    publicValues: str  # noqa: N815 - wire name
    proof: str


def status_body(
    status: str,
    *,
    tracking_id: str | None = None,
    result: ProofResultModel | None = None,
) -> dict[str, Any]:
    """Render a status response, omitting empty fields."""

    body: dict[str, Any] = {"status": status}
    if tracking_id:
        body["tracking_id"] = tracking_id
    if result is not None:
        body["result"] = {
            "result": result.result,
            "vkey": result.vkey,
            "publicValues": result.publicValues,
            "proof": result.proof,
        }
    return body


__all__ = [
    "ErrorResponse",
    "ProofAcceptedResponse",
    "ProofRequestDTO",
    "ProofResultModel",
    "status_body",
]
