"""Port describing per-request artifact persistence."""

from __future__ import annotations

from typing import BinaryIO, Protocol

from sxg_prover.domain.job import ArtifactState, ProofResult
from sxg_prover.domain.witness import Witness


class JobStorePort(Protocol):
    """Witness, result and log artifacts keyed by request id."""

    def put_witness(self, request_id: str, witness: Witness) -> None:
        """Create the witness artifact; raise DuplicateRequestError when it exists."""

    def discard_witness(self, request_id: str) -> None:
        """Remove the witness and log of a job whose prover never started."""

    def put_result(self, request_id: str, result: ProofResult) -> None:
        ...

    def get_artifact_state(self, request_id: str) -> ArtifactState:
        ...

    def read_result(self, request_id: str) -> ProofResult:
        ...

    def read_log(self, request_id: str) -> bytes:
        ...

    def open_log(self, request_id: str) -> BinaryIO:
        """Open the log artifact for the prover's combined output."""


__all__ = ["JobStorePort"]
