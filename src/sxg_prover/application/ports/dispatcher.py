"""Port for launching the external prover."""

from __future__ import annotations

from typing import Protocol

from sxg_prover.domain.job import ProcessHandle


class ProverDispatcherPort(Protocol):
    def dispatch(self, request_id: str) -> ProcessHandle:
        """Start the prover for ``request_id`` without waiting; raise DispatchError."""


__all__ = ["ProverDispatcherPort"]
