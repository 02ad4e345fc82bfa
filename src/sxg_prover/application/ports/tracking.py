"""Port for extracting a tracking reference from prover output."""

from __future__ import annotations

from typing import Protocol


class TrackingReferenceParser(Protocol):
    def parse(self, log_content: str) -> str | None:
        """Return the tracking reference or None when the prover has not emitted one."""


__all__ = ["TrackingReferenceParser"]
