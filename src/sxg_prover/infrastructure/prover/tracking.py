"""Tracking-reference parsers for prover output."""

from __future__ import annotations

EXPLORER_BASE_URL = "https://explorer.succinct.xyz/"
EXPLORER_MARKER = f"View in explorer: {EXPLORER_BASE_URL}"


class ExplorerLogTrackingParser:
    """Scrape the explorer link the prover prints once the network accepts a job."""

    def __init__(self, *, marker: str = EXPLORER_MARKER, base_url: str = EXPLORER_BASE_URL) -> None:
        self._marker = marker
        self._base_url = base_url

    def parse(self, log_content: str) -> str | None:
        for line in log_content.splitlines():
            if self._marker not in line:
                continue
            segment = line.rstrip().rsplit("/", 1)[-1].strip()
            if segment:
                return f"{self._base_url}{segment}"
        return None


__all__ = ["EXPLORER_BASE_URL", "EXPLORER_MARKER", "ExplorerLogTrackingParser"]
