"""Answer "what is the state of job X" from stored artifacts."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sxg_prover.application.ports.job_store import JobStorePort
from sxg_prover.application.ports.tracking import TrackingReferenceParser
from sxg_prover.domain.exceptions import NotFoundError
from sxg_prover.domain.job import ArtifactState, JobStatus

logger = logging.getLogger("sxg_prover.status")


@dataclass(slots=True)
class StatusResolver:
    store: JobStorePort
    tracking_parser: TrackingReferenceParser

    def resolve(self, request_id: str) -> JobStatus:
        state = self.store.get_artifact_state(request_id)
        if state is ArtifactState.COMPLETED:
            return JobStatus.completed(self.store.read_result(request_id))
        if state is ArtifactState.PROCESSING:
            return JobStatus.processing(self._tracking_ref(request_id))
        return JobStatus.not_found()

    def _tracking_ref(self, request_id: str) -> str | None:
        try:
            content = self.store.read_log(request_id)
        except NotFoundError:
            return None
        except OSError as exc:
            logger.warning(
                "prover log unreadable",
                extra={"data": {"request_id": request_id, "error": str(exc)}},
            )
            return None
        try:
            return self.tracking_parser.parse(content.decode("utf-8", errors="replace"))
        except Exception:  # noqa: BLE001 - scraping unstructured output must not fail polling
            logger.warning(
                "tracking reference parse failed",
                exc_info=True,
                extra={"data": {"request_id": request_id}},
            )
            return None


__all__ = ["StatusResolver"]
