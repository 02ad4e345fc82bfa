"""Filesystem-backed job artifacts keyed by request id."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO

from sxg_prover.domain.exceptions import (
    DuplicateRequestError,
    NotFoundError,
    PersistenceError,
)
from sxg_prover.domain.job import ArtifactState, ProofResult
from sxg_prover.domain.request_id import normalize_request_id
from sxg_prover.domain.witness import Witness

logger = logging.getLogger("sxg_prover.state")

WITNESS_SUFFIX = ".json"
RESULT_SUFFIX = "-fixture.json"
LOG_SUFFIX = ".log"


class FileJobStore:
    """Persist witness, result and log artifacts as ``<id>.json``, ``<id>-fixture.json`` and ``<id>.log``.

    Job state is inferred from which artifacts exist. The witness write is
    create-exclusive, so two submissions of the same claim cannot both succeed.
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    # ------------------------------------------------------------------
    # paths

    def witness_path(self, request_id: str) -> Path:
        return self._root / f"{_checked(request_id)}{WITNESS_SUFFIX}"

    def result_path(self, request_id: str) -> Path:
        return self._root / f"{_checked(request_id)}{RESULT_SUFFIX}"

    def log_path(self, request_id: str) -> Path:
        return self._root / f"{_checked(request_id)}{LOG_SUFFIX}"

    # ------------------------------------------------------------------
    # public API

    def put_witness(self, request_id: str, witness: Witness) -> None:
        target = self.witness_path(request_id)
        body = _encode_json(witness.to_json_dict())
        try:
            self._write_exclusive(target, body)
        except FileExistsError as exc:
            raise DuplicateRequestError(request_id) from exc
        except OSError as exc:
            raise PersistenceError(f"failed to write witness file: {exc}") from exc
        logger.info(
            "witness stored",
            extra={"data": {"request_id": request_id, "path": str(target), "bytes": len(body)}},
        )

    def discard_witness(self, request_id: str) -> None:
        paths = (self.witness_path(request_id), self.log_path(request_id))
        try:
            for path in paths:
                path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceError(f"failed to discard witness: {exc}") from exc
        logger.info("witness discarded", extra={"data": {"request_id": request_id}})

    def put_result(self, request_id: str, result: ProofResult) -> None:
        target = self.result_path(request_id)
        try:
            self._write_replace(target, _encode_json(result.to_json_dict()))
        except OSError as exc:
            raise PersistenceError(f"failed to write result file: {exc}") from exc

    def get_artifact_state(self, request_id: str) -> ArtifactState:
        if self.result_path(request_id).exists():
            return ArtifactState.COMPLETED
        if self.witness_path(request_id).exists():
            return ArtifactState.PROCESSING
        return ArtifactState.UNKNOWN

    def read_result(self, request_id: str) -> ProofResult:
        payload = self._read_json(self.result_path(request_id), kind="result")
        try:
            return ProofResult.from_json_dict(payload)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"result file for {request_id} is invalid: {exc}") from exc

    def read_log(self, request_id: str) -> bytes:
        path = self.log_path(request_id)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise NotFoundError(f"log for {request_id} not found") from exc

    def open_log(self, request_id: str) -> BinaryIO:
        path = self.log_path(request_id)
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            return path.open("ab")
        except OSError as exc:
            raise PersistenceError(f"failed to create log file: {exc}") from exc

    # ------------------------------------------------------------------
    # helpers

    def _read_json(self, path: Path, *, kind: str) -> object:
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise NotFoundError(f"{kind} {path.name} not found") from exc
        except OSError as exc:
            raise PersistenceError(f"failed to read {kind} file: {exc}") from exc
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"{kind} file {path.name} is not valid JSON") from exc

    def _write_exclusive(self, path: Path, body: bytes) -> None:
        tmp_path = self._write_temp(path, body)
        try:
            # link() refuses to overwrite: the final name appears complete or not at all.
            os.link(tmp_path, path)
        finally:
            tmp_path.unlink(missing_ok=True)

    def _write_replace(self, path: Path, body: bytes) -> None:
        tmp_path = self._write_temp(path, body)
        try:
            os.replace(tmp_path, path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    def _write_temp(self, path: Path, body: bytes) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        tmp_path = Path(name)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(body)
                handle.flush()
                os.fsync(handle.fileno())
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
        os.chmod(tmp_path, 0o644)
        return tmp_path


def _checked(request_id: str) -> str:
    normalized = normalize_request_id(request_id)
    if normalized is None:
        raise ValueError(f"invalid request id: {request_id!r}")
    return normalized


def _encode_json(payload: object) -> bytes:
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


__all__ = ["FileJobStore", "LOG_SUFFIX", "RESULT_SUFFIX", "WITNESS_SUFFIX"]
