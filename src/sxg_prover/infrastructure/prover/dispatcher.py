"""Launch the external prover as a detached process per request."""

from __future__ import annotations

import logging
import os
import subprocess
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from sxg_prover.application.ports.job_store import JobStorePort
from sxg_prover.domain.exceptions import DispatchError
from sxg_prover.domain.job import ProcessHandle

logger = logging.getLogger("sxg_prover.prover")


@dataclass(frozen=True, slots=True)
class ProverCommand:
    """How to invoke the prover binary and what to hand it through the environment."""

    binary: str
    proof_system: str = "groth16"
    prover_mode: str = "network"
    private_key: str = ""
    rust_log: str = "info"
    working_dir: str | None = None
    extra_env: Mapping[str, str] = field(default_factory=dict)

    def argv(self, request_id: str) -> list[str]:
        return [self.binary, "--system", self.proof_system, "--input-file-id", request_id]

    def environment(self, base: Mapping[str, str]) -> dict[str, str]:
        env = dict(base)
        env.update(self.extra_env)
        env["SP1_PROVER"] = self.prover_mode
        env["SP1_PRIVATE_KEY"] = self.private_key
        env["RUST_LOG"] = self.rust_log
        return env


class SubprocessProverDispatcher:
    """Starts one prover per request and returns as soon as the process exists.

    stdout and stderr both go to the store's log artifact. A daemon thread
    reaps the child so finished provers do not linger as zombies.
    """

    _popen: Callable[..., subprocess.Popen[bytes]]

    def __init__(
        self,
        *,
        command: ProverCommand,
        store: JobStorePort,
        popen: Callable[..., subprocess.Popen[bytes]] | None = None,
        base_env: Mapping[str, str] | None = None,
        reap: bool = True,
    ) -> None:
        self._command = command
        self._store = store
        self._popen = popen or self._default_popen
        self._base_env = base_env
        self._reap = reap

    def dispatch(self, request_id: str) -> ProcessHandle:
        log_file = self._store.open_log(request_id)
        log_path = getattr(log_file, "name", "")
        try:
            process = self._popen(
                self._command.argv(request_id),
                stdin=subprocess.DEVNULL,
                stdout=log_file,
                stderr=subprocess.STDOUT,
                env=self._command.environment(
                    os.environ if self._base_env is None else self._base_env
                ),
                cwd=self._command.working_dir,
                start_new_session=True,
                close_fds=True,
            )
        except OSError as exc:
            logger.error(
                "failed to start prover",
                exc_info=exc,
                extra={"data": {"request_id": request_id, "binary": self._command.binary}},
            )
            raise DispatchError(f"failed to start prover: {exc}") from exc
        finally:
            # The child holds its own descriptor.
            log_file.close()

        logger.info(
            "started prover",
            extra={
                "data": {
                    "request_id": request_id,
                    "pid": process.pid,
                    "system": self._command.proof_system,
                    "log_path": str(log_path),
                }
            },
        )
        if self._reap:
            self._start_reaper(request_id, process)
        return ProcessHandle(request_id=request_id, pid=process.pid, log_path=str(log_path))

    def _start_reaper(self, request_id: str, process: subprocess.Popen[bytes]) -> None:
        def _wait() -> None:
            returncode = process.wait()
            logger.info(
                "prover exited",
                extra={"data": {"request_id": request_id, "pid": process.pid, "returncode": returncode}},
            )

        thread = threading.Thread(target=_wait, name=f"prover-reaper-{process.pid}", daemon=True)
        thread.start()

    @staticmethod
    def _default_popen(
        *args: Any,
        **kwargs: Any,
    ) -> subprocess.Popen[bytes]:  # pragma: no cover - thin wrapper
        return subprocess.Popen(*args, **kwargs)  # noqa: S603


__all__ = ["ProverCommand", "SubprocessProverDispatcher"]
