"""Entrypoint for running the prover API service under uvicorn."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from sxg_prover.infrastructure.http.middleware import request_logging_middleware
from sxg_prover.infrastructure.http.routes import add_proof_routes
from sxg_prover.observability.logging import (
    configure_logging,
    enable_cloud_logging,
    init_logging,
    shutdown_logging,
)
from sxg_prover.observability.tracing import configure_tracing
from sxg_prover.runtime.bootstrap import RuntimeContext, build_runtime
from sxg_prover.runtime.settings import Settings


def create_app(runtime: RuntimeContext) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        yield
        if runtime.settings.observability.enable_cloud_logging:
            shutdown_logging()

    app = FastAPI(title="SXG Prover API", version="0.1.0", lifespan=lifespan)
    app.middleware("http")(request_logging_middleware)
    add_proof_routes(app, runtime.route_deps_provider)
    return app


def _configure_observability(settings: Settings) -> None:
    if settings.observability.enable_cloud_logging:
        gcp_project = settings.observability.gcp_project_id
        if gcp_project is None:
            raise RuntimeError("Cloud logging enabled but no GCP project configured")
        enable_cloud_logging(gcp_project=gcp_project, cloud_log_labels={"service": "sxg-prover"})
    else:
        configure_logging(cloud_logging_enabled=False)


def main() -> None:
    import uvicorn

    init_logging()
    configure_tracing(service_name="sxg-prover")
    settings = Settings.load()
    _configure_observability(settings)
    runtime = build_runtime(settings)

    uvicorn.run(
        create_app(runtime),
        host=settings.listen_host,
        port=settings.listen_port,
        # logging already setup
        log_config=None,
    )


__all__ = ["create_app", "main"]
