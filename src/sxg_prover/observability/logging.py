"""Logging setup for the prover service (console formatter + optional Cloud Logging)."""

from __future__ import annotations

import json
import logging
import os
import time
import traceback
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from logging.config import dictConfig
from typing import Any

from google.cloud import logging as gcp_logging
from opentelemetry import baggage, trace

ROOT_LEVEL_ENV = "LOG_LEVEL"
CLOUD_LOG_NAME = "sxg-prover"

_SERVICE_LOGGERS: dict[str, dict[str, Any]] = {
    "sxg_prover.prover": {"level": "INFO"},
    "sxg_prover.sxg": {"level": "INFO"},
}

_THIRD_PARTY_LEVELS: dict[str, tuple[str, str]] = {
    "uvicorn": ("UVICORN_LOG_LEVEL", "INFO"),
    "uvicorn.error": ("UVICORN_LOG_LEVEL", "INFO"),
    "uvicorn.access": ("UVICORN_ACCESS_LOG_LEVEL", "WARNING"),
    "httpx": ("HTTPX_LOG_LEVEL", "WARNING"),
    "httpcore": ("HTTPX_LOG_LEVEL", "WARNING"),
}


def _level(env_var: str, default: str) -> str:
    return os.getenv(env_var, default).upper()


def _emit_json_lines() -> bool:
    # Managed runtimes parse JSON lines into structured entries.
    return bool(os.getenv("K_SERVICE") or os.getenv("KUBERNETES_SERVICE_HOST"))


class ExtrasFormatter(logging.Formatter):
    """Append the ``data`` extra to console lines, or emit JSON on managed runtimes."""

    def format(self, record: logging.LogRecord) -> str:
        data = record.__dict__.get("data")
        if _emit_json_lines():
            return json.dumps(_json_payload(record), sort_keys=True, separators=(",", ":"))
        formatted = super().format(record)
        if not data:
            return formatted
        try:
            encoded = json.dumps(data, sort_keys=True, separators=(",", ":"))
        except TypeError:
            encoded = json.dumps(_sanitize_for_json(data), sort_keys=True, separators=(",", ":"))
        return f"{formatted} | data={encoded}"


class OtelContextLogFilter(logging.Filter):
    """Copy the active span ids and baggage into ``json_fields``."""

    def __init__(self, *, gcp_project_id: str | None = None) -> None:
        super().__init__()
        self._gcp_project_id = gcp_project_id.strip() if gcp_project_id else None

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - thin wrapper
        fields = record.__dict__.get("json_fields")
        json_fields: dict[str, Any] = dict(fields) if isinstance(fields, Mapping) else {}
        otel: dict[str, Any] = {}

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            trace_id = f"{span_context.trace_id:032x}"
            span_id = f"{span_context.span_id:016x}"
            otel.update(trace_id=trace_id, span_id=span_id)
            if self._gcp_project_id:
                json_fields.setdefault(
                    "logging.googleapis.com/trace",
                    f"projects/{self._gcp_project_id}/traces/{trace_id}",
                )
                json_fields.setdefault("logging.googleapis.com/spanId", span_id)

        values = baggage.get_all()
        if values:
            otel["baggage"] = {key: str(value) for key, value in values.items()}
        if otel:
            json_fields["otel"] = otel
            record.__dict__["json_fields"] = json_fields
        return True


class CloudJsonSanitizer(logging.Filter):
    """Make ``data`` and ``json_fields`` JSON-safe before Cloud Logging ships them."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - thin wrapper
        record_dict = record.__dict__
        if "data" in record_dict:
            record_dict["data"] = _sanitize_for_json(record_dict["data"])
        fields = _sanitize_for_json(record_dict.get("json_fields") or {})
        if not isinstance(fields, dict):
            fields = {"json_fields": fields}
        if "data" in record_dict:
            fields.setdefault("data", record_dict["data"])
        record_dict["json_fields"] = fields
        return True


def build_log_config(
    *,
    cloud_logging_enabled: bool = False,
    gcp_project: str | None = None,
    cloud_log_labels: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return a dictConfig-compatible logging configuration."""

    handler_names = ["console"]
    handlers: dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "console",
            "stream": "ext://sys.stdout",
            "filters": ["otel_context"],
        }
    }
    if cloud_logging_enabled:
        if not gcp_project:
            raise RuntimeError("GCP project required when cloud logging is enabled")
        handlers["cloud_logging"] = _cloud_logging_handler(gcp_project, cloud_log_labels)
        handler_names.append("cloud_logging")

    loggers: dict[str, dict[str, Any]] = {
        name: {"level": _level(env, default), "handlers": list(handler_names), "propagate": False}
        for name, (env, default) in _THIRD_PARTY_LEVELS.items()
    }
    loggers.update({name: dict(config) for name, config in _SERVICE_LOGGERS.items()})

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "()": ExtrasFormatter,
                "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S",
            }
        },
        "filters": {
            "otel_context": {"()": OtelContextLogFilter, "gcp_project_id": gcp_project},
            "cloud_json_sanitizer": {"()": CloudJsonSanitizer},
        },
        "handlers": handlers,
        "root": {"level": _level(ROOT_LEVEL_ENV, "INFO"), "handlers": list(handler_names)},
        "loggers": loggers,
    }


def configure_logging(
    *,
    cloud_logging_enabled: bool = False,
    gcp_project: str | None = None,
    cloud_log_labels: Mapping[str, str] | None = None,
) -> None:
    start = time.monotonic()
    dictConfig(
        build_log_config(
            cloud_logging_enabled=cloud_logging_enabled,
            gcp_project=gcp_project,
            cloud_log_labels=cloud_log_labels,
        )
    )
    logging.getLogger("sxg_prover.observability").debug(
        "configured logging",
        extra={
            "data": {
                "cloud_logging_enabled": cloud_logging_enabled,
                "elapsed_s": round(time.monotonic() - start, 3),
            }
        },
    )


def init_logging() -> None:
    """Bootstrap console logging before settings are loaded."""

    configure_logging(cloud_logging_enabled=False)


def enable_cloud_logging(*, gcp_project: str, cloud_log_labels: Mapping[str, str] | None = None) -> None:
    """Attach Cloud Logging on top of the console setup."""

    configure_logging(
        cloud_logging_enabled=True,
        gcp_project=gcp_project,
        cloud_log_labels=cloud_log_labels,
    )


def shutdown_logging() -> None:
    """Flush and close Cloud Logging handlers before exit."""

    from google.cloud.logging_v2.handlers.handlers import CloudLoggingHandler

    seen: set[int] = set()
    loggers = [logging.getLogger()]
    loggers.extend(
        logger for logger in logging.Logger.manager.loggerDict.values() if isinstance(logger, logging.Logger)
    )
    for logger in loggers:
        for handler in logger.handlers:
            if id(handler) in seen or not isinstance(handler, CloudLoggingHandler):
                continue
            seen.add(id(handler))
            handler.flush()  # type: ignore[no-untyped-call]
            handler.close()  # type: ignore[no-untyped-call]


def _cloud_logging_handler(project: str, labels: Mapping[str, str] | None) -> dict[str, Any]:
    from google.cloud.logging_v2.resource import Resource

    client: gcp_logging.Client = gcp_logging.Client(project=project)  # type: ignore[no-untyped-call]
    return {
        "level": "INFO",
        "class": "google.cloud.logging_v2.handlers.handlers.CloudLoggingHandler",
        "client": client,
        "name": CLOUD_LOG_NAME,
        "resource": Resource("global", {"project_id": project}),
        "labels": dict(labels or {}),
        "formatter": "console",
        "filters": ["otel_context", "cloud_json_sanitizer"],
    }


def _json_payload(record: logging.LogRecord) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "message": record.getMessage(),
        "severity": record.levelname,
        "logger": record.name,
        "timestamp": (
            f"{time.strftime('%Y-%m-%dT%H:%M:%S', time.gmtime(record.created))}"
            f".{int(record.msecs):03d}Z"
        ),
    }
    data = record.__dict__.get("data")
    if data:
        payload["data"] = _sanitize_for_json(data)
    if record.exc_info:
        payload["exception"] = "".join(traceback.format_exception(*record.exc_info)).rstrip("\n")
    fields = record.__dict__.get("json_fields")
    if isinstance(fields, Mapping):
        for key, value in _sanitize_for_json(fields).items():
            payload.setdefault(key, value)
    return payload


def _sanitize_for_json(value: Any, depth: int = 8, max_items: int = 200) -> Any:
    """Return a JSON-serialisable copy; bytes are summarised, unknowns stringified."""

    if depth <= 0:
        return "<depth_exceeded>"
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes len={len(value)}>"
    if is_dataclass(value) and not isinstance(value, type):
        return _sanitize_for_json(asdict(value), depth - 1, max_items)
    if isinstance(value, Mapping):
        items = list(value.items())
        out = {str(k): _sanitize_for_json(v, depth - 1, max_items) for k, v in items[:max_items]}
        if len(items) > max_items:
            out["<truncated>"] = f"...{len(items) - max_items} more"
        return out
    if isinstance(value, (list, tuple, set)):
        seq = list(value)
        out_list = [_sanitize_for_json(item, depth - 1, max_items) for item in seq[:max_items]]
        if len(seq) > max_items:
            out_list.append(f"... {len(seq) - max_items} more")
        return out_list
    return str(value)


__all__ = [
    "ExtrasFormatter",
    "build_log_config",
    "configure_logging",
    "enable_cloud_logging",
    "init_logging",
    "shutdown_logging",
]
