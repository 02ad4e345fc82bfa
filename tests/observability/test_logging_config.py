from __future__ import annotations

import json
import logging

import pytest

from sxg_prover.observability.logging import ExtrasFormatter, build_log_config


def _record(data: object | None = None) -> logging.LogRecord:
    record = logging.LogRecord("sxg_prover.test", logging.INFO, __file__, 1, "witness stored", None, None)
    if data is not None:
        record.__dict__["data"] = data
    return record


def test_console_line_appends_data(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("K_SERVICE", raising=False)
    monkeypatch.delenv("KUBERNETES_SERVICE_HOST", raising=False)
    formatter = ExtrasFormatter("%(levelname)s %(name)s: %(message)s")

    line = formatter.format(_record({"request_id": "ab", "bytes": b"\x00\x01"}))

    assert line == 'INFO sxg_prover.test: witness stored | data={"bytes":"<bytes len=2>","request_id":"ab"}'


def test_managed_runtime_emits_json(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("K_SERVICE", "sxg-prover")

    payload = json.loads(ExtrasFormatter().format(_record({"pid": 7})))

    assert payload["message"] == "witness stored"
    assert payload["severity"] == "INFO"
    assert payload["data"] == {"pid": 7}


def test_cloud_logging_requires_project() -> None:
    with pytest.raises(RuntimeError, match="GCP project required"):
        build_log_config(cloud_logging_enabled=True)


def test_console_config_shape() -> None:
    config = build_log_config()

    assert config["root"]["handlers"] == ["console"]
    assert config["loggers"]["uvicorn.access"]["propagate"] is False
    assert "sxg_prover.prover" in config["loggers"]
