from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from sxg_prover.config.fetch import FetchSettings
from sxg_prover.config.prover import ProverSettings
from sxg_prover.runtime.settings import Settings

_ENV_VARS = (
    "SXG_PROVER_STATE_DIR",
    "SXG_PROVER_BINARY",
    "SXG_PROVER_SYSTEM",
    "SP1_PROVER",
    "PRIVATE_KEY",
    "PROVER_RUST_LOG",
    "SXG_FETCH_TIMEOUT_SECONDS",
    "SXG_MAX_EXCHANGE_BYTES",
    "SXG_PROVER_HOST",
    "SXG_PROVER_PORT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the picture.
    monkeypatch.chdir(tmp_path)


def test_defaults_in_mock_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SP1_PROVER", "mock")

    settings = Settings()

    assert settings.listen_port == 8080
    assert settings.prover.proof_system == "groth16"
    assert settings.prover.private_key_value == ""
    assert settings.fetch.max_exchange_bytes == 8 * 1024 * 1024


def test_network_mode_requires_private_key() -> None:
    with pytest.raises(ValidationError, match="PRIVATE_KEY is required"):
        Settings()


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PRIVATE_KEY", "0xsecret")
    monkeypatch.setenv("SXG_PROVER_STATE_DIR", str(tmp_path / "jobs"))
    monkeypatch.setenv("SXG_PROVER_SYSTEM", "plonk")
    monkeypatch.setenv("SXG_PROVER_PORT", "9090")
    monkeypatch.setenv("SXG_FETCH_TIMEOUT_SECONDS", "2.5")

    settings = Settings()

    assert settings.listen_port == 9090
    assert settings.prover.state_dir == tmp_path / "jobs"
    assert settings.prover.proof_system == "plonk"
    assert settings.prover.private_key_value == "0xsecret"
    assert "0xsecret" not in repr(settings)
    assert settings.fetch.timeout_seconds == 2.5


def test_unknown_proof_system_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SXG_PROVER_SYSTEM", "stark")

    with pytest.raises(ValidationError):
        ProverSettings()


def test_fetch_limits_must_be_positive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SXG_MAX_EXCHANGE_BYTES", "0")

    with pytest.raises(ValidationError):
        FetchSettings()
