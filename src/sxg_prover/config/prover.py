"""External prover invocation settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProverSettings(BaseSettings):
    """Where job artifacts live and how the prover binary is launched."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )

    state_dir: Path = Field(default=Path("."), alias="SXG_PROVER_STATE_DIR")
    prover_binary: str = Field(default="sp1-prover", alias="SXG_PROVER_BINARY")
    proof_system: Literal["groth16", "plonk"] = Field(default="groth16", alias="SXG_PROVER_SYSTEM")
    prover_mode: Literal["network", "local", "mock"] = Field(default="network", alias="SP1_PROVER")
    private_key: SecretStr | None = Field(default=None, alias="PRIVATE_KEY")
    rust_log: str = Field(default="info", alias="PROVER_RUST_LOG")

    @property
    def private_key_value(self) -> str:
        return self.private_key.get_secret_value() if self.private_key else ""


__all__ = ["ProverSettings"]
