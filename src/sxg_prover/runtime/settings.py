"""Configuration for the prover service runtime."""

from __future__ import annotations

import logging

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sxg_prover.config.fetch import FetchSettings
from sxg_prover.config.observability import ObservabilitySettings
from sxg_prover.config.prover import ProverSettings


class Settings(BaseSettings):
    """Service configuration resolved from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
    )

    # --- Server ---
    listen_host: str = Field(default="0.0.0.0", alias="SXG_PROVER_HOST")  # noqa: S104
    listen_port: int = Field(default=8080, alias="SXG_PROVER_PORT")

    # --- Component settings ---
    prover: ProverSettings = Field(default_factory=ProverSettings)
    fetch: FetchSettings = Field(default_factory=FetchSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @model_validator(mode="after")
    def _require_network_key(self) -> Settings:
        if self.prover.prover_mode == "network" and not self.prover.private_key_value:
            raise ValueError("PRIVATE_KEY is required when SP1_PROVER=network")
        return self

    # --- Loader ---
    @classmethod
    def load(cls) -> Settings:
        instance = cls()
        logger = logging.getLogger("sxg_prover.settings")
        logger.info("prover settings loaded: %r", instance)
        return instance


__all__ = ["Settings"]
