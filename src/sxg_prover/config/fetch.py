"""Signed-exchange retrieval settings."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FetchSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )

    timeout_seconds: float = Field(default=10.0, gt=0, alias="SXG_FETCH_TIMEOUT_SECONDS")
    max_exchange_bytes: int = Field(default=8 * 1024 * 1024, gt=0, alias="SXG_MAX_EXCHANGE_BYTES")


__all__ = ["FetchSettings"]
