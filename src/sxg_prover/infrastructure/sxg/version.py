"""Supported signed-exchange format versions."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SxgVersion:
    name: str
    magic: bytes
    mime_type: str
    signature_context: bytes
    integrity_parameter: str

    def __str__(self) -> str:
        return self.name


VERSION_1B2 = SxgVersion(
    name="1b2",
    magic=b"sxg1-b2\x00",
    mime_type="application/signed-exchange;v=b2",
    signature_context=b"HTTP Exchange 1 b2",
    integrity_parameter="digest/mi-sha256-03",
)
VERSION_1B3 = SxgVersion(
    name="1b3",
    magic=b"sxg1-b3\x00",
    mime_type="application/signed-exchange;v=b3",
    signature_context=b"HTTP Exchange 1 b3",
    integrity_parameter="digest/mi-sha256-03",
)

ALL_VERSIONS: tuple[SxgVersion, ...] = (VERSION_1B2, VERSION_1B3)
LATEST_VERSION = ALL_VERSIONS[-1]


def version_from_magic(magic: bytes) -> SxgVersion | None:
    for version in ALL_VERSIONS:
        if version.magic == magic:
            return version
    return None


__all__ = [
    "ALL_VERSIONS",
    "LATEST_VERSION",
    "SxgVersion",
    "VERSION_1B2",
    "VERSION_1B3",
    "version_from_magic",
]
