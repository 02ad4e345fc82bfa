"""Witness record handed to the external prover."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

SCALAR_WIDTH = 32


def encode_scalar(value: int) -> bytes:
    """Return ``value`` as a fixed 32-byte big-endian buffer, zero-left-padded."""

    if value < 0:
        raise ValueError("scalar must be non-negative")
    if value.bit_length() > SCALAR_WIDTH * 8:
        raise ValueError(f"scalar does not fit in {SCALAR_WIDTH} bytes")
    return value.to_bytes(SCALAR_WIDTH, "big")


def bytes_to_ints(buffer: bytes) -> list[int]:
    return list(buffer)


@dataclass(frozen=True, slots=True)
class Witness:
    """Offsets and scalars needed to prove a claim about a signed exchange."""

    final_payload: bytes
    data_to_verify: bytes
    data_to_verify_start_index: int
    integrity_start_index: int
    payload: bytes
    r: bytes
    s: bytes
    px: bytes
    py: bytes

    def __post_init__(self) -> None:
        _check_offset(
            "data_to_verify_start_index", self.data_to_verify_start_index, len(self.payload)
        )
        _check_offset(
            "integrity_start_index", self.integrity_start_index, len(self.final_payload)
        )
        for name in ("r", "s", "px", "py"):
            if len(getattr(self, name)) != SCALAR_WIDTH:
                raise ValueError(f"witness scalar {name} must be {SCALAR_WIDTH} bytes")

    def to_json_dict(self) -> dict[str, Any]:
        """Render with every byte buffer as an array of integers 0..255."""

        return {
            "final_payload": bytes_to_ints(self.final_payload),
            "data_to_verify": bytes_to_ints(self.data_to_verify),
            "data_to_verify_start_index": self.data_to_verify_start_index,
            "integrity_start_index": self.integrity_start_index,
            "payload": bytes_to_ints(self.payload),
            "r": bytes_to_ints(self.r),
            "s": bytes_to_ints(self.s),
            "px": bytes_to_ints(self.px),
            "py": bytes_to_ints(self.py),
        }


def _check_offset(name: str, offset: int, length: int) -> None:
    if offset <= 0 or offset >= length:
        raise ValueError(f"{name} must be within (0, {length}), got {offset}")


__all__ = [
    "SCALAR_WIDTH",
    "Witness",
    "bytes_to_ints",
    "encode_scalar",
]
