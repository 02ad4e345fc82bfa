"""Parser for the parameterised-list ``Signature`` header of a signed exchange."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Any


class SignatureHeaderError(ValueError):
    """Raised when the signature header cannot be parsed."""


@dataclass(frozen=True, slots=True)
class SignatureEntry:
    label: str
    sig: bytes
    integrity: str
    cert_url: str
    cert_sha256: bytes | None
    validity_url: str
    date: int
    expires: int


def parse_signature_header(value: str) -> tuple[SignatureEntry, ...]:
    """Parse every signature in the header; at least one must be present."""

    entries = tuple(_parse_entry(chunk) for chunk in _split_top_level(value, ","))
    if not entries:
        raise SignatureHeaderError("signature header is empty")
    return entries


def _parse_entry(text: str) -> SignatureEntry:
    parts = _split_top_level(text, ";")
    if not parts:
        raise SignatureHeaderError("signature entry is empty")
    label, params = parts[0], {}
    for raw in parts[1:]:
        key, sep, val = raw.partition("=")
        if not sep:
            raise SignatureHeaderError(f"parameter {key!r} has no value")
        params[key.strip()] = _parse_item(val.strip())

    cert_sha256 = params.get("cert-sha256")
    try:
        return SignatureEntry(
            label=label,
            sig=_expect(params, "sig", bytes),
            integrity=_expect(params, "integrity", str),
            cert_url=_expect(params, "cert-url", str),
            cert_sha256=cert_sha256 if isinstance(cert_sha256, bytes) else None,
            validity_url=_expect(params, "validity-url", str),
            date=_expect(params, "date", int),
            expires=_expect(params, "expires", int),
        )
    except KeyError as exc:
        raise SignatureHeaderError(f"signature is missing parameter {exc.args[0]!r}") from exc


def _expect(params: dict[str, object], key: str, kind: type) -> Any:
    value = params[key]
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise SignatureHeaderError(f"signature parameter {key!r} has the wrong type")
    return value


def _parse_item(raw: str) -> object:
    if len(raw) >= 2 and raw[0] == raw[-1] == '"':
        return raw[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "*:":
        try:
            return base64.b64decode(raw[1:-1], validate=True)
        except (binascii.Error, ValueError) as exc:
            raise SignatureHeaderError("binary parameter is not valid base64") from exc
    if raw.lstrip("-").isdigit():
        return int(raw)
    return raw


def _split_top_level(text: str, separator: str) -> list[str]:
    """Split on ``separator`` outside of quoted strings."""

    parts: list[str] = []
    current: list[str] = []
    in_quotes = False
    escaped = False
    for char in text:
        if escaped:
            current.append(char)
            escaped = False
            continue
        if char == "\\" and in_quotes:
            current.append(char)
            escaped = True
            continue
        if char == '"':
            in_quotes = not in_quotes
        if char == separator and not in_quotes:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return [part for part in parts if part]


__all__ = ["SignatureEntry", "SignatureHeaderError", "parse_signature_header"]
