"""Claim value object submitted by callers."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from sxg_prover.domain.exceptions import ValidationError

_ALLOWED_SCHEMES = frozenset({"http", "https"})
_URL_ERROR = "source_url must be an absolute http(s) URL"


@dataclass(frozen=True, slots=True)
class Claim:
    """Assertion that ``data`` appears verbatim inside the content at ``source_url``.

    Both fields are hashed exactly as given, so ``source_url`` is rejected
    rather than trimmed when it carries surrounding whitespace.
    """

    data: bytes
    source_url: str

    def __post_init__(self) -> None:
        if not self.data:
            raise ValidationError("data required")
        if not self.source_url:
            raise ValidationError("source_url required")
        if self.source_url != self.source_url.strip():
            raise ValidationError("source_url must not have surrounding whitespace")
        try:
            parts = urlsplit(self.source_url)
            scheme, netloc = parts.scheme.lower(), parts.netloc
        except ValueError as exc:
            raise ValidationError(_URL_ERROR) from exc
        if scheme not in _ALLOWED_SCHEMES or not netloc:
            raise ValidationError(_URL_ERROR)

    @classmethod
    def create(cls, data: str | bytes, source_url: str) -> Claim:
        """Build a claim from wire values, encoding text data as UTF-8."""

        raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        return cls(data=raw, source_url=source_url)


__all__ = ["Claim"]
