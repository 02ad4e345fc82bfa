from __future__ import annotations

import pytest

from sxg_prover.domain.claim import Claim
from sxg_prover.domain.exceptions import ValidationError
from sxg_prover.domain.request_id import (
    canonical_claim_bytes,
    compute_request_id,
    normalize_request_id,
)


def test_empty_data_is_rejected() -> None:
    with pytest.raises(ValidationError, match="data required"):
        Claim.create("", "https://x")


def test_empty_source_url_is_rejected() -> None:
    with pytest.raises(ValidationError, match="source_url required"):
        Claim.create("x", "")


def test_non_http_source_url_is_rejected() -> None:
    with pytest.raises(ValidationError, match="absolute http"):
        Claim.create("x", "file:///etc/passwd")


@pytest.mark.parametrize("url", ["http://[::1", "https://bad]/x"])
def test_malformed_source_url_is_a_validation_error(url: str) -> None:
    with pytest.raises(ValidationError, match="absolute http"):
        Claim.create("x", url)


@pytest.mark.parametrize("url", [" https://example/test", "https://example/test\n"])
def test_source_url_with_surrounding_whitespace_is_rejected(url: str) -> None:
    with pytest.raises(ValidationError, match="surrounding whitespace"):
        Claim.create("hello", url)


def test_text_data_is_utf8_encoded() -> None:
    claim = Claim.create("héllo", "https://example.test/a")

    assert claim.data == "héllo".encode()


def test_request_id_is_deterministic() -> None:
    first = compute_request_id(Claim.create("hello", "https://example/test"))
    second = compute_request_id(Claim.create("hello", "https://example/test"))

    assert first == second
    assert len(first) == 64
    assert first == first.lower()


def test_request_id_differs_per_field() -> None:
    base = compute_request_id(Claim.create("hello", "https://example/test"))

    assert compute_request_id(Claim.create("hello!", "https://example/test")) != base
    assert compute_request_id(Claim.create("hello", "https://example/other")) != base


def test_canonical_encoding_is_unambiguous_across_field_boundaries() -> None:
    left = Claim(data=b"https://a", source_url="https://b")
    right = Claim(data=b"https://", source_url="https://ab")

    assert canonical_claim_bytes(left) != canonical_claim_bytes(right)
    assert compute_request_id(left) != compute_request_id(right)


def test_canonical_encoding_is_length_prefixed() -> None:
    claim = Claim(data=b"abc", source_url="https://x")
    encoded = canonical_claim_bytes(claim)

    assert encoded.startswith(b"sxg-prover/request-id/v1")
    assert (3).to_bytes(8, "big") + b"abc" in encoded
    assert encoded.endswith(len(b"https://x").to_bytes(8, "big") + b"https://x")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("A" * 64, "a" * 64),
        ("  " + "0f" * 32 + "\n", "0f" * 32),
        ("xyz", None),
        ("a" * 63, None),
        ("../" + "a" * 61, None),
    ],
)
def test_normalize_request_id(raw: str, expected: str | None) -> None:
    assert normalize_request_id(raw) == expected
