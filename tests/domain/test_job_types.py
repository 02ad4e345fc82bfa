from __future__ import annotations

from sxg_prover.domain.exchange import Exchange
from sxg_prover.domain.job import JobStatus, JobStatusKind, ProofResult


def test_proof_result_uses_wire_field_names() -> None:
    result = ProofResult(result=1, vkey="0xvk", public_values="0xpv", proof="0xproof")

    assert result.to_json_dict() == {
        "result": 1,
        "vkey": "0xvk",
        "publicValues": "0xpv",
        "proof": "0xproof",
    }
    assert ProofResult.from_json_dict(result.to_json_dict()) == result


def test_job_status_constructors() -> None:
    assert JobStatus.not_found().kind is JobStatusKind.NOT_FOUND
    assert JobStatus.processing().tracking_ref is None
    assert JobStatus.processing("https://t/1").tracking_ref == "https://t/1"


def test_exchange_header_lookup_is_case_insensitive() -> None:
    exchange = Exchange(
        payload=b"x",
        signed_message=b"y",
        response_headers=(("digest", "mi-sha256-03=abc"), ("Digest", "second")),
        signature_r=1,
        signature_s=1,
        public_key_x=1,
        public_key_y=1,
    )

    assert exchange.header("Digest") == "mi-sha256-03=abc"
    assert exchange.header("missing") is None
