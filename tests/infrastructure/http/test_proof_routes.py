from __future__ import annotations

from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from sxg_prover.application.extract_witness import WitnessExtractor
from sxg_prover.application.resolve_status import StatusResolver
from sxg_prover.application.submit_claim import SubmitClaim
from sxg_prover.domain.claim import Claim
from sxg_prover.domain.exceptions import FetchError, VerificationError
from sxg_prover.domain.job import ProofResult
from sxg_prover.domain.request_id import compute_request_id
from sxg_prover.infrastructure.http.routes import ProofRouteDeps, add_proof_routes
from sxg_prover.infrastructure.prover.tracking import ExplorerLogTrackingParser
from sxg_prover.infrastructure.state.job_store import FileJobStore
from tests.fixtures.fakes import FakeDispatcher, FakeExchangeSource, StubEncoder, make_exchange

CLAIM_BODY = {"data": "hello", "source_url": "https://example/test"}
REQUEST_ID = compute_request_id(Claim.create("hello", "https://example/test"))


def _client(
    tmp_path: Path,
    *,
    source: FakeExchangeSource | None = None,
    dispatcher: FakeDispatcher | None = None,
) -> tuple[TestClient, FileJobStore]:
    store = FileJobStore(tmp_path)
    deps = ProofRouteDeps(
        submit=SubmitClaim(
            exchanges=source or FakeExchangeSource(make_exchange()),
            extractor=WitnessExtractor(encoder=StubEncoder()),
            store=store,
            dispatcher=dispatcher or FakeDispatcher(),
        ),
        status=StatusResolver(store=store, tracking_parser=ExplorerLogTrackingParser()),
    )
    app = FastAPI()
    add_proof_routes(app, lambda: deps)
    return TestClient(app), store


@pytest.mark.parametrize("path", ["/", "/v1/proofs"])
def test_submit_returns_request_id(tmp_path: Path, path: str) -> None:
    client, store = _client(tmp_path)

    response = client.post(path, json=CLAIM_BODY)

    assert response.status_code == 200
    assert response.json() == {"reqId": REQUEST_ID}
    assert store.witness_path(REQUEST_ID).exists()


def test_duplicate_submission_conflicts(tmp_path: Path) -> None:
    client, _ = _client(tmp_path)
    client.post("/", json=CLAIM_BODY)

    response = client.post("/", json=CLAIM_BODY)

    assert response.status_code == 409
    body = response.json()
    assert body["category"] == "duplicate_request"
    assert REQUEST_ID in body["error"]


@pytest.mark.parametrize(
    "payload",
    [
        {"data": "", "source_url": "https://example/test"},
        {"data": "hello", "source_url": ""},
        {"data": "hello", "source_url": "ftp://example/test"},
        {"data": "hello", "source_url": "http://[::1"},
        {"data": "hello", "source_url": " https://example/test"},
        {},
    ],
)
def test_invalid_claims_are_rejected(tmp_path: Path, payload: dict[str, str]) -> None:
    client, store = _client(tmp_path)

    response = client.post("/v1/proofs", json=payload)

    assert response.status_code == 400
    assert response.json()["category"] == "validation_error"
    assert list(store.root.iterdir()) == []


@pytest.mark.parametrize(
    ("error", "status_code"),
    [
        (FetchError("GET failed"), 502),
        (VerificationError("The exchange has an invalid signature"), 422),
    ],
)
def test_collaborator_errors_map_to_status(tmp_path: Path, error: Exception, status_code: int) -> None:
    client, _ = _client(tmp_path, source=FakeExchangeSource(error=error))

    response = client.post("/", json=CLAIM_BODY)

    assert response.status_code == status_code
    assert response.json()["error"] == str(error)


def test_extraction_error_is_unprocessable(tmp_path: Path) -> None:
    client, _ = _client(tmp_path, source=FakeExchangeSource(make_exchange(b"<p>nothing</p>")))

    response = client.post("/", json=CLAIM_BODY)

    assert response.status_code == 422
    assert response.json()["error"] == "data not found in payload"


def test_dispatch_failure_is_internal(tmp_path: Path) -> None:
    client, _ = _client(tmp_path, dispatcher=FakeDispatcher(fail=True))

    assert client.post("/", json=CLAIM_BODY).status_code == 500


def test_status_lifecycle(tmp_path: Path) -> None:
    client, store = _client(tmp_path)

    missing = client.get("/status", params={"reqId": REQUEST_ID})
    assert missing.status_code == 404
    assert missing.json() == {"status": "not_found"}

    client.post("/", json=CLAIM_BODY)
    pending = client.get("/status", params={"reqId": REQUEST_ID})
    assert pending.status_code == 202
    assert pending.json() == {"status": "processing"}

    with store.open_log(REQUEST_ID) as handle:
        handle.write(b"View in explorer: https://explorer.succinct.xyz/0xjob\n")
    tracked = client.get(f"/v1/proofs/{REQUEST_ID}")
    assert tracked.status_code == 200
    assert tracked.json() == {
        "status": "processing",
        "tracking_id": "https://explorer.succinct.xyz/0xjob",
    }

    store.put_result(
        REQUEST_ID, ProofResult(result=1, vkey="0xvk", public_values="0xpv", proof="0xproof")
    )
    done = client.get("/status", params={"reqId": REQUEST_ID.upper()})
    assert done.status_code == 200
    assert done.json() == {
        "status": "completed",
        "result": {"result": 1, "vkey": "0xvk", "publicValues": "0xpv", "proof": "0xproof"},
    }


@pytest.mark.parametrize("raw", ["", "abc", "../etc/passwd", "g" * 64])
def test_status_rejects_malformed_ids(tmp_path: Path, raw: str) -> None:
    client, _ = _client(tmp_path)

    response = client.get("/status", params={"reqId": raw})

    assert response.status_code == 400


def test_corrupt_result_is_internal_error(tmp_path: Path) -> None:
    client, store = _client(tmp_path)
    store.result_path(REQUEST_ID).write_text("{broken", encoding="utf-8")

    response = client.get(f"/v1/proofs/{REQUEST_ID}")

    assert response.status_code == 500
    assert response.json()["category"] == "persistence_error"


def test_healthz(tmp_path: Path) -> None:
    client, _ = _client(tmp_path)

    assert client.get("/healthz").json() == {"status": "ok"}


def test_dispatch_failure_leaves_no_job_behind(tmp_path: Path) -> None:
    client, store = _client(tmp_path, dispatcher=FakeDispatcher(fail=True))

    assert client.post("/", json=CLAIM_BODY).status_code == 500

    status = client.get("/status", params={"reqId": REQUEST_ID})
    assert status.status_code == 404
    assert status.json() == {"status": "not_found"}
    assert not store.witness_path(REQUEST_ID).exists()

    retry_client, _ = _client(tmp_path)
    retried = retry_client.post("/", json=CLAIM_BODY)
    assert retried.status_code == 200
    assert retried.json() == {"reqId": REQUEST_ID}
