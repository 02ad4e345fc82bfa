from __future__ import annotations

import pytest

from sxg_prover.infrastructure.prover.tracking import EXPLORER_BASE_URL, ExplorerLogTrackingParser


@pytest.mark.parametrize(
    ("log", "expected"),
    [
        ("", None),
        ("nothing to see\n", None),
        (
            "INFO View in explorer: https://explorer.succinct.xyz/0xabc123\n",
            "https://explorer.succinct.xyz/0xabc123",
        ),
        (
            "View in explorer: https://explorer.succinct.xyz/request/0xfeed  \r\n",
            "https://explorer.succinct.xyz/0xfeed",
        ),
    ],
)
def test_parse_explorer_line(log: str, expected: str | None) -> None:
    assert ExplorerLogTrackingParser().parse(log) == expected


def test_first_matching_line_wins() -> None:
    log = (
        "View in explorer: https://explorer.succinct.xyz/first\n"
        "View in explorer: https://explorer.succinct.xyz/second\n"
    )

    assert ExplorerLogTrackingParser().parse(log) == f"{EXPLORER_BASE_URL}first"


def test_custom_marker_and_base() -> None:
    parser = ExplorerLogTrackingParser(marker="track: https://t.example/", base_url="https://t.example/")

    assert parser.parse("x\ntrack: https://t.example/jobs/42\n") == "https://t.example/42"
