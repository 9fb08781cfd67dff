# Copyright 2025 CrownOps Engineering
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Unit tests for the llvm-cov export parser."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from cargosift.core.types import LineTotals
from cargosift.coverage import parse_llvm_cov
from cargosift.coverage.llvm_cov import uncovered_lines
from cargosift.exceptions import CoverageReportError
from cargosift.paths import make_relativizer
from tests.fixtures.builders import build_llvm_cov_document, build_llvm_cov_file

pytestmark = [pytest.mark.unit, pytest.mark.coverage]

ROOT_RELATIVIZER = make_relativizer(Path("/work/demo"))


def test_uncovered_lines_collects_zero_count_segments() -> None:
    segments = [
        [1, 1, 5, True, True, False],
        [2, 1, 0, True, True, False],
        [3, 1, 0, True, True, False],
        [7, 1, 0, True, False, False],
        [8, 1, 0, False, False, True],
    ]
    assert uncovered_lines(segments) == [2, 3, 7]


@pytest.mark.parametrize(
    "segments",
    [
        [[42, 1, 0, True, True, False], [42, 9, 3, True, False, False]],
        [[42, 9, 3, True, False, False], [42, 1, 0, True, True, False]],
    ],
)
def test_covered_segment_wins_regardless_of_order(segments: list[list[object]]) -> None:
    assert uncovered_lines(segments) == []  # type: ignore[arg-type]


def test_uncovered_lines_ignores_short_and_malformed_segments() -> None:
    segments = [[1, 1, 0, True], "junk", [2, 1, 0, 1, True], [3, 1, 0, True, True]]
    assert uncovered_lines(segments) == [3]  # type: ignore[arg-type]


def test_parse_llvm_cov_builds_report() -> None:
    document = build_llvm_cov_document([
        build_llvm_cov_file(
            "/work/demo/src/lib.rs",
            [
                [10, 1, 0, True, True, False],
                [11, 1, 0, True, True, False],
                [12, 1, 0, True, True, False],
                [22, 5, 0, True, True, False],
                [30, 1, 0, True, True, False],
                [31, 1, 0, True, True, False],
                [40, 1, 2, True, True, False],
            ],
            count=50,
            covered=44,
            percent=88.0,
        ),
        {"filename": "/work/demo/src/empty.rs", "summary": {}},
        build_llvm_cov_file("/home/u/.cargo/registry/dep.rs", [], count=3, covered=3, percent=100.0),
    ])
    report = parse_llvm_cov(document, ROOT_RELATIVIZER)

    assert report.summary.lines == LineTotals(count=120, covered=90, percent=75.0)
    assert report.summary.functions == LineTotals(count=12, covered=10, percent=83.33)
    assert [item.file for item in report.files] == ["src/lib.rs", "/home/u/.cargo/registry/dep.rs"]
    lib = report.files[0]
    assert lib.uncovered_lines == ("10-12", "22", "30-31")
    assert lib.lines == LineTotals(count=50, covered=44, percent=88.0)
    assert report.files[1].uncovered_lines == ()


def test_parse_llvm_cov_payload_includes_functions() -> None:
    report = parse_llvm_cov(build_llvm_cov_document([]), ROOT_RELATIVIZER)
    payload = report.to_payload()
    assert payload["summary"]["functions"] == {"count": 12, "covered": 10, "percent": 83.33}
    assert payload["files"] == []


@pytest.mark.parametrize(
    ("text", "reason"),
    [
        ("not json at all", "not valid JSON"),
        ("[]", "top-level value is not an object"),
        (json.dumps({"data": []}), "missing data\\[0\\]"),
        (json.dumps({"type": "llvm.coverage.json.export"}), "missing data\\[0\\]"),
        (json.dumps({"data": ["nope"]}), "missing data\\[0\\]"),
    ],
)
def test_parse_llvm_cov_rejects_invalid_documents(text: str, reason: str) -> None:
    with pytest.raises(CoverageReportError, match=f"Invalid llvm-cov coverage report: {reason}"):
        _ = parse_llvm_cov(text, ROOT_RELATIVIZER)
