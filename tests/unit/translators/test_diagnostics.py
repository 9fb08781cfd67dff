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

"""Unit tests for compiler-message and problem-record translation."""

from __future__ import annotations

import pytest

from cargosift.core.model_types import Severity
from cargosift.core.types import DiagnosticRecord, RelatedLocation, Span
from cargosift.rendering import render_record
from cargosift.translators import translate_compiler_message, translate_problem_record
from tests.fixtures.builders import build_compiler_message, build_rustc_span

pytestmark = pytest.mark.unit


def test_error_renders_as_single_line() -> None:
    event = build_compiler_message(rendered="mismatched types")
    record = translate_compiler_message(event)
    assert record is not None
    assert render_record(record) == (
        "Error (severity 5) from rustc in src/lib.rs at line 10:5-8: mismatched types"
    )


def test_rendered_text_is_collapsed_and_preferred_over_message() -> None:
    event = build_compiler_message(
        rendered="error[E0308]: mismatched types\n  --> src/lib.rs:10:5\n   |\n",
    )
    record = translate_compiler_message(event)
    assert record is not None
    assert record.message == "error[E0308]: mismatched types --> src/lib.rs:10:5 |"


def test_message_field_used_when_rendered_missing() -> None:
    record = translate_compiler_message(build_compiler_message(rendered=None))
    assert record is not None
    assert record.message == "mismatched types"


def test_columns_are_reported_verbatim() -> None:
    span = build_rustc_span("src/main.rs", line_start=1, column_start=1, line_end=3, column_end=2)
    record = translate_compiler_message(build_compiler_message(spans=[span]))
    assert record is not None
    assert record.span == Span(start_line=1, start_col=1, end_line=3, end_col=2)
    assert "at line 1:1-2" in render_record(record)


def test_only_first_span_is_used() -> None:
    spans = [build_rustc_span("src/a.rs"), build_rustc_span("src/b.rs", line_start=99)]
    record = translate_compiler_message(build_compiler_message(spans=spans))
    assert record is not None
    assert record.resource == "src/a.rs"
    assert record.span.start_line == 10


def test_message_without_spans_is_dropped() -> None:
    assert translate_compiler_message(build_compiler_message(spans=[])) is None


def test_span_missing_required_field_is_dropped() -> None:
    span = build_rustc_span()
    del span["column_end"]
    assert translate_compiler_message(build_compiler_message(spans=[span])) is None


def test_warning_filtered_unless_requested() -> None:
    event = build_compiler_message(level="warning", rendered="unused variable: `x`")
    assert translate_compiler_message(event) is None
    record = translate_compiler_message(event, include_warnings=True)
    assert record is not None
    assert record.severity is Severity.WARNING
    assert render_record(record).startswith("Warning (severity 4) from rustc in src/lib.rs")


@pytest.mark.parametrize("level", ["note", "help", "failure-note"])
def test_other_levels_are_dropped(level: str) -> None:
    event = build_compiler_message(level=level)
    assert translate_compiler_message(event, include_warnings=True) is None


def test_non_compiler_message_events_are_ignored() -> None:
    assert translate_compiler_message({"reason": "build-finished", "success": False}) is None
    assert translate_compiler_message({"reason": "compiler-message", "message": "oops"}) is None


def test_children_become_related_locations_in_order() -> None:
    children = [
        {
            "message": "expected `u32`\nbecause of this",
            "level": "note",
            "spans": [build_rustc_span("src/lib.rs", line_start=3, column_start=9, column_end=12)],
        },
        {"message": "no location here", "level": "help", "spans": []},
        {
            "message": "defined here",
            "level": "note",
            "spans": [build_rustc_span("src/other.rs", line_start=1, column_start=1, column_end=4)],
        },
    ]
    record = translate_compiler_message(build_compiler_message(children=children))
    assert record is not None
    assert record.related == (
        RelatedLocation(
            message="expected `u32` because of this",
            resource="src/lib.rs",
            span=Span(start_line=3, start_col=9, end_line=10, end_col=12),
        ),
        RelatedLocation(
            message="defined here",
            resource="src/other.rs",
            span=Span(start_line=1, start_col=1, end_line=10, end_col=4),
        ),
    )
    assert render_record(record) == (
        "Error (severity 5) from rustc in src/lib.rs at line 10:5-8: mismatched types"
        " Related: In src/lib.rs at line 3:9-12: expected `u32` because of this"
        " Related: In src/other.rs at line 1:1-4: defined here"
    )


def _problem(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "resource": "/work/src/lib.rs",
        "owner": "rustc",
        "severity": 8,
        "message": "cannot find value `y`\nin this scope",
        "source": "rustc",
        "startLineNumber": 4,
        "startColumn": 13,
        "endLineNumber": 4,
        "endColumn": 14,
    }
    payload.update(overrides)
    return payload


def test_problem_record_high_severity_collapses_to_error() -> None:
    record = translate_problem_record(_problem())  # type: ignore[arg-type]
    assert record == DiagnosticRecord(
        severity=Severity.ERROR,
        label="Error",
        source_tool="rustc",  # type: ignore[arg-type]
        resource="/work/src/lib.rs",
        span=Span(start_line=4, start_col=13, end_line=4, end_col=14),
        message="cannot find value `y` in this scope",
    )


def test_problem_record_warning_requires_opt_in() -> None:
    event = _problem(severity=4)
    assert translate_problem_record(event) is None  # type: ignore[arg-type]
    record = translate_problem_record(event, include_warnings=True)  # type: ignore[arg-type]
    assert record is not None
    assert record.label == "Warning"


def test_problem_record_low_severity_and_missing_fields_dropped() -> None:
    assert translate_problem_record(_problem(severity=2), include_warnings=True) is None  # type: ignore[arg-type]
    assert translate_problem_record(_problem(severity="8")) is None  # type: ignore[arg-type]
    assert translate_problem_record(_problem(startColumn=None)) is None  # type: ignore[arg-type]


def test_problem_record_defaults_source_and_keeps_related() -> None:
    event = _problem(
        source=None,
        relatedInformation=[
            {
                "resource": "/work/src/main.rs",
                "message": "first used here",
                "startLineNumber": 2,
                "startColumn": 1,
                "endLineNumber": 2,
                "endColumn": 5,
            },
            {"message": "missing resource"},
        ],
    )
    record = translate_problem_record(event)  # type: ignore[arg-type]
    assert record is not None
    assert record.source_tool == "unknown"
    assert len(record.related) == 1
    assert record.related[0].resource == "/work/src/main.rs"
