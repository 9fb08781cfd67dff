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

"""Render canonical records as the single-line strings of the digest."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from cargosift.core.types import (
    DiagnosticRecord,
    ProcessFailure,
    SuiteFailure,
    TestFailure,
    TestIgnored,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cargosift.core.types import CoverageReport, RelatedLocation, Span

__all__ = [
    "dump_coverage",
    "dump_lines",
    "format_diagnostic",
    "format_process_failure",
    "format_suite_failure",
    "format_test_failure",
    "format_test_ignored",
    "render_record",
]


def _location(resource: str, span: Span) -> str:
    return f"{resource} at line {span.start_line}:{span.start_col}-{span.end_col}"


def _related(location: RelatedLocation) -> str:
    return f" Related: In {_location(location.resource, location.span)}: {location.message}"


def format_diagnostic(record: DiagnosticRecord) -> str:
    """Render a diagnostic followed by its related locations, on one line.

    Args:
        record: Diagnostic to render.

    Returns:
        ``"<Label> (severity <n>) from <tool> in <file> at line <L>:<C1>-<C2>: <message>"``
        with one ``" Related: In ..."`` suffix per related location.
    """
    head = (
        f"{record.label} (severity {int(record.severity)}) from {record.source_tool} "
        f"in {_location(record.resource, record.span)}: {record.message}"
    )
    return head + "".join(_related(location) for location in record.related)


def format_test_failure(record: TestFailure) -> str:
    return (
        f"Test failed: {record.name} (exec_time: {record.exec_time_seconds:.3f}s)"
        f" - {record.captured_stdout}"
    )


def format_suite_failure(record: SuiteFailure) -> str:
    return (
        f"Suite failed: passed {record.passed_count}, failed {record.failed_count}"
        f" (exec_time: {record.exec_time_seconds:.3f}s)"
    )


def format_test_ignored(record: TestIgnored) -> str:
    if record.reason:
        return f"Test ignored: {record.name} - {record.reason}"
    return f"Test ignored: {record.name}"


def format_process_failure(record: ProcessFailure) -> str:
    text = f"Cargo {record.subcommand} failed with exit code {record.exit_code}"
    if record.stderr:
        return f"{text}: {record.stderr}"
    return text


def render_record(record: object) -> str:
    """Render any canonical record; unsupported types are a programming error."""
    if isinstance(record, DiagnosticRecord):
        return format_diagnostic(record)
    if isinstance(record, TestFailure):
        return format_test_failure(record)
    if isinstance(record, SuiteFailure):
        return format_suite_failure(record)
    if isinstance(record, TestIgnored):
        return format_test_ignored(record)
    if isinstance(record, ProcessFailure):
        return format_process_failure(record)
    raise TypeError(f"Cannot render {type(record).__name__}")


def dump_lines(lines: Iterable[str]) -> str:
    """Serialise rendered records as one compact JSON array."""
    return json.dumps(list(lines), ensure_ascii=False)


def dump_coverage(report: CoverageReport) -> str:
    return json.dumps(report.to_payload(), indent=2, ensure_ascii=False)
