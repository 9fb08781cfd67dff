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

"""Canonical records produced by the translators and coverage parsers.

Every record is an immutable dataclass. Translators build a record in full or
return ``None``; nothing is mutated after construction. The coverage records
expose ``to_payload`` helpers returning the JSON document shape written by the
CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NotRequired, TypeAlias, TypedDict

if TYPE_CHECKING:
    from .model_types import Severity
    from .type_aliases import DisplayPath, RangeString, ToolName


@dataclass(slots=True, frozen=True)
class Span:
    """Source location of a diagnostic.

    Attributes:
        start_line: First line (1-based, as reported upstream).
        start_col: First column (1-based, as reported upstream).
        end_line: Last line when reported; accepted but never rendered.
        end_col: End column (exclusive, as reported upstream).
    """

    start_line: int
    start_col: int
    end_line: int | None
    end_col: int


@dataclass(slots=True, frozen=True)
class RelatedLocation:
    """Secondary location attached to a diagnostic (``note``/``help`` sites)."""

    message: str
    resource: str
    span: Span


def _default_related() -> tuple[RelatedLocation, ...]:
    return ()


@dataclass(slots=True, frozen=True)
class DiagnosticRecord:
    """A single reported compiler problem with a source location.

    Attributes:
        severity: Ordinal severity (4 = warning, 5 = error).
        label: Human tag rendered in front of the record.
        source_tool: Originating tool, e.g. ``rustc``.
        resource: File path as reported upstream.
        span: Authoritative (first) span of the upstream message.
        message: Whitespace-collapsed message text.
        related: Secondary locations in upstream order.
    """

    severity: Severity
    label: str
    source_tool: ToolName
    resource: str
    span: Span
    message: str
    related: tuple[RelatedLocation, ...] = field(default_factory=_default_related)


@dataclass(slots=True, frozen=True)
class TestFailure:
    """A failed test case reported by the libtest JSON formatter."""

    __test__ = False

    name: str
    exec_time_seconds: float
    captured_stdout: str


@dataclass(slots=True, frozen=True)
class SuiteFailure:
    """A failed test suite with its verbatim counters."""

    passed_count: int
    failed_count: int
    exec_time_seconds: float


@dataclass(slots=True, frozen=True)
class TestIgnored:
    """An ignored test, only kept when ignored tests are requested."""

    __test__ = False

    name: str
    reason: str


TestResultRecord: TypeAlias = TestFailure | SuiteFailure | TestIgnored
Record: TypeAlias = DiagnosticRecord | TestResultRecord


@dataclass(slots=True, frozen=True)
class ProcessFailure:
    """Synthetic record describing a supervised tool that exited non-zero.

    Attributes:
        tool: Executable that was launched (``cargo``).
        subcommand: Cargo subcommand, used in the rendered text.
        exit_code: Exit status; negative values are POSIX signal numbers.
        stderr: Normalized stderr text captured from the child, possibly empty.
    """

    tool: ToolName
    subcommand: str
    exit_code: int
    stderr: str = ""


class LineTotalsPayload(TypedDict):
    count: int
    covered: int
    percent: float


class CoverageSummaryPayload(TypedDict):
    lines: LineTotalsPayload
    functions: NotRequired[LineTotalsPayload]


class FileCoverageLinesPayload(TypedDict):
    lines: LineTotalsPayload


class FileCoveragePayload(TypedDict):
    file: str
    coverage: FileCoverageLinesPayload
    uncovered_lines: list[str]


class CoverageReportPayload(TypedDict):
    summary: CoverageSummaryPayload
    files: list[FileCoveragePayload]


@dataclass(slots=True, frozen=True)
class LineTotals:
    count: int
    covered: int
    percent: float

    def to_payload(self) -> LineTotalsPayload:
        return {"count": self.count, "covered": self.covered, "percent": self.percent}


@dataclass(slots=True, frozen=True)
class CoverageSummary:
    """Whole-run aggregate; function totals only exist for llvm-cov reports."""

    lines: LineTotals
    functions: LineTotals | None = None

    def to_payload(self) -> CoverageSummaryPayload:
        payload: CoverageSummaryPayload = {"lines": self.lines.to_payload()}
        if self.functions is not None:
            payload["functions"] = self.functions.to_payload()
        return payload


@dataclass(slots=True, frozen=True)
class FileCoverage:
    file: DisplayPath
    lines: LineTotals
    uncovered_lines: tuple[RangeString, ...]

    def to_payload(self) -> FileCoveragePayload:
        return {
            "file": self.file,
            "coverage": {"lines": self.lines.to_payload()},
            "uncovered_lines": list(self.uncovered_lines),
        }


@dataclass(slots=True, frozen=True)
class CoverageReport:
    """Summary plus per-file coverage, files in upstream order."""

    summary: CoverageSummary
    files: tuple[FileCoverage, ...]

    def to_payload(self) -> CoverageReportPayload:
        return {
            "summary": self.summary.to_payload(),
            "files": [item.to_payload() for item in self.files],
        }


__all__ = [
    "CoverageReport",
    "CoverageReportPayload",
    "CoverageSummary",
    "CoverageSummaryPayload",
    "DiagnosticRecord",
    "FileCoverage",
    "FileCoveragePayload",
    "LineTotals",
    "LineTotalsPayload",
    "ProcessFailure",
    "Record",
    "RelatedLocation",
    "Span",
    "SuiteFailure",
    "TestFailure",
    "TestIgnored",
    "TestResultRecord",
]
