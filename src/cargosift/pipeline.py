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

"""Pipeline driver: acquire tool output, then translate it in arrival order.

Input is either a pre-captured text blob or the output of a supervised cargo
run. Diagnostic and test streams are newline-delimited JSON and are translated
event by event, tolerating noise. Coverage input is one whole document and is
either parsed completely or rejected.
"""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Final

from cargosift._infra.process import ProcessSupervisor, write_to_stderr
from cargosift.core.model_types import CoverageTool, DiagnosticsMode, EventKind, LogComponent
from cargosift.core.type_aliases import ToolName
from cargosift.core.types import ProcessFailure
from cargosift.coverage import parse_coverage
from cargosift.events import classify_event, parse_event_lines
from cargosift.exceptions import CoverageReportError
from cargosift.logging import structured_extra
from cargosift.paths import make_relativizer
from cargosift.ranges import normalize_message
from cargosift.rendering import render_record
from cargosift.translators import (
    translate_compiler_message,
    translate_problem_record,
    translate_test_event,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from cargosift._infra.process import ErrorSink, ProcessOutcome
    from cargosift.config import SiftConfig
    from cargosift.core.type_aliases import Command
    from cargosift.core.types import CoverageReport, Record
    from cargosift.json import JSONMapping

logger: logging.Logger = logging.getLogger("cargosift.pipeline")

CARGO: Final[ToolName] = ToolName("cargo")
TARPAULIN_REPORT: Final[str] = "tarpaulin-report.json"
HARNESS_FLAG_PREFIXES: Final[tuple[str, ...]] = ("--nocapture", "--show-output")

__all__ = [
    "PipelineResult",
    "build_coverage_command",
    "build_diagnostics_command",
    "run_coverage",
    "run_diagnostics",
    "translate_event",
    "translate_events",
]


def _default_records() -> list[Record]:
    return []


@dataclass(slots=True)
class PipelineResult:
    """Translated records plus the optional process failure appended last."""

    records: list[Record] = field(default_factory=_default_records)
    failure: ProcessFailure | None = None

    def lines(self) -> list[str]:
        rendered = [render_record(record) for record in self.records]
        if self.failure is not None:
            rendered.append(render_record(self.failure))
        return rendered


def translate_event(event: JSONMapping, config: SiftConfig) -> Record | None:
    """Route one parsed event to the translator matching its type tag."""
    match classify_event(event):
        case EventKind.COMPILER_MESSAGE:
            return translate_compiler_message(event, include_warnings=config.include_warnings)
        case EventKind.TEST | EventKind.SUITE:
            return translate_test_event(event, include_ignored=config.include_ignored)
        case EventKind.PROBLEM:
            return translate_problem_record(event, include_warnings=config.include_warnings)
        case EventKind.UNRECOGNIZED:
            return None


def translate_events(text: str, config: SiftConfig) -> list[Record]:
    """Translate every event of a newline-delimited JSON blob, keeping upstream order."""
    records: list[Record] = []
    for event in parse_event_lines(text):
        record = translate_event(event, config)
        if record is not None:
            records.append(record)
    return records


def build_diagnostics_command(
    mode: DiagnosticsMode,
    cargo_args: Sequence[str] = (),
    harness_args: Sequence[str] = (),
) -> Command:
    """Build the cargo command line for ``check`` or ``test``.

    For ``test``, output-capture flags (``--nocapture``, ``--show-output``)
    belong to the test harness and are moved behind ``--`` together with
    ``harness_args``.
    """
    if mode is DiagnosticsMode.CHECK:
        return [CARGO, "check", "--message-format=json", *cargo_args, *harness_args]
    cargo_flags = [arg for arg in cargo_args if not arg.startswith(HARNESS_FLAG_PREFIXES)]
    moved = [arg for arg in cargo_args if arg.startswith(HARNESS_FLAG_PREFIXES)]
    return [
        CARGO,
        "test",
        "--message-format=json",
        *cargo_flags,
        "--",
        "-Z",
        "unstable-options",
        "--format=json",
        *moved,
        *harness_args,
    ]


def _failure_record(subcommand: str, outcome: ProcessOutcome, config: SiftConfig) -> ProcessFailure:
    stderr = normalize_message(" ".join(outcome.stderr_lines)) if config.capture_stderr else ""
    return ProcessFailure(
        tool=CARGO,
        subcommand=subcommand,
        exit_code=outcome.exit_code,
        stderr=stderr,
    )


def run_diagnostics(
    mode: DiagnosticsMode,
    config: SiftConfig,
    *,
    input_text: str | None = None,
    cwd: Path | None = None,
    cargo_args: Sequence[str] = (),
    harness_args: Sequence[str] = (),
    sink: ErrorSink = write_to_stderr,
) -> PipelineResult:
    """Produce the diagnostic/test digest for one invocation.

    Args:
        mode: ``check`` or ``test``.
        config: Resolved configuration (warnings, ignored tests, stderr rules).
        input_text: Pre-captured cargo output; when ``None`` cargo is run.
        cwd: Working directory for the cargo child.
        cargo_args: Extra arguments for cargo itself.
        harness_args: Extra arguments for the test harness (``test`` only).
        sink: Receiver for forwarded stderr lines.

    Returns:
        Records in upstream order, with a failure record when cargo exited
        non-zero. Partial output is translated regardless of the exit status.

    Raises:
        ToolSpawnError: If cargo cannot be launched.
    """
    if input_text is not None:
        return PipelineResult(records=translate_events(input_text, config))

    supervisor = ProcessSupervisor(
        build_diagnostics_command(mode, cargo_args, harness_args),
        cwd=cwd,
        env=config.env,
        stderr_filter=config.stderr_filter,
        sink=sink,
    )
    outcome = supervisor.run()
    result = PipelineResult(records=translate_events(outcome.stdout, config))
    if not outcome.succeeded:
        result.failure = _failure_record(mode.value, outcome, config)
    logger.info(
        "Translated %s record(s)",
        len(result.records),
        extra=structured_extra(
            LogComponent.PIPELINE,
            tool=mode.value,
            exit_code=outcome.exit_code,
            duration_ms=outcome.duration_ms,
        ),
    )
    return result


def build_coverage_command(
    tool: CoverageTool,
    cargo_args: Sequence[str] = (),
    *,
    output_dir: Path | None = None,
) -> Command:
    """Build the cargo command line for a coverage backend."""
    if tool is CoverageTool.TARPAULIN:
        target = str(output_dir) if output_dir is not None else "."
        return [CARGO, "tarpaulin", "--out", "json", "--output-dir", target, *cargo_args]
    return [CARGO, "llvm-cov", "--json", *cargo_args]


def _supervise_coverage(
    tool: CoverageTool,
    command: Command,
    config: SiftConfig,
    *,
    cwd: Path | None,
    sink: ErrorSink,
) -> ProcessOutcome:
    outcome = ProcessSupervisor(
        command,
        cwd=cwd,
        env=config.env,
        stderr_filter=config.stderr_filter,
        sink=sink,
    ).run()
    if not outcome.succeeded:
        logger.warning(
            "cargo %s exited with %s; parsing whatever report it produced",
            tool.value,
            outcome.exit_code,
            extra=structured_extra(LogComponent.COVERAGE, tool=tool.value, exit_code=outcome.exit_code),
        )
    return outcome


def _collect_coverage_document(
    tool: CoverageTool,
    config: SiftConfig,
    *,
    cwd: Path | None,
    cargo_args: Sequence[str],
    sink: ErrorSink,
) -> str:
    if tool is not CoverageTool.TARPAULIN:
        command = build_coverage_command(tool, cargo_args)
        return _supervise_coverage(tool, command, config, cwd=cwd, sink=sink).stdout
    # tarpaulin cannot stream its JSON report to stdout; it writes a file instead.
    with tempfile.TemporaryDirectory(prefix="cargosift-tarpaulin-") as scratch:
        output_dir = Path(scratch)
        command = build_coverage_command(tool, cargo_args, output_dir=output_dir)
        _ = _supervise_coverage(tool, command, config, cwd=cwd, sink=sink)
        report_path = output_dir / TARPAULIN_REPORT
        try:
            return report_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CoverageReportError(tool, f"report not written to {report_path} ({exc})") from exc


def run_coverage(
    tool: CoverageTool,
    config: SiftConfig,
    *,
    input_text: str | None = None,
    cwd: Path | None = None,
    cargo_args: Sequence[str] = (),
    sink: ErrorSink = write_to_stderr,
) -> CoverageReport:
    """Produce a coverage report from pre-captured text or a supervised run.

    Raises:
        CoverageReportError: If the document is invalid; no partial report exists.
        ToolSpawnError: If cargo cannot be launched.
    """
    document = input_text
    if document is None:
        document = _collect_coverage_document(
            tool,
            config,
            cwd=cwd,
            cargo_args=cargo_args,
            sink=sink,
        )
    report = parse_coverage(tool, document, make_relativizer(cwd))
    logger.info(
        "Processed %s file(s)",
        len(report.files),
        extra=structured_extra(LogComponent.COVERAGE, tool=tool.value),
    )
    return report
