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

"""Parse ``cargo tarpaulin --out json`` reports.

Tarpaulin lists one trace per instrumented line and supplies no aggregated
totals, so line counts and percentages are computed here. Files without
traces were not part of the run and are left out of the report.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from cargosift.core.model_types import CoverageTool
from cargosift.core.types import CoverageReport, CoverageSummary, FileCoverage
from cargosift.exceptions import CoverageReportError
from cargosift.json import as_list, as_mapping, opt_int, opt_str
from cargosift.ranges import compact_ranges

from .common import computed_totals, load_document

if TYPE_CHECKING:
    from cargosift.json import JSONList, JSONMapping
    from cargosift.paths import PathRelativizer

__all__ = ["parse_tarpaulin"]


def _joined_path(parts: JSONList) -> str:
    names = [part for part in map(opt_str, parts) if part]
    if not names:
        return ""
    return Path(*names).as_posix()


def _file_coverage(payload: JSONMapping, relativize: PathRelativizer) -> FileCoverage | None:
    traces = payload.get("traces")
    if not isinstance(traces, list) or not traces:
        return None
    covered = 0
    covered_lines: set[int] = set()
    uncovered: set[int] = set()
    for raw in traces:
        trace = as_mapping(raw)
        line = opt_int(trace.get("line")) or 0
        hits = opt_int(as_mapping(trace.get("stats")).get("Line")) or 0
        if hits > 0:
            covered += 1
            covered_lines.add(line)
        else:
            uncovered.add(line)
    return FileCoverage(
        file=relativize(_joined_path(as_list(payload.get("path")))),
        lines=computed_totals(len(traces), covered),
        uncovered_lines=tuple(compact_ranges(sorted(uncovered - covered_lines))),
    )


def parse_tarpaulin(text: str, relativize: PathRelativizer) -> CoverageReport:
    """Reduce a tarpaulin JSON report to a `CoverageReport`.

    Args:
        text: The complete JSON document.
        relativize: Maps absolute file names to display paths.

    Returns:
        Computed line summary plus per-file coverage in report order.

    Raises:
        CoverageReportError: If the document is not JSON or lacks a ``files`` list.
    """
    root = load_document(text, tool=CoverageTool.TARPAULIN)
    raw_files = root.get("files")
    if not isinstance(raw_files, list):
        raise CoverageReportError(CoverageTool.TARPAULIN, "missing files list")
    files = [
        entry
        for entry in (_file_coverage(as_mapping(item), relativize) for item in raw_files)
        if entry is not None
    ]
    total_lines = sum(entry.lines.count for entry in files)
    total_covered = sum(entry.lines.covered for entry in files)
    summary = CoverageSummary(lines=computed_totals(total_lines, total_covered))
    return CoverageReport(summary=summary, files=tuple(files))
