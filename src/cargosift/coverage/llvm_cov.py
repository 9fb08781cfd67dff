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

"""Parse ``cargo llvm-cov --json`` export documents.

Each file carries code-region segments shaped
``[line, column, count, hasCount, isRegionEntry, isGap]``. Segments are not
ordered by line in a way that can be relied on, so line status is decided by
membership: a line with any counted, executed segment is covered, and covered
lines never appear among the uncovered ones.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from cargosift.core.model_types import CoverageTool, LogComponent
from cargosift.core.types import CoverageReport, CoverageSummary, FileCoverage
from cargosift.exceptions import CoverageReportError
from cargosift.json import as_list, as_mapping, as_str, opt_int
from cargosift.logging import structured_extra
from cargosift.ranges import compact_ranges

from .common import load_document, reported_totals

if TYPE_CHECKING:
    from cargosift.json import JSONList, JSONMapping
    from cargosift.paths import PathRelativizer

logger: logging.Logger = logging.getLogger("cargosift.coverage")

_MIN_SEGMENT_FIELDS: Final[int] = 5

__all__ = ["parse_llvm_cov", "uncovered_lines"]


def uncovered_lines(segments: JSONList) -> list[int]:
    """Return the sorted lines that have a zero-count segment and no executed one."""
    covered: set[int] = set()
    uncovered: set[int] = set()
    for raw in segments:
        segment = as_list(raw)
        if len(segment) < _MIN_SEGMENT_FIELDS:
            continue
        if segment[3] is not True:
            continue
        line = opt_int(segment[0]) or 0
        count = opt_int(segment[2]) or 0
        if count > 0:
            covered.add(line)
        else:
            uncovered.add(line)
    return sorted(uncovered - covered)


def _file_coverage(payload: JSONMapping, relativize: PathRelativizer) -> FileCoverage | None:
    segments = payload.get("segments")
    if not isinstance(segments, list):
        return None
    summary = as_mapping(payload.get("summary"))
    return FileCoverage(
        file=relativize(as_str(payload.get("filename"))),
        lines=reported_totals(summary.get("lines")),
        uncovered_lines=tuple(compact_ranges(uncovered_lines(segments))),
    )


def parse_llvm_cov(text: str, relativize: PathRelativizer) -> CoverageReport:
    """Reduce an llvm-cov JSON export to a `CoverageReport`.

    Args:
        text: The complete JSON document.
        relativize: Maps absolute file names to display paths.

    Returns:
        Summary (lines and functions) plus per-file coverage in report order.

    Raises:
        CoverageReportError: If the document is not JSON or lacks ``data[0]``.
    """
    root = load_document(text, tool=CoverageTool.LLVM_COV)
    data = as_list(root.get("data"))
    if not data or not isinstance(data[0], dict):
        raise CoverageReportError(CoverageTool.LLVM_COV, "missing data[0]")
    export = as_mapping(data[0])
    totals = as_mapping(export.get("totals"))
    summary = CoverageSummary(
        lines=reported_totals(totals.get("lines")),
        functions=reported_totals(totals.get("functions")),
    )
    files: list[FileCoverage] = []
    for item in as_list(export.get("files")):
        entry = _file_coverage(as_mapping(item), relativize)
        if entry is None:
            logger.debug(
                "Skipping llvm-cov file entry without segments",
                extra=structured_extra(LogComponent.COVERAGE, tool=CoverageTool.LLVM_COV),
            )
            continue
        files.append(entry)
    return CoverageReport(summary=summary, files=tuple(files))
