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

"""Helpers shared by the llvm-cov and tarpaulin report parsers."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, cast

from cargosift.core.types import LineTotals
from cargosift.exceptions import CoverageReportError
from cargosift.json import as_int, as_mapping, opt_float

if TYPE_CHECKING:
    from cargosift.json import JSONMapping

__all__ = ["computed_totals", "load_document", "reported_totals", "round_percent"]


def round_percent(percent: float) -> float:
    """Round to two decimals through string formatting to avoid float noise."""
    return float(f"{percent:.2f}")


def load_document(text: str, *, tool: str) -> JSONMapping:
    """Parse a whole coverage document, failing hard on invalid input.

    Raises:
        CoverageReportError: If ``text`` is not JSON or not a JSON object.
    """
    try:
        root: object = json.loads(text)
    except ValueError as exc:
        raise CoverageReportError(tool, f"not valid JSON ({exc})") from exc
    if not isinstance(root, dict):
        raise CoverageReportError(tool, "top-level value is not an object")
    return cast("JSONMapping", root)


def reported_totals(block: object) -> LineTotals:
    """Read pre-aggregated ``{count, covered, percent}`` totals from a report."""
    payload = as_mapping(block)
    return LineTotals(
        count=as_int(payload.get("count")),
        covered=as_int(payload.get("covered")),
        percent=round_percent(opt_float(payload.get("percent")) or 0.0),
    )


def computed_totals(count: int, covered: int) -> LineTotals:
    percent = round_percent(covered / count * 100.0) if count > 0 else 0.0
    return LineTotals(count=count, covered=covered, percent=percent)
