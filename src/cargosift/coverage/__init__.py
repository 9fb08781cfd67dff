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

"""Coverage report parsers sharing one output model."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cargosift.core.model_types import CoverageTool

from .llvm_cov import parse_llvm_cov
from .tarpaulin import parse_tarpaulin

if TYPE_CHECKING:
    from cargosift.core.types import CoverageReport
    from cargosift.paths import PathRelativizer

__all__ = ["parse_coverage", "parse_llvm_cov", "parse_tarpaulin"]


def parse_coverage(tool: CoverageTool, text: str, relativize: PathRelativizer) -> CoverageReport:
    """Parse ``text`` with the parser matching ``tool``."""
    if tool is CoverageTool.TARPAULIN:
        return parse_tarpaulin(text, relativize)
    return parse_llvm_cov(text, relativize)
