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

"""cargosift - compact digests of cargo's JSON output.

Runs ``cargo check``, ``cargo test`` or a coverage backend (or reads their
captured output) and condenses the JSON event streams into single-line
diagnostics, test failures and uncovered line ranges for editors, CI and
automated agents.
"""

from __future__ import annotations

from cargosift.exceptions import (
    CargosiftError,
    CargosiftTypeError,
    CargosiftValidationError,
    CoverageReportError,
    InputReadError,
    SupervisorStateError,
    ToolSpawnError,
)

__version__ = "0.3.0"

__all__ = [
    "CargosiftError",
    "CargosiftTypeError",
    "CargosiftValidationError",
    "CoverageReportError",
    "InputReadError",
    "SupervisorStateError",
    "ToolSpawnError",
    "__version__",
]
