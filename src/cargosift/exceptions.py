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

"""Common exception hierarchy for cargosift."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

__all__ = [
    "CargosiftError",
    "CargosiftTypeError",
    "CargosiftValidationError",
    "CoverageReportError",
    "InputReadError",
    "SupervisorStateError",
    "ToolSpawnError",
]


class CargosiftError(Exception):
    """Base error for all cargosift exceptions."""


class CargosiftValidationError(CargosiftError, ValueError):
    """Raised when input data fails validation checks."""


class CargosiftTypeError(CargosiftError, TypeError):
    """Raised when input data has an unexpected type."""


class CoverageReportError(CargosiftValidationError):
    """Raised when a coverage document cannot be turned into a report.

    A coverage report is a single structured artifact, so there is no partial
    result: invalid JSON or a missing top-level key aborts the whole parse.
    """

    def __init__(self, tool: str, reason: str) -> None:
        self.tool = tool
        self.reason = reason
        super().__init__(f"Invalid {tool} coverage report: {reason}")


class ToolSpawnError(CargosiftError):
    """Raised when the external tool cannot be launched."""

    def __init__(self, executable: str, error: OSError) -> None:
        self.executable = executable
        self.error = error
        super().__init__(f"Unable to launch {executable}: {error}")


class SupervisorStateError(CargosiftError, RuntimeError):
    """Raised when a process supervisor is driven out of order."""

    def __init__(self, state: str) -> None:
        self.state = state
        super().__init__(f"Process supervisor cannot start from state '{state}'")


class InputReadError(CargosiftError):
    """Raised when pre-captured input cannot be read from a file or stdin."""

    def __init__(self, source: Path | str, error: Exception) -> None:
        self.source = source
        self.error = error
        super().__init__(f"Unable to read {source}: {error}")
