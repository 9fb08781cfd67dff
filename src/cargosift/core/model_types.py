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

"""Enumerations shared by the translators, the supervisor and the CLI."""

from __future__ import annotations

from enum import IntEnum, StrEnum


class Severity(IntEnum):
    """Ordinal severity of a diagnostic; higher is more severe."""

    WARNING = 4
    ERROR = 5

    @property
    def label(self) -> str:
        return "Error" if self is Severity.ERROR else "Warning"

    @classmethod
    def from_level(cls, raw: object) -> Severity | None:
        """Map a rustc ``level`` string onto a severity, or ``None`` when unknown."""
        if not isinstance(raw, str):
            return None
        match raw.strip().lower():
            case "error":
                return cls.ERROR
            case "warning":
                return cls.WARNING
            case _:
                return None

    @classmethod
    def from_ordinal(cls, raw: int) -> Severity | None:
        if raw >= cls.ERROR:
            return cls.ERROR
        if raw == cls.WARNING:
            return cls.WARNING
        return None


class EventKind(StrEnum):
    COMPILER_MESSAGE = "compiler-message"
    TEST = "test"
    SUITE = "suite"
    PROBLEM = "problem"
    UNRECOGNIZED = "unrecognized"


class DiagnosticsMode(StrEnum):
    CHECK = "check"
    TEST = "test"

    @classmethod
    def from_str(cls, raw: str) -> DiagnosticsMode:
        value = raw.strip().lower()
        try:
            return cls(value)
        except ValueError as exc:
            raise ValueError(f"Unknown diagnostics mode '{raw}'") from exc


class CoverageTool(StrEnum):
    LLVM_COV = "llvm-cov"
    TARPAULIN = "tarpaulin"

    @classmethod
    def from_str(cls, raw: str) -> CoverageTool:
        value = raw.strip().lower()
        try:
            return cls(value)
        except ValueError as exc:
            raise ValueError(f"Unknown coverage tool '{raw}'") from exc


class SupervisorState(StrEnum):
    NOT_STARTED = "not-started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class LogFormat(StrEnum):
    TEXT = "text"
    JSON = "json"

    @classmethod
    def from_str(cls, raw: str) -> LogFormat:
        value = raw.strip().lower()
        try:
            return cls(value)
        except ValueError as exc:
            raise ValueError(f"Unknown log format '{raw}'") from exc


class LogComponent(StrEnum):
    CLI = "cli"
    PROCESS = "process"
    PIPELINE = "pipeline"
    COVERAGE = "coverage"
    CONFIG = "config"

    @classmethod
    def from_str(cls, raw: str) -> LogComponent:
        value = raw.strip().lower()
        try:
            return cls(value)
        except ValueError as exc:
            raise ValueError(f"Unknown log component '{raw}'") from exc


__all__ = [
    "CoverageTool",
    "DiagnosticsMode",
    "EventKind",
    "LogComponent",
    "LogFormat",
    "Severity",
    "SupervisorState",
]
