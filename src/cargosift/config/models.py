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

"""Configuration models and validation for cargosift.

Pydantic models validate the raw TOML tables; the frozen `SiftConfig`
dataclass is what the rest of the package consumes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, Final, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cargosift._infra.process import DEFAULT_ALLOW_SUBSTRINGS, DEFAULT_DENY_PREFIXES, StderrFilter
from cargosift.core.model_types import CoverageTool
from cargosift.exceptions import CargosiftValidationError

if TYPE_CHECKING:
    from pathlib import Path

CONFIG_VERSION: Final[int] = 0

__all__ = [
    "CONFIG_VERSION",
    "ConfigModel",
    "ConfigReadError",
    "ConfigValidationError",
    "InvalidConfigFileError",
    "SiftConfig",
    "StderrRulesModel",
    "UnsupportedConfigVersionError",
    "config_from_model",
]


class ConfigValidationError(CargosiftValidationError):
    """Raised when configuration data contains invalid values."""


class UnsupportedConfigVersionError(ConfigValidationError):
    """Raised when a configuration file declares an unsupported schema version."""

    def __init__(self, provided: int, expected: int) -> None:
        self.provided = provided
        self.expected = expected
        super().__init__(f"Unsupported config_version {provided}; expected {expected}")


class ConfigReadError(ConfigValidationError):
    """Raised when a configuration file cannot be read from disk."""

    def __init__(self, path: Path, error: Exception) -> None:
        self.path = path
        self.error = error
        super().__init__(f"Unable to read {path}: {error}")


class InvalidConfigFileError(ConfigValidationError):
    """Raised when a configuration file fails validation."""

    def __init__(self, path: Path, error: Exception) -> None:
        self.path = path
        self.error = error
        super().__init__(f"Invalid cargosift configuration in {path}: {error}")


def _ensure_str_list(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        items: list[str] = []
        for item in cast("list[object] | tuple[object, ...]", value):
            if not isinstance(item, str):
                raise ConfigValidationError("stderr rules must be strings")
            items.append(item)
        return items
    raise ConfigValidationError("stderr rules must be a string or a list of strings")


class StderrRulesModel(BaseModel):
    """Pydantic model for the ``[stderr]`` forwarding rules."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")
    allow: list[str] = Field(default_factory=lambda: list(DEFAULT_ALLOW_SUBSTRINGS))
    deny: list[str] = Field(default_factory=lambda: list(DEFAULT_DENY_PREFIXES))

    @field_validator("allow", "deny", mode="before")
    @classmethod
    def _coerce_list(cls, value: object) -> list[str]:
        return _ensure_str_list(value)


class ConfigModel(BaseModel):
    """Pydantic model for validating a cargosift configuration table.

    Attributes:
        config_version: Schema version; only ``0`` is accepted.
        include_warnings: Report compiler warnings next to errors.
        include_ignored: Report ignored tests.
        coverage_tool: Default coverage backend.
        capture_stderr: Attach forwarded stderr to process failure records.
        env: Extra environment variables for the cargo child process.
        stderr: Live stderr forwarding rules.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid", populate_by_name=True)
    config_version: int = CONFIG_VERSION
    include_warnings: bool = False
    include_ignored: bool = False
    coverage_tool: CoverageTool = CoverageTool.LLVM_COV
    capture_stderr: bool = True
    env: dict[str, str] = Field(default_factory=dict)
    stderr: StderrRulesModel = Field(default_factory=StderrRulesModel)

    @field_validator("config_version")
    @classmethod
    def _check_version(cls, value: int) -> int:
        if value != CONFIG_VERSION:
            raise UnsupportedConfigVersionError(value, CONFIG_VERSION)
        return value

    @field_validator("coverage_tool", mode="before")
    @classmethod
    def _normalise_tool(cls, value: object) -> object:
        if isinstance(value, str):
            return CoverageTool.from_str(value)
        return value


def _default_env() -> dict[str, str]:
    return {}


@dataclass(slots=True, frozen=True)
class SiftConfig:
    """Runtime configuration resolved from file, then overridden by CLI flags."""

    include_warnings: bool = False
    include_ignored: bool = False
    coverage_tool: CoverageTool = CoverageTool.LLVM_COV
    capture_stderr: bool = True
    env: dict[str, str] = field(default_factory=_default_env)
    stderr_filter: StderrFilter = field(default_factory=StderrFilter)


def config_from_model(model: ConfigModel) -> SiftConfig:
    return SiftConfig(
        include_warnings=model.include_warnings,
        include_ignored=model.include_ignored,
        coverage_tool=model.coverage_tool,
        capture_stderr=model.capture_stderr,
        env=dict(model.env),
        stderr_filter=StderrFilter(
            allow_substrings=tuple(model.stderr.allow),
            deny_prefixes=tuple(model.stderr.deny),
        ),
    )
