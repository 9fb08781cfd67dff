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

"""Configuration discovery and loading for cargosift.

A project configures cargosift either in a standalone ``cargosift.toml`` /
``.cargosift.toml`` or inside its ``Cargo.toml`` under
``[workspace.metadata.cargosift]`` or ``[package.metadata.cargosift]``. The
first file in that order holding cargosift settings wins.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Final, cast

from pydantic import ValidationError

from cargosift.core.model_types import LogComponent
from cargosift.logging import structured_extra

from .models import (
    ConfigModel,
    ConfigReadError,
    InvalidConfigFileError,
    SiftConfig,
    config_from_model,
)

logger: logging.Logger = logging.getLogger("cargosift.config")

CONFIG_FILENAMES: Final[tuple[str, ...]] = ("cargosift.toml", ".cargosift.toml")
CARGO_MANIFEST: Final[str] = "Cargo.toml"
_METADATA_TABLES: Final[tuple[str, ...]] = ("workspace", "package")

__all__ = ["CONFIG_FILENAMES", "LoadedConfig", "load_config", "load_config_with_metadata"]


@dataclass(slots=True, frozen=True)
class LoadedConfig:
    """Container for a loaded configuration and its source path.

    Attributes:
        config: Parsed configuration instance.
        path: File the configuration was loaded from, or None for defaults.
    """

    config: SiftConfig
    path: Path | None


def _read_toml(path: Path) -> dict[str, object]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigReadError(path, exc) from exc


def _cargo_metadata(raw: dict[str, object]) -> dict[str, object] | None:
    for table in _METADATA_TABLES:
        section = raw.get(table)
        if not isinstance(section, dict):
            continue
        metadata = cast("dict[str, object]", section).get("metadata")
        if not isinstance(metadata, dict):
            continue
        settings = cast("dict[str, object]", metadata).get("cargosift")
        if isinstance(settings, dict):
            return cast("dict[str, object]", settings)
    return None


def _extract_settings(path: Path, raw: dict[str, object]) -> dict[str, object] | None:
    if path.name == CARGO_MANIFEST:
        return _cargo_metadata(raw)
    return raw


def _validate(path: Path, settings: dict[str, object]) -> SiftConfig:
    try:
        model = ConfigModel.model_validate(settings)
    except ValidationError as exc:
        raise InvalidConfigFileError(path, exc) from exc
    return config_from_model(model)


def _search_order(root: Path, explicit_path: Path | None) -> list[Path]:
    if explicit_path is not None:
        return [explicit_path]
    return [root / name for name in (*CONFIG_FILENAMES, CARGO_MANIFEST)]


def load_config_with_metadata(
    explicit_path: Path | None = None,
    *,
    root: Path | None = None,
) -> LoadedConfig:
    """Load cargosift configuration with metadata about the source file.

    Args:
        explicit_path: Configuration file to read instead of searching. It must
            exist.
        root: Directory searched for configuration files; defaults to the
            current working directory.

    Returns:
        LoadedConfig: Parsed configuration and the path it originated from,
        or defaults with ``path=None`` when nothing is configured.

    Raises:
        ConfigReadError: If a candidate file cannot be read or parsed as TOML.
        InvalidConfigFileError: If the settings fail validation.
    """
    base_dir = root if root is not None else Path.cwd()
    for candidate in _search_order(base_dir, explicit_path):
        if explicit_path is None and not candidate.is_file():
            continue
        settings = _extract_settings(candidate, _read_toml(candidate))
        if settings is None:
            continue
        config = _validate(candidate, settings)
        logger.debug(
            "Loaded configuration from %s",
            candidate,
            extra=structured_extra(LogComponent.CONFIG, path=candidate),
        )
        return LoadedConfig(config=config, path=candidate)
    return LoadedConfig(config=SiftConfig(), path=None)


def load_config(explicit_path: Path | None = None, *, root: Path | None = None) -> SiftConfig:
    """Load cargosift configuration from disk or fall back to defaults."""
    return load_config_with_metadata(explicit_path, root=root).config
