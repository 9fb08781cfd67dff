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

"""Structured logging for cargosift.

Every record goes to stderr through the ``cargosift`` logger; stdout is kept
for the digest. Records may carry the fields listed in `STRUCTURED_FIELDS`
through ``extra=structured_extra(...)``; the JSON formatter emits them as
top-level keys and the text formatter ignores them.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Final, Literal, TypedDict, cast, override

from cargosift.core.model_types import LogComponent, LogFormat

ROOT_LOGGER_NAME: Final[str] = "cargosift"
LOG_FORMAT_ENV: Final[str] = "CARGOSIFT_LOG_FORMAT"
LOG_LEVEL_ENV: Final[str] = "CARGOSIFT_LOG_LEVEL"

LogLevelName = Literal["debug", "info", "warning", "error"]

LOG_FORMATS: Final[tuple[Literal["text", "json"], ...]] = ("text", "json")
_LEVELS: Final[dict[LogLevelName, int]] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}
LOG_LEVELS: Final[tuple[LogLevelName, ...]] = tuple(_LEVELS)
DEFAULT_LEVEL: Final[LogLevelName] = "info"
STRUCTURED_FIELDS: Final[tuple[str, ...]] = (
    "component",
    "tool",
    "duration_ms",
    "exit_code",
    "path",
    "details",
)
TEXT_FORMAT: Final[str] = "[%(levelname)s] %(message)s"


@dataclass(slots=True, frozen=True)
class LogConfig:
    """Logging setup applied by `configure_logging`."""

    format: LogFormat
    level: int
    level_name: str


def _plain(value: object) -> object:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        items = cast("Mapping[object, object]", value).items()
        return {str(_plain(key)): _plain(item) for key, item in items}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in cast("Iterable[object]", value)]
    return value


class JSONLogFormatter(logging.Formatter):
    """One JSON object per record, structured fields included."""

    @override
    def format(self, record: logging.LogRecord) -> str:
        document: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        document.update(
            (name, getattr(record, name)) for name in STRUCTURED_FIELDS if hasattr(record, name)
        )
        if record.exc_info:
            document["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(_plain(document), ensure_ascii=False, default=str)


class TextLogFormatter(logging.Formatter):
    """``[LEVEL] message`` lines for interactive use."""

    def __init__(self) -> None:
        super().__init__(TEXT_FORMAT)


def _resolve_format(requested: LogFormat | str | None) -> LogFormat:
    raw = requested if requested is not None else os.getenv(LOG_FORMAT_ENV)
    if not raw:
        return LogFormat.TEXT
    return raw if isinstance(raw, LogFormat) else LogFormat.from_str(raw)


def _resolve_level(requested: str | int | None) -> tuple[int, str]:
    raw = requested if requested is not None else os.getenv(LOG_LEVEL_ENV)
    if isinstance(raw, int):
        return raw, logging.getLevelName(raw).lower()
    name = (raw or DEFAULT_LEVEL).strip().lower()
    if name not in _LEVELS:
        name = DEFAULT_LEVEL
    return _LEVELS[name], name


def configure_logging(
    log_format: LogFormat | str | None = None,
    *,
    log_level: str | int | None = None,
) -> LogConfig:
    """Install a single stderr handler on the ``cargosift`` logger.

    Args:
        log_format: ``text`` or ``json``; ``None`` reads ``CARGOSIFT_LOG_FORMAT``
            and falls back to ``text``.
        log_level: Level name or number; ``None`` reads ``CARGOSIFT_LOG_LEVEL``
            and falls back to ``info``.

    Returns:
        The applied `LogConfig`.
    """
    selected = _resolve_format(log_format)
    level, level_name = _resolve_level(log_level)

    handler = logging.StreamHandler()
    handler.setFormatter(JSONLogFormatter() if selected is LogFormat.JSON else TextLogFormatter())
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return LogConfig(format=selected, level=level, level_name=level_name)


class _StructuredLogBase(TypedDict):
    component: LogComponent


class StructuredLogExtra(_StructuredLogBase, total=False):
    """Keys accepted in ``extra`` by cargosift log calls."""

    tool: str
    duration_ms: float
    exit_code: int
    path: str
    details: dict[str, object]


def structured_extra(
    component: LogComponent,
    *,
    tool: str | None = None,
    duration_ms: float | None = None,
    exit_code: int | None = None,
    path: str | os.PathLike[str] | None = None,
    details: Mapping[str, object] | None = None,
) -> StructuredLogExtra:
    """Build the ``extra`` mapping for a log call, leaving out unset fields.

    Args:
        component: Area of cargosift emitting the record.
        tool: Executable or backend the record is about.
        duration_ms: Elapsed wall-clock time.
        exit_code: Child exit status.
        path: File or directory involved.
        details: Free-form counters; an empty mapping is left out.

    Returns:
        Mapping to pass as ``extra=``.
    """
    extra: StructuredLogExtra = {"component": component}
    if tool is not None:
        extra["tool"] = str(tool)
    if duration_ms is not None:
        extra["duration_ms"] = float(duration_ms)
    if exit_code is not None:
        extra["exit_code"] = int(exit_code)
    if path is not None:
        extra["path"] = os.fspath(path)
    if details:
        extra["details"] = dict(details)
    return extra


__all__ = [
    "LOG_FORMATS",
    "LOG_LEVELS",
    "LogConfig",
    "StructuredLogExtra",
    "configure_logging",
    "structured_extra",
]
