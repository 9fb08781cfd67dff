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

"""Canonical JSON types and tolerant accessors for upstream tool payloads.

Upstream events are never validated against a schema. The accessors here
return ``None`` (or a caller-supplied default) when a value has the wrong
JSON type so translators can short-circuit instead of raising.
"""

from __future__ import annotations

import json
from typing import TypeAlias, cast

from pydantic import JsonValue

__all__ = [
    "JSONList",
    "JSONMapping",
    "JSONValue",
    "as_int",
    "as_list",
    "as_mapping",
    "as_str",
    "load_json_object",
    "opt_float",
    "opt_int",
    "opt_str",
]

JSONValue: TypeAlias = JsonValue
JSONMapping = dict[str, JsonValue]
JSONList = list[JsonValue]


def load_json_object(payload: str) -> JSONMapping | None:
    """Parse ``payload`` and return it when it is a JSON object.

    Args:
        payload: One line (or document) of JSON text.

    Returns:
        The parsed mapping, or ``None`` when the text is not valid JSON or the
        top-level value is not an object.
    """
    try:
        value: object = json.loads(payload)
    except ValueError:
        return None
    return cast("JSONMapping", value) if isinstance(value, dict) else None


def as_mapping(value: object) -> JSONMapping:
    """Return `value` as a JSON mapping if it is a dict, else an empty mapping."""
    return cast("JSONMapping", value) if isinstance(value, dict) else {}


def as_list(value: object) -> JSONList:
    """Return `value` as a JSON list if it is a list, else an empty list."""
    return cast("JSONList", value) if isinstance(value, list) else []


def as_str(value: object, default: str = "") -> str:
    """Return `value` as a string if already a string, else `default`."""
    if isinstance(value, str):
        return value
    return default


def as_int(value: object, default: int = 0) -> int:
    """Return `value` as an int when it is a JSON integer, else `default`."""
    result = opt_int(value)
    return default if result is None else result


def opt_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


def opt_int(value: object) -> int | None:
    """Return `value` when it is a JSON integer (booleans excluded)."""
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def opt_float(value: object) -> float | None:
    """Return `value` as a float when it is any JSON number (booleans excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)
