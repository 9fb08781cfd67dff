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

"""Path display helpers used when reporting coverage files."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path, PurePath
from typing import TypeAlias

from cargosift.core.type_aliases import DisplayPath

PathRelativizer: TypeAlias = Callable[[str], DisplayPath]

__all__ = ["PathRelativizer", "make_relativizer", "relative_display_path"]


def relative_display_path(path: str, root: Path) -> DisplayPath:
    """Strip ``root`` from ``path`` when ``path`` lives underneath it.

    Paths outside ``root`` (and relative paths) are returned unchanged, so a
    report never loses information about where a file actually is.

    Args:
        path: Path reported by the upstream tool.
        root: Directory the invocation runs from.

    Returns:
        The display path, relative to ``root`` when possible.
    """
    try:
        return DisplayPath(PurePath(path).relative_to(root).as_posix())
    except ValueError:
        return DisplayPath(path)


def make_relativizer(root: Path | None = None) -> PathRelativizer:
    """Bind `relative_display_path` to ``root`` (the current directory by default)."""
    base = root if root is not None else Path.cwd()

    def _relativize(path: str) -> DisplayPath:
        return relative_display_path(path, base)

    return _relativize
