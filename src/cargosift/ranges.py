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

"""Range compaction and message minimization.

Both helpers are pure: they keep the digest compact (one line per record,
uncovered lines as ``"A-B"`` runs) and are shared by every translator.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cargosift.core.type_aliases import RangeString

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

__all__ = ["compact_ranges", "expand_ranges", "normalize_message"]


def _format_run(start: int, end: int) -> RangeString:
    if start == end:
        return RangeString(str(start))
    return RangeString(f"{start}-{end}")


def compact_ranges(lines: Sequence[int]) -> list[RangeString]:
    """Group ascending, de-duplicated line numbers into inclusive ranges.

    Args:
        lines: Sorted distinct line numbers.

    Returns:
        Range strings, ``"N"`` for a singleton run and ``"A-B"`` otherwise.
        ``[10, 11, 12, 22, 30, 31]`` becomes ``["10-12", "22", "30-31"]``.
    """
    if not lines:
        return []
    ranges: list[RangeString] = []
    start = end = lines[0]
    for line in lines[1:]:
        if line == end + 1:
            end = line
            continue
        ranges.append(_format_run(start, end))
        start = end = line
    ranges.append(_format_run(start, end))
    return ranges


def expand_ranges(ranges: Iterable[str]) -> list[int]:
    """Inverse of `compact_ranges`: expand range strings back to line numbers."""
    lines: list[int] = []
    for item in ranges:
        head, sep, tail = item.partition("-")
        if not sep:
            lines.append(int(head))
            continue
        lines.extend(range(int(head), int(tail) + 1))
    return lines


def normalize_message(text: str) -> str:
    """Collapse every whitespace run (newlines and tabs included) into one space."""
    return " ".join(text.split())
