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

"""End-to-end CLI runs against a stand-in ``cargo`` executable on PATH."""

from __future__ import annotations

import json
import os
import sys
from typing import TYPE_CHECKING

import pytest

from cargosift.cli import main
from tests.fixtures.builders import build_compiler_message, build_test_event, ndjson

if TYPE_CHECKING:
    from pathlib import Path

pytestmark = [
    pytest.mark.integration,
    pytest.mark.cli,
    pytest.mark.skipif(sys.platform == "win32", reason="shebang scripts are POSIX only"),
]

STUB_TEMPLATE = """#!{python}
import sys
sys.stderr.write("     Running unittests src/lib.rs\\n")
sys.stderr.write("error: test failed, to rerun pass `--lib`\\n")
with open({argv_log!r}, "w") as handle:
    handle.write("\\n".join(sys.argv[1:]))
sys.stdout.write({stdout!r})
sys.exit({exit_code})
"""


def _install_cargo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, *, stdout: str, exit_code: int) -> Path:
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    argv_log = tmp_path / "argv.txt"
    script = bin_dir / "cargo"
    _ = script.write_text(
        STUB_TEMPLATE.format(
            python=sys.executable,
            argv_log=str(argv_log),
            stdout=stdout,
            exit_code=exit_code,
        ),
        encoding="utf-8",
    )
    script.chmod(0o755)
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    monkeypatch.chdir(tmp_path)
    return argv_log


def test_failing_cargo_test_run(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    stream = ndjson([
        build_test_event("test", "failed", name="tests::it_adds", exec_time=0.5, stdout="left != right\n"),
        build_test_event("suite", "failed", passed=2, failed=1, exec_time=0.75),
    ])
    argv_log = _install_cargo(tmp_path, monkeypatch, stdout=stream + "\n", exit_code=101)

    assert main(["sift", "test", "--nocapture", "--", "--exact"]) == 0

    captured = capsys.readouterr()
    assert json.loads(captured.out) == [
        "Test failed: tests::it_adds (exec_time: 0.500s) - left != right",
        "Suite failed: passed 2, failed 1 (exec_time: 0.750s)",
        "Cargo test failed with exit code 101: error: test failed, to rerun pass `--lib`",
    ]
    assert "error: test failed" in captured.err
    assert "Running unittests" not in captured.err
    assert argv_log.read_text(encoding="utf-8").splitlines() == [
        "test",
        "--message-format=json",
        "--",
        "-Z",
        "unstable-options",
        "--format=json",
        "--nocapture",
        "--exact",
    ]


def test_clean_cargo_check_run(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    stream = ndjson([build_compiler_message(level="warning"), {"reason": "build-finished", "success": True}])
    _ = _install_cargo(tmp_path, monkeypatch, stdout=stream, exit_code=0)
    assert main(["check", "--include-warnings"]) == 0
    (line,) = json.loads(capsys.readouterr().out)
    assert line.startswith("Warning (severity 4) from rustc")


def test_missing_cargo_is_reported(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("PATH", str(tmp_path / "empty"))
    monkeypatch.chdir(tmp_path)
    assert main(["check"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Unable to launch cargo" in captured.err
