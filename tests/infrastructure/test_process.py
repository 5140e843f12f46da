"""Tests for cancellable subprocess execution."""

from __future__ import annotations

import os
import sys
import time
from pathlib import Path

import pytest

from crust.domain.context import Context
from crust.domain.errors import Cancelled, DeadlineExceeded, ExecutionError, ProcessError
from crust.infrastructure import process

PY = sys.executable


class TestRun:
    def test_success(self) -> None:
        completed = process.run(Context(), [PY, "-c", "pass"])
        assert completed.returncode == 0

    def test_capture_output(self) -> None:
        completed = process.run(Context(), [PY, "-c", "print('hello')"], capture_output=True)
        assert completed.stdout.strip() == "hello"

    def test_output_helper(self, tmp_path: Path) -> None:
        out = process.output(Context(), [PY, "-c", "import os; print(os.getcwd())"], cwd=tmp_path)
        assert Path(out.strip()).resolve() == tmp_path.resolve()

    def test_env_replaces_environment(self) -> None:
        env = {"CRUST_MARKER": "1", "PATH": os.environ.get("PATH", "")}
        out = process.output(
            Context(),
            [PY, "-c", "import os; print(os.environ.get('CRUST_MARKER'), 'HOME' in os.environ)"],
            env=env,
        )
        assert out.split() == ["1", "False"]

    def test_non_zero_exit(self) -> None:
        with pytest.raises(ProcessError) as exc_info:
            process.run(
                Context(),
                [PY, "-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"],
                capture_output=True,
            )
        err = exc_info.value
        assert err.returncode == 3
        assert err.stderr == "bad"
        assert err.argv[0] == PY
        assert err.code == "EXECUTION_FAILED"

    def test_missing_program(self, tmp_path: Path) -> None:
        with pytest.raises(ExecutionError, match="cannot execute"):
            process.run(Context(), [str(tmp_path / "does-not-exist")])

    def test_already_cancelled(self, tmp_path: Path) -> None:
        marker = tmp_path / "ran"
        ctx = Context()
        ctx.cancel()
        with pytest.raises(Cancelled) as exc_info:
            process.run(ctx, [PY, "-c", f"open({str(marker)!r}, 'w').close()"])
        assert exc_info.value is ctx.err()
        assert not marker.exists()

    def test_timeout_terminates_child(self) -> None:
        started = time.monotonic()
        with Context().with_timeout(0.3) as ctx, pytest.raises(DeadlineExceeded) as exc_info:
            process.run(ctx, [PY, "-c", "import time; time.sleep(30)"])
        assert exc_info.value is ctx.err()
        assert time.monotonic() - started < 10

    def test_cancelled_without_error(self) -> None:
        class Errorless(Context):
            """Claims cancellation once the child runs, but has no error."""

            @property
            def cancelled(self) -> bool:
                return True

            def err(self) -> Cancelled | None:
                return None

        started = time.monotonic()
        with pytest.raises(RuntimeError, match="without an error"):
            process.run(Errorless(), [PY, "-c", "import time; time.sleep(30)"])
        assert time.monotonic() - started < 10


class TestEnsureBinary:
    def test_found(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        binary = tmp_path / "golangci-lint"
        binary.write_text("#!/bin/sh\n", encoding="utf-8")
        binary.chmod(0o755)
        monkeypatch.setenv("PATH", str(tmp_path))
        assert process.ensure_binary("golangci-lint") == str(binary)

    def test_missing(self) -> None:
        with pytest.raises(ExecutionError, match="not available in PATH"):
            process.ensure_binary("crust-definitely-not-installed")


class TestEnviron:
    def test_drop_and_extra(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GOROOT", "/opt/go")
        monkeypatch.setenv("KEEP", "yes")
        env = process.environ(drop=("goroot",), CGO_ENABLED="0")
        assert "GOROOT" not in env
        assert env["KEEP"] == "yes"
        assert env["CGO_ENABLED"] == "0"
