"""Subprocess execution that honours run-context cancellation.

Commands run one after another.  While a child runs, the context is
checked every ``POLL_INTERVAL`` seconds; on cancellation the child is
terminated (then killed after ``TERMINATE_GRACE``) and ``ctx.err()`` is
raised, so cancellation reaches the executor unchanged.
"""

from __future__ import annotations

import os
import shlex
import shutil
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from crust.domain.errors import ExecutionError, ProcessError

if TYPE_CHECKING:
    from crust.domain.context import Context

POLL_INTERVAL = 0.1
TERMINATE_GRACE = 5.0


def run(
    ctx: Context,
    args: Sequence[str],
    *,
    cwd: Path | str | None = None,
    env: Mapping[str, str] | None = None,
    capture_output: bool = False,
) -> subprocess.CompletedProcess[str]:
    """Run *args* to completion.

    Args:
        ctx: Run context; cancellation terminates the child.
        args: Program and arguments.
        cwd: Working directory.
        env: Complete environment for the child. Inherits ours when None.
        capture_output: Capture stdout/stderr as text instead of passing
            them through to the terminal.

    Raises:
        ProcessError: The child exited with a non-zero code.
        ExecutionError: The program could not be started.
        Cancelled: The context was cancelled before or while running.
    """
    ctx.raise_if_cancelled()
    argv = [str(a) for a in args]
    log = ctx.log.bind(command=shlex.join(argv), cwd=str(cwd) if cwd else None)
    log.debug("Executing command")

    pipe = subprocess.PIPE if capture_output else None
    try:
        proc = subprocess.Popen(
            argv,
            cwd=cwd,
            env=dict(env) if env is not None else None,
            stdout=pipe,
            stderr=pipe,
            text=True,
        )
    except OSError as exc:
        raise ExecutionError(
            f"cannot execute '{argv[0]}': {exc}",
            details={"args": argv},
        ) from exc

    with proc:
        stdout, stderr = _communicate(ctx, proc)

    if proc.returncode != 0:
        log.debug("Command failed", returncode=proc.returncode)
        raise ProcessError(argv, proc.returncode, stderr=stderr or "")
    return subprocess.CompletedProcess(argv, proc.returncode, stdout, stderr)


def output(
    ctx: Context,
    args: Sequence[str],
    *,
    cwd: Path | str | None = None,
    env: Mapping[str, str] | None = None,
) -> str:
    """Run *args* and return its captured stdout."""
    return run(ctx, args, cwd=cwd, env=env, capture_output=True).stdout or ""


def ensure_binary(name: str) -> str:
    """Return the absolute path of *name* on PATH, or raise ExecutionError."""
    path = shutil.which(name)
    if path is None:
        raise ExecutionError(
            f"{name} command is not available in PATH",
            details={"binary": name},
        )
    return path


def environ(*, drop: Sequence[str] = (), **extra: str) -> dict[str, str]:
    """Copy of the current environment without *drop* keys, plus *extra*."""
    dropped = {key.upper() for key in drop}
    env = {k: v for k, v in os.environ.items() if k.upper() not in dropped}
    env.update(extra)
    return env


def _communicate(ctx: Context, proc: subprocess.Popen[str]) -> tuple[str | None, str | None]:
    while True:
        try:
            return proc.communicate(timeout=POLL_INTERVAL)
        except subprocess.TimeoutExpired:
            if not ctx.cancelled:
                continue
            _terminate(proc)
            err = ctx.err()
            if err is None:
                raise RuntimeError("context reported cancelled without an error")
            raise err from None


def _terminate(proc: subprocess.Popen[str]) -> None:
    proc.terminate()
    try:
        proc.wait(timeout=TERMINATE_GRACE)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()
