"""Shared utility functions for exgen.

Provides async command execution, executable capability probes and JSON
output.  Every subprocess spawned by exgen goes through :func:`run_command`.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: float = 120,
) -> tuple[int, str, str]:
    """Run ``cmd`` (an argument list, no shell) and capture its output.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple with both streams decoded and
        stripped.  A timeout kills the child and yields return code ``-1``.

    Raises:
        FileNotFoundError: If the executable does not exist.
    """
    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=str(cwd) if cwd else None,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return -1, "", f"{cmd[0]} timed out after {timeout:g}s"

    stdout = stdout_bytes.decode("utf-8", errors="replace").strip()
    stderr = stderr_bytes.decode("utf-8", errors="replace").strip()
    return process.returncode or 0, stdout, stderr


# ---------------------------------------------------------------------------
# Capability probes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Available:
    """The probed executable ran successfully."""

    name: str
    version: str = ""

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class Unavailable:
    """The probed executable is missing or failed; ``reason`` says why."""

    name: str
    reason: str

    def __bool__(self) -> bool:
        return False


ProbeResult = Union[Available, Unavailable]


async def probe_command(name: str, timeout: float = 5) -> ProbeResult:
    """Check whether ``<name> --version`` runs successfully.

    Never raises: a missing executable, a non-zero exit or a timeout are all
    reported as :class:`Unavailable` with the reason attached.
    """
    try:
        returncode, stdout, stderr = await run_command([name, "--version"], timeout=timeout)
    except FileNotFoundError:
        return Unavailable(name, "not installed or not in PATH")
    except OSError as exc:
        return Unavailable(name, str(exc))

    if returncode != 0:
        return Unavailable(name, stderr or f"exited with code {returncode}")
    first_line = stdout.splitlines()[0] if stdout else ""
    return Available(name, first_line)


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


async def save_json(data: dict[str, Any] | list[Any], path: str | Path) -> Path:
    """Save data as pretty-printed JSON.

    Parent directories are created automatically and the write runs in a
    worker thread.
    """
    file_path = Path(path)
    content = json.dumps(data, indent=2, ensure_ascii=False, default=str) + "\n"

    def _write() -> None:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")

    await asyncio.to_thread(_write)
    return file_path

