"""Async subprocess execution for the external git and compose binaries."""

import asyncio
import logging
import os
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


async def run_command(
    cmd: list[str],
    *,
    cwd: str | Path | None = None,
    env: dict[str, str] | None = None,
    timeout: float | None = None,
    kill_timeout: float = 5.0,
) -> subprocess.CompletedProcess:
    """Run a command without blocking the event loop.

    ``env`` entries are added on top of the current process environment.
    If the awaiting task is cancelled or ``timeout`` expires, the child is
    terminated (SIGTERM, then SIGKILL after ``kill_timeout``) before the
    error propagates.

    Raises:
        FileNotFoundError: If the binary does not exist
        subprocess.CalledProcessError: If the command exits non-zero
        subprocess.TimeoutExpired: If the command outlives ``timeout``
        asyncio.CancelledError: If the caller cancels the task
    """
    logger.debug(f"Running: {' '.join(cmd)}")

    process_env = None
    if env:
        process_env = {**os.environ, **env}

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=str(cwd) if cwd is not None else None,
        env=process_env,
    )

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        await _terminate(process, kill_timeout)
        raise subprocess.TimeoutExpired(cmd, timeout) from None
    except asyncio.CancelledError:
        logger.warning(f"Command cancelled, terminating: {cmd[0]}")
        await _terminate(process, kill_timeout)
        raise

    result = subprocess.CompletedProcess(
        cmd,
        process.returncode,
        stdout.decode("utf-8", errors="replace"),
        stderr.decode("utf-8", errors="replace"),
    )
    result.check_returncode()
    return result


async def _terminate(process: asyncio.subprocess.Process, kill_timeout: float) -> None:
    """Stop a running child process (SIGTERM, then SIGKILL)."""
    if process.returncode is not None:
        return
    try:
        process.terminate()
        try:
            await asyncio.wait_for(process.wait(), timeout=kill_timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
    except ProcessLookupError:
        pass  # Already exited
