"""Subprocess runner with inherited console I/O.

Detect writes its own progress to the console, so its standard streams
are passed straight through: nothing is captured or buffered here.
"""

from __future__ import annotations

import subprocess

from hubdetect.core.errors import ProcessInterruptedError, ProcessLaunchError
from hubdetect.core.logging import get_logger
from hubdetect.core.models import ProcessSpec

LOGGER = get_logger(__name__)

# Grace period given to the child after an interrupt before it is killed
TERMINATE_TIMEOUT = 10


def run_inherited(spec: ProcessSpec) -> int:
    """Run a process to completion with inherited stdin/stdout/stderr.

    Args:
        spec: Process to launch.

    Returns:
        The process exit code.

    Raises:
        ProcessLaunchError: If the process cannot be started.
        ProcessInterruptedError: If the wait is interrupted (Ctrl+C); the
            child is terminated first.
    """
    LOGGER.info(f"Launching: {spec.redacted_command()}")
    try:
        proc = subprocess.Popen(
            spec.command,
            env=dict(spec.environment),
            cwd=str(spec.cwd) if spec.cwd is not None else None,
        )
    except (OSError, ValueError) as e:
        LOGGER.error(f"Unable to start {spec.executable}: {e}")
        raise ProcessLaunchError(f"Failed to launch {spec.executable}: {e}") from e

    try:
        exit_code = proc.wait()
    except KeyboardInterrupt as e:
        LOGGER.error(f"Interrupted while waiting for {spec.executable}, stopping it")
        _stop(proc)
        raise ProcessInterruptedError(f"Interrupted while waiting for {spec.executable}") from e

    LOGGER.info(f"Output: {exit_code}")
    return exit_code


def _stop(proc: subprocess.Popen) -> None:
    proc.terminate()
    try:
        proc.wait(timeout=TERMINATE_TIMEOUT)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()
