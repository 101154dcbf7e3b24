from __future__ import annotations

import logging
import subprocess

logger = logging.getLogger(__name__)


def release_process(process: subprocess.Popen | None) -> int | None:
    """Kill and reap a spawned simulator. Never raises.

    Returns the exit status, or ``None`` when there was nothing to release or
    the status could not be collected.
    """
    if process is None:
        return None

    try:
        # Popen.kill is a no-op once the child has been reaped.
        process.kill()
    except OSError as exc:
        logger.debug('Kill of pid %s failed: %s', process.pid, exc)

    returncode: int | None = None
    try:
        returncode = process.wait()
    except (OSError, subprocess.SubprocessError) as exc:
        logger.warning('Could not wait for JSBSim pid %s: %s', process.pid, exc)

    if process.stdout is not None:
        try:
            process.stdout.close()
        except OSError:
            pass

    if returncode != 0:
        logger.warning('JSBSim process (pid %s) did not exit cleanly: %s', process.pid, returncode)
    return returncode
