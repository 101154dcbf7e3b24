from __future__ import annotations

import logging
import subprocess

from jsbsim_console.runtime.errors import LaunchError
from jsbsim_console.runtime.lifecycle import release_process
from jsbsim_console.runtime.types import READY_MARKER, ProcessConfig

logger = logging.getLogger(__name__)


def build_command(config: ProcessConfig) -> list[str]:
    cmd = [
        config.executable,
        f'--simulation-rate={config.simulation_hz}',
        f'--root={config.root}',
    ]
    if config.aircraft is not None:
        cmd.append(f'--aircraft={config.aircraft}')
    if config.init_script is not None:
        cmd.append(f'--initfile={config.init_script}')
    if config.script is not None:
        cmd.append(f'--script={config.script}')
    if config.suspend_on_start:
        cmd.append('--suspend')
    if config.realtime:
        cmd.append('--realtime')
    return cmd


def wait_until_ready(process: subprocess.Popen, marker: str = READY_MARKER) -> None:
    """Block until ``marker`` shows up on the process stdout.

    Reading stops at the marker line; the rest of stdout is left untouched.
    """
    if process.stdout is None:
        raise LaunchError('JSBSim stdout is not captured')
    while True:
        line = process.stdout.readline()
        if not line:
            break
        logger.debug('[jsbsim stdout] %s', line.rstrip())
        if marker in line:
            return

    # Output ended but the child may still be alive.
    returncode = release_process(process)
    raise LaunchError(
        f'JSBSim exited with code {returncode} before printing {marker!r}',
        returncode=returncode,
    )


def launch(config: ProcessConfig) -> subprocess.Popen:
    cmd = build_command(config)
    logger.info('Launching JSBSim: %s', ' '.join(cmd))
    try:
        process = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            text=True,
            errors='replace',
        )
    except OSError as exc:
        raise LaunchError(f'Cannot start {config.executable}: {exc}') from exc

    wait_until_ready(process)
    logger.info('JSBSim ready (pid=%s)', process.pid)
    return process
