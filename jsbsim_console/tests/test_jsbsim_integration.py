from __future__ import annotations

import os
import shutil
import time
from pathlib import Path

import pytest

from jsbsim_console.runtime.client import JSBSim
from jsbsim_console.runtime.types import ProcessConfig

JSBSIM_EXECUTABLE = os.environ.get('JSBSIM_EXECUTABLE', 'JSBSim')
JSBSIM_ROOT = os.environ.get('JSBSIM_ROOT')

pytestmark = pytest.mark.skipif(
    shutil.which(JSBSIM_EXECUTABLE) is None or not JSBSIM_ROOT,
    reason='needs a JSBSim binary and JSBSIM_ROOT',
)


def test_jsbsim_connection_performs_as_expected() -> None:
    config = ProcessConfig(executable=JSBSIM_EXECUTABLE, root=Path(JSBSIM_ROOT or '.'), simulation_hz=400)
    with JSBSim.launch(config) as sim:
        assert sim.get('simulation/cycle_duration', int) == 0
        assert sim.get('propulsion/engine/set-running', int) == 0
        assert sim.get('fcs/throttle-cmd-norm') == 0.0
        sim.set('fcs/throttle-cmd-norm', 1.0)
        assert sim.get('fcs/throttle-cmd-norm') == 1.0

        assert sim.get('simulation/sim-time-sec') == 0.0025
        sim.iterate(120)
        time.sleep(0.1)
        assert sim.get('simulation/sim-time-sec') == 0.3025
        sim.resume()
        time.sleep(0.1)
        assert sim.get('simulation/sim-time-sec') != 0.3025
        process = sim.process
    assert process is not None and process.poll() is not None
