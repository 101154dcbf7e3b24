from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

READY_MARKER = 'JSBSim Execution beginning'
PROMPT = 'JSBSim>'


@dataclass(frozen=True, slots=True)
class ProcessConfig:
    """How to launch a JSBSim instance. Defaults suit local testing."""

    executable: str = 'JSBSim'
    root: Path = Path('./jsbsim_root')
    aircraft: str | None = 'Concorde'
    init_script: str | None = 'reset00'
    script: str | None = None
    # Low rates can make JSBSim numerically unstable; no floor is enforced here.
    simulation_hz: int = 400
    suspend_on_start: bool = True
    realtime: bool = False
    port: int = 5556
    host: str = 'localhost'
    connect_attempts: int = 20
    connect_backoff_s: float = 0.05
    connect_backoff_max_s: float = 1.0

    def __post_init__(self) -> None:
        if self.simulation_hz <= 0:
            raise ValueError('simulation_hz must be > 0')
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f'port out of range: {self.port}')
        if self.connect_attempts < 1:
            raise ValueError('connect_attempts must be >= 1')
        if self.connect_backoff_s < 0 or self.connect_backoff_max_s < 0:
            raise ValueError('connect backoff must be >= 0')

    @property
    def address(self) -> tuple[str, int]:
        return self.host, self.port


@dataclass(slots=True)
class GetResult:
    key: str
    value: Any = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.value
