from __future__ import annotations

import logging
import subprocess
from typing import Any, Callable, TypeVar

from jsbsim_console.runtime import commands
from jsbsim_console.runtime.connection import Address, ConsoleConnection, open_connection
from jsbsim_console.runtime.errors import JSBSimError
from jsbsim_console.runtime.launcher import launch
from jsbsim_console.runtime.lifecycle import release_process
from jsbsim_console.runtime.types import GetResult, ProcessConfig

logger = logging.getLogger(__name__)

T = TypeVar('T')


class JSBSim:
    """A connected JSBSim console client.

    Create it with :meth:`connect` for a running server or :meth:`launch` to
    spawn one. Use it as a context manager so :meth:`close` always runs; a
    spawned process is killed on close.
    """

    def __init__(
        self, connection: ConsoleConnection, process: subprocess.Popen | None = None
    ) -> None:
        self._connection = connection
        self._process = process

    @classmethod
    def connect(
        cls, address: Address, *, attempts: int = 1, timeout: float | None = None
    ) -> JSBSim:
        return cls(open_connection(address, attempts=attempts, timeout=timeout))

    @classmethod
    def launch(cls, config: ProcessConfig | None = None, *, timeout: float | None = None) -> JSBSim:
        config = config or ProcessConfig()
        process = launch(config)
        try:
            connection = open_connection(
                config.address,
                attempts=config.connect_attempts,
                backoff_s=config.connect_backoff_s,
                backoff_max_s=config.connect_backoff_max_s,
                timeout=timeout,
            )
        except BaseException:
            release_process(process)
            raise
        return cls(connection, process)

    @property
    def process(self) -> subprocess.Popen | None:
        return self._process

    @property
    def closed(self) -> bool:
        return self._connection.closed

    def hold(self) -> None:
        # Any reply counts as success.
        self._connection.request(commands.HOLD)

    def resume(self) -> None:
        response = self._connection.request(commands.RESUME)
        commands.expect_suffix(response, commands.RESUMING_SUFFIX, 'resume')

    def iterate(self, steps: int) -> None:
        response = self._connection.request(commands.iterate_command(steps))
        commands.expect_suffix(response, commands.ITERATED_SUFFIX, 'iterate')

    def set(self, key: str, value: Any) -> None:
        response = self._connection.request(commands.set_command(key, value))
        commands.expect_suffix(response, commands.SET_OK_SUFFIX, 'set property')

    def get(self, key: str, type_: Callable[[str], T] = float) -> T:
        response = self._connection.request(commands.get_command(key))
        return commands.parse_get_response(key, response, type_)

    def try_get(self, key: str, type_: Callable[[str], Any] = float) -> GetResult:
        try:
            return GetResult(key=key, value=self.get(key, type_))
        except JSBSimError as exc:
            return GetResult(key=key, error=exc)

    def close(self) -> None:
        process, self._process = self._process, None
        if self._connection.closed and process is None:
            return
        if not self._connection.closed:
            try:
                self._connection.send(commands.QUIT)
            except JSBSimError as exc:
                logger.debug('quit not delivered: %s', exc)

        release_process(process)
        try:
            self._connection.close()
        except OSError as exc:
            logger.debug('socket close failed: %s', exc)

    def __enter__(self) -> JSBSim:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
