from __future__ import annotations

import logging
import socket
import time

from jsbsim_console.runtime.errors import TransportError
from jsbsim_console.runtime.types import PROMPT

logger = logging.getLogger(__name__)

Address = str | tuple[str, int]


def _split_address(address: Address) -> tuple[str, int]:
    if isinstance(address, tuple):
        host, port = address
        return str(host), int(port)
    host, sep, port = address.rpartition(':')
    if not sep or not host:
        raise ValueError(f'Address must be host:port, got {address!r}')
    if host.startswith('[') and host.endswith(']'):
        host = host[1:-1]
    return host, int(port)


class ConsoleConnection:
    """Line framing over one TCP socket to the JSBSim console.

    The buffered reader is created once and lives as long as the socket, so
    bytes that arrive together with a response are kept for the next read.
    """

    def __init__(self, sock: socket.socket, *, encoding: str = 'utf-8') -> None:
        self._sock = sock
        self._reader = sock.makefile('rb')
        self._encoding = encoding
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, line: str) -> None:
        if self._closed:
            raise TransportError('Connection is closed')
        logger.debug('>> %s', line)
        try:
            self._sock.sendall(f'{line}\n'.encode(self._encoding))
        except OSError as exc:
            raise TransportError(f'Failed to send {line!r}: {exc}') from exc

    def recv_line(self) -> str:
        """Return the next line that is neither blank nor the prompt."""
        if self._closed:
            raise TransportError('Connection is closed')
        while True:
            try:
                raw = self._reader.readline()
            except OSError as exc:
                raise TransportError(f'Failed to read from console: {exc}') from exc
            if not raw:
                raise TransportError('Console closed the connection')
            line = raw.decode(self._encoding, errors='replace').strip()
            if not line or line == PROMPT:
                continue
            logger.debug('<< %s', line)
            return line

    def request(self, line: str) -> str:
        self.send(line)
        return self.recv_line()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._reader.close()
        finally:
            self._sock.close()


def _connect_once(host: str, port: int, timeout: float | None) -> socket.socket:
    sock = socket.create_connection((host, port), timeout=timeout)
    sock.settimeout(timeout)
    return sock


def open_connection(
    address: Address,
    *,
    attempts: int = 1,
    backoff_s: float = 0.05,
    backoff_max_s: float = 1.0,
    timeout: float | None = None,
) -> ConsoleConnection:
    """Connect to a JSBSim console and consume its startup banner.

    Refused connections are retried ``attempts`` times with doubling backoff.
    ``timeout`` applies to connect and every later read; ``None`` blocks.
    """
    if attempts < 1:
        raise ValueError('attempts must be >= 1')
    host, port = _split_address(address)

    delay_s = backoff_s
    for attempt in range(1, attempts + 1):
        try:
            sock = _connect_once(host, port, timeout)
            break
        except OSError as exc:
            if attempt == attempts:
                raise TransportError(
                    f'Cannot connect to {host}:{port} after {attempts} attempt(s): {exc}'
                ) from exc
            logger.warning(
                'Connect to %s:%s failed (attempt %d/%d): %s', host, port, attempt, attempts, exc
            )
            time.sleep(delay_s)
            delay_s = min(delay_s * 2, backoff_max_s)

    connection = ConsoleConnection(sock)
    try:
        banner = connection.recv_line()
    except TransportError:
        connection.close()
        raise
    logger.info('Connected to %s:%s (%s)', host, port, banner)
    return connection
