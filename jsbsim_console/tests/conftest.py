from __future__ import annotations

import socket
import sys
import threading
from pathlib import Path
from typing import Callable, Iterator

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from jsbsim_console.runtime.types import ProcessConfig

FAKE_JSBSIM = Path(__file__).with_name('fake_jsbsim.py')


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(('127.0.0.1', 0))
        return int(sock.getsockname()[1])


class ScriptedServer:
    """One-client console server answering each received line from a script.

    An empty reply sends nothing; running out of replies closes the socket.
    """

    def __init__(self, banner: bytes, replies: list[bytes]) -> None:
        self._sock = socket.create_server(('127.0.0.1', 0))
        self.port = int(self._sock.getsockname()[1])
        self.received: list[str] = []
        self._replies = list(replies)
        self._banner = banner
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    @property
    def address(self) -> tuple[str, int]:
        return '127.0.0.1', self.port

    def _serve(self) -> None:
        try:
            conn, _ = self._sock.accept()
        except OSError:
            return
        with conn, conn.makefile('rb') as reader:
            try:
                conn.sendall(self._banner)
                for raw in reader:
                    line = raw.decode('ascii').rstrip('\n')
                    self.received.append(line)
                    if line == 'quit' or not self._replies:
                        break
                    reply = self._replies.pop(0)
                    if reply:
                        conn.sendall(reply)
            except OSError:
                pass

    def close(self) -> None:
        self._sock.close()
        self._thread.join(timeout=2.0)


@pytest.fixture
def scripted_server() -> Iterator[Callable[..., ScriptedServer]]:
    servers: list[ScriptedServer] = []

    def _make(replies: list[bytes], banner: bytes = b'Connected to JSBSim server\r\nJSBSim> ') -> ScriptedServer:
        server = ScriptedServer(banner, replies)
        servers.append(server)
        return server

    yield _make
    for server in servers:
        server.close()


@pytest.fixture
def fake_jsbsim(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Callable[..., ProcessConfig]:
    if sys.platform == 'win32':
        pytest.skip('fake JSBSim wrapper needs a POSIX shell')
    wrapper = tmp_path / 'JSBSim'
    wrapper.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{FAKE_JSBSIM}" "$@"\n', encoding='utf-8')
    wrapper.chmod(0o755)

    def _make(mode: str = 'ready', **overrides) -> ProcessConfig:
        port = free_port()
        monkeypatch.setenv('FAKE_JSBSIM_PORT', str(port))
        monkeypatch.setenv('FAKE_JSBSIM_MODE', mode)
        fields = {
            'executable': str(wrapper),
            'root': tmp_path,
            'host': '127.0.0.1',
            'port': port,
            'connect_backoff_s': 0.05,
        }
        fields.update(overrides)
        return ProcessConfig(**fields)

    return _make


@pytest.fixture
def unused_port() -> int:
    return free_port()
