from __future__ import annotations

from typing import Any


class JSBSimError(Exception):
    """Base class for every error raised by the console client."""


class TransportError(JSBSimError):
    """Socket or stream failure while talking to the console."""


class ProtocolError(JSBSimError):
    """A response was read but did not have the expected shape."""

    def __init__(self, message: str, response: str) -> None:
        super().__init__(f'{message}: {response!r}')
        self.response = response


class ParseError(ProtocolError):
    """The value side of a ``get`` response could not be converted."""

    def __init__(self, key: str, target_type: Any, response: str) -> None:
        name = getattr(target_type, '__name__', repr(target_type))
        super().__init__(f'Cannot parse {key} as {name}', response)
        self.key = key
        self.target_type = target_type


class LaunchError(JSBSimError):
    """The simulator could not be spawned or never reported readiness."""

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode
