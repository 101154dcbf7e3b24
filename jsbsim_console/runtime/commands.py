from __future__ import annotations

import operator
from typing import Any, Callable, TypeVar

from jsbsim_console.runtime.errors import ParseError, ProtocolError

T = TypeVar('T')

HOLD = 'hold'
RESUME = 'resume'
QUIT = 'quit'

RESUMING_SUFFIX = 'Resuming'
ITERATED_SUFFIX = 'Iterations performed'
SET_OK_SUFFIX = 'set successful'


def _check_field(name: str, text: str) -> str:
    if not text or '\n' in text or '\r' in text:
        raise ValueError(f'{name} must be a non-empty single line, got {text!r}')
    return text


def render_value(value: Any) -> str:
    # JSBSim reads booleans as numbers.
    if isinstance(value, bool):
        return '1' if value else '0'
    return str(value)


def iterate_command(steps: int) -> str:
    return f'iterate {operator.index(steps)}'


def set_command(key: str, value: Any) -> str:
    return f'set {_check_field("key", key)} {_check_field("value", render_value(value))}'


def get_command(key: str) -> str:
    return f'get {_check_field("key", key)}'


def expect_suffix(response: str, suffix: str, action: str) -> str:
    if not response.strip().endswith(suffix):
        raise ProtocolError(f'Failed to {action}', response)
    return response


def split_get_response(response: str) -> str:
    """Return the raw value side of a ``<key> = <value>`` response."""
    parts = response.strip().split('=')
    if len(parts) != 2:
        raise ProtocolError(
            f'Expected exactly one "=" in get response, found {len(parts) - 1}', response
        )
    value = parts[1].strip()
    if not value:
        raise ProtocolError('No value returned', response)
    return value


def convert_value(text: str, type_: Callable[[str], T]) -> T:
    if type_ is bool:
        return float(text) != 0.0  # type: ignore[return-value]
    return type_(text)


def parse_get_response(key: str, response: str, type_: Callable[[str], T] = float) -> T:
    value = split_get_response(response)
    try:
        return convert_value(value, type_)
    except Exception as exc:
        raise ParseError(key, type_, response) from exc  # type: ignore[arg-type]
