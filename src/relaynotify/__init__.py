"""Relay notifier.

Streams buffer lines from a WeeChat relay and raises a notification for
highlights and private messages:
- ``codec`` / ``hdata`` / ``message`` decode the binary wire format
- ``session`` drives connect, authenticate, sync and dispatch
- ``notify`` holds the actuators the session hands lines to
"""

from .errors import BadPassword, EndOfStream, IoError, ParseError, RelayError
from .session import Relay, RelaySession

__all__ = [
    "BadPassword",
    "EndOfStream",
    "IoError",
    "ParseError",
    "Relay",
    "RelayError",
    "RelaySession",
]
