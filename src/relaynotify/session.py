from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

from .constants import (
    CMD_INIT,
    CMD_PING,
    CMD_QUIT,
    CMD_SYNC,
    DEFAULT_PING_TOKEN,
    DEFAULT_PORT,
    HEADER_LENGTH,
    ID_BUFFER_LINE_ADDED,
    ID_PONG,
)
from .errors import BadPassword, EndOfStream, IoError, ParseError, RelayError
from .hdata import HData
from .message import Header, Message, StrData
from .net import SocketTransport, TlsConfig, Transport
from .notify import BufferLine, Notifier
from .objects import Object

logger = logging.getLogger(__name__)

Opener = Callable[[str, int, Optional[TlsConfig]], Transport]


class SessionState(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    AUTHENTICATING = "authenticating"
    STREAMING = "streaming"
    CLOSED = "closed"


@dataclass(frozen=True, slots=True)
class Relay:
    """Connection settings for one relay. Holds no live connection."""

    host: str
    port: int = DEFAULT_PORT
    password: str = field(default="", repr=False)
    tls: TlsConfig | None = None
    ping_token: str = DEFAULT_PING_TOKEN

    def run(self, notifier: Notifier, opener: Opener | None = None) -> None:
        """Connect, authenticate, subscribe and stream until the connection ends.

        Always ends by raising: :class:`BadPassword` when the relay rejects the
        password, :class:`IoError` (``EndOfStream`` for a closed connection)
        or :class:`ParseError` for undecodable data.
        """
        RelaySession(self, notifier, opener).run()


class RelaySession:
    """One connect, run and close cycle over a transport it exclusively owns."""

    def __init__(self, relay: Relay, notifier: Notifier, opener: Opener | None = None):
        self.relay = relay
        self.notifier = notifier
        self.opener = opener or SocketTransport.connect
        self.transport: Transport | None = None
        self.state = SessionState.DISCONNECTED
        self._handlers: dict[str, Callable[[Message], None]] = {
            ID_BUFFER_LINE_ADDED: self._on_buffer_line_added,
        }

    def _set_state(self, state: SessionState) -> None:
        logger.debug("session %s -> %s", self.state.value, state.value)
        self.state = state

    def connect(self) -> None:
        relay = self.relay
        logger.info("connecting to %s:%d%s", relay.host, relay.port, " (tls)" if relay.tls else "")
        self.transport = self.opener(relay.host, relay.port, relay.tls)
        self._set_state(SessionState.CONNECTED)

    def _transport(self) -> Transport:
        if self.transport is None:
            raise IoError("session is not connected")
        return self.transport

    def send(self, command: str) -> None:
        if not command.endswith("\n"):
            command += "\n"
        self._transport().write(command.encode("utf-8"))

    def recv_message(self) -> Message:
        header = Header.from_bytes(self._transport().read_exact(HEADER_LENGTH))
        if header.compression:
            raise ParseError("received a compressed message but compression is off")
        return Message.from_bytes(self._transport().read_exact(header.length))

    def authenticate(self) -> None:
        # The relay never answers a bad password, it just drops the
        # connection. A ping right after init tells the two cases apart.
        self._set_state(SessionState.AUTHENTICATING)
        logger.debug("send: init password=******,compression=off")
        self.send(CMD_INIT.format(password=self.relay.password))
        try:
            self.send(CMD_PING.format(token=self.relay.ping_token))
        except IoError as exc:
            logger.debug("ping send failed: %s", exc)

        try:
            reply = self.recv_message()
        except EndOfStream as exc:
            raise BadPassword() from exc

        if reply.identifier == ID_PONG and isinstance(reply.payload, StrData):
            logger.debug("pong %r", reply.payload.data)
        else:
            logger.debug("unexpected %r reply to ping", reply.identifier)
        logger.info("authenticated with %s:%d", self.relay.host, self.relay.port)

    def subscribe(self) -> None:
        logger.debug("send: %s", CMD_SYNC)
        self.send(CMD_SYNC)
        self._set_state(SessionState.STREAMING)

    def stream(self) -> None:
        while True:
            self.dispatch(self.recv_message())

    def dispatch(self, message: Message) -> None:
        handler = self._handlers.get(message.identifier)
        if handler is None:
            logger.debug("ignoring %s", message.identifier)
            return
        handler(message)

    def _on_buffer_line_added(self, message: Message) -> None:
        hdata = message.as_hdata()
        if logger.isEnabledFor(logging.DEBUG):
            for record in hdata:
                logger.debug("line: %s", ", ".join(f"{k}={v}" for k, v in record.items()))
        for line in notify_worthy_lines(hdata):
            logger.debug("notify-worthy line: %s", line)
            self.notifier.notify(line)

    def close(self) -> None:
        """Best-effort quit, flush and shutdown. Never raises."""
        transport = self.transport
        if self.state is SessionState.CLOSED:
            return
        if transport is None:
            self._set_state(SessionState.CLOSED)
            return
        steps = (
            ("quit", lambda: self.send(CMD_QUIT)),
            ("flush", transport.flush),
            ("shutdown", transport.shutdown),
            ("close", transport.close),
        )
        for name, step in steps:
            try:
                step()
            except (RelayError, OSError) as exc:
                logger.debug("%s during close failed: %s", name, exc)
        self._set_state(SessionState.CLOSED)

    def run(self) -> None:
        self.connect()
        try:
            self.authenticate()
            self.subscribe()
            self.stream()
        finally:
            self.close()


def _field(record: dict[str, Object], name: str) -> Object:
    try:
        return record[name]
    except KeyError:
        raise ParseError(f"buffer line has no {name!r} field") from None


def buffer_line(record: dict[str, Object]) -> BufferLine:
    """Build a :class:`BufferLine` from one ``_buffer_line_added`` record."""
    tags = tuple(tag.as_str() or "" for tag in _field(record, "tags_array").as_array())
    return BufferLine(
        highlight=_field(record, "highlight").as_char() == 1,
        tags=tags,
        buffer=record["buffer"].as_pointer() if "buffer" in record else None,
        date=record["date"].as_time() if "date" in record else None,
        prefix=record["prefix"].as_str() if "prefix" in record else None,
        message=record["message"].as_str() if "message" in record else None,
    )


def is_notify_worthy(line: BufferLine) -> bool:
    return line.highlight or line.private


def notify_worthy_lines(hdata: HData) -> Iterator[BufferLine]:
    for record in hdata:
        line = buffer_line(record)
        if is_notify_worthy(line):
            yield line
