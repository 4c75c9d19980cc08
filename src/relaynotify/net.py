from __future__ import annotations

import logging
import socket
import ssl
from dataclasses import dataclass
from typing import Protocol

from .constants import DEFAULT_CONNECT_TIMEOUT_S, READ_CHUNK_SIZE
from .errors import EndOfStream, IoError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TlsConfig:
    verify: bool = True
    ca_file: str | None = None

    def context(self) -> ssl.SSLContext:
        ctx = ssl.create_default_context(cafile=self.ca_file)
        if not self.verify:
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE
        return ctx


class Transport(Protocol):
    def read_exact(self, n: int) -> bytes: ...

    def write(self, data: bytes) -> None: ...

    def flush(self) -> None: ...

    def shutdown(self) -> None: ...

    def close(self) -> None: ...


class SocketTransport:
    """Blocking byte stream over a TCP socket, optionally wrapped in TLS."""

    def __init__(self, sock: socket.socket):
        self.sock = sock

    @classmethod
    def connect(
        cls,
        host: str,
        port: int,
        tls: TlsConfig | None = None,
        timeout_s: float = DEFAULT_CONNECT_TIMEOUT_S,
    ) -> "SocketTransport":
        try:
            sock = socket.create_connection((host, port), timeout=timeout_s)
        except OSError as exc:
            raise IoError(f"cannot connect to {host}:{port}: {exc}", exc) from exc

        if tls is not None:
            try:
                sock = tls.context().wrap_socket(sock, server_hostname=host)
            except OSError as exc:
                sock.close()
                raise IoError(f"TLS handshake with {host}:{port} failed: {exc}", exc) from exc
            logger.debug("TLS established with %s:%d (%s)", host, port, sock.version())

        sock.settimeout(None)
        return cls(sock)

    def read_exact(self, n: int) -> bytes:
        # n comes off the wire; grow the buffer as bytes arrive
        buf = bytearray()
        while len(buf) < n:
            try:
                chunk = self.sock.recv(min(n - len(buf), READ_CHUNK_SIZE))
            except OSError as exc:
                raise IoError(f"read failed: {exc}", exc) from exc
            if not chunk:
                raise EndOfStream(f"connection closed after {len(buf)} of {n} bytes")
            buf += chunk
        return bytes(buf)

    def write(self, data: bytes) -> None:
        try:
            self.sock.sendall(data)
        except OSError as exc:
            raise IoError(f"write failed: {exc}", exc) from exc

    def flush(self) -> None:
        # sendall() leaves nothing buffered on our side
        pass

    def shutdown(self) -> None:
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError as exc:
            raise IoError(f"shutdown failed: {exc}", exc) from exc

    def close(self) -> None:
        self.sock.close()
