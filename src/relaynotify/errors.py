from __future__ import annotations


class RelayError(Exception):
    """Base class for everything the relay client raises."""


class IoError(RelayError):
    """Transport failure while connecting, reading or writing."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class EndOfStream(IoError):
    """The peer closed the connection before a read could complete."""


class BadPassword(RelayError):
    """The relay dropped the connection right after ``init``."""

    def __init__(self, message: str = "invalid relay password"):
        super().__init__(message)


class ParseError(RelayError):
    """Malformed or undecodable wire data."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail
