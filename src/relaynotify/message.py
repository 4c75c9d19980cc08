from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .codec import BytesLike, decode_char, decode_int, decode_string, decode_type_tag
from .constants import BODY_HDATA, BODY_STR, HEADER_LENGTH, TYPE_TAG_LENGTH
from .errors import ParseError
from .hdata import HData


@dataclass(frozen=True, slots=True)
class Header:
    length: int  # body bytes still to be read
    compression: bool

    @staticmethod
    def from_bytes(raw: BytesLike) -> "Header":
        if len(raw) != HEADER_LENGTH:
            raise ParseError(f"header must be {HEADER_LENGTH} bytes, got {len(raw)}")
        view = memoryview(raw)

        parsed = decode_int(view)
        total = parsed.object.as_int()
        pos = parsed.bytes_read

        flag = decode_char(view[pos:]).object.as_char()
        if flag not in (0, 1):
            raise ParseError(f"bad compression flag {flag}")

        if total < HEADER_LENGTH:
            raise ParseError(f"message length {total} shorter than its header")
        return Header(length=total - HEADER_LENGTH, compression=bool(flag))


@dataclass(frozen=True, slots=True)
class StrData:
    data: str | None


Payload = Union[StrData, HData]


@dataclass(frozen=True, slots=True)
class Message:
    identifier: str
    payload: Payload

    @staticmethod
    def from_bytes(body: BytesLike) -> "Message":
        """Decode a message body: identifier, 3-byte body tag, then the payload."""
        view = memoryview(body)
        parsed = decode_string(view)
        identifier = parsed.object.as_str()
        if identifier is None:
            raise ParseError("message identifier is null")
        pos = parsed.bytes_read

        tag = decode_type_tag(view[pos:], "message type")
        pos += TYPE_TAG_LENGTH
        if tag == BODY_STR:
            payload: Payload = StrData(decode_string(view[pos:]).object.as_str())
        elif tag == BODY_HDATA:
            payload = HData.from_bytes(view[pos:])
        else:
            raise ParseError(f"unknown message type {tag!r}")
        return Message(identifier=identifier, payload=payload)

    def as_hdata(self) -> HData:
        if not isinstance(self.payload, HData):
            raise ParseError(f"message {self.identifier!r} is not an hdata")
        return self.payload

    def as_strdata(self) -> StrData:
        if not isinstance(self.payload, StrData):
            raise ParseError(f"message {self.identifier!r} is not a strdata")
        return self.payload
