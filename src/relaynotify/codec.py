"""Decoders for the self-describing relay object format.

Every decoder takes a bytes-like object whose *prefix* holds the encoded
value and returns a :class:`ParsedValue` with the decoded object and the
exact number of bytes it consumed. Lengths announced by the peer are always
checked against what is actually available before anything is read.

Wire layout (everything big-endian):

==== ==================================================================
Tag  Encoding
==== ==================================================================
chr  1 byte
int  4-byte signed integer
lon  1-byte length + ASCII decimal digits (signed 64-bit)
tim  1-byte length + ASCII decimal digits (signed 32-bit epoch seconds)
ptr  1-byte length + ASCII hex digits, ``"0"`` is the null pointer
str  4-byte signed length + UTF-8 bytes, -1 is null and 0 is empty
buf  4-byte signed length + raw bytes, -1 is null and 0 is empty
arr  3-byte element tag + 4-byte count + elements
htb  3-byte key tag + 3-byte value tag + 4-byte count + (key, value) pairs
==== ==================================================================
"""
from __future__ import annotations

import re
import struct
from typing import Callable, Union

from .constants import (
    INT32_MAX,
    INT32_MIN,
    INT64_MAX,
    INT64_MIN,
    MAX_NESTING_DEPTH,
    NULL_LENGTH,
    NULL_POINTER,
    TYPE_TAG_LENGTH,
)
from .errors import ParseError
from .objects import Object, ObjectType, ParsedValue

BytesLike = Union[bytes, bytearray, memoryview]

_I32 = struct.Struct("!i")
_DECIMAL = re.compile(rb"[+-]?[0-9]+")


def decode_i32(raw: BytesLike) -> int:
    """Decode exactly four big-endian bytes into a signed 32-bit integer."""
    if len(raw) != _I32.size:
        raise ParseError(f"cannot decode int from {len(raw)} bytes, need {_I32.size}")
    return _I32.unpack(raw)[0]


def _need(view: memoryview, n: int, what: str) -> None:
    if len(view) < n:
        raise ParseError(f"not enough bytes to decode {what}: need {n}, have {len(view)}")


def decode_type_tag(data: BytesLike, what: str = "type tag") -> str:
    view = memoryview(data)
    _need(view, TYPE_TAG_LENGTH, what)
    try:
        return bytes(view[:TYPE_TAG_LENGTH]).decode("ascii")
    except UnicodeDecodeError:
        raise ParseError(f"{what} is not ASCII: {bytes(view[:TYPE_TAG_LENGTH])!r}") from None


def _length_prefixed(view: memoryview, what: str) -> tuple[bytes | None, int]:
    _need(view, 4, f"{what} length")
    length = decode_i32(view[:4])
    if length == NULL_LENGTH:
        return None, 4
    if length < 0:
        raise ParseError(f"invalid {what} length {length}")
    end = 4 + length
    _need(view, end, what)
    return bytes(view[4:end]), end


def _short_prefixed(view: memoryview, what: str) -> tuple[bytes, int]:
    _need(view, 1, f"{what} length")
    end = 1 + view[0]
    _need(view, end, what)
    return bytes(view[1:end]), end


def _decimal(raw: bytes, what: str, lo: int, hi: int) -> int:
    if not _DECIMAL.fullmatch(raw):
        raise ParseError(f"{what} is not a decimal number: {raw!r}")
    value = int(raw)
    if not lo <= value <= hi:
        raise ParseError(f"{what} out of range: {value}")
    return value


def decode_string(data: BytesLike) -> ParsedValue:
    payload, used = _length_prefixed(memoryview(data), "string")
    if payload is None:
        return ParsedValue(Object.string(None), used)
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(f"string is not valid UTF-8: {exc}") from None
    return ParsedValue(Object.string(text), used)


def decode_buffer(data: BytesLike) -> ParsedValue:
    payload, used = _length_prefixed(memoryview(data), "buffer")
    return ParsedValue(Object.buffer(payload), used)


def decode_pointer(data: BytesLike) -> ParsedValue:
    raw, used = _short_prefixed(memoryview(data), "pointer")
    try:
        text = raw.decode("ascii")
    except UnicodeDecodeError:
        raise ParseError(f"pointer is not ASCII: {raw!r}") from None
    return ParsedValue(Object.pointer(None if text == NULL_POINTER else text), used)


def decode_char(data: BytesLike) -> ParsedValue:
    view = memoryview(data)
    _need(view, 1, "char")
    return ParsedValue(Object.char(view[0]), 1)


def decode_int(data: BytesLike) -> ParsedValue:
    view = memoryview(data)
    _need(view, 4, "int")
    return ParsedValue(Object.int32(decode_i32(view[:4])), 4)


def decode_long(data: BytesLike) -> ParsedValue:
    raw, used = _short_prefixed(memoryview(data), "long")
    return ParsedValue(Object.long(_decimal(raw, "long", INT64_MIN, INT64_MAX)), used)


def decode_time(data: BytesLike) -> ParsedValue:
    raw, used = _short_prefixed(memoryview(data), "time")
    return ParsedValue(Object.time(_decimal(raw, "time", INT32_MIN, INT32_MAX)), used)


def _count(view: memoryview, what: str) -> int:
    _need(view, 4, f"{what} count")
    count = decode_i32(view[:4])
    if count < 0:
        raise ParseError(f"negative {what} count {count}")
    return count


def _check_depth(depth: int, what: str) -> None:
    if depth >= MAX_NESTING_DEPTH:
        raise ParseError(f"{what} nested deeper than {MAX_NESTING_DEPTH} levels")


def decode_array(data: BytesLike, depth: int = 0) -> ParsedValue:
    _check_depth(depth, "array")
    view = memoryview(data)
    kind = ObjectType.from_tag(decode_type_tag(view, "array element type"))
    pos = TYPE_TAG_LENGTH
    count = _count(view[pos:], "array")
    pos += 4

    items = []
    for _ in range(count):
        parsed = decode_object(kind, view[pos:], depth + 1)
        pos += parsed.bytes_read
        items.append(parsed.object)
    return ParsedValue(Object.array(items), pos)


def decode_hashtable(data: BytesLike, depth: int = 0) -> ParsedValue:
    _check_depth(depth, "hashtable")
    view = memoryview(data)
    key_kind = ObjectType.from_tag(decode_type_tag(view, "hashtable key type"))
    pos = TYPE_TAG_LENGTH
    value_kind = ObjectType.from_tag(decode_type_tag(view[pos:], "hashtable value type"))
    pos += TYPE_TAG_LENGTH
    count = _count(view[pos:], "hashtable")
    pos += 4

    entries: dict[Object, Object] = {}
    for _ in range(count):
        key = decode_object(key_kind, view[pos:], depth + 1)
        pos += key.bytes_read
        value = decode_object(value_kind, view[pos:], depth + 1)
        pos += value.bytes_read
        try:
            duplicate = key.object in entries
        except TypeError:
            raise ParseError(f"unhashable hashtable key type {key_kind.value}") from None
        if duplicate:
            raise ParseError(f"duplicate hashtable key {key.object}")
        entries[key.object] = value.object
    return ParsedValue(Object.hashtable(entries), pos)


_SCALARS: dict[ObjectType, Callable[[BytesLike], ParsedValue]] = {
    ObjectType.BUFFER: decode_buffer,
    ObjectType.CHAR: decode_char,
    ObjectType.INT: decode_int,
    ObjectType.LONG: decode_long,
    ObjectType.POINTER: decode_pointer,
    ObjectType.STRING: decode_string,
    ObjectType.TIME: decode_time,
}


def decode_object(kind: ObjectType | str, data: BytesLike, depth: int = 0) -> ParsedValue:
    """Decode one object of type ``kind`` from the start of ``data``."""
    if not isinstance(kind, ObjectType):
        kind = ObjectType.from_tag(kind)
    if kind is ObjectType.ARRAY:
        return decode_array(data, depth)
    if kind is ObjectType.HASHTABLE:
        return decode_hashtable(data, depth)
    return _SCALARS[kind](data)
