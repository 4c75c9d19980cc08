"""Encoders for building relay wire fixtures in tests."""
from __future__ import annotations

import struct


def i32(value: int) -> bytes:
    return struct.pack("!i", value)


def string(text: str | None) -> bytes:
    if text is None:
        return i32(-1)
    raw = text.encode("utf-8")
    return i32(len(raw)) + raw


def buffer(data: bytes | None) -> bytes:
    if data is None:
        return i32(-1)
    return i32(len(data)) + data


def short(text: str) -> bytes:
    raw = text.encode("ascii")
    return bytes([len(raw)]) + raw


def pointer(text: str) -> bytes:
    return short(text)


def long(value: int) -> bytes:
    return short(str(value))


def time(value: int) -> bytes:
    return short(str(value))


def char(code: int) -> bytes:
    return bytes([code])


def array(tag: str, items: list[bytes]) -> bytes:
    return tag.encode("ascii") + i32(len(items)) + b"".join(items)


def hashtable(key_tag: str, value_tag: str, pairs: list[tuple[bytes, bytes]]) -> bytes:
    body = b"".join(k + v for k, v in pairs)
    return key_tag.encode("ascii") + value_tag.encode("ascii") + i32(len(pairs)) + body


def hdata(paths: str, keys: str, records: list[bytes]) -> bytes:
    return string(paths) + string(keys) + i32(len(records)) + b"".join(records)


def body(identifier: str | None, tag: str, payload: bytes) -> bytes:
    return string(identifier) + tag.encode("ascii") + payload


def frame(body_bytes: bytes, compression: int = 0) -> bytes:
    return i32(len(body_bytes) + 5) + bytes([compression]) + body_bytes


def pong(token: str = "relaynotify") -> bytes:
    return frame(body("_pong", "str", string(token)))


LINE_KEYS = "buffer:ptr,date:tim,highlight:chr,tags_array:arr,prefix:str,message:str"


def line_record(highlight: int, tags: list[str], prefix: str = "alice", message: str = "hi") -> bytes:
    return (
        pointer("5a6b7c")
        + pointer("12ab34")
        + time(1700000000)
        + char(highlight)
        + array("str", [string(t) for t in tags])
        + string(prefix)
        + string(message)
    )


def line_added(*records: bytes) -> bytes:
    return frame(body("_buffer_line_added", "hda", hdata("line_data", LINE_KEYS, list(records))))
