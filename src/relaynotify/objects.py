from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from .constants import (
    TAG_ARRAY,
    TAG_BUFFER,
    TAG_CHAR,
    TAG_HASHTABLE,
    TAG_INT,
    TAG_LONG,
    TAG_POINTER,
    TAG_STRING,
    TAG_TIME,
)
from .errors import ParseError


class ObjectType(str, enum.Enum):
    ARRAY = TAG_ARRAY
    BUFFER = TAG_BUFFER
    CHAR = TAG_CHAR
    HASHTABLE = TAG_HASHTABLE
    INT = TAG_INT
    LONG = TAG_LONG
    POINTER = TAG_POINTER
    STRING = TAG_STRING
    TIME = TAG_TIME

    @classmethod
    def from_tag(cls, tag: str) -> "ObjectType":
        try:
            return cls(tag)
        except ValueError:
            raise ParseError(f"unknown object type tag {tag!r}") from None


@dataclass(frozen=True, slots=True)
class Object:
    """One decoded relay value.

    ``value`` holds a tuple of Objects for arrays, a dict for hashtables,
    ``bytes | None`` for buffers, ``str | None`` for pointers and strings and
    a plain int for everything else (a char is its byte value). ``None`` is
    the null state and is never conflated with an empty value.
    """

    type: ObjectType
    value: Any

    @staticmethod
    def array(items: Sequence["Object"]) -> "Object":
        return Object(ObjectType.ARRAY, tuple(items))

    @staticmethod
    def buffer(data: bytes | None) -> "Object":
        return Object(ObjectType.BUFFER, data)

    @staticmethod
    def char(code: int) -> "Object":
        return Object(ObjectType.CHAR, code)

    @staticmethod
    def hashtable(entries: Mapping["Object", "Object"]) -> "Object":
        return Object(ObjectType.HASHTABLE, dict(entries))

    @staticmethod
    def int32(value: int) -> "Object":
        return Object(ObjectType.INT, value)

    @staticmethod
    def long(value: int) -> "Object":
        return Object(ObjectType.LONG, value)

    @staticmethod
    def pointer(text: str | None) -> "Object":
        return Object(ObjectType.POINTER, text)

    @staticmethod
    def string(text: str | None) -> "Object":
        return Object(ObjectType.STRING, text)

    @staticmethod
    def time(epoch: int) -> "Object":
        return Object(ObjectType.TIME, epoch)

    def _expect(self, kind: ObjectType) -> Any:
        if self.type is not kind:
            raise ParseError(f"expected {kind.value} object, got {self.type.value}")
        return self.value

    def as_array(self) -> tuple["Object", ...]:
        return self._expect(ObjectType.ARRAY)

    def as_buffer(self) -> bytes | None:
        return self._expect(ObjectType.BUFFER)

    def as_not_null_buffer(self) -> bytes:
        buf = self.as_buffer()
        if buf is None:
            raise ParseError("buffer is null")
        return buf

    def as_char(self) -> int:
        return self._expect(ObjectType.CHAR)

    def as_map(self) -> dict["Object", "Object"]:
        return self._expect(ObjectType.HASHTABLE)

    def as_int(self) -> int:
        return self._expect(ObjectType.INT)

    def as_long(self) -> int:
        return self._expect(ObjectType.LONG)

    def as_pointer(self) -> str | None:
        return self._expect(ObjectType.POINTER)

    def as_not_null_pointer(self) -> str:
        ptr = self.as_pointer()
        if ptr is None:
            raise ParseError("pointer is null")
        return ptr

    def as_str(self) -> str | None:
        return self._expect(ObjectType.STRING)

    def as_not_null_str(self) -> str:
        s = self.as_str()
        if s is None:
            raise ParseError("string is null")
        return s

    def as_time(self) -> int:
        return self._expect(ObjectType.TIME)

    def __str__(self) -> str:
        kind, value = self.type, self.value
        if kind is ObjectType.STRING:
            return "null" if value is None else f'"{value}"'
        if kind is ObjectType.POINTER:
            return "0x0" if value is None else f"0x{value}"
        if kind is ObjectType.BUFFER:
            return "null" if value is None else "[" + ", ".join(str(b) for b in value) + "]"
        if kind is ObjectType.CHAR:
            return f"{value} ({chr(value)!r})"
        if kind is ObjectType.ARRAY:
            return "[" + ", ".join(str(item) for item in value) + "]"
        if kind is ObjectType.HASHTABLE:
            return "{" + ", ".join(f"{k}: {v}" for k, v in value.items()) + "}"
        return str(value)


@dataclass(frozen=True, slots=True)
class ParsedValue:
    object: Object
    bytes_read: int
