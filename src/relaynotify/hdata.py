from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from .codec import BytesLike, decode_int, decode_object, decode_pointer, decode_string
from .errors import ParseError
from .objects import Object, ObjectType


@dataclass(frozen=True, slots=True)
class HData:
    """Records of an hdata body, one dict per record.

    Each record maps every path name to the pointer read for it, followed by
    every key name to the object decoded with the key's declared type.
    """

    paths: tuple[str, ...]
    keys: tuple[tuple[str, ObjectType], ...]
    records: list[dict[str, Object]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[dict[str, Object]]:
        return iter(self.records)

    def __getitem__(self, index: int) -> dict[str, Object]:
        return self.records[index]

    @staticmethod
    def from_bytes(data: BytesLike) -> "HData":
        """Decode the bytes that follow the ``hda`` tag of a message body.

        The whole input must be consumed. Leftover or missing bytes mean the
        declared layout and the actual content disagree.
        """
        view = memoryview(data)
        pos = 0

        parsed = decode_string(view)
        pos += parsed.bytes_read
        paths = _split_names(parsed.object, "hdata path")

        parsed = decode_string(view[pos:])
        pos += parsed.bytes_read
        keys = tuple(_parse_key_spec(spec) for spec in _split_names(parsed.object, "hdata keys"))

        names = list(paths) + [name for name, _ in keys]
        if len(set(names)) != len(names):
            raise ParseError(f"duplicate field names in hdata: {names}")

        parsed = decode_int(view[pos:])
        pos += parsed.bytes_read
        count = parsed.object.as_int()
        if count < 0:
            raise ParseError(f"negative hdata record count {count}")

        records: list[dict[str, Object]] = []
        for _ in range(count):
            record: dict[str, Object] = {}
            for path in paths:
                parsed = decode_pointer(view[pos:])
                pos += parsed.bytes_read
                record[path] = parsed.object
            for name, kind in keys:
                parsed = decode_object(kind, view[pos:])
                pos += parsed.bytes_read
                record[name] = parsed.object
            records.append(record)

        if pos != len(view):
            raise ParseError(f"hdata decoded {pos} of {len(view)} bytes")
        return HData(paths=paths, keys=keys, records=records)


def _split_names(obj: Object, what: str) -> tuple[str, ...]:
    text = obj.as_str()
    if text is None:
        raise ParseError(f"{what} is null")
    if text == "":
        return ()
    return tuple(text.split(","))


def _parse_key_spec(spec: str) -> tuple[str, ObjectType]:
    name, sep, tag = spec.partition(":")
    if not sep or not name:
        raise ParseError(f"malformed hdata key spec {spec!r}")
    return name, ObjectType.from_tag(tag)
