from __future__ import annotations

import pytest

import wire
from relaynotify.errors import ParseError
from relaynotify.hdata import HData
from relaynotify.objects import Object, ObjectType


def test_two_paths_two_keys_one_record():
    raw = wire.hdata("p1,p2", "f1:int,f2:str", [
        wire.pointer("abc") + wire.pointer("0") + wire.i32(12) + wire.string("x"),
    ])
    h = HData.from_bytes(raw)
    assert h.paths == ("p1", "p2")
    assert h.keys == (("f1", ObjectType.INT), ("f2", ObjectType.STRING))
    assert len(h) == 1
    assert list(h[0]) == ["p1", "p2", "f1", "f2"]
    assert h[0]["p1"] == Object.pointer("abc")
    assert h[0]["p2"].as_pointer() is None
    assert h[0]["f1"].as_int() == 12
    assert h[0]["f2"].as_str() == "x"


def test_records_keep_order():
    raw = wire.hdata("buffer", "number:int", [
        wire.pointer("a1") + wire.i32(1),
        wire.pointer("a2") + wire.i32(2),
        wire.pointer("a3") + wire.i32(3),
    ])
    assert [r["number"].as_int() for r in HData.from_bytes(raw)] == [1, 2, 3]


def test_empty_hdata():
    h = HData.from_bytes(wire.hdata("", "", []))
    assert len(h) == 0
    assert h.paths == ()


def test_trailing_bytes_fail():
    raw = wire.hdata("p", "f:chr", [wire.pointer("1") + wire.char(0)])
    with pytest.raises(ParseError):
        HData.from_bytes(raw + b"\x00")


def test_truncated_record_fails():
    raw = wire.hdata("p", "f:int", [wire.pointer("1") + wire.i32(5)])
    with pytest.raises(ParseError):
        HData.from_bytes(raw[:-2])


def test_count_larger_than_records_fails():
    raw = wire.string("p") + wire.string("f:chr") + wire.i32(2) + wire.pointer("1") + wire.char(1)
    with pytest.raises(ParseError):
        HData.from_bytes(raw)


@pytest.mark.parametrize("keys", ["f", "f:", ":int", "f:int,g:xyz"])
def test_bad_key_spec_fails(keys):
    with pytest.raises(ParseError):
        HData.from_bytes(wire.hdata("p", keys, []))


def test_duplicate_field_names_fail():
    with pytest.raises(ParseError):
        HData.from_bytes(wire.hdata("p", "p:int", []))


def test_null_path_list_fails():
    with pytest.raises(ParseError):
        HData.from_bytes(wire.string(None) + wire.string("f:int") + wire.i32(0))


def test_negative_count_fails():
    with pytest.raises(ParseError):
        HData.from_bytes(wire.string("p") + wire.string("f:int") + wire.i32(-1))


def test_buffer_line_record():
    h = HData.from_bytes(wire.hdata("line_data", wire.LINE_KEYS, [wire.line_record(1, ["notify_private", "nick_bob"])]))
    rec = h[0]
    assert rec["highlight"].as_char() == 1
    assert [t.as_str() for t in rec["tags_array"].as_array()] == ["notify_private", "nick_bob"]
    assert rec["date"].as_time() == 1700000000
    assert rec["buffer"].as_pointer() == "12ab34"
