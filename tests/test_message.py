from __future__ import annotations

import pytest

import wire
from relaynotify.errors import ParseError
from relaynotify.hdata import HData
from relaynotify.message import Header, Message, StrData


def test_header_length_excludes_header():
    h = Header.from_bytes(wire.i32(25) + b"\x00")
    assert h.length == 20
    assert h.compression is False
    assert Header.from_bytes(wire.i32(5) + b"\x01") == Header(length=0, compression=True)


def test_header_bad_compression_byte():
    with pytest.raises(ParseError):
        Header.from_bytes(wire.i32(10) + b"\x02")


def test_header_too_short_total():
    with pytest.raises(ParseError):
        Header.from_bytes(wire.i32(4) + b"\x00")


def test_header_wrong_size():
    with pytest.raises(ParseError):
        Header.from_bytes(b"\x00\x00\x00")


def test_strdata_message():
    m = Message.from_bytes(wire.body("_pong", "str", wire.string("foo")))
    assert m.identifier == "_pong"
    assert m.as_strdata() == StrData("foo")
    with pytest.raises(ParseError):
        m.as_hdata()


def test_null_strdata_message():
    m = Message.from_bytes(wire.body("_pong", "str", wire.string(None)))
    assert m.as_strdata().data is None


def test_hdata_message():
    m = Message.from_bytes(wire.body("_buffer_line_added", "hda", wire.hdata("line_data", wire.LINE_KEYS, [wire.line_record(0, [])])))
    h = m.as_hdata()
    assert isinstance(h, HData)
    assert len(h) == 1
    with pytest.raises(ParseError):
        m.as_strdata()


def test_framed_message_round_trips_through_header():
    framed = wire.line_added(wire.line_record(0, ["irc_privmsg"]))
    header = Header.from_bytes(framed[:5])
    assert header.length == len(framed) - 5
    m = Message.from_bytes(framed[5:])
    assert m.identifier == "_buffer_line_added"


def test_unknown_message_type():
    with pytest.raises(ParseError, match="unknown message type"):
        Message.from_bytes(wire.body("_x", "inf", b""))


def test_null_identifier():
    with pytest.raises(ParseError):
        Message.from_bytes(wire.body(None, "str", wire.string("x")))


def test_missing_type_tag():
    with pytest.raises(ParseError):
        Message.from_bytes(wire.string("_pong") + b"st")
