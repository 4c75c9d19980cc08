from __future__ import annotations

import pytest

from relaynotify import cli
from relaynotify.errors import BadPassword, EndOfStream
from relaynotify.net import TlsConfig
from relaynotify.notify import BackgroundNotifier, LogNotifier, SoundNotifier
from relaynotify.session import Relay


def test_build_relay_from_flags():
    args = cli.build_parser().parse_args(["--host", "h", "--port", "8001", "--password", "pw", "--tls", "--no-verify"])
    relay = cli.build_relay(args)
    assert relay == Relay(host="h", port=8001, password="pw", tls=TlsConfig(verify=False))


def test_password_from_environment(monkeypatch):
    monkeypatch.setenv("RELAYNOTIFY_PASSWORD", "from-env")
    relay = cli.build_relay(cli.build_parser().parse_args(["--host", "h"]))
    assert relay.password == "from-env"
    assert relay.tls is None


def test_ca_file_implies_tls():
    relay = cli.build_relay(cli.build_parser().parse_args(["--host", "h", "--ca-file", "/etc/ca.pem"]))
    assert relay.tls == TlsConfig(verify=True, ca_file="/etc/ca.pem")


def test_notifier_choice():
    parse = cli.build_parser().parse_args
    assert isinstance(cli.build_notifier(parse(["--host", "h", "--notifier", "log"])), LogNotifier)
    sound = cli.build_notifier(parse(["--host", "h", "--notifier", "sound", "--sound-file", "x.wav"]))
    assert isinstance(sound, BackgroundNotifier)
    assert isinstance(sound.inner, SoundNotifier)


def test_sound_requires_file():
    with pytest.raises(SystemExit):
        cli.main(["--host", "h", "--notifier", "sound"])


@pytest.mark.parametrize("error, code", [(BadPassword(), 2), (EndOfStream("closed"), 1)])
def test_exit_codes(monkeypatch, error, code):
    def fake_run(self, notifier, opener=None):
        raise error

    monkeypatch.setattr(Relay, "run", fake_run)
    assert cli.main(["--host", "h", "--notifier", "log"]) == code
