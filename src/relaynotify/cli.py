from __future__ import annotations

import argparse
import logging
import os

from .constants import DEFAULT_PING_TOKEN, DEFAULT_PORT, PASSWORD_ENV
from .errors import BadPassword, RelayError
from .net import TlsConfig
from .notify import BackgroundNotifier, DesktopNotifier, LogNotifier, Notifier, SoundNotifier
from .session import Relay

logger = logging.getLogger(__name__)


def build_notifier(args: argparse.Namespace) -> Notifier:
    if args.notifier == "log":
        return LogNotifier()
    if args.notifier == "desktop":
        return BackgroundNotifier(DesktopNotifier(title=args.title))
    return BackgroundNotifier(SoundNotifier(args.sound_file, player=args.player))


def build_relay(args: argparse.Namespace) -> Relay:
    tls = None
    if args.tls or args.ca_file:
        tls = TlsConfig(verify=not args.no_verify, ca_file=args.ca_file)
    password = args.password if args.password is not None else os.environ.get(PASSWORD_ENV, "")
    return Relay(
        host=args.host,
        port=args.port,
        password=password,
        tls=tls,
        ping_token=args.ping_token,
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="relaynotify",
        description="Notify on highlights and private messages from a WeeChat relay.",
    )
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    p.add_argument("--host", required=True)
    p.add_argument("--port", type=int, default=DEFAULT_PORT)
    p.add_argument("--password", default=None, help=f"relay password (default: ${PASSWORD_ENV})")
    p.add_argument("--ping-token", default=DEFAULT_PING_TOKEN)

    tls = p.add_argument_group("tls")
    tls.add_argument("--tls", action="store_true", help="wrap the connection in TLS")
    tls.add_argument("--no-verify", action="store_true", help="skip certificate verification")
    tls.add_argument("--ca-file", default=None, help="CA bundle to verify the relay against")

    out = p.add_argument_group("notification")
    out.add_argument("--notifier", choices=["log", "desktop", "sound"], default="desktop")
    out.add_argument("--title", default="WeeChat")
    out.add_argument("--sound-file", default=None)
    out.add_argument("--player", default="paplay")
    return p


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    if args.notifier == "sound" and not args.sound_file:
        p.error("--notifier sound requires --sound-file")
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")

    relay = build_relay(args)
    try:
        relay.run(build_notifier(args))
    except BadPassword as exc:
        logger.error("%s", exc)
        return 2
    except RelayError as exc:
        logger.error("relay session ended: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
