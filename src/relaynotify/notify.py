"""Notification actuators.

The relay session hands every notify-worthy buffer line to a
:class:`Notifier`. Actuators that shell out (``notify-send``, ``paplay``)
block for as long as the helper runs, so the CLI wraps them in a
:class:`BackgroundNotifier` to keep the receive loop reading.
"""
from __future__ import annotations

import logging
import queue
import subprocess
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .constants import TAG_NOTIFY_PRIVATE

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BufferLine:
    highlight: bool
    tags: tuple[str, ...] = ()
    buffer: str | None = None
    date: int | None = None
    prefix: str | None = None
    message: str | None = None

    @property
    def private(self) -> bool:
        return TAG_NOTIFY_PRIVATE in self.tags

    def summary(self) -> str:
        who = self.prefix or ("private message" if self.private else "highlight")
        return f"{who}: {self.message}" if self.message else who


class Notifier(ABC):
    @abstractmethod
    def notify(self, line: BufferLine) -> None:
        """Signal the user about ``line``."""

    @property
    def name(self) -> str:
        return type(self).__name__


class LogNotifier(Notifier):
    def notify(self, line: BufferLine) -> None:
        logger.info("notify: %s", line.summary())


class DesktopNotifier(Notifier):
    """Desktop alert via ``notify-send``."""

    def __init__(self, *, title: str = "IRC", urgency: str = "normal", timeout_ms: int = 10_000):
        self._title = title
        self._urgency = urgency
        self._timeout_ms = timeout_ms

    def notify(self, line: BufferLine) -> None:
        body = line.summary()[:500]
        try:
            subprocess.run(
                [
                    "notify-send",
                    f"--urgency={self._urgency}",
                    f"--expire-time={self._timeout_ms}",
                    self._title,
                    body,
                ],
                check=False,
                capture_output=True,
                timeout=5,
            )
        except FileNotFoundError:
            logger.warning("notify-send not available; desktop notification skipped")
        except (OSError, subprocess.SubprocessError) as exc:
            logger.warning("notify-send failed: %s", exc)


class SoundNotifier(Notifier):
    """Plays a sound file through ``paplay`` (or another player command)."""

    def __init__(self, sound_file: str, player: str = "paplay"):
        self._sound_file = sound_file
        self._player = player

    def notify(self, line: BufferLine) -> None:
        try:
            subprocess.run([self._player, self._sound_file], check=False, capture_output=True, timeout=30)
        except FileNotFoundError:
            logger.warning("%s not available; sound notification skipped", self._player)
        except (OSError, subprocess.SubprocessError) as exc:
            logger.warning("%s failed: %s", self._player, exc)


class BackgroundNotifier(Notifier):
    """Queues lines for one daemon worker thread and returns immediately.

    Lines are handed to ``inner`` one at a time in arrival order, so a burst
    of highlights never runs more than one helper process at once.
    """

    def __init__(self, inner: Notifier):
        self.inner = inner
        self._queue: queue.Queue[BufferLine] = queue.Queue()
        self._worker: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return f"background {self.inner.name}"

    def notify(self, line: BufferLine) -> None:
        self._queue.put(line)
        with self._lock:
            if self._worker is None:
                self._worker = threading.Thread(target=self._run, name=self.name, daemon=True)
                self._worker.start()

    def _run(self) -> None:
        while True:
            line = self._queue.get()
            try:
                self.inner.notify(line)
            except Exception:
                logger.exception("%s failed", self.inner.name)
