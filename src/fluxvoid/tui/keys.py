"""Non-blocking quit-key polling for the live dashboard.

On POSIX the terminal is switched to cbreak mode for the lifetime of the
poller so single key presses arrive without Enter; the previous mode is
restored on exit. On Windows msvcrt is used directly.
"""

from __future__ import annotations

import os
import sys
from typing import TextIO

import structlog

if sys.platform == "win32":
    import msvcrt
else:
    import select
    import termios
    import tty

log = structlog.get_logger()

QUIT_KEYS = frozenset("qQ")


class QuitKeyPoller:
    """Context manager answering "was the quit key pressed since last check?".

    When stdin is not a terminal (pipes, CI) polling always returns False;
    the loop is then stopped by Ctrl-C or a tick limit.
    """

    def __init__(self, stream: TextIO | None = None, keys: frozenset[str] = QUIT_KEYS) -> None:
        self._stream = stream if stream is not None else sys.stdin
        self._keys = keys
        self._old_settings: list | None = None
        self._enabled = False

    def __enter__(self) -> QuitKeyPoller:
        try:
            self._enabled = self._stream.isatty()
        except (AttributeError, ValueError):
            self._enabled = False
        if self._enabled and sys.platform != "win32":
            fd = self._stream.fileno()
            self._old_settings = termios.tcgetattr(fd)
            tty.setcbreak(fd)
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._old_settings is not None:
            termios.tcsetattr(self._stream.fileno(), termios.TCSADRAIN, self._old_settings)
            self._old_settings = None
        self._enabled = False

    def poll(self) -> bool:
        """Drain pending key presses; True if any was a quit key."""
        if not self._enabled:
            return False
        pressed = False
        for key in self._pending_keys():
            if key in self._keys:
                pressed = True
        return pressed

    def _pending_keys(self) -> list[str]:
        keys: list[str] = []
        if sys.platform == "win32":
            while msvcrt.kbhit():
                keys.append(msvcrt.getwch())
            return keys
        fd = self._stream.fileno()
        while select.select([fd], [], [], 0)[0]:
            chunk = os.read(fd, 1024)
            if not chunk:
                log.debug("stdin_closed")
                self._enabled = False
                break
            keys.extend(chunk.decode("utf-8", errors="ignore"))
        return keys
