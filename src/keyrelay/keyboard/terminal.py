"""Keystroke source reading the controlling terminal.

Puts the TTY in cbreak mode for the duration of each read so a single
key press is delivered without waiting for Enter and without echo.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import termios
import tty
from typing import TextIO

from keyrelay.keyboard.base import KeySource

logger = logging.getLogger(__name__)


class TerminalKeySource(KeySource):
    """Reads one character at a time from stdin.

    Falls back to plain buffered reads when stdin is not a TTY (piped
    input), which keeps scripted sessions working.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdin

    @property
    def is_tty(self) -> bool:
        try:
            return self._stream.isatty()
        except ValueError:
            return False

    async def read_key(self) -> str:
        """Block (in an executor thread) until a key is pressed."""
        loop = asyncio.get_running_loop()
        char = await loop.run_in_executor(None, self._read_blocking)
        if not char:
            raise EOFError("Keyboard input closed")
        return char

    def _read_blocking(self) -> str:
        if not self.is_tty:
            return self._stream.read(1)
        fd = self._stream.fileno()
        old_attrs = termios.tcgetattr(fd)
        try:
            tty.setcbreak(fd)
            return self._stream.read(1)
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, old_attrs)
