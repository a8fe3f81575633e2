"""OS keystroke simulation through pynput.

pynput talks to X11/uinput on Linux, Quartz on macOS and SendInput on
Windows. Importing it fails on machines without a usable backend (for
example a headless Linux box), which surfaces here as a
KeySimulationError from :meth:`PynputKeySimulator.open`.
"""

from __future__ import annotations

import asyncio
import logging

from keyrelay.keyboard.base import KeySimulationError, KeySimulator

logger = logging.getLogger(__name__)


class PynputKeySimulator(KeySimulator):
    """Types received characters with ``pynput.keyboard.Controller``.

    The controller call blocks briefly, so it runs in the default
    executor to keep the receive cycle responsive.
    """

    def __init__(self) -> None:
        self._controller = None

    @property
    def is_open(self) -> bool:
        return self._controller is not None

    async def open(self) -> None:
        """Create the pynput keyboard controller."""
        try:
            from pynput.keyboard import Controller

            self._controller = Controller()
        except Exception as e:
            raise KeySimulationError(
                f"pynput keyboard backend unavailable: {e}", backend="pynput"
            ) from e
        logger.info("Key simulation backend ready (pynput)")

    async def close(self) -> None:
        self._controller = None

    async def simulate_key(self, char: str) -> None:
        """Type ``char`` via the OS input stream."""
        if self._controller is None:
            raise KeySimulationError("Key simulator not open", backend="pynput")
        controller = self._controller
        logger.debug("Simulating key press: %s", char)
        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, controller.type, char)
        except Exception as e:
            raise KeySimulationError(
                f"Failed to simulate key {char!r}: {e}", backend="pynput"
            ) from e
