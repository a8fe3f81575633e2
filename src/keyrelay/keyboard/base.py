"""Abstract base classes for local keystroke input and output.

A host session reads keystrokes from a :class:`KeySource`; a client
session replays received characters through a :class:`KeySimulator`.
Both are swappable so sessions can run against real terminals and
operating-system input, or against scripted fakes in tests.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from keyrelay.errors import KeySimulationError

logger = logging.getLogger(__name__)

__all__ = ["KeySimulationError", "KeySimulator", "KeySource", "NullKeySimulator"]


class KeySource(ABC):
    """Abstract interface for reading local keystrokes one at a time.

    Example usage::

        async with TerminalKeySource() as keys:
            key = await keys.read_key()
    """

    async def open(self) -> None:
        """Prepare the input device. The default does nothing."""

    async def close(self) -> None:
        """Release the input device. Safe to call multiple times."""

    @abstractmethod
    async def read_key(self) -> str:
        """Wait for the next keystroke and return it as one character.

        Raises:
            EOFError: If the input is exhausted.
        """
        ...

    async def __aenter__(self) -> KeySource:
        await self.open()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.close()


class KeySimulator(ABC):
    """Abstract interface for injecting keystrokes into the local OS.

    Simulation is fire-and-forget: the client session logs failures and
    moves on to the next key event.

    Example usage::

        async with PynputKeySimulator() as sim:
            await sim.simulate_key("z")
    """

    @abstractmethod
    async def open(self) -> None:
        """Acquire the OS input backend.

        Raises:
            KeySimulationError: If the backend is unavailable.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the OS input backend. Safe to call multiple times."""
        ...

    @abstractmethod
    async def simulate_key(self, char: str) -> None:
        """Type one character as if it was pressed on the local keyboard.

        Raises:
            KeySimulationError: If the keystroke cannot be injected.
        """
        ...

    async def __aenter__(self) -> KeySimulator:
        await self.open()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.close()


class NullKeySimulator(KeySimulator):
    """Logs received keys without touching the OS input stream."""

    async def open(self) -> None:
        logger.info("Key simulation disabled, received keys are only logged")

    async def close(self) -> None:
        pass

    async def simulate_key(self, char: str) -> None:
        logger.info("Received key (not simulated): %s", char)
