"""Local keyboard input and OS keystroke simulation for keyrelay.

Public API:
    KeySource -- Abstract keystroke reader
    KeySimulator -- Abstract OS keystroke injector
    NullKeySimulator -- Logs keys instead of injecting them
    TerminalKeySource -- Raw TTY reader
    PynputKeySimulator -- pynput-backed injector
"""

from keyrelay.keyboard.base import (
    KeySimulationError,
    KeySimulator,
    KeySource,
    NullKeySimulator,
)

__all__ = [
    "KeySimulationError",
    "KeySimulator",
    "KeySource",
    "NullKeySimulator",
    "PynputKeySimulator",
    "TerminalKeySource",
]


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations with platform dependencies."""
    if name == "TerminalKeySource":
        from keyrelay.keyboard.terminal import TerminalKeySource
        return TerminalKeySource
    if name == "PynputKeySimulator":
        from keyrelay.keyboard.pynput_backend import PynputKeySimulator
        return PynputKeySimulator
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
