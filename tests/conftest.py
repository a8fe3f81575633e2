"""Shared test fixtures for the keyrelay test suite.

Provides scripted key sources, recording simulators, and temporary state
stores so sessions can be driven end-to-end without a terminal or an OS
input backend.
"""

from __future__ import annotations

import asyncio
import socket
from pathlib import Path

import pytest

from keyrelay.keyboard.base import KeySimulator, KeySource
from keyrelay.keymap.store import StateStore
from keyrelay.keymap.translator import KeyTranslator


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class ScriptedKeySource(KeySource):
    """A KeySource fed from the test through :meth:`press`."""

    def __init__(self, keys: str = "") -> None:
        self._queue: asyncio.Queue[str] = asyncio.Queue()
        for key in keys:
            self._queue.put_nowait(key)
        self.opened = False
        self.closed = False

    def press(self, key: str) -> None:
        self._queue.put_nowait(key)

    async def open(self) -> None:
        self.opened = True

    async def close(self) -> None:
        self.closed = True

    async def read_key(self) -> str:
        return await self._queue.get()


class RecordingSimulator(KeySimulator):
    """A KeySimulator that remembers every simulated key."""

    def __init__(self) -> None:
        self.keys: list[str] = []
        self.received = asyncio.Event()
        self.is_open = False

    async def open(self) -> None:
        self.is_open = True

    async def close(self) -> None:
        self.is_open = False

    async def simulate_key(self, char: str) -> None:
        self.keys.append(char)
        self.received.set()


async def wait_for(predicate, timeout: float = 2.0) -> None:
    """Poll ``predicate`` on the event loop until it is true."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.01)


def free_udp_port(host: str = "127.0.0.1") -> int:
    """Return a UDP port that is currently unused on ``host``."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
        s.bind((host, 0))
        return s.getsockname()[1]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def state_path(tmp_path: Path) -> Path:
    """Location of a state file inside the test's temporary directory."""
    return tmp_path / "program.settings"


@pytest.fixture
def store(state_path: Path) -> StateStore:
    return StateStore(state_path)


@pytest.fixture
def translator(store: StateStore) -> KeyTranslator:
    """A translator mapping a -> z, persisted to the temporary store."""
    t = KeyTranslator(store=store)
    t.remap([("a", "z")])
    return t


@pytest.fixture
def recording_simulator() -> RecordingSimulator:
    return RecordingSimulator()


@pytest.fixture
def host_keys() -> ScriptedKeySource:
    """Scripted keystrokes for a host session."""
    return ScriptedKeySource()


@pytest.fixture
def client_keys() -> ScriptedKeySource:
    """Scripted keystrokes for a client session."""
    return ScriptedKeySource()


@pytest.fixture
def wait_until():
    """Async helper: ``await wait_until(lambda: cond)``."""
    return wait_for


@pytest.fixture
def udp_port() -> int:
    return free_udp_port()
