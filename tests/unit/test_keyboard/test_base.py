"""Tests for the keyboard abstract base classes."""

from __future__ import annotations

import pytest

from keyrelay.keyboard.base import (
    KeySimulationError,
    KeySimulator,
    KeySource,
    NullKeySimulator,
)


class _OneKey(KeySource):
    def __init__(self) -> None:
        self.events: list[str] = []

    async def open(self) -> None:
        self.events.append("open")

    async def close(self) -> None:
        self.events.append("close")

    async def read_key(self) -> str:
        return "k"


class TestKeySourceInterface:
    def test_cannot_instantiate_abstract_class(self) -> None:
        with pytest.raises(TypeError):
            KeySource()  # type: ignore[abstract]

    @pytest.mark.asyncio
    async def test_context_manager_opens_and_closes(self) -> None:
        source = _OneKey()
        async with source as keys:
            assert await keys.read_key() == "k"
        assert source.events == ["open", "close"]


class TestKeySimulatorInterface:
    def test_cannot_instantiate_abstract_class(self) -> None:
        with pytest.raises(TypeError):
            KeySimulator()  # type: ignore[abstract]

    def test_key_simulation_error(self) -> None:
        error = KeySimulationError("no display", backend="pynput")
        assert str(error) == "no display"
        assert error.backend == "pynput"

    @pytest.mark.asyncio
    async def test_null_simulator_logs(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level("INFO", logger="keyrelay")
        async with NullKeySimulator() as sim:
            await sim.simulate_key("z")
        assert "Received key (not simulated): z" in caplog.text
