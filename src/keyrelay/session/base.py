"""Abstract base class for relay sessions.

A session owns everything one run of a role needs: the relay channel,
the local key source, and the role-specific state (the peer registry
for a host, the simulator for a client). Nothing is shared between
sessions, so several can be created and run one after another in the
same process.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from keyrelay.domain.models import Address, SessionState
from keyrelay.keyboard.base import KeySource
from keyrelay.relay.channel import RelayChannel

logger = logging.getLogger(__name__)


class Session(ABC):
    """Common lifecycle for the host and client roles.

    Subclasses implement :meth:`run`, which drives the session from
    ``IDLE`` to ``STOPPED`` and returns once the local quit key has been
    pressed, and :meth:`handle_datagram`, the receive-cycle callback.

    Example usage::

        session = HostSession(translator=translator, keys=TerminalKeySource())
        await session.run()
    """

    role: str = "session"

    def __init__(
        self,
        keys: KeySource,
        channel: RelayChannel | None = None,
        quit_key: str = "q",
    ) -> None:
        self._keys = keys
        self._channel = channel or RelayChannel()
        self._quit_key = quit_key
        self._state = SessionState.IDLE

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def channel(self) -> RelayChannel:
        return self._channel

    @property
    def is_active(self) -> bool:
        return self._state not in (SessionState.IDLE, SessionState.STOPPED)

    @abstractmethod
    async def run(self) -> SessionState:
        """Run the session until the quit key is pressed.

        Returns:
            The final state, ``STOPPED`` after a normal quit.
        """
        ...

    @abstractmethod
    async def handle_datagram(self, payload: bytes, sender: Address) -> None:
        """Decode one inbound datagram and act on it."""
        ...

    async def stop(self) -> None:
        """Close the channel and enter the terminal state. Idempotent."""
        if self._state is SessionState.STOPPED:
            return
        await self._channel.close()
        self._set_state(SessionState.STOPPED)

    async def _read_until_quit(self) -> None:
        """Feed local keystrokes to :meth:`_on_key` until the quit key."""
        while self.is_active:
            try:
                key = await self._keys.read_key()
            except EOFError:
                logger.info("Keyboard input closed, stopping %s", self.role)
                return
            if key == self._quit_key:
                logger.info("Quit key pressed, stopping %s", self.role)
                return
            await self._on_key(key)

    async def _on_key(self, key: str) -> None:
        """React to a local keystroke. The default ignores it."""

    def _set_state(self, state: SessionState) -> None:
        if state is self._state:
            return
        logger.debug("%s state: %s -> %s", self.role, self._state.value, state.value)
        self._state = state
