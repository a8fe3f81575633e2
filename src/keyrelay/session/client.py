"""Client role: announce to a host and replay the keys it relays.

States: IDLE -> CONNECTING -> CONNECTED -> STOPPED.
"""

from __future__ import annotations

import logging

from keyrelay.config.settings import DEFAULT_RELAY_PORT
from keyrelay.domain.models import Address, Announce, KeyEvent, SessionState
from keyrelay.errors import KeySimulationError, MalformedMessage, StateStoreError
from keyrelay.keyboard.base import KeySimulator, KeySource
from keyrelay.keymap.store import StateStore
from keyrelay.protocol.codec import decode, encode_announce
from keyrelay.relay.channel import RelayChannel
from keyrelay.relay.netutil import resolve_local_ipv4
from keyrelay.session.base import Session

logger = logging.getLogger(__name__)


class ClientSession(Session):
    """Joins a host and simulates every key event it receives.

    Received keys are simulated as-is: the host has already applied its
    mapping, so the client's own table is not consulted.
    """

    role = "client"

    def __init__(
        self,
        address_text: str,
        keys: KeySource,
        simulator: KeySimulator,
        store: StateStore | None = None,
        channel: RelayChannel | None = None,
        port: int = DEFAULT_RELAY_PORT,
        bind_host: str = "0.0.0.0",
        local_address: str | None = None,
        quit_key: str = "q",
    ) -> None:
        super().__init__(keys=keys, channel=channel, quit_key=quit_key)
        self._address_text = address_text
        self._simulator = simulator
        self._store = store
        self._port = port
        self._bind_host = bind_host
        self._local_address = local_address
        self._host: Address | None = None
        self._simulator_ready = False

    @property
    def host(self) -> Address | None:
        return self._host

    @property
    def local_address(self) -> str | None:
        return self._local_address

    async def run(self) -> SessionState:
        """Join the host, then replay keys until the quit key.

        Raises:
            InvalidAddress: If the address text is not IPv4. The session
                stays IDLE.
            NoIPv4Interface: If no local address can be announced.
            BindError: If the relay port is in use locally.
        """
        if self._state is not SessionState.IDLE:
            raise RuntimeError(f"Client session already {self._state.value}")

        logger.info("Attempting to join %s", self._address_text)
        host = Address.parse(self._address_text, port=self._port)
        self._host = host
        self._set_state(SessionState.CONNECTING)
        self._remember_host()

        try:
            await self._connect(host)
            async with self._keys:
                await self._read_until_quit()
        finally:
            await self.stop()
            if self._simulator_ready:
                await self._simulator.close()
                self._simulator_ready = False
        logger.info("Disconnected from %s", host.host)
        return self._state

    async def _connect(self, host: Address) -> None:
        if self._local_address is None:
            self._local_address = resolve_local_ipv4(host.host)

        await self._channel.bind(self._port, self._bind_host)
        self._channel.connect(host)

        try:
            await self._simulator.open()
            self._simulator_ready = True
        except KeySimulationError as e:
            logger.warning("Key simulation unavailable, received keys will only be logged: %s", e)

        self._channel.send(encode_announce(self._local_address))
        logger.info("Notified host %s of new connection from IP: %s", host.host, self._local_address)

        self._set_state(SessionState.CONNECTED)
        self._channel.start_receiving(self.handle_datagram)
        logger.info("Connected to %s, waiting for key events (press '%s' to leave)",
                    host.host, self._quit_key)

    def _remember_host(self) -> None:
        if self._store is None:
            return
        try:
            state = self._store.load_or_default()
            state.last_used_ip_address = self._address_text.strip()
            self._store.save(state)
        except StateStoreError as e:
            logger.warning("Could not save last used address: %s", e)

    async def handle_datagram(self, payload: bytes, sender: Address) -> None:
        try:
            message = decode(payload)
        except MalformedMessage as e:
            logger.debug("Dropping datagram from %s: %s", sender.host, e)
            return
        if message is None:
            return

        if isinstance(message, KeyEvent):
            logger.debug("Received key: %s", message.char)
            await self._simulate(message.char)
        elif isinstance(message, Announce):
            logger.debug("Ignoring announce from %s on a client", message.address)

    async def _simulate(self, char: str) -> None:
        if not self._simulator_ready:
            logger.info("Received key (simulation unavailable): %s", char)
            return
        try:
            await self._simulator.simulate_key(char)
        except KeySimulationError as e:
            logger.warning("Key simulation failed: %s", e)
