"""Host role: translate local keystrokes and broadcast them to clients.

States: IDLE -> HOSTING -> STOPPED.
"""

from __future__ import annotations

import logging

from keyrelay.config.settings import DEFAULT_RELAY_PORT
from keyrelay.domain.models import Address, Announce, KeyEvent, SessionState
from keyrelay.errors import MalformedMessage
from keyrelay.keyboard.base import KeySource
from keyrelay.keymap.translator import KeyTranslator
from keyrelay.protocol.codec import decode, encode_key_event
from keyrelay.relay.channel import RelayChannel
from keyrelay.relay.peers import PeerRegistry
from keyrelay.session.base import Session

logger = logging.getLogger(__name__)


class HostSession(Session):
    """Captures keystrokes, translates them, and relays them to clients.

    Clients are learned from their announce datagrams. Key events that
    arrive at the host are ignored: a host never replays keys.
    """

    role = "host"

    def __init__(
        self,
        translator: KeyTranslator,
        keys: KeySource,
        channel: RelayChannel | None = None,
        registry: PeerRegistry | None = None,
        port: int = DEFAULT_RELAY_PORT,
        bind_host: str = "0.0.0.0",
        peer_port: int | None = None,
        quit_key: str = "q",
    ) -> None:
        super().__init__(keys=keys, channel=channel, quit_key=quit_key)
        self._translator = translator
        self._registry = registry if registry is not None else PeerRegistry()
        self._port = port
        self._bind_host = bind_host
        self._peer_port = peer_port

    @property
    def registry(self) -> PeerRegistry:
        return self._registry

    async def run(self) -> SessionState:
        """Bind the relay port, then relay keys until the quit key.

        Raises:
            BindError: If the relay port is in use. The session stays IDLE.
        """
        if self._state is not SessionState.IDLE:
            raise RuntimeError(f"Host session already {self._state.value}")

        logger.info("Starting host on port %d", self._port)
        await self._channel.bind(self._port, self._bind_host)
        if self._peer_port is None:
            self._peer_port = self._channel.local_address[1]

        self._set_state(SessionState.HOSTING)
        self._channel.start_receiving(self.handle_datagram)
        logger.info("Hosting on port %d, press '%s' to stop", self._peer_port, self._quit_key)

        try:
            async with self._keys:
                await self._read_until_quit()
        finally:
            await self.stop()
        logger.info("Host stopped (%d client(s) registered)", len(self._registry))
        return self._state

    async def _on_key(self, key: str) -> None:
        self.relay_key(key)

    def relay_key(self, key: str) -> int:
        """Translate one local keystroke and broadcast it.

        Returns:
            The number of clients the key event was sent to. Unmapped
            keys are not sent at all.
        """
        translated = self._translator.translate(key)
        if translated is None:
            logger.debug("Key %r has no mapping, not sent", key)
            return 0
        payload = encode_key_event(translated)
        peers = self._registry.all()
        sent = self._channel.send_to_all(payload, peers)
        logger.debug("Sent key %r (from %r) to %d/%d client(s)", translated, key, sent, len(peers))
        return sent

    async def handle_datagram(self, payload: bytes, sender: Address) -> None:
        try:
            message = decode(payload)
        except MalformedMessage as e:
            logger.debug("Dropping datagram from %s: %s", sender.host, e)
            return
        if message is None:
            return

        if isinstance(message, Announce):
            client = Address(host=message.address, port=self._peer_port or self._port)
            if self._registry.register(client):
                logger.info("New client joined from IP: %s", client.host)
            else:
                logger.debug("Client %s announced again", client.host)
        elif isinstance(message, KeyEvent):
            logger.debug("Ignoring key event %r from %s while hosting", message.char, sender.host)
