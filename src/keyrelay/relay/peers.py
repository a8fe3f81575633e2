"""Host-side registry of clients that have announced themselves."""

from __future__ import annotations

import logging

from keyrelay.domain.models import Address

logger = logging.getLogger(__name__)


class PeerRegistry:
    """Set of client addresses, deduplicated by host.

    Only the host's receive handler mutates the registry, and it runs on
    the event loop thread, so no lock is taken. Entries are never removed:
    client disconnects are not observable over the relay protocol.
    """

    def __init__(self) -> None:
        self._peers: dict[str, Address] = {}

    def register(self, address: Address) -> bool:
        """Add a client address.

        Returns:
            True if the host was not known before, False otherwise.
        """
        if address.host in self._peers:
            return False
        self._peers[address.host] = address
        logger.info("Registered client %s (%d total)", address.host, len(self._peers))
        return True

    def all(self) -> list[Address]:
        """Snapshot of every registered client, for broadcasting."""
        return list(self._peers.values())

    def __len__(self) -> int:
        return len(self._peers)

    def __contains__(self, address: object) -> bool:
        if isinstance(address, Address):
            return address.host in self._peers
        return address in self._peers
