"""UDP relay transport and host-side peer tracking.

Public API:
    RelayChannel -- Datagram channel with a re-arming receive cycle
    PeerRegistry -- Clients known to a host
    resolve_local_ipv4 -- Address a client announces
"""

from keyrelay.relay.channel import RelayChannel
from keyrelay.relay.netutil import resolve_local_ipv4
from keyrelay.relay.peers import PeerRegistry

__all__ = ["PeerRegistry", "RelayChannel", "resolve_local_ipv4"]
