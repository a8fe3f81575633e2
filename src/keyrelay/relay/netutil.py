"""Local IPv4 address discovery for client announces."""

from __future__ import annotations

import ipaddress
import logging
import socket

from keyrelay.errors import NoIPv4Interface

logger = logging.getLogger(__name__)

# Any port works: connecting a UDP socket sends nothing, it only picks a route.
_ROUTE_PROBE_PORT = 9


def _route_source_ipv4(target: str) -> str | None:
    """Return the local address the kernel would use to reach ``target``."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as probe:
            probe.connect((target, _ROUTE_PROBE_PORT))
            source = probe.getsockname()[0]
    except OSError as e:
        logger.debug("Route lookup towards %s failed: %s", target, e)
        return None
    if source == "0.0.0.0":
        return None
    return source


def _hostname_ipv4_addresses() -> list[str]:
    try:
        infos = socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET)
    except OSError as e:
        logger.debug("Hostname lookup failed: %s", e)
        return []
    addresses: list[str] = []
    for info in infos:
        address = info[4][0]
        if address not in addresses:
            addresses.append(address)
    return addresses


def resolve_local_ipv4(target: str | None = None) -> str:
    """Find the IPv4 address this machine should announce.

    When ``target`` (the host being joined) is given, the address of the
    interface routing towards it wins. Otherwise the hostname's addresses
    are used, preferring a non-loopback one.

    Raises:
        NoIPv4Interface: If no IPv4 address is available.
    """
    logger.debug("Getting local IP address...")
    if target:
        source = _route_source_ipv4(target)
        if source is not None:
            return source

    addresses = _hostname_ipv4_addresses()
    for address in addresses:
        if not ipaddress.IPv4Address(address).is_loopback:
            return address
    if addresses:
        return addresses[0]
    raise NoIPv4Interface("No network adapters with an IPv4 address in the system")
