"""Tests for local IPv4 address discovery."""

from __future__ import annotations

import socket
from unittest.mock import patch

import pytest

from keyrelay.errors import NoIPv4Interface
from keyrelay.relay.netutil import resolve_local_ipv4


def _infos(*addresses: str) -> list[tuple]:
    return [
        (socket.AF_INET, socket.SOCK_DGRAM, 17, "", (address, 0))
        for address in addresses
    ]


class TestResolveLocalIpv4:
    def test_route_towards_loopback_target(self) -> None:
        assert resolve_local_ipv4("127.0.0.1") == "127.0.0.1"

    def test_hostname_prefers_non_loopback(self) -> None:
        with patch("socket.getaddrinfo", return_value=_infos("127.0.1.1", "192.168.1.50")):
            assert resolve_local_ipv4() == "192.168.1.50"

    def test_hostname_falls_back_to_loopback(self) -> None:
        with patch("socket.getaddrinfo", return_value=_infos("127.0.1.1")):
            assert resolve_local_ipv4() == "127.0.1.1"

    def test_route_failure_falls_back_to_hostname(self) -> None:
        with patch("keyrelay.relay.netutil._route_source_ipv4", return_value=None), \
                patch("socket.getaddrinfo", return_value=_infos("10.1.2.3")):
            assert resolve_local_ipv4("192.168.1.1") == "10.1.2.3"

    def test_no_ipv4_address_raises(self) -> None:
        with patch("socket.getaddrinfo", side_effect=socket.gaierror("no such host")):
            with pytest.raises(NoIPv4Interface):
                resolve_local_ipv4()

    def test_empty_lookup_raises(self) -> None:
        with patch("socket.getaddrinfo", return_value=[]):
            with pytest.raises(NoIPv4Interface):
                resolve_local_ipv4()
