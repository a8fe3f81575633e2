"""UDP transport shared by the host and client sessions.

Wraps one asyncio datagram endpoint. Inbound datagrams are queued by the
protocol and drained by a single background task that hands each one to
the session's receive handler, then waits for the next. The task runs
until :meth:`RelayChannel.close` is called.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Union

from pydantic import ValidationError

from keyrelay.domain.models import Address
from keyrelay.errors import BindError, ChannelClosed, MalformedMessage

logger = logging.getLogger(__name__)

MessageHandler = Callable[[bytes, Address], Union[None, Awaitable[None]]]

# Queued by the protocol when the socket goes away
_CLOSED = object()


class _RelayProtocol(asyncio.DatagramProtocol):
    """Pushes every datagram onto the channel's inbound queue."""

    def __init__(self, queue: asyncio.Queue) -> None:
        self._queue = queue
        self.closed = asyncio.get_running_loop().create_future()

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        self._queue.put_nowait((data, addr))

    def error_received(self, exc: Exception) -> None:
        # ICMP errors such as "port unreachable" for a departed client
        logger.warning("Relay socket error: %s", exc)

    def connection_lost(self, exc: Exception | None) -> None:
        self._queue.put_nowait(_CLOSED)
        if not self.closed.done():
            self.closed.set_result(None)


class RelayChannel:
    """Best-effort datagram channel bound to one local port.

    Usage::

        channel = RelayChannel()
        await channel.bind(11000)
        channel.connect(Address.parse("192.168.1.10"))
        channel.start_receiving(on_message)
        channel.send(b"new:192.168.1.50")
        await channel.close()
    """

    def __init__(self, max_datagram: int = 1024) -> None:
        self._max_datagram = max_datagram
        self._transport: asyncio.DatagramTransport | None = None
        self._protocol: _RelayProtocol | None = None
        self._queue: asyncio.Queue = asyncio.Queue()
        self._remote: Address | None = None
        self._receive_task: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._transport is not None and not self._closed

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def is_receiving(self) -> bool:
        return self._receive_task is not None and not self._receive_task.done()

    @property
    def remote(self) -> Address | None:
        return self._remote

    @property
    def local_address(self) -> tuple[str, int]:
        """The (host, port) the socket is actually bound to."""
        transport = self._require_transport()
        return transport.get_extra_info("sockname")[:2]

    async def bind(self, port: int, host: str = "0.0.0.0") -> None:
        """Reserve the local port for sending and receiving.

        Raises:
            BindError: If the port is already in use or cannot be bound.
            ChannelClosed: If the channel was closed.
        """
        if self._closed:
            raise ChannelClosed("Relay channel is closed")
        if self._transport is not None:
            raise BindError(f"Relay channel already bound to {self.local_address}", port=port)

        loop = asyncio.get_running_loop()
        try:
            transport, protocol = await loop.create_datagram_endpoint(
                lambda: _RelayProtocol(self._queue),
                local_addr=(host, port),
            )
        except OSError as e:
            raise BindError(f"Cannot bind UDP port {port} on {host}: {e}", port=port) from e
        self._transport = transport
        self._protocol = protocol
        logger.info("Relay channel bound to %s:%d", *self.local_address)

    def connect(self, remote: Address) -> None:
        """Set the default destination used by :meth:`send`."""
        self._remote = remote
        logger.info("Relay channel default destination: %s:%d", remote.host, remote.port)

    def send(self, payload: bytes, destination: Address | None = None) -> bool:
        """Send one datagram; best-effort.

        Send errors are logged and reported through the return value.

        Returns:
            True if the datagram was handed to the OS.

        Raises:
            ChannelClosed: If the channel is not open.
        """
        transport = self._require_transport()
        target = destination or self._remote
        if target is None:
            raise ValueError("No destination given and channel is not connected")
        try:
            transport.sendto(payload, target.as_tuple())
        except OSError as e:
            logger.warning("Send to %s failed: %s", target.host, e)
            return False
        logger.debug("Sent %d byte(s) to %s:%d", len(payload), target.host, target.port)
        return True

    def send_to_all(self, payload: bytes, destinations: Iterable[Address]) -> int:
        """Send the same datagram to every destination.

        Returns:
            The number of destinations the datagram was handed off for.
        """
        return sum(1 for destination in destinations if self.send(payload, destination))

    async def receive(self) -> tuple[bytes, Address]:
        """Wait for the next inbound datagram.

        Raises:
            ChannelClosed: If the channel is closed before one arrives.
            MalformedMessage: If the sender is not an IPv4 peer.
        """
        self._require_transport()
        item = await self._queue.get()
        if item is _CLOSED or self._closed:
            raise ChannelClosed("Relay channel is closed")
        data, addr = item
        if len(data) > self._max_datagram:
            data = data[: self._max_datagram]
        try:
            sender = Address(host=addr[0], port=addr[1])
        except ValidationError as e:
            raise MalformedMessage(f"Datagram from unsupported sender {addr[0]}") from e
        return data, sender

    def start_receiving(self, on_message: MessageHandler) -> None:
        """Deliver every inbound datagram to ``on_message`` until close().

        ``on_message`` may be a plain function or a coroutine function.
        Exceptions raised by it are logged and do not stop the cycle.
        """
        self._require_transport()
        if self.is_receiving:
            raise RuntimeError("Relay channel is already receiving")
        self._receive_task = asyncio.create_task(self._receive_loop(on_message))

    async def _receive_loop(self, on_message: MessageHandler) -> None:
        while True:
            try:
                payload, sender = await self.receive()
            except ChannelClosed:
                logger.debug("Receive cycle ended: channel closed")
                return
            except MalformedMessage as e:
                logger.debug("Dropping datagram: %s", e)
                continue
            try:
                result = on_message(payload, sender)
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Receive handler failed for datagram from %s", sender.host)

    async def close(self) -> None:
        """Release the socket and stop the receive cycle. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        if self._transport is not None:
            self._transport.close()
        self._queue.put_nowait(_CLOSED)
        if self._protocol is not None:
            # The socket itself is released on the next loop iteration
            await self._protocol.closed

        task = self._receive_task
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("Relay channel closed")

    def _require_transport(self) -> asyncio.DatagramTransport:
        if self._closed:
            raise ChannelClosed("Relay channel is closed")
        if self._transport is None:
            raise ChannelClosed("Relay channel is not bound")
        return self._transport

    async def __aenter__(self) -> RelayChannel:
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.close()
