"""Exception hierarchy shared by the keyrelay components."""

from __future__ import annotations


class KeyRelayError(Exception):
    """Base class for all keyrelay errors."""


class BindError(KeyRelayError):
    """Raised when the relay port cannot be bound (usually already in use)."""

    def __init__(self, message: str, port: int = 0) -> None:
        super().__init__(message)
        self.port = port


class InvalidAddress(KeyRelayError):
    """Raised when a join target is not a dotted IPv4 address."""

    def __init__(self, message: str, text: str = "") -> None:
        super().__init__(message)
        self.text = text


class NoIPv4Interface(KeyRelayError):
    """Raised when no local IPv4 address is available to announce."""


class ChannelClosed(KeyRelayError):
    """Raised when a relay channel is used after close()."""


class MalformedMessage(KeyRelayError):
    """Raised when an inbound datagram cannot be decoded."""


class StateStoreError(KeyRelayError):
    """Raised when the persisted state file cannot be read or written."""


class KeySimulationError(KeyRelayError):
    """Raised when the OS keystroke simulator fails."""

    def __init__(self, message: str, backend: str = "") -> None:
        super().__init__(message)
        self.backend = backend
