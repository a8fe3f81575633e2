"""Core domain models for keyrelay.

These models represent the data flowing through the relay: peer
addresses, the two wire message kinds, the session lifecycle states,
and the settings persisted between runs.
"""

from __future__ import annotations

import enum
import ipaddress
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from keyrelay.config.settings import DEFAULT_RELAY_PORT
from keyrelay.errors import InvalidAddress


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class SessionState(str, enum.Enum):
    """Lifecycle state of a host or client session."""

    IDLE = "idle"
    HOSTING = "hosting"  # Host only
    CONNECTING = "connecting"  # Client only
    CONNECTED = "connected"  # Client only
    STOPPED = "stopped"


# ---------------------------------------------------------------------------
# Addressing
# ---------------------------------------------------------------------------


def _validate_ipv4(text: str) -> str:
    try:
        return str(ipaddress.IPv4Address(text.strip()))
    except ValueError as e:
        raise InvalidAddress(f"Invalid IPv4 address: {text!r}", text=text) from e


class Address(BaseModel):
    """A peer's IPv4 host plus the relay port.

    Identity is the host value alone: the port is the same system-wide,
    so two addresses with the same host compare and hash equal.
    """

    model_config = ConfigDict(frozen=True)

    host: str = Field(description="Dotted IPv4 address")
    port: int = Field(default=DEFAULT_RELAY_PORT, ge=1, le=65535)

    @field_validator("host")
    @classmethod
    def _check_host(cls, value: str) -> str:
        try:
            return _validate_ipv4(value)
        except InvalidAddress as e:
            raise ValueError(str(e)) from e

    @classmethod
    def parse(cls, text: str, port: int = DEFAULT_RELAY_PORT) -> Address:
        """Build an Address from user-supplied text.

        Raises:
            InvalidAddress: If ``text`` is not a dotted IPv4 address.
        """
        return cls(host=_validate_ipv4(text), port=port)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self.host == other.host

    def __hash__(self) -> int:
        return hash(self.host)

    def __str__(self) -> str:
        return self.host

    def as_tuple(self) -> tuple[str, int]:
        return (self.host, self.port)


# ---------------------------------------------------------------------------
# Wire messages
# ---------------------------------------------------------------------------


class Announce(BaseModel):
    """A client telling the host where to send key events."""

    model_config = ConfigDict(frozen=True)

    message_type: Literal["announce"] = "announce"
    address: str = Field(description="Dotted IPv4 address of the announcing client")


class KeyEvent(BaseModel):
    """A single translated keystroke to replay on the receiver."""

    model_config = ConfigDict(frozen=True)

    message_type: Literal["key_event"] = "key_event"
    char: str = Field(min_length=1, max_length=1)


# Discriminated union for wire messages
WireMessage = Annotated[
    Union[Announce, KeyEvent],
    Field(discriminator="message_type"),
]


# ---------------------------------------------------------------------------
# Persisted state
# ---------------------------------------------------------------------------


class SavedState(BaseModel):
    """Settings kept on disk between runs.

    Field aliases match the on-disk JSON keys so files written by other
    implementations of the protocol stay readable.
    """

    model_config = ConfigDict(populate_by_name=True)

    last_used_ip_address: str | None = Field(default=None, alias="LastUsedIPAddress")
    key_mappings: dict[str, str] = Field(default_factory=dict, alias="KeyMappings")

    @field_validator("key_mappings", mode="before")
    @classmethod
    def _none_is_empty(cls, value: object) -> object:
        return {} if value is None else value
