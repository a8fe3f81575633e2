"""Wire codec for the two relay message kinds.

Every message is exactly one UDP datagram with no framing:

    Announce   b"new:192.168.1.50"   (UTF-8 text)
    KeyEvent   b"z"                  (one UTF-8 encoded character)
"""

from __future__ import annotations

from keyrelay.domain.models import Address, Announce, KeyEvent, WireMessage
from keyrelay.errors import InvalidAddress, MalformedMessage

ANNOUNCE_PREFIX = b"new:"
ENCODING = "utf-8"


def encode_key_event(char: str) -> bytes:
    """Encode a single character as a key-event datagram."""
    if len(char) != 1:
        raise ValueError(f"Key event must be exactly one character, got {char!r}")
    return char.encode(ENCODING)


def encode_announce(address: Address | str) -> bytes:
    """Encode an announce datagram for the given client address."""
    return ANNOUNCE_PREFIX + str(address).encode(ENCODING)


def decode(payload: bytes) -> WireMessage | None:
    """Classify a raw datagram.

    Returns None for an empty payload. Anything after the first
    character of a key event is ignored.

    Raises:
        MalformedMessage: If the payload cannot be decoded.
    """
    if not payload:
        return None

    if payload.startswith(ANNOUNCE_PREFIX):
        return _decode_announce(payload[len(ANNOUNCE_PREFIX):])

    text = _decode_leading_text(payload)
    if not text:
        raise MalformedMessage(f"Undecodable key event payload: {payload[:8]!r}")
    return KeyEvent(char=text[0])


def _decode_announce(body: bytes) -> Announce:
    try:
        text = body.decode(ENCODING)
    except UnicodeDecodeError as e:
        raise MalformedMessage(f"Announce is not valid UTF-8: {e}") from e
    try:
        address = Address.parse(text)
    except InvalidAddress as e:
        raise MalformedMessage(f"Announce carries an invalid address: {text!r}") from e
    return Announce(address=address.host)


def _decode_leading_text(payload: bytes) -> str:
    """Decode the longest valid UTF-8 prefix of the payload."""
    try:
        return payload.decode(ENCODING)
    except UnicodeDecodeError as e:
        return payload[:e.start].decode(ENCODING)
