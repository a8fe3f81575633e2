"""Relay wire protocol: announce and key-event datagrams."""

from keyrelay.protocol.codec import decode, encode_announce, encode_key_event

__all__ = ["decode", "encode_announce", "encode_key_event"]
