"""Domain models for keyrelay.

This package contains the core data structures and enumerations used
throughout the system. All models use Pydantic v2 for validation and
serialization.
"""

from keyrelay.domain.models import (
    Address,
    Announce,
    KeyEvent,
    SavedState,
    SessionState,
    WireMessage,
)

__all__ = [
    "Address",
    "Announce",
    "KeyEvent",
    "SavedState",
    "SessionState",
    "WireMessage",
]
