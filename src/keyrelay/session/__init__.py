"""Host and client relay sessions.

Public API:
    Session -- Abstract base class
    HostSession -- Translate and broadcast local keystrokes
    ClientSession -- Announce to a host and replay its key events
"""

from keyrelay.session.base import Session
from keyrelay.session.client import ClientSession
from keyrelay.session.host import HostSession

__all__ = ["ClientSession", "HostSession", "Session"]
