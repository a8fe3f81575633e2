"""keyrelay -- LAN keystroke relay.

A host captures local keystrokes, translates each one through a
configurable substitution table, and broadcasts the result over UDP to
every client that has announced itself. Clients replay the received
characters as simulated key presses on their own machine.
"""

__version__ = "0.1.0"
