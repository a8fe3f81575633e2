"""Command-line interface for keyrelay.

Provides the ``keyrelay`` entry point: one-shot subcommands for hosting,
joining and remapping keys, plus the interactive command shell that runs
when no subcommand is given.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Callable, Iterable
from pathlib import Path

from keyrelay.config.settings import Settings
from keyrelay.domain.models import SessionState
from keyrelay.errors import KeyRelayError
from keyrelay.keyboard.base import KeySimulator, KeySource, NullKeySimulator
from keyrelay.keymap.store import StateStore
from keyrelay.keymap.translator import KeyTranslator, parse_mapping_text
from keyrelay.relay.channel import RelayChannel
from keyrelay.session.client import ClientSession
from keyrelay.session.host import HostSession

logger = logging.getLogger(__name__)

SHELL_PROMPT = "Enter command (h - host, k - map keys, j - join, q - quit): "


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="keyrelay",
        description="Relay translated keystrokes to other machines on the LAN",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/keyrelay.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("host", help="Host a session and broadcast mapped keys")

    join_parser = subparsers.add_parser("join", help="Join a host and replay its keys")
    join_parser.add_argument(
        "address", nargs="?", default=None,
        help="Host IPv4 address (default: last used)",
    )

    map_parser = subparsers.add_parser("map", help="Add key mappings, or list them")
    map_parser.add_argument(
        "pairs", nargs="?", default=None,
        help="Mappings in the form a=b,c=d",
    )

    subparsers.add_parser("shell", help="Interactive command shell (default)")

    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# Command surface
# ---------------------------------------------------------------------------


def _state_store(settings: Settings) -> StateStore:
    return StateStore(settings.session.state_file)


def _default_keys() -> KeySource:
    from keyrelay.keyboard.terminal import TerminalKeySource
    return TerminalKeySource()


def _default_simulator(settings: Settings) -> KeySimulator:
    if settings.keyboard.simulator == "none":
        return NullKeySimulator()
    from keyrelay.keyboard.pynput_backend import PynputKeySimulator
    return PynputKeySimulator()


async def start_host_session(settings: Settings, keys: KeySource | None = None) -> SessionState:
    """Host until the quit key is pressed."""
    store = _state_store(settings)
    translator = KeyTranslator.from_state(store.load_or_default(), store)
    if not len(translator):
        logger.warning("No key mappings configured, nothing will be sent")
    session = HostSession(
        translator=translator,
        keys=keys or _default_keys(),
        channel=RelayChannel(max_datagram=settings.relay.max_datagram),
        port=settings.relay.port,
        bind_host=settings.relay.bind_host,
        quit_key=settings.session.quit_key,
    )
    print(f"Hosting on port {settings.relay.port}. Press any key to send, "
          f"'{settings.session.quit_key}' to stop hosting.")
    return await session.run()


async def start_client_session(
    settings: Settings,
    address_text: str,
    keys: KeySource | None = None,
    simulator: KeySimulator | None = None,
) -> SessionState:
    """Join ``address_text`` and replay keys until the quit key is pressed."""
    session = ClientSession(
        address_text=address_text,
        keys=keys or _default_keys(),
        simulator=simulator or _default_simulator(settings),
        store=_state_store(settings),
        channel=RelayChannel(max_datagram=settings.relay.max_datagram),
        port=settings.relay.port,
        bind_host=settings.relay.bind_host,
        quit_key=settings.session.quit_key,
    )
    return await session.run()


def remap_keys(settings: Settings, pairs: Iterable[tuple[str, str]]) -> dict[str, str]:
    """Apply and persist key mappings; returns the full table."""
    store = _state_store(settings)
    translator = KeyTranslator.from_state(store.load_or_default(), store)
    return translator.remap(pairs)


def _format_mappings(mappings: dict[str, str]) -> str:
    if not mappings:
        return "(no key mappings)"
    return ",".join(f"{k}={v}" for k, v in sorted(mappings.items()))


# ---------------------------------------------------------------------------
# Interactive shell
# ---------------------------------------------------------------------------


def run_shell(
    settings: Settings,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> None:
    """Run the interactive ``h``/``k``/``j``/``q`` command loop."""
    while True:
        try:
            command = read_line(SHELL_PROMPT).strip()
        except EOFError:
            write("Exiting application.")
            return

        try:
            if command == "h":
                asyncio.run(start_host_session(settings))
            elif command == "k":
                _shell_map_keys(settings, read_line, write)
            elif command == "j":
                _shell_join(settings, read_line, write)
            elif command == "q":
                write("Exiting application.")
                return
            else:
                write("Invalid command.")
        except KeyRelayError as e:
            logger.error("%s", e)
            write(f"Error: {e}")


def _shell_map_keys(
    settings: Settings,
    read_line: Callable[[str], str],
    write: Callable[[str], None],
) -> None:
    text = read_line("Enter key mappings (format: a=b,c=d, etc.): ")
    if not text.strip():
        write("Invalid input.")
        return
    mappings = remap_keys(settings, parse_mapping_text(text.strip()))
    write(f"Key mappings saved: {_format_mappings(mappings)}")


def _shell_join(
    settings: Settings,
    read_line: Callable[[str], str],
    write: Callable[[str], None],
) -> None:
    last_used = _state_store(settings).load_or_default().last_used_ip_address
    prompt = "Enter the server IP address"
    prompt += f" [{last_used}]: " if last_used else ": "
    address = read_line(prompt).strip() or (last_used or "")
    asyncio.run(start_client_session(settings, address))
    write("Disconnected from server.")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def _run_command(settings: Settings, args: argparse.Namespace) -> int:
    if args.command == "host":
        logger.info("Starting host session")
        asyncio.run(start_host_session(settings))

    elif args.command == "join":
        address = args.address or _state_store(settings).load_or_default().last_used_ip_address
        if not address:
            print("No address given and no last used address saved.", file=sys.stderr)
            return 2
        logger.info("Joining %s", address)
        asyncio.run(start_client_session(settings, address))

    elif args.command == "map":
        if args.pairs is None:
            store = _state_store(settings)
            print(_format_mappings(store.load_or_default().key_mappings))
        else:
            mappings = remap_keys(settings, parse_mapping_text(args.pairs))
            print(f"Key mappings saved: {_format_mappings(mappings)}")

    else:
        run_shell(settings)
    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the keyrelay CLI."""
    args = parse_args(argv)

    from keyrelay.config.settings import load_settings
    from keyrelay.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    try:
        code = _run_command(settings, args)
    except KeyRelayError as e:
        logger.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        code = 1
    except KeyboardInterrupt:
        code = 130
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
