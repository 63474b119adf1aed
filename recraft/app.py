"""Console entry point: the server list driven by key names read from stdin."""

from __future__ import annotations

import argparse
import sys

from recraft.connect import ServerConnect
from recraft.screen import Key, Screen, parse_keys
from recraft.server_list import SERVERS_FILE, ServerList


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="recraft",
        description="Browse and join servers. Enter key names per line "
        "(a, b, x, y, up, down, select, start).",
    )
    parser.add_argument(
        "--servers", default=SERVERS_FILE, help="server list file (default: %(default)s)"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the server list until START is pressed or input ends."""
    args = _parse_args(argv)
    with ServerList(args.servers, connect_factory=ServerConnect) as server_list:
        Screen.current_screen = server_list
        server_list.init_gui()
        server_list.poll_all_async()
        server_list.draw_screen()

        while True:
            line = sys.stdin.readline()
            if not line:
                break
            try:
                keys = parse_keys(line)
            except ValueError as exc:
                print(exc)
                continue
            if Screen.current_screen is not None:
                try:
                    Screen.current_screen.update_controls(keys)
                except EOFError:
                    break
            if Key.START in keys:
                break
    return 0


if __name__ == "__main__":
    sys.exit(main())