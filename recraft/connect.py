"""Joining a server: login packets, keep-alive handling and the connect screen."""

from __future__ import annotations

import select
import socket
import sys
from typing import Callable, TextIO

from recraft.dataio import DataOutputStream
from recraft.screen import Key, Screen
from recraft.server_storage import ServerNBTStorage

DEFAULT_PORT = 25565
USERNAME = "Nintendo3DS"
PROTOCOL_VERSION = 23
LOGIN_PACKET_ID = 2
LOGIN_RESPONSE_PACKET_ID = 1
KEEP_ALIVE_PACKET_ID = 0
RECEIVE_BUFFER_SIZE = 512
SELECT_TIMEOUT = 1.0

_CLEAR = "\x1b[2J\x1b[H"


def encode_login_packet(username: str) -> bytes:
    """Build the handshake packet that announces ``username``."""
    out = DataOutputStream()
    out.write_byte(LOGIN_PACKET_ID)
    out.write_string(username)
    return out.getvalue()


def encode_login_response_packet(username: str) -> bytes:
    """Build the login packet sent after the server's handshake reply."""
    out = DataOutputStream()
    out.write_byte(LOGIN_RESPONSE_PACKET_ID)
    out.write_int(PROTOCOL_VERSION)
    out.write_string(username)
    out.write_long(0)  # map seed
    out.write_string("")  # world type name
    out.write_int(0)  # server mode
    for _ in range(4):  # world type, difficulty, world height, max players
        out.write_byte(0)
    return out.getvalue()


def encode_keep_alive_packet(response_id: int) -> bytes:
    """Build the keep-alive reply carrying ``response_id``."""
    out = DataOutputStream()
    out.write_int(response_id)
    return out.getvalue()


def decode_keep_alive_packet(data: bytes) -> int:
    """Read the keep-alive id from every second byte after the packet id.

    Raises ValueError if fewer than nine bytes are given.
    """
    if len(data) < 9:
        raise ValueError("keep-alive packet too short")
    raw = data[1] | (data[3] << 8) | (data[5] << 16) | (data[7] << 24)
    return raw - (1 << 32) if raw & 0x80000000 else raw


def is_allowed_char(char: str) -> bool:
    """True for printable ASCII, newline and tab."""
    return len(char) == 1 and (" " <= char <= "~" or char in "\n\t")


def connect_to_server(host: str, should_exit: Callable[[], bool] | None = None) -> None:
    """Log in to ``host`` and answer keep-alives until disconnected or told to exit.

    Raises ValueError for an invalid address and OSError for network failures.
    """
    try:
        socket.inet_aton(host)
    except OSError:
        raise ValueError(f"Invalid IP: {host}") from None

    with socket.create_connection((host, DEFAULT_PORT)) as sock:
        print(f"Connected to {host}:{DEFAULT_PORT}")
        sock.sendall(encode_login_packet(USERNAME))

        reply = sock.recv(RECEIVE_BUFFER_SIZE)
        if not reply:
            raise ConnectionError("Failed to receive server response")
        print(f"Received server response ({len(reply)} bytes)")

        sock.sendall(encode_login_response_packet(USERNAME))

        while True:
            readable, _, _ = select.select([sock], [], [], SELECT_TIMEOUT)
            if readable:
                data = sock.recv(RECEIVE_BUFFER_SIZE)
                if not data:
                    print("Server disconnected")
                    break
                print(f"First byte: {data[0]}")
                if data[0] == KEEP_ALIVE_PACKET_ID:
                    try:
                        keep_alive_id = decode_keep_alive_packet(data)
                    except ValueError:
                        pass
                    else:
                        print(f"Keep-alive ID: {keep_alive_id}")
                        sock.sendall(encode_keep_alive_packet(keep_alive_id))
                        print("Sent keep-alive response")
            if should_exit is not None and should_exit():
                print("Exiting game loop")
                break

    print("Press B to return to the server list.")


class ServerConnect(Screen):
    """Screen offering to join one server; SELECT goes back to the list."""

    def __init__(
        self,
        server_list: Screen,
        server: ServerNBTStorage,
        out: TextIO | None = None,
        should_exit: Callable[[], bool] | None = None,
    ) -> None:
        self.server_list = server_list
        self.server = server
        self._out = out
        self._should_exit = should_exit

    def _print(self, text: str) -> None:
        (self._out if self._out is not None else sys.stdout).write(text)

    def draw_screen(self) -> None:
        self._print(_CLEAR + "Press A to connect to server\n")

    def update_controls(self, keys: Key) -> None:
        if Key.A in keys:
            self._print(f"Attempting to connect to {self.server.host}\n")
            try:
                connect_to_server(self.server.host, self._should_exit)
            except (ValueError, OSError) as exc:
                self._print(f"{exc}\n")
        if Key.SELECT in keys:
            Screen.current_screen = self.server_list
            self.server_list.draw_screen()