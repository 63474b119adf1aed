"""The server list screen: saved servers, status polling and selection."""

from __future__ import annotations

import io
import os
import re
import socket
import struct
import sys
from dataclasses import dataclass
from typing import BinaryIO, Callable, TextIO, Union

from recraft.nbt.compressed import read_map_from_file, save_map_to_file_with_backup
from recraft.nbt.containers import NBTTagCompound, NBTTagList
from recraft.polling import ServerPollingThread
from recraft.screen import Key, Screen
from recraft.server_storage import ServerNBTStorage

PathLike = Union[str, "os.PathLike[str]"]

DEFAULT_PORT = 25565
DEFAULT_HOST = "192.168.2.101"
SERVERS_FILE = "servers.dat"
CONNECT_TIMEOUT = 3.0
STATUS_REQUEST = 0xFE
STATUS_REPLY = 0xFF
MAX_RESPONSE_CHARS = 256
MAX_KEYBOARD_INPUT = 255

_SECTION_SIGN = "\u00a7"
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_CLEAR = "\x1b[2J\x1b[H"


@dataclass
class ServerInfo:
    """The outcome of one status poll."""

    motd: str = ""
    online_players: int = -1
    max_players: int = -1
    player_count: str = ""
    success: bool = False


def _parse_int(text: str) -> int:
    """Parse a leading 32-bit integer, ignoring anything after it."""
    match = _LEADING_INT.match(text)
    if match is None:
        raise ValueError(f"not a number: {text!r}")
    value = int(match.group(1))
    if not -(2**31) <= value < 2**31:
        raise ValueError(f"number out of range: {text!r}")
    return value


def parse_host(host: str) -> tuple[str, int]:
    """Split ``host``, ``host:port`` or ``[addr]:port`` into address and port."""
    host = host or DEFAULT_HOST
    parts = [host]
    if host.startswith("["):
        end = host.find("]")
        if end != -1:
            port_part = host[end + 1 :].strip(" \t")
            if port_part.startswith(":") and len(port_part) > 1:
                port_part = port_part[1:]
            parts = [host[1:end], port_part]
    elif ":" in host:
        parts = host.split(":", 1)
    port = DEFAULT_PORT
    if len(parts) > 1:
        try:
            port = _parse_int(parts[1])
        except ValueError:
            port = DEFAULT_PORT
    return parts[0], port


def read_utf16_string(stream: BinaryIO, max_length: int) -> str:
    """Read a 16-bit length followed by that many UTF-16BE code units."""
    head = stream.read(2)
    if len(head) != 2:
        raise EOFError("Failed to read string length")
    (length,) = struct.unpack(">H", head)
    if length > max_length:
        raise ValueError("Invalid string length")
    data = stream.read(length * 2)
    if len(data) != length * 2:
        raise EOFError("Failed to read string data")
    text = data.decode("utf-16-be", "surrogatepass")
    return text.split("\0", 1)[0]


def parse_status_response(response: str) -> ServerInfo:
    """Turn ``motd§online§max`` into a ServerInfo; bad numbers raise ValueError."""
    parts = [part for part in response.split(_SECTION_SIGN) if part]
    info = ServerInfo(motd=parts[0] if parts else "")
    info.online_players = _parse_int(parts[1]) if len(parts) > 1 else -1
    info.max_players = _parse_int(parts[2]) if len(parts) > 2 else -1
    if info.online_players >= 0 and info.max_players > 0:
        info.player_count = f"{info.online_players} / {info.max_players}"
    else:
        info.player_count = "???"
    info.success = True
    return info


def get_keyboard_input(prompt: str) -> str:
    """Ask for a line of text until a non-empty one is given."""
    while True:
        text = input(f"{prompt}: ")
        if text:
            return text[:MAX_KEYBOARD_INPUT]


ConnectFactory = Callable[["ServerList", ServerNBTStorage], Screen]


class ServerList(Screen):
    """Lists saved servers, polls them in the background and edits the list."""

    def __init__(
        self,
        path: PathLike = SERVERS_FILE,
        out: TextIO | None = None,
        keyboard: Callable[[str], str] = get_keyboard_input,
        connect_factory: ConnectFactory | None = None,
    ) -> None:
        self.path = path
        self._out = out
        self._keyboard = keyboard
        self._connect_factory = connect_factory
        self.servers: list[ServerNBTStorage] = []
        self.selected_server = 0
        self.root_tag: NBTTagCompound | None = None
        self.is_polling = False
        self._last_polling_state = False
        self.polling_thread: ServerPollingThread | None = ServerPollingThread(self)

    def _stream(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    def _print(self, text: str) -> None:
        self._stream().write(text)

    def __enter__(self) -> "ServerList":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Stop the polling worker and wait for it."""
        if self.polling_thread is not None:
            self.polling_thread.stop()
            self.polling_thread.join()

    def init_gui(self) -> None:
        self.load()
        if self.polling_thread is not None:
            self.polling_thread.start()
        self.draw_screen()

    # -- persistence ---------------------------------------------------

    def load(self) -> None:
        """Replace the list with the servers stored on disk."""
        try:
            self.root_tag = read_map_from_file(self.path)
            tag_list = self.root_tag.get_tag_list("servers")
            if tag_list is None:
                return
            self.servers.clear()
            for tag in tag_list:
                if isinstance(tag, NBTTagCompound):
                    self.servers.append(ServerNBTStorage.from_compound(tag))
        except Exception:
            self._print("Failed to load server list.\n")

    def save(self) -> None:
        try:
            tag_list = NBTTagList()
            for server in self.servers:
                tag_list.add_tag(server.to_compound())
            root = NBTTagCompound()
            root.set_tag("servers", tag_list)
            save_map_to_file_with_backup(root, self.path)
        except Exception:
            self._print("Failed to save server list.\n")

    def add_server(self, name: str, host: str) -> None:
        self.servers.append(ServerNBTStorage(name, host))
        self.save()

    def delete_selected_server(self) -> None:
        if not self.servers:
            return
        del self.servers[self.selected_server]
        if self.selected_server >= len(self.servers) and self.selected_server > 0:
            self.selected_server -= 1
        self.save()

    # -- polling -------------------------------------------------------

    def poll_server(self, storage: ServerNBTStorage) -> ServerInfo:
        """Ask one server for its status; failures give ``success=False``."""
        try:
            address, port = parse_host(storage.host)
            socket.inet_pton(socket.AF_INET, address)
            with socket.create_connection((address, port), timeout=CONNECT_TIMEOUT) as sock:
                sock.settimeout(None)
                sock.sendall(bytes([STATUS_REQUEST]))
                if sock.recv(1) != bytes([STATUS_REPLY]):
                    raise ConnectionError("Bad message")
                payload = sock.recv(512)
                if not payload:
                    raise ConnectionError("Failed to read response string")
            response = read_utf16_string(io.BytesIO(payload), MAX_RESPONSE_CHARS)
            info = parse_status_response(response)
        except Exception:
            info = ServerInfo()
        self.draw_screen()
        return info

    def poll_all_async(self) -> None:
        if self.polling_thread is None or not self.servers:
            return
        self.is_polling = True
        self.polling_thread.poll_all_servers_async()

    def update_async_polls(self) -> None:
        """Apply finished polls; call regularly from the main loop."""
        if self.polling_thread is None:
            return
        self.polling_thread.process_completed_polls()
        if self.is_polling and self.polling_thread.pending_count() == 0:
            self.is_polling = False
            self.draw_screen()

    def pending_poll_count(self) -> int:
        if self.polling_thread is None:
            return 0
        return self.polling_thread.pending_count()

    # -- screen --------------------------------------------------------

    def draw_screen(self) -> None:
        lines = [
            _CLEAR,
            "Re:Craft 3DS\n",
            "A:Add  B:Del  X:Poll  Y:Reload \nSELECT:Connect  START:Exit\n",
        ]
        if self.is_polling:
            lines.append(f"Polling... ({self.pending_poll_count()} remaining)\n")
        lines.append("\n")
        servers = list(self.servers)
        if not servers:
            lines.append("(No servers added)\n")
        for index, server in enumerate(servers):
            marker = ">" if index == self.selected_server else " "
            lines.append(f"{marker} {server.name} ({server.host})\n")
            lines.append(f"   {server.motd}\n")
            lines.append(f"   {server.player_count or '???'}\n\n")
        self._print("".join(lines))

    def update_controls(self, keys: Key) -> None:
        if Key.UP in keys:
            self.move_selection_up()
            self.draw_screen()
        if Key.DOWN in keys:
            self.move_selection_down()
            self.draw_screen()
        if Key.A in keys:
            name = self._keyboard("Enter Server Name")
            host = self._keyboard("Enter Server IP")
            self.add_server(name, host)
            self.draw_screen()
        if Key.B in keys:
            self.delete_selected_server()
            self.draw_screen()
        if Key.X in keys:
            self.poll_all_async()
            self.draw_screen()
        if Key.Y in keys:
            self.load()
            self.poll_all_async()
            self.draw_screen()
        if Key.SELECT in keys:
            if (
                self._connect_factory is not None
                and self.servers
                and self.selected_server < len(self.servers)
            ):
                screen = self._connect_factory(self, self.servers[self.selected_server])
                Screen.current_screen = screen
                screen.draw_screen()

        self.update_async_polls()

        if self.is_polling != self._last_polling_state:
            self._last_polling_state = self.is_polling
            self.draw_screen()

    def move_selection_up(self) -> None:
        if self.selected_server > 0:
            self.selected_server -= 1

    def move_selection_down(self) -> None:
        if self.selected_server + 1 < len(self.servers):
            self.selected_server += 1