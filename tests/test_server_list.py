import io
import socket
import struct
import threading
import time

import pytest

from recraft.nbt.compressed import read_map_from_file
from recraft.screen import Key, Screen
from recraft.server_list import (
    ServerList,
    parse_host,
    parse_status_response,
    read_utf16_string,
    get_keyboard_input,
)
from recraft.server_storage import ServerNBTStorage

PAYLOAD = "A Server\u00a73\u00a720"


@pytest.fixture
def make_list(tmp_path):
    created = []

    def factory(**kwargs):
        kwargs.setdefault("path", tmp_path / "servers.dat")
        kwargs.setdefault("out", io.StringIO())
        server_list = ServerList(**kwargs)
        created.append(server_list)
        return server_list

    yield factory
    for server_list in created:
        server_list.close()


@pytest.fixture
def status_port():
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen()
    srv.settimeout(0.1)
    stop = threading.Event()

    def serve():
        while not stop.is_set():
            try:
                conn, _ = srv.accept()
            except OSError:
                continue
            with conn:
                conn.settimeout(5)
                conn.recv(1)
                body = PAYLOAD.encode("utf-16-be")
                conn.sendall(b"\xff" + struct.pack(">H", len(PAYLOAD)) + body)

    worker = threading.Thread(target=serve, daemon=True)
    worker.start()
    yield srv.getsockname()[1]
    stop.set()
    worker.join(2)
    srv.close()


@pytest.mark.parametrize(
    "host, expected",
    [
        ("1.2.3.4", ("1.2.3.4", 25565)),
        ("1.2.3.4:25566", ("1.2.3.4", 25566)),
        ("[::1]:1234", ("::1", 1234)),
        ("[::1]", ("::1", 25565)),
        ("", ("192.168.2.101", 25565)),
        ("host:abc", ("host", 25565)),
        ("host:12abc", ("host", 12)),
    ],
)
def test_parse_host(host, expected):
    assert parse_host(host) == expected


def test_read_utf16_string():
    data = struct.pack(">H", 2) + "hi".encode("utf-16-be")
    assert read_utf16_string(io.BytesIO(data), 256) == "hi"


def test_read_utf16_string_non_ascii_round_trip():
    text = "caf\u00e9 \u00a7 x"
    data = struct.pack(">H", len(text)) + text.encode("utf-16-be")
    assert read_utf16_string(io.BytesIO(data), 256) == text


def test_read_utf16_string_too_long():
    data = struct.pack(">H", 10) + b"\x00a" * 10
    with pytest.raises(ValueError):
        read_utf16_string(io.BytesIO(data), 5)


def test_read_utf16_string_truncated():
    with pytest.raises(EOFError):
        read_utf16_string(io.BytesIO(struct.pack(">H", 3) + b"\x00a"), 256)


def test_parse_status_response():
    info = parse_status_response(PAYLOAD)
    assert info.motd == "A Server"
    assert info.online_players == 3
    assert info.max_players == 20
    assert info.player_count == "3 / 20"
    assert info.success is True


def test_parse_status_response_motd_only():
    info = parse_status_response("Just a motd")
    assert info.motd == "Just a motd"
    assert info.online_players == -1
    assert info.player_count == "???"


def test_parse_status_response_bad_number():
    with pytest.raises(ValueError):
        parse_status_response("motd\u00a7many\u00a720")


def test_keyboard_input_retries_empty(monkeypatch):
    answers = iter(["", "Alpha"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
    assert get_keyboard_input("Enter Server Name") == "Alpha"


def test_add_server_persists(make_list, tmp_path):
    first = make_list()
    first.add_server("Alpha", "1.2.3.4")
    stored = read_map_from_file(tmp_path / "servers.dat")
    assert stored.get_tag_list("servers").tag_count() == 1
    second = make_list()
    second.load()
    assert [(s.name, s.host) for s in second.servers] == [("Alpha", "1.2.3.4")]


def test_load_missing_file_reports(make_list):
    out = io.StringIO()
    server_list = make_list(out=out)
    server_list.load()
    assert "Failed to load server list." in out.getvalue()
    assert server_list.servers == []


def test_save_empty_name_reports(make_list, tmp_path):
    out = io.StringIO()
    server_list = make_list(out=out)
    server_list.add_server("", "1.2.3.4")
    assert "Failed to save server list." in out.getvalue()
    assert not (tmp_path / "servers.dat").exists()


def test_delete_adjusts_selection(make_list):
    server_list = make_list()
    for name in ("a", "b", "c"):
        server_list.add_server(name, "1.2.3.4")
    server_list.move_selection_down()
    server_list.move_selection_down()
    server_list.move_selection_down()
    assert server_list.selected_server == 2
    server_list.delete_selected_server()
    assert server_list.selected_server == 1
    assert [s.name for s in server_list.servers] == ["a", "b"]


def test_delete_on_empty_list(make_list):
    server_list = make_list()
    server_list.delete_selected_server()
    assert server_list.servers == []
    assert server_list.selected_server == 0


def test_move_up_stops_at_zero(make_list):
    server_list = make_list()
    server_list.add_server("a", "1.2.3.4")
    server_list.move_selection_up()
    assert server_list.selected_server == 0


def test_draw_empty(make_list):
    out = io.StringIO()
    make_list(out=out).draw_screen()
    assert "(No servers added)" in out.getvalue()
    assert "Re:Craft 3DS" in out.getvalue()


def test_draw_servers(make_list):
    out = io.StringIO()
    server_list = make_list(out=out)
    server_list.servers.append(ServerNBTStorage("Alpha", "1.2.3.4"))
    server_list.servers.append(ServerNBTStorage("Beta", "5.6.7.8", motd="Hi"))
    server_list.draw_screen()
    text = out.getvalue()
    assert "> Alpha (1.2.3.4)\n" in text
    assert "  Beta (5.6.7.8)\n" in text
    assert "   ???\n" in text
    assert "   Hi\n" in text


def test_key_a_adds_server_from_keyboard(make_list):
    answers = {"Enter Server Name": "Alpha", "Enter Server IP": "1.2.3.4"}
    server_list = make_list(keyboard=answers.__getitem__)
    server_list.update_controls(Key.A)
    assert [(s.name, s.host) for s in server_list.servers] == [("Alpha", "1.2.3.4")]


def test_key_b_deletes(make_list):
    server_list = make_list()
    server_list.add_server("Alpha", "1.2.3.4")
    server_list.update_controls(Key.B)
    assert server_list.servers == []


def test_select_opens_connect_screen(make_list):
    opened = []

    class FakeScreen(Screen):
        def draw_screen(self):
            opened.append("drawn")

        def update_controls(self, keys):
            pass

    def factory(owner, server):
        opened.append((owner, server.name))
        return FakeScreen()

    server_list = make_list(connect_factory=factory)
    server_list.add_server("Alpha", "1.2.3.4")
    server_list.update_controls(Key.SELECT)
    assert isinstance(Screen.current_screen, FakeScreen)
    assert opened == [(server_list, "Alpha"), "drawn"]


def test_poll_server_reads_status(make_list, status_port):
    server_list = make_list()
    info = server_list.poll_server(ServerNBTStorage("Local", f"127.0.0.1:{status_port}"))
    assert info.success is True
    assert info.motd == "A Server"
    assert info.player_count == "3 / 20"


def test_poll_server_rejects_hostname(make_list):
    info = make_list().poll_server(ServerNBTStorage("Local", "localhost:1"))
    assert info.success is False
    assert info.motd == ""


def test_async_poll_updates_servers(make_list, status_port):
    server_list = make_list()
    server_list.servers.append(ServerNBTStorage("Local", f"127.0.0.1:{status_port}"))
    server_list.polling_thread.start()
    server_list.poll_all_async()
    assert server_list.is_polling is True
    deadline = time.monotonic() + 10
    while time.monotonic() < deadline and server_list.servers[0].motd != "A Server":
        server_list.update_async_polls()
        time.sleep(0.02)
    assert server_list.servers[0].motd == "A Server"
    assert server_list.servers[0].player_count == "3 / 20"
    server_list.update_async_polls()
    assert server_list.pending_poll_count() == 0
    assert server_list.is_polling is False