import time

from recraft.polling import ServerPollingThread
from recraft.server_list import ServerInfo
from recraft.server_storage import ServerNBTStorage


class FakeList:
    def __init__(self, servers, fail=False):
        self.servers = servers
        self.fail = fail
        self.seen = []

    def poll_server(self, storage):
        self.seen.append(storage)
        if self.fail:
            raise RuntimeError("boom")
        return ServerInfo(
            motd="motd of " + storage.name,
            online_players=1,
            max_players=2,
            player_count="1 / 2",
            success=True,
        )


def _wait_until(condition, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return False


def test_queued_request_counts_as_pending():
    storage = ServerNBTStorage("a", "1.2.3.4")
    poller = ServerPollingThread(FakeList([storage]))
    request = poller.poll_server_async(0, storage)
    assert request.server_index == 0
    assert request.storage is storage
    assert request.is_complete is False
    assert poller.pending_count() == 1
    poller.clear_requests()
    assert poller.pending_count() == 0


def test_poll_without_storage_returns_none():
    poller = ServerPollingThread(FakeList([]))
    assert poller.poll_server_async(0, None) is None
    assert poller.pending_count() == 0


def test_stopped_poller_rejects_requests():
    storages = [ServerNBTStorage("a", "h"), ServerNBTStorage("b", "h")]
    poller = ServerPollingThread(FakeList(storages))
    poller.stop()
    assert poller.poll_server_async(0, storages[0]) is None
    poller.poll_all_servers_async()
    assert poller.pending_count() == 0


def test_poll_all_queues_every_server():
    storages = [ServerNBTStorage("a", "h"), ServerNBTStorage("b", "h")]
    poller = ServerPollingThread(FakeList(storages))
    poller.poll_all_servers_async()
    assert poller.pending_count() == 2
    poller.poll_all_servers_async()
    assert poller.pending_count() == 2


def test_worker_updates_storages():
    storages = [ServerNBTStorage("a", "h"), ServerNBTStorage("b", "h")]
    fake = FakeList(storages)
    poller = ServerPollingThread(fake)
    poller.start()
    try:
        poller.poll_all_servers_async()

        def done():
            poller.process_completed_polls()
            return all(s.motd for s in storages)

        assert _wait_until(done)
        assert [s.motd for s in storages] == ["motd of a", "motd of b"]
        assert [s.player_count for s in storages] == ["1 / 2", "1 / 2"]
    finally:
        poller.stop()
        poller.join(5)


def test_failed_poll_marks_unknown():
    storage = ServerNBTStorage("a", "h", motd="old", player_count="5 / 9")
    poller = ServerPollingThread(FakeList([storage], fail=True))
    poller.start()
    try:
        request = poller.poll_server_async(0, storage)

        def done():
            poller.process_completed_polls()
            return storage.player_count == "???"

        assert _wait_until(done)
        assert storage.motd == ""
        assert request.is_complete is True
        assert request.result is None
    finally:
        poller.stop()
        poller.join(5)


def test_poll_receives_a_copy():
    storage = ServerNBTStorage("a", "1.2.3.4")
    fake = FakeList([storage])
    poller = ServerPollingThread(fake)
    poller.start()
    try:
        request = poller.poll_server_async(0, storage)
        assert _wait_until(lambda: request.is_complete)
        assert fake.seen[0] == storage
        assert fake.seen[0] is not storage
        assert request.result.success is True
    finally:
        poller.stop()
        poller.join(5)