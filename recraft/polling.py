"""Background worker that polls servers for their status one at a time."""

from __future__ import annotations

import dataclasses
import sys
import threading
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Sequence

from recraft.server_storage import ServerNBTStorage

if TYPE_CHECKING:
    from recraft.server_list import ServerInfo


class _PollTarget(Protocol):
    servers: Sequence[ServerNBTStorage]

    def poll_server(self, storage: ServerNBTStorage) -> "ServerInfo": ...


_WAIT_SECONDS = 1.0


@dataclass
class ServerPollRequest:
    """One queued poll; ``result`` stays ``None`` if the poll raised."""

    server_index: int
    storage: ServerNBTStorage
    is_complete: bool = False
    result: "ServerInfo | None" = None


class ServerPollingThread:
    """Runs queued server polls on a worker thread and hands back the results."""

    def __init__(self, server_list: _PollTarget | None) -> None:
        self._server_list = server_list
        self.running = True
        self._thread: threading.Thread | None = None
        self._requests: deque[ServerPollRequest] = deque()
        self._completed: deque[ServerPollRequest] = deque()
        self._queue_lock = threading.Lock()
        self._completed_lock = threading.Lock()
        self._new_request = threading.Event()

    # -- thread control ------------------------------------------------

    def start(self) -> None:
        """Start the worker thread; does nothing if it was already started."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._entry, name="server-poller", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Ask the worker to finish after its current poll."""
        self.running = False
        self._new_request.set()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _entry(self) -> None:
        if not self.running:
            return
        try:
            self.run()
        except Exception:
            pass

    def run(self) -> None:
        """Worker loop: wait for requests and process every queued one."""
        while self.running:
            self._new_request.wait(_WAIT_SECONDS)
            self._new_request.clear()
            if not self.running:
                break
            while self.running:
                with self._queue_lock:
                    if not self._requests:
                        break
                    request = self._requests.popleft()
                self._process_request(request)
                with self._completed_lock:
                    self._completed.append(request)

    # -- queueing ------------------------------------------------------

    def poll_server_async(
        self, server_index: int, storage: ServerNBTStorage | None
    ) -> ServerPollRequest | None:
        """Queue one server; returns ``None`` if stopped or no storage is given."""
        if storage is None or not self.running:
            return None
        request = ServerPollRequest(server_index, storage)
        with self._queue_lock:
            self._requests.append(request)
        self._new_request.set()
        return request

    def poll_all_servers_async(self) -> None:
        """Drop outstanding requests and queue every server in the list."""
        if self._server_list is None or not self.running:
            return
        self.clear_requests()
        for index, storage in enumerate(list(self._server_list.servers)):
            self.poll_server_async(index, storage)

    def process_completed_polls(self) -> None:
        """Copy finished results into the servers they were made for."""
        with self._completed_lock:
            finished = list(self._completed)
            self._completed.clear()
        for request in finished:
            result = request.result
            if result is not None and result.success:
                request.storage.motd = result.motd
                request.storage.player_count = result.player_count
            else:
                request.storage.motd = ""
                request.storage.player_count = "???"

    def pending_count(self) -> int:
        """Queued plus completed-but-unprocessed requests."""
        with self._queue_lock:
            count = len(self._requests)
        with self._completed_lock:
            count += len(self._completed)
        return count

    def clear_requests(self) -> None:
        with self._queue_lock:
            self._requests.clear()
        with self._completed_lock:
            self._completed.clear()

    def _process_request(self, request: ServerPollRequest) -> None:
        if self._server_list is None:
            return
        try:
            snapshot = dataclasses.replace(request.storage)
            request.result = self._server_list.poll_server(snapshot)
        except Exception:
            print(
                f"Exception during server poll for {request.storage.name}",
                file=sys.stdout,
            )
            request.result = None
        request.is_complete = True