"""A Unix-socket message bus: whatever one client writes, every other client reads."""

from __future__ import annotations

import logging
import os
import select
import socket
import threading
from dataclasses import dataclass
from typing import Any

from utilkit.sockutils import unix_socket_listen
from utilkit.workqueue import Work, WorkQueue, WorkStatus

__all__ = ["BusServer"]

_log = logging.getLogger(__name__)

_BUF_SIZE = 1024
_POLL_INTERVAL = 0.01
_ACCEPT_TIMEOUT = 0.1
_CLIENT_TIMEOUT = 1.0


@dataclass(eq=False)
class _BusClient:
    sock: socket.socket
    message_id: int = 0


class BusServer:
    """Broadcasts each message received from a client to all the other clients.

    Up to ``max_clients`` clients are served at once, each on a worker of a
    :class:`WorkQueue`; further connections are closed straight away.
    """

    def __init__(self, max_clients: int, path: str | os.PathLike[str]) -> None:
        if max_clients <= 0:
            raise ValueError("max_clients must be positive")
        self.max_clients = max_clients
        self.path = os.fspath(path)
        self._lock = threading.Lock()
        self._message_id = 0
        self._message = b""
        self._slots = [Work() for _ in range(max_clients)]
        self._clients: set[socket.socket] = set()
        self._stopping = threading.Event()
        self._listener: socket.socket | None = None
        self._thread: threading.Thread | None = None
        self._wq: WorkQueue | None = None

    def start(self) -> None:
        """Bind the socket and start accepting clients."""
        if self._listener is not None:
            raise RuntimeError("bus server already started")
        self._stopping.clear()
        self._wq = WorkQueue(self.max_clients)
        try:
            listener = unix_socket_listen(self.path, self.max_clients)
        except BaseException:
            self._wq.destroy()
            self._wq = None
            raise
        listener.settimeout(_ACCEPT_TIMEOUT)
        self._listener = listener
        self._thread = threading.Thread(
            target=self._serve, name="bus-server", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Disconnect every client, stop serving and remove the socket file."""
        if self._listener is None:
            return
        self._stopping.set()
        if self._thread is not None:
            self._thread.join()
        if self._wq is not None:
            self._wq.destroy()
        self._listener.close()
        with self._lock:
            clients = list(self._clients)
            self._clients.clear()
        for sock in clients:
            sock.close()
        try:
            os.unlink(self.path)
        except FileNotFoundError:
            pass
        self._listener = None
        self._thread = None
        self._wq = None

    def _serve(self) -> None:
        assert self._listener is not None
        while not self._stopping.is_set():
            try:
                conn, _ = self._listener.accept()
            except (socket.timeout, InterruptedError):
                continue
            except OSError as exc:
                if not self._stopping.is_set():
                    _log.error("accept failed: %s", exc)
                break
            conn.settimeout(_CLIENT_TIMEOUT)
            if not self._queue_client(conn):
                _log.warning("client[%d]: workqueue full; closing.", conn.fileno())
                conn.close()

    def _queue_client(self, conn: socket.socket) -> bool:
        assert self._wq is not None
        with self._lock:
            for index, slot in enumerate(self._slots):
                if slot.status in (WorkStatus.NEW, WorkStatus.COMPLETE):
                    break
            else:
                return False
            work = Work(work_fn=self._serve_client, arg=_BusClient(conn))
            self._slots[index] = work
            self._clients.add(conn)
        self._wq.add_work(work)
        return True

    def _drop(self, client: _BusClient) -> None:
        with self._lock:
            self._clients.discard(client.sock)
        client.sock.close()

    def _serve_client(self, client: _BusClient) -> int:
        if self._stopping.is_set():
            self._drop(client)
            return 0
        try:
            readable, _, _ = select.select([client.sock], [], [], _POLL_INTERVAL)
            if readable:
                data = client.sock.recv(_BUF_SIZE)
                if not data:
                    self._drop(client)
                    return 0
                with self._lock:
                    self._message_id += 1
                    self._message = data
                    client.message_id = self._message_id
            pending = b""
            with self._lock:
                if self._message_id > client.message_id:
                    pending = self._message
                    client.message_id = self._message_id
            if pending:
                client.sock.sendall(pending)
        except (OSError, ValueError) as exc:
            _log.error("bus client failed: %s", exc)
            self._drop(client)
            return -1
        return 1

    def __enter__(self) -> BusServer:
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        self.stop()