import os
import select

import pytest

from utilkit.bus_server import BusServer
from utilkit.sockutils import unix_socket_connect

NUM_CLIENTS = 5
TEST_MSG = b"12345678901234567890"
TEST_MSG_LEN = 20


def _connect_all(path, count):
    clients = []
    for _ in range(count):
        sock = unix_socket_connect(path)
        sock.settimeout(5)
        clients.append(sock)
    return clients


def test_bus_broadcast(tmp_path):
    path = tmp_path / "bus"
    with BusServer(NUM_CLIENTS, path):
        clients = _connect_all(path, NUM_CLIENTS)
        try:
            for round_no in range(10):
                writer = round_no % NUM_CLIENTS
                assert clients[writer].send(TEST_MSG) == TEST_MSG_LEN
                for index, sock in enumerate(clients):
                    if index == writer:
                        continue
                    assert sock.recv(128) == TEST_MSG
            readable, _, _ = select.select(clients, [], [], 0.2)
            assert readable == []
        finally:
            for sock in clients:
                sock.close()


def test_bus_relays_distinct_messages(tmp_path):
    path = tmp_path / "bus"
    with BusServer(3, path):
        a, b, c = _connect_all(path, 3)
        try:
            a.sendall(b"from-a")
            assert b.recv(64) == b"from-a"
            assert c.recv(64) == b"from-a"
            c.sendall(b"from-c")
            assert a.recv(64) == b"from-c"
            assert b.recv(64) == b"from-c"
        finally:
            for sock in (a, b, c):
                sock.close()


def test_bus_full_closes_extra_client(tmp_path):
    path = tmp_path / "bus"
    with BusServer(1, path):
        first = unix_socket_connect(path)
        second = unix_socket_connect(path)
        second.settimeout(5)
        try:
            assert second.recv(16) == b""
        finally:
            first.close()
            second.close()


def test_stop_removes_socket_file(tmp_path):
    path = tmp_path / "bus"
    server = BusServer(2, path)
    server.start()
    assert os.path.exists(path)
    server.stop()
    assert not os.path.exists(path)
    with pytest.raises(OSError):
        unix_socket_connect(path)


def test_start_twice_raises(tmp_path):
    path = tmp_path / "bus"
    with BusServer(2, path) as server:
        with pytest.raises(RuntimeError):
            server.start()


def test_invalid_client_count(tmp_path):
    with pytest.raises(ValueError):
        BusServer(0, tmp_path / "bus")