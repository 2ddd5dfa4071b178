import os
import stat
import time

import pytest

from utilkit.channel import (
    ChannelAlreadyOpenError,
    ChannelManager,
    ChannelNotOpenError,
    ChannelOpenFailedError,
    ChannelType,
    FifoChannel,
    UartChannel,
    UnixBusChannel,
    UnknownChannelTypeError,
    guess_channel_type,
)


def _receive(channel, timeout=5.0):
    end = time.monotonic() + timeout
    while time.monotonic() < end:
        data = channel.receive(1024)
        if data:
            return data
        time.sleep(0.01)
    return b""


@pytest.mark.parametrize(
    "desc, expected",
    [
        ("uart", ChannelType.UART),
        ("usart", ChannelType.UART),
        ("serial", ChannelType.UART),
        ("msgq", ChannelType.MSGQ),
        ("message_queue", ChannelType.MSGQ),
        ("fifo", ChannelType.FIFO),
        ("pipe", ChannelType.FIFO),
        ("unix_bus", ChannelType.UNIX_BUS),
    ],
)
def test_guess_channel_type(desc, expected):
    assert guess_channel_type(desc) is expected


@pytest.mark.parametrize("desc", ["", "UART", "socket", "unix-bus"])
def test_guess_channel_type_unknown(desc):
    with pytest.raises(UnknownChannelTypeError):
        guess_channel_type(desc)


def test_fifo_pair_exchanges_bytes_both_ways(tmp_path):
    device = str(tmp_path / "ch")
    with FifoChannel(device, 0, True) as server:
        assert all(stat.S_ISFIFO(os.stat(p).st_mode) for p in server.paths)
        with FifoChannel(device, 0, False) as client:
            assert client.send(b"hello") == 5
            assert server.receive(64) == b"hello"
            assert server.send(b"world") == 5
            assert client.receive(64) == b"world"
            assert client.receive(64) == b""


def test_fifo_receive_is_limited_to_max_len(tmp_path):
    device = str(tmp_path / "ch")
    with FifoChannel(device, 0, True) as server, FifoChannel(device, 0, False) as client:
        client.send(b"abcdef")
        assert server.receive(4) == b"abcd"
        assert server.receive(4) == b"ef"


def test_fifo_flush_discards_pending_input(tmp_path):
    device = str(tmp_path / "ch")
    with FifoChannel(device, 0, True) as server, FifoChannel(device, 0, False) as client:
        client.send(b"x" * 200)
        server.flush()
        assert server.receive(16) == b""


def test_fifo_server_close_removes_pipes(tmp_path):
    device = str(tmp_path / "ch")
    server = FifoChannel(device, 0, True)
    paths = server.paths
    assert len(paths) == 2
    server.close()
    assert not any(os.path.exists(p) for p in paths)
    with pytest.raises(ChannelOpenFailedError):
        FifoChannel(device, 0, False)


def test_fifo_client_without_server_fails(tmp_path):
    with pytest.raises(ChannelOpenFailedError):
        FifoChannel(str(tmp_path / "nobody"), 0, False)


def test_fifo_rejects_overlong_device(tmp_path):
    with pytest.raises(ChannelOpenFailedError):
        FifoChannel(str(tmp_path / ("d" * 130)), 0, True)


def test_uart_channel_on_missing_device_fails(tmp_path):
    with pytest.raises(ChannelOpenFailedError):
        UartChannel(str(tmp_path / "ttyMissing"), 9600, False)


def test_unix_bus_broadcasts_to_other_members(tmp_path):
    path = str(tmp_path / "bus")
    first = UnixBusChannel(path, 0, False)
    try:
        assert first.owns_server is True
        second = UnixBusChannel(path, 0, False)
        try:
            assert second.owns_server is False
            assert first.send(b"ping") == 4
            assert _receive(second) == b"ping"
            time.sleep(0.05)
            assert first.receive(1024) == b""
        finally:
            second.close()
    finally:
        first.close()
    assert not os.path.exists(path)


def test_manager_open_get_close(tmp_path):
    manager = ChannelManager()
    device = str(tmp_path / "ch")
    channel = manager.open(ChannelType.FIFO, device, 0, True)
    assert manager.get(device) is channel
    assert channel.id == 1
    assert manager.open_channels == 1
    with pytest.raises(ChannelAlreadyOpenError):
        manager.open(ChannelType.FIFO, device, 0, True)
    manager.close(device)
    assert manager.open_channels == 0
    with pytest.raises(ChannelNotOpenError):
        manager.get(device)
    with pytest.raises(ChannelNotOpenError):
        manager.close(device)


def test_manager_ids_follow_open_count(tmp_path):
    manager = ChannelManager()
    a = manager.open(ChannelType.FIFO, str(tmp_path / "a"), 0, True)
    b = manager.open(ChannelType.FIFO, str(tmp_path / "b"), 0, True)
    try:
        assert (a.id, b.id) == (1, 2)
    finally:
        manager.teardown()


def test_manager_teardown_closes_everything(tmp_path):
    manager = ChannelManager()
    devices = [str(tmp_path / "a"), str(tmp_path / "b")]
    paths = [p for d in devices for p in manager.open(ChannelType.FIFO, d, 0, True).paths]
    manager.teardown()
    assert manager.open_channels == 0
    assert not any(os.path.exists(p) for p in paths)
    for device in devices:
        with pytest.raises(ChannelNotOpenError):
            manager.get(device)


def test_manager_rejects_unsupported_and_unknown_types(tmp_path):
    manager = ChannelManager()
    with pytest.raises(UnknownChannelTypeError):
        manager.open(ChannelType.MSGQ, str(tmp_path / "q"))
    with pytest.raises(UnknownChannelTypeError):
        manager.open(99, str(tmp_path / "q"))
    assert manager.open_channels == 0


def test_manager_failed_open_leaves_nothing_registered(tmp_path):
    manager = ChannelManager()
    device = str(tmp_path / "ttyMissing")
    with pytest.raises(ChannelOpenFailedError):
        manager.open(ChannelType.UART, device, 9600)
    with pytest.raises(ChannelNotOpenError):
        manager.get(device)
    assert manager.open_channels == 0