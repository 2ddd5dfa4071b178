import fcntl
import os

import pytest

from utilkit.fdutils import fcntl_setfl, flush_fd, read_loop, write_loop


@pytest.fixture
def pipe():
    rfd, wfd = os.pipe()
    yield rfd, wfd
    for fd in (rfd, wfd):
        try:
            os.close(fd)
        except OSError:
            pass


def test_setfl_adds_flag(pipe):
    rfd, _ = pipe
    fcntl_setfl(rfd, os.O_NONBLOCK)
    assert fcntl.fcntl(rfd, fcntl.F_GETFL) & os.O_NONBLOCK
    assert read_loop(rfd, 16) == b""


def test_setfl_bad_fd(pipe):
    rfd, _ = pipe
    os.close(rfd)
    with pytest.raises(OSError):
        fcntl_setfl(rfd, os.O_NONBLOCK)


def test_write_read_round_trip(pipe):
    rfd, wfd = pipe
    data = b"hello world"
    assert write_loop(wfd, data) == len(data)
    assert read_loop(rfd, 128) == data


def test_read_nonblocking_empty(pipe):
    rfd, _ = pipe
    fcntl_setfl(rfd, os.O_NONBLOCK)
    assert read_loop(rfd, 16) == b""


def test_read_closed_fd_raises(pipe):
    rfd, _ = pipe
    os.close(rfd)
    with pytest.raises(OSError):
        read_loop(rfd, 16)


def test_write_full_nonblocking_pipe(pipe):
    _, wfd = pipe
    fcntl_setfl(wfd, os.O_NONBLOCK)
    chunk = b"x" * 65536
    while write_loop(wfd, chunk) > 0:
        pass
    assert write_loop(wfd, chunk) == 0


def test_flush_fd(pipe):
    rfd, wfd = pipe
    fcntl_setfl(rfd, os.O_NONBLOCK)
    os.write(wfd, b"y" * 200)
    assert flush_fd(rfd) is True
    assert flush_fd(rfd) is False
    assert read_loop(rfd, 16) == b""