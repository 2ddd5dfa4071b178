import os
import sys

import pytest

from utilkit.file import path_extract
from utilkit.procutils import (
    any_pid_of,
    o_redirect,
    parse_proc_cmdline,
    pid_of,
    read_pid,
    write_pid,
)


def _all_pids():
    return [int(name) for name in os.listdir("/proc") if name.isdigit()]


def test_write_then_read_pid(tmp_path):
    pid_file = tmp_path / "app.pid"
    assert write_pid(pid_file) is True
    assert pid_file.read_text() == f"{os.getpid()}\n"
    assert read_pid(pid_file) == os.getpid()


def test_write_pid_without_path():
    assert write_pid(None) is False


def test_read_pid_garbage(tmp_path):
    pid_file = tmp_path / "bad.pid"
    pid_file.write_text("not a pid\n")
    with pytest.raises(ValueError):
        read_pid(pid_file)


def test_read_pid_leading_whitespace(tmp_path):
    pid_file = tmp_path / "ws.pid"
    pid_file.write_text("  4242 trailing")
    assert read_pid(pid_file) == 4242


def test_read_pid_missing_file(tmp_path):
    with pytest.raises(OSError):
        read_pid(tmp_path / "missing.pid")


def test_read_pid_none():
    with pytest.raises(ValueError):
        read_pid(None)


def test_parse_proc_cmdline_self():
    assert parse_proc_cmdline(os.getpid(), 1) == sys.orig_argv[0][:200]


def test_parse_proc_cmdline_second_arg():
    assert parse_proc_cmdline(os.getpid(), 2) == sys.orig_argv[1][:200]


def test_parse_proc_cmdline_past_end():
    assert parse_proc_cmdline(os.getpid(), len(sys.orig_argv) + 5) is None


def test_parse_proc_cmdline_unknown_pid():
    assert parse_proc_cmdline(2**31 - 1, 1) is None


def test_pid_of_finds_self(monkeypatch):
    monkeypatch.chdir(os.path.dirname(sys.executable))
    arg0 = parse_proc_cmdline(os.getpid(), 1)
    _, name = path_extract(arg0)
    others = [pid for pid in _all_pids() if pid != os.getpid()]
    assert pid_of(name, others) == os.getpid()


def test_pid_of_all_omitted(monkeypatch):
    monkeypatch.chdir(os.path.dirname(sys.executable))
    arg0 = parse_proc_cmdline(os.getpid(), 1)
    _, name = path_extract(arg0)
    assert pid_of(name, _all_pids() + [os.getpid()]) is None


def test_any_pid_of_unknown_name():
    assert any_pid_of("no-such-executable-utilkit") is None


def test_o_redirect_stdout(tmp_path):
    log = tmp_path / "out.log"
    saved = os.dup(1)
    try:
        o_redirect(1, log)
        os.write(1, b"to stdout\n")
    finally:
        os.dup2(saved, 1)
        os.close(saved)
    assert log.read_bytes() == b"to stdout\n"


def test_o_redirect_stderr_appends(tmp_path):
    log = tmp_path / "err.log"
    log.write_bytes(b"first\n")
    saved = os.dup(2)
    try:
        o_redirect(2, log)
        os.write(2, b"second\n")
    finally:
        os.dup2(saved, 2)
        os.close(saved)
    assert log.read_bytes() == b"first\nsecond\n"


def test_o_redirect_bad_path(tmp_path):
    with pytest.raises(OSError):
        o_redirect(1, tmp_path / "missing-dir" / "out.log")