import random
import threading
import time
from dataclasses import dataclass

import pytest

from utilkit.circbuf import BufferEmptyError, BufferFullError, CircularBuffer


@dataclass
class Item:
    a: int
    b: str = "x"


def test_boundary():
    buf = CircularBuffer(10)
    next_write = next_read = 0
    for _ in range(100):
        for _ in range(3):
            buf.push(Item(next_write))
            next_write += 1
        for _ in range(3):
            assert buf.pop().a == next_read
            next_read += 1
    assert len(buf) == 0


def test_probabilistic():
    rng = random.Random(1234)
    buf = CircularBuffer(10)
    limit = 5000
    next_write = expected = 1
    done_writing = done_reading = False
    while not (done_reading and done_writing):
        if not done_writing:
            try:
                buf.push(Item(next_write))
            except BufferFullError:
                pass
            else:
                next_write += 1
                done_writing = next_write > limit
        if rng.random() < 0.1:
            try:
                item = buf.pop()
            except BufferEmptyError:
                continue
            assert item.a == expected
            done_reading = item.a >= limit
            expected += 1
    assert expected == limit + 1


def test_single_producer_single_consumer():
    buf = CircularBuffer(10)
    first, last = 1337, 1337 + 3000
    received = []

    def producer():
        val = first
        while val <= last:
            try:
                buf.push(Item(val))
            except BufferFullError:
                time.sleep(0)
                continue
            val += 1

    def consumer():
        while not received or received[-1] < last:
            try:
                received.append(buf.pop().a)
            except BufferEmptyError:
                time.sleep(0)

    threads = [threading.Thread(target=producer), threading.Thread(target=consumer)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    assert received == list(range(first, last + 1))
    assert len(buf) == 0
    assert buf.free_space() == 10


def test_full_and_empty():
    buf = CircularBuffer(2)
    with pytest.raises(BufferEmptyError):
        buf.pop()
    with pytest.raises(BufferEmptyError):
        buf.peek()
    buf.push(1)
    buf.push(2)
    with pytest.raises(BufferFullError):
        buf.push(3)
    assert buf.free_space() == 0


def test_peek_does_not_remove():
    buf = CircularBuffer(4)
    buf.push("a")
    buf.push("b")
    assert buf.peek() == "a"
    assert len(buf) == 2
    assert buf.pop() == "a"
    assert buf.peek() == "b"


def test_free_space_and_flush():
    buf = CircularBuffer(5)
    for i in range(3):
        buf.push(i)
    assert buf.free_space() == 2
    assert len(buf) == 3
    buf.flush()
    assert buf.free_space() == 5
    with pytest.raises(BufferEmptyError):
        buf.pop()


def test_invalid_size():
    with pytest.raises(ValueError):
        CircularBuffer(0)