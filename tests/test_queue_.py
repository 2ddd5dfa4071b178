import pytest

from utilkit.linked_list import Node
from utilkit.queue_ import Queue


def test_fifo_order():
    queue = Queue()
    nodes = [Node(v) for v in ["a", "b", "c"]]
    for node in nodes:
        queue.enqueue(node)
    assert [queue.dequeue() for _ in nodes] == nodes


def test_peeks_do_not_remove():
    queue = Queue()
    first, last = Node("first"), Node("last")
    queue.enqueue(first)
    queue.enqueue(last)
    assert queue.peek_first() is first
    assert queue.peek_last() is last
    assert len(queue) == 2


def test_len_tracks_operations():
    queue = Queue()
    for v in range(4):
        queue.enqueue(Node(v))
    queue.dequeue()
    assert len(queue) == 3


def test_empty_queue_raises():
    queue = Queue()
    with pytest.raises(IndexError):
        queue.dequeue()
    with pytest.raises(IndexError):
        queue.peek_first()
    with pytest.raises(IndexError):
        queue.peek_last()


def test_drain_then_reuse():
    queue = Queue()
    node = Node("x")
    queue.enqueue(node)
    assert queue.dequeue() is node
    assert len(queue) == 0
    again = Node("y")
    queue.enqueue(again)
    assert queue.peek_first() is again
    assert queue.peek_last() is again