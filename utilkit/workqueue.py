"""A pool of worker threads draining a shared backlog of work items."""

from __future__ import annotations

import enum
import threading
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from utilkit.utils import usec_now, usec_since

__all__ = ["WorkStatus", "Work", "WorkQueue"]


class WorkStatus(enum.Enum):
    NEW = 0
    QUEUED = 1
    IN_PROGRESS = 2
    COMPLETE = 3


@dataclass(eq=False)
class Work:
    """A unit of work.

    ``work_fn(arg)`` is called on a worker thread. A positive (or True)
    result puts the work back on the backlog to run again; anything else
    completes it, after which ``complete_fn(work)`` is called.
    """

    work_fn: Callable[[Any], Any] | None = None
    arg: Any = None
    complete_fn: Callable[[Work], Any] | None = None
    status: WorkStatus = WorkStatus.NEW
    elapsed_us: int = 0
    error: Exception | None = None


class WorkQueue:
    """Runs queued :class:`Work` items on ``num_workers`` threads."""

    def __init__(self, num_workers: int) -> None:
        if num_workers <= 0:
            raise ValueError("num_workers must be positive")
        self.num_workers = num_workers
        self._backlog: deque[Work] = deque()
        self._cond = threading.Condition()
        self._stopped = False
        self._workers = [
            threading.Thread(target=self._worker, name=f"workqueue-{i}", daemon=True)
            for i in range(num_workers)
        ]
        for thread in self._workers:
            thread.start()

    def add_work(self, work: Work) -> None:
        """Queue ``work``; raises RuntimeError once the queue is destroyed."""
        with self._cond:
            if self._stopped:
                raise RuntimeError("work queue has been destroyed")
            work.elapsed_us = 0
            work.status = WorkStatus.QUEUED
            self._backlog.append(work)
            self._cond.notify()

    def backlog_count(self) -> int:
        """Number of items waiting to be picked up by a worker."""
        with self._cond:
            return len(self._backlog)

    def destroy(self) -> None:
        """Drop the backlog (marking it complete) and stop the workers.

        Work already running is allowed to finish its current call.
        """
        with self._cond:
            if self._stopped:
                return
            self._stopped = True
            while self._backlog:
                self._backlog.popleft().status = WorkStatus.COMPLETE
            self._cond.notify_all()
        current = threading.current_thread()
        for thread in self._workers:
            if thread is not current:
                thread.join()

    def _requeue(self, work: Work) -> None:
        with self._cond:
            if self._stopped:
                work.status = WorkStatus.COMPLETE
                return
            self._backlog.append(work)
            self._cond.notify()

    def _run(self, work: Work) -> None:
        work.status = WorkStatus.IN_PROGRESS
        start = usec_now()
        result: Any = -1
        if work.work_fn is not None:
            try:
                result = work.work_fn(work.arg)
            except Exception as exc:
                work.error = exc
                result = -1
        work.elapsed_us += usec_since(start)
        if result is not None and result > 0:
            self._requeue(work)
            return
        work.status = WorkStatus.COMPLETE
        if work.complete_fn is not None:
            work.complete_fn(work)

    def _worker(self) -> None:
        while True:
            with self._cond:
                while not self._backlog and not self._stopped:
                    self._cond.wait()
                if self._stopped:
                    return
                work = self._backlog.popleft()
            self._run(work)

    def __enter__(self) -> WorkQueue:
        return self

    def __exit__(self, *args: Any) -> None:
        self.destroy()