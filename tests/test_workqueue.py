import threading
import time

import pytest

from utilkit.workqueue import Work, WorkQueue, WorkStatus

NUM_JOBS = 20
NUM_WORKERS = 5


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def test_jobs_run_until_complete():
    lock = threading.Lock()
    done = threading.Event()
    completed = []

    def runner(data):
        time.sleep(0.001)
        data["runs"] += 1
        return 0 if data["runs"] == 5 else 1

    def on_complete(work):
        with lock:
            completed.append(work.arg["job_id"])
            if len(completed) == NUM_JOBS:
                done.set()

    data = [{"job_id": i, "runs": 0} for i in range(NUM_JOBS)]
    works = [Work(work_fn=runner, arg=d, complete_fn=on_complete) for d in data]
    with WorkQueue(NUM_WORKERS) as wq:
        for work in works:
            wq.add_work(work)
        assert done.wait(10)
        assert wq.backlog_count() == 0
    assert sorted(completed) == list(range(NUM_JOBS))
    assert all(d["runs"] == 5 for d in data)
    assert all(w.status is WorkStatus.COMPLETE for w in works)
    assert all(w.elapsed_us > 0 for w in works)


def test_work_without_function_completes():
    done = threading.Event()
    work = Work(complete_fn=lambda w: done.set())
    with WorkQueue(1) as wq:
        wq.add_work(work)
        assert done.wait(5)
    assert work.status is WorkStatus.COMPLETE


def test_failing_work_records_error():
    done = threading.Event()

    def boom(arg):
        raise RuntimeError(arg)

    work = Work(work_fn=boom, arg="bad", complete_fn=lambda w: done.set())
    with WorkQueue(2) as wq:
        wq.add_work(work)
        assert done.wait(5)
    assert isinstance(work.error, RuntimeError)
    assert work.status is WorkStatus.COMPLETE


def test_destroy_flushes_backlog():
    gate = threading.Event()
    ran = []

    def blocker(arg):
        gate.wait(5)
        return 0

    def second(arg):
        ran.append(arg)
        return 0

    wq = WorkQueue(1)
    first = Work(work_fn=blocker)
    queued = Work(work_fn=second, arg="second")
    wq.add_work(first)
    assert _wait_for(lambda: first.status is WorkStatus.IN_PROGRESS)
    wq.add_work(queued)
    assert wq.backlog_count() == 1

    stopper = threading.Thread(target=wq.destroy)
    stopper.start()
    assert _wait_for(lambda: queued.status is WorkStatus.COMPLETE)
    gate.set()
    stopper.join(5)
    assert not stopper.is_alive()
    assert ran == []
    assert first.status is WorkStatus.COMPLETE


def test_add_after_destroy_raises():
    wq = WorkQueue(1)
    wq.destroy()
    with pytest.raises(RuntimeError):
        wq.add_work(Work())


def test_invalid_worker_count():
    with pytest.raises(ValueError):
        WorkQueue(0)