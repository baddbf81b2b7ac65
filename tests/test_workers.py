import threading
import time

import pytest

from capsim.workers import TrialFailed, WorkerPool


def _double(x):
    return x * 2


def test_results_in_submission_order():
    with WorkerPool(4) as pool:
        assert pool.submit_all(_double, [(i,) for i in range(20)]) == [i * 2 for i in range(20)]
        assert pool.submit_all(_double, []) == []


def test_tasks_run_on_pool_threads():
    names = set()

    def record():
        time.sleep(0.01)
        names.add(threading.current_thread().name)

    with WorkerPool(2) as pool:
        pool.submit_all(record, [()] * 6)
    assert names
    assert all(n.startswith("capsim") for n in names)


def test_failed_task_raises():
    def fail(x):
        if x == 2:
            raise ValueError("bad input")
        return x

    with WorkerPool(2) as pool:
        with pytest.raises(TrialFailed, match="bad input"):
            pool.submit_all(fail, [(1,), (2,), (3,)])
        # the pool stays usable for the next trial
        assert pool.submit_all(fail, [(1,)]) == [1]


def test_closed_pool_rejects_work():
    pool = WorkerPool(1)
    assert pool.shutdown(timeout=1.0) is True
    with pytest.raises(TrialFailed):
        pool.submit_all(_double, [(1,)])


def test_invalid_size():
    with pytest.raises(ValueError):
        WorkerPool(0)
