from __future__ import annotations

import logging
import threading
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor, wait
from typing import Any, Callable, List, Sequence, Set

log = logging.getLogger(__name__)


class TrialFailed(RuntimeError):
    """A parallel evaluation task failed or was cancelled; the trial cannot continue."""


class WorkerPool:
    """
    Fixed-size thread pool with a submit-many / await-all interface.

    One pool is shared by every trial of a batch. No task outlives the
    submit_all call that created it.
    """

    def __init__(self, num_workers: int):
        if num_workers < 1:
            raise ValueError(f"num_workers must be >= 1, got {num_workers}")
        self.num_workers = num_workers
        self._executor = ThreadPoolExecutor(max_workers=num_workers, thread_name_prefix="capsim")
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()
        self._closed = False

    def submit_all(self, fn: Callable[..., Any], args_list: Sequence[Sequence[Any]]) -> List[Any]:
        """Runs fn(*args) for every entry, blocks until all finish, returns results in order."""
        if self._closed:
            raise TrialFailed("Worker pool has been shut down")

        with self._lock:
            futures = [self._executor.submit(fn, *args) for args in args_list]
            self._pending.update(futures)
        try:
            wait(futures)
            results = []
            for i, fut in enumerate(futures):
                if fut.cancelled() or not fut.done():
                    raise TrialFailed(f"Task {i + 1}/{len(futures)} was cancelled")
                try:
                    results.append(fut.result())
                except CancelledError as e:
                    raise TrialFailed(f"Task {i + 1}/{len(futures)} was cancelled") from e
                except Exception as e:
                    raise TrialFailed(f"Task {i + 1}/{len(futures)} failed: {e}") from e
            return results
        finally:
            with self._lock:
                self._pending.difference_update(futures)

    def shutdown(self, timeout: float = 60.0) -> bool:
        """
        Cancels queued tasks and waits at most `timeout` seconds for running ones.

        Returns True when every task finished within the bound.
        """
        self._closed = True
        with self._lock:
            pending = set(self._pending)
        self._executor.shutdown(wait=False, cancel_futures=True)
        if not pending:
            return True
        log.info("Waiting up to %.0f seconds for worker pool to terminate.", timeout)
        _, not_done = wait(pending, timeout=timeout)
        if not_done:
            log.warning("%d worker task(s) still running after %.0f seconds.", len(not_done), timeout)
        return not not_done

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
