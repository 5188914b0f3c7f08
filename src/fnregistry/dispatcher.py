"""Bounded work dispatcher.

Runs one unit of work per input with a concurrency ceiling and returns one
result slot per input, in input order, whatever order the work finishes in.

Usage:
    dispatcher = BoundedDispatcher(jobs=8)
    results = dispatcher.run(paths, extractor.parse_file)
    # results[i] belongs to paths[i]; None marks a failed or abandoned input
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor, wait
from threading import Event, Lock
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

from .exceptions import FileAccessError
from .logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

ProgressCallback = Callable[[int, int], None]


class BoundedDispatcher(Generic[T, R]):
    """Fans work out over a thread pool of at most ``jobs`` workers.

    A worker that raises leaves its slot ``None``; the batch carries on.
    With ``timeout_seconds`` set, inputs not started when the deadline
    passes are cancelled and their slots stay ``None``.

    Attributes:
        completed: Inputs that finished (successfully or not) in the last run
        failed: Inputs whose worker raised in the last run
        abandoned: Inputs dropped by the deadline in the last run
    """

    # Below this many inputs the pool costs more than it saves
    sequential_threshold = 10

    def __init__(
        self,
        jobs: int = 1,
        timeout_seconds: Optional[float] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> None:
        if jobs < 1:
            raise ValueError("jobs must be at least 1")
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.jobs = jobs
        self.timeout_seconds = timeout_seconds
        self.progress = progress
        self._lock = Lock()
        self.completed = 0
        self.failed = 0
        self.abandoned = 0

    def run(self, inputs: Sequence[T], worker: Callable[[T], R]) -> List[Optional[R]]:
        """Apply ``worker`` to every input and return the results by position."""
        items = list(inputs)
        total = len(items)
        results: List[Optional[R]] = [None] * total
        self.completed = self.failed = self.abandoned = 0
        if total == 0:
            return results

        cancelled = Event()
        if self.jobs == 1 or total < self.sequential_threshold:
            self._run_sequential(items, worker, results, cancelled)
        else:
            self._run_parallel(items, worker, results, cancelled)

        if self.failed:
            logger.info(f"{self.failed}/{total} inputs failed and were skipped")
        with self._lock:
            return list(results)

    def _run_sequential(
        self,
        items: List[T],
        worker: Callable[[T], R],
        results: List[Optional[R]],
        cancelled: Event,
    ) -> None:
        deadline = (
            time.monotonic() + self.timeout_seconds if self.timeout_seconds is not None else None
        )
        for index, item in enumerate(items):
            if deadline is not None and time.monotonic() > deadline:
                cancelled.set()
                self._abandon(len(items) - index, len(items))
                return
            self._process(index, item, worker, results, cancelled, len(items))

    def _run_parallel(
        self,
        items: List[T],
        worker: Callable[[T], R],
        results: List[Optional[R]],
        cancelled: Event,
    ) -> None:
        total = len(items)
        executor = ThreadPoolExecutor(max_workers=min(self.jobs, total))
        timed_out = False
        try:
            futures = [
                executor.submit(self._process, index, item, worker, results, cancelled, total)
                for index, item in enumerate(items)
            ]
            _, pending = wait(futures, timeout=self.timeout_seconds)
            if pending:
                timed_out = True
                cancelled.set()
                for future in pending:
                    future.cancel()
                with self._lock:
                    remaining = total - self.completed
                self._abandon(remaining, total)
        finally:
            # Never block on work still running past the deadline
            executor.shutdown(wait=not timed_out, cancel_futures=True)

    def _process(
        self,
        index: int,
        item: T,
        worker: Callable[[T], R],
        results: List[Optional[R]],
        cancelled: Event,
        total: int,
    ) -> None:
        if cancelled.is_set():
            return

        value: Optional[R] = None
        failed = False
        try:
            value = worker(item)
        except FileAccessError as e:
            logger.warning(f"Skipping {item}: {e}")
            failed = True
        except Exception as e:
            logger.error(f"Error processing {item}: {e}")
            logger.debug("Worker traceback", exc_info=True)
            failed = True

        with self._lock:
            if cancelled.is_set():
                return
            results[index] = value
            self.completed += 1
            if failed:
                self.failed += 1
            done = self.completed

        if self.progress is not None:
            self.progress(done, total)

    def _abandon(self, count: int, total: int) -> None:
        with self._lock:
            self.abandoned = count
        logger.warning(
            f"Timed out after {self.timeout_seconds}s: abandoned {count} of {total} inputs"
        )
