"""
=============================================================================
FIXED-SIZE THREAD POOL
=============================================================================

A fixed number of worker threads pull connection tasks off one shared
queue. The size is chosen at startup (the WORKERS command-line argument)
and never changes.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   accept loop ──submit()──► [ task | task | task | ... ]  Queue     │
    │                                   │      │      │                   │
    │                                   ▼      ▼      ▼                   │
    │                              Worker-0 Worker-1 Worker-2 ...         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

When every worker is busy, new connections wait in the queue; with a
bounded queue, submit() returns False once it is full and the caller
closes the connection.

=============================================================================
SHUTDOWN: POISON PILLS
=============================================================================

shutdown() lets queued tasks drain (up to a timeout), then puts one None
on the queue per worker. A worker that takes None exits its loop. Workers
are daemon threads, so one stuck in a slow client read cannot keep the
process alive after the timeout.

A task that raises is logged with its traceback and counted; the worker
keeps running.

=============================================================================
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """A deferred call: func(*args, **kwargs)."""

    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.monotonic)


class Worker(threading.Thread):
    """
    Takes tasks off the queue until it receives None or is told to stop.

    idle_timeout only bounds how long get() blocks before the stop flag is
    re-checked.
    """

    def __init__(
        self,
        task_queue: "queue.Queue[Optional[Task]]",
        worker_id: int,
        idle_timeout: float = 1.0,
    ):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)
        self.task_queue = task_queue
        self.worker_id = worker_id
        self.idle_timeout = idle_timeout
        self.state = WorkerState.IDLE
        self._stop_requested = threading.Event()
        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while not self._stop_requested.is_set():
            try:
                task = self.task_queue.get(timeout=self.idle_timeout)
            except queue.Empty:
                continue

            try:
                if task is None:
                    break  # Poison pill
                self._execute_task(task)
            finally:
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.monotonic()
        waited = start_time - task.submitted_at

        try:
            task.func(*task.args, **task.kwargs)
            self.tasks_completed += 1
            logger.debug(
                f"Worker {self.worker_id} completed task in "
                f"{time.monotonic() - start_time:.3f}s (queued {waited:.3f}s)"
            )
        except Exception as e:
            self.tasks_failed += 1
            logger.exception(
                f"Worker {self.worker_id} task failed after "
                f"{time.monotonic() - start_time:.3f}s: {e}"
            )
        finally:
            self.state = WorkerState.IDLE

    def stop(self):
        self._stop_requested.set()


class ThreadPool:
    """
    Fixed-size pool of worker threads.

    Usage:
        pool = ThreadPool(workers=8)
        pool.start()
        pool.submit(process_connection, args=(conn,))
        ...
        pool.shutdown(timeout=5.0)
    """

    def __init__(
        self,
        workers: int,
        queue_size: int = 0,
        idle_timeout: float = 1.0,
    ):
        """
        Args:
            workers: Number of worker threads. Must be >= 1.
            queue_size: Maximum queued tasks; 0 means unbounded.
            idle_timeout: Seconds a worker blocks on the queue before
                          re-checking its stop flag.

        Raises:
            ValueError: If workers < 1 or queue_size < 0.
        """
        if workers < 1:
            raise ValueError("workers must be >= 1")
        if queue_size < 0:
            raise ValueError("queue_size must be >= 0")

        self.workers = workers
        self.max_queue_size = queue_size
        self.idle_timeout = idle_timeout

        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue(maxsize=queue_size)
        self._workers: list[Worker] = []
        self._lock = threading.Lock()
        self._started = False
        self._shutting_down = False

    @property
    def is_running(self) -> bool:
        return self._started and not self._shutting_down

    def start(self):
        """Spawn all workers. Calling it again is a no-op."""
        with self._lock:
            if self._started:
                return
            logger.info(f"Starting thread pool with {self.workers} workers")
            for worker_id in range(self.workers):
                worker = Worker(self._task_queue, worker_id, self.idle_timeout)
                self._workers.append(worker)
                worker.start()
            self._started = True
            self._shutting_down = False

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        block: bool = False,
        queue_timeout: Optional[float] = None,
    ) -> bool:
        """
        Queue a call for a worker.

        Returns:
            True if queued, False if the (bounded) queue was full.

        Raises:
            RuntimeError: If the pool is not started or is shutting down.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")
        if self._shutting_down:
            raise RuntimeError("Thread pool is shutting down")

        task = Task(func=func, args=args, kwargs=kwargs or {})
        try:
            self._task_queue.put(task, block=block, timeout=queue_timeout)
            return True
        except queue.Full:
            return False

    def shutdown(
        self,
        wait: bool = True,
        timeout: Optional[float] = None,
    ) -> Optional[dict]:
        """
        Stop the pool.

        Args:
            wait: Let queued tasks run before stopping.
            timeout: Upper bound in seconds on waiting for the queue to
                     drain and for each worker to exit; None waits for the
                     queue without limit.

        Returns:
            The final stats snapshot, or None if the pool was not running.
        """
        if not self._started:
            return

        logger.info("Shutting down thread pool...")
        self._shutting_down = True

        if wait:
            if timeout is None:
                self._task_queue.join()
            else:
                deadline = time.monotonic() + timeout
                while self._task_queue.unfinished_tasks:
                    if time.monotonic() > deadline:
                        logger.warning("Shutdown timeout, forcing stop")
                        break
                    time.sleep(0.05)

        for worker in self._workers:
            worker.stop()
            try:
                self._task_queue.put_nowait(None)
            except queue.Full:
                pass  # Stop flag still ends the worker

        join_timeout = 2.0 if timeout is None else max(timeout, 0.1)
        for worker in self._workers:
            worker.join(timeout=join_timeout)

        final_stats = self.stats
        with self._lock:
            self._workers.clear()
            self._started = False
        logger.info(f"Thread pool shutdown complete: {final_stats}")
        return final_stats

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def idle_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.IDLE)

    @property
    def queued(self) -> int:
        return self._task_queue.qsize()

    @property
    def stats(self) -> dict:
        return {
            "workers": {
                "total": len(self._workers),
                "busy": self.busy_workers,
                "idle": self.idle_workers,
            },
            "tasks": {
                "queued": self.queued,
                "completed": sum(w.tasks_completed for w in self._workers),
                "failed": sum(w.tasks_failed for w in self._workers),
            },
        }
