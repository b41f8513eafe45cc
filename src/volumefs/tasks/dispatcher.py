"""Dispatcher — bounded, deduplicating concurrent task execution."""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
import threading
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class TaskState:
    """A unit of scheduled work with a one-shot completion signal.

    Created on submission, registered under its id (if any) while queued or
    running, and finished exactly once: the registry entry is dropped and
    the completion event fires whether the payload succeeded, raised, or
    never ran at all.
    """

    def __init__(self, task: Callable[[], Any], task_id: str, dispatcher: Dispatcher) -> None:
        self._task = task
        self._id = task_id
        self._dispatcher = dispatcher
        self._done = asyncio.Event()
        self._finished = False
        self.exception: BaseException | None = None
        self.cancelled = False

    def __repr__(self) -> str:
        state = "done" if self.done() else "pending"
        return f"TaskState(id={self._id!r}, {state})"

    @property
    def id(self) -> str:
        return self._id

    def done(self) -> bool:
        return self._done.is_set()

    async def wait(self) -> None:
        """Block until the task has finished."""
        await self._done.wait()

    async def run(self) -> None:
        try:
            result = self._task()
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        except Exception as e:
            self.exception = e
            logger.warning("Task %s failed", self._id or repr(self), exc_info=True)
        finally:
            self._finish()

    def cancel(self) -> None:
        """Finish without running the payload.  No-op once finished."""
        if self._dispatcher._release(self):
            self.cancelled = True
            self._done.set()

    def _finish(self) -> None:
        if self._dispatcher._release(self):
            self._done.set()


class Dispatcher:
    """A bounded worker pool with an in-flight registry keyed by task id.

    One dispatch loop takes tasks from a bounded queue, acquires one of
    ``max_workers`` permits, and runs each task as its own asyncio task.
    At most one task per non-empty id is queued or running at a time.

    Usage::

        async with Dispatcher(max_workers=8, queue_size=16) as d:
            ts = d.try_add_with_id(job, "key")
            if ts is not None:
                await ts.wait()
    """

    def __init__(self, max_workers: int, queue_size: int) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {max_workers}")
        if queue_size < 1:
            raise ValueError(f"queue_size must be positive, got {queue_size}")

        self.max_workers = max_workers
        self.queue_size = queue_size

        self._semaphore = asyncio.Semaphore(max_workers)
        self._queue: asyncio.Queue[TaskState] = asyncio.Queue(maxsize=queue_size)
        self._tasks: dict[str, TaskState] = {}
        self._lock = threading.Lock()

        self._loop_task: asyncio.Task[None] | None = None
        self._executions: set[asyncio.Task[None]] = set()
        self._closed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the dispatch loop on the running event loop."""
        if self._closed:
            raise RuntimeError("Dispatcher is shut down")
        if self._loop_task is not None:
            return
        logger.debug(
            "Dispatcher starting (workers=%d, queue=%d)", self.max_workers, self.queue_size
        )
        self._loop_task = asyncio.create_task(self._dispatch_loop(), name="dispatcher-loop")

    async def shutdown(self) -> None:
        """Stop the dispatch loop and wait for in-flight executions.

        Tasks still waiting in the queue are finished as cancelled so that
        nothing blocks on them forever.
        """
        self._closed = True
        if self._loop_task is not None:
            self._loop_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._loop_task
            self._loop_task = None

        if self._executions:
            await asyncio.gather(*self._executions, return_exceptions=True)

        abandoned = self._drain_queue()
        if abandoned:
            logger.debug("Dispatcher dropped %d queued tasks on shutdown", abandoned)

    async def __aenter__(self) -> Dispatcher:
        await self.start()
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.shutdown()

    @property
    def is_running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    @property
    def pending(self) -> int:
        """Number of tasks waiting in the queue."""
        return self._queue.qsize()

    @property
    def running(self) -> int:
        """Number of tasks currently executing."""
        return len(self._executions)

    # ------------------------------------------------------------------
    # Dispatch loop
    # ------------------------------------------------------------------

    async def _dispatch_loop(self) -> None:
        while True:
            ts = await self._queue.get()
            if ts.done():
                # cancelled while queued
                continue
            try:
                await self._semaphore.acquire()
            except asyncio.CancelledError:
                ts.cancel()
                raise
            execution = asyncio.create_task(self._execute(ts))
            self._executions.add(execution)
            execution.add_done_callback(self._executions.discard)

    async def _execute(self, ts: TaskState) -> None:
        try:
            await ts.run()
        finally:
            self._semaphore.release()

    def _drain_queue(self) -> int:
        count = 0
        while True:
            try:
                ts = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return count
            ts.cancel()
            count += 1

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def get(self, task_id: str) -> TaskState | None:
        """The in-flight task registered under *task_id*, if any."""
        with self._lock:
            return self._tasks.get(task_id)

    def _register(self, task: Callable[[], Any], task_id: str) -> tuple[TaskState, bool]:
        if not task_id:
            return TaskState(task, task_id, self), True
        with self._lock:
            existing = self._tasks.get(task_id)
            if existing is not None:
                return existing, False
            ts = TaskState(task, task_id, self)
            self._tasks[task_id] = ts
            return ts, True

    def _release(self, ts: TaskState) -> bool:
        """Mark *ts* finished and drop it from the registry.

        Returns False if it was already finished.
        """
        with self._lock:
            if ts._finished:
                return False
            ts._finished = True
            if ts.id and self._tasks.get(ts.id) is ts:
                del self._tasks[ts.id]
            return True

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def add(self, task: Callable[[], Any]) -> TaskState:
        """Enqueue *task*, waiting for a free queue slot."""
        if self._closed:
            raise RuntimeError("Dispatcher is shut down")
        ts = TaskState(task, "", self)
        await self._queue.put(ts)
        if self._closed:
            self._drain_queue()
        return ts

    def try_add(self, task: Callable[[], Any]) -> TaskState | None:
        """Enqueue *task* only if a queue slot is free right now."""
        return self.try_add_with_id(task, "")

    def try_add_with_id(self, task: Callable[[], Any], task_id: str) -> TaskState | None:
        """Enqueue *task* under *task_id* without waiting.

        Returns the already registered task when one with the same id is in
        flight, and ``None`` when the queue is full (the id is released
        again) or the dispatcher is shut down.
        """
        if self._closed:
            return None
        ts, created = self._register(task, task_id)
        if not created:
            return ts
        try:
            self._queue.put_nowait(ts)
        except asyncio.QueueFull:
            ts.cancel()
            return None
        return ts
