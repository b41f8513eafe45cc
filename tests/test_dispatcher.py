"""Tests for the bounded, deduplicating task dispatcher."""

from __future__ import annotations

import asyncio

import pytest

from volumefs.tasks.dispatcher import Dispatcher, TaskState


class Gate:
    """A payload that blocks until released and records concurrency."""

    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.started = 0
        self.active = 0
        self.peak = 0

    async def __call__(self) -> None:
        self.started += 1
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await self.release.wait()
        finally:
            self.active -= 1


async def wait_until(predicate, timeout: float = 2.0) -> None:
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.005)


# ---------------------------------------------------------------------------
# Construction and lifecycle
# ---------------------------------------------------------------------------


class TestConstruction:
    @pytest.mark.parametrize(("workers", "queue"), [(0, 1), (1, 0), (-1, 5)])
    async def test_rejects_non_positive(self, workers, queue):
        with pytest.raises(ValueError):
            Dispatcher(workers, queue)

    async def test_context_manager(self):
        async with Dispatcher(2, 2) as d:
            assert d.is_running
        assert not d.is_running

    async def test_start_is_idempotent(self):
        d = Dispatcher(1, 1)
        await d.start()
        await d.start()
        assert d.is_running
        await d.shutdown()

    async def test_cannot_restart(self):
        d = Dispatcher(1, 1)
        await d.shutdown()
        with pytest.raises(RuntimeError):
            await d.start()


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


class TestExecution:
    async def test_runs_async_payload(self):
        ran = []

        async def job():
            ran.append(1)

        async with Dispatcher(1, 4) as d:
            ts = d.try_add(job)
            assert isinstance(ts, TaskState)
            await ts.wait()
        assert ran == [1]
        assert ts.done()
        assert ts.exception is None
        assert ts.cancelled is False

    async def test_runs_sync_payload(self):
        ran = []
        async with Dispatcher(1, 4) as d:
            ts = d.try_add(lambda: ran.append("sync"))
            await ts.wait()
        assert ran == ["sync"]

    async def test_concurrency_bound(self):
        gate = Gate()
        async with Dispatcher(2, 10) as d:
            handles = [d.try_add(gate) for _ in range(10)]
            assert all(h is not None for h in handles)
            await wait_until(lambda: gate.started == 2)
            await asyncio.sleep(0.05)
            assert gate.active == 2
            gate.release.set()
            for h in handles:
                await h.wait()
        assert gate.started == 10
        assert gate.peak == 2

    async def test_failure_is_recorded_and_key_released(self):
        async def boom():
            raise RuntimeError("boom")

        async with Dispatcher(1, 2) as d:
            ts = d.try_add_with_id(boom, "k")
            await ts.wait()
            assert isinstance(ts.exception, RuntimeError)
            assert d.get("k") is None

            again = d.try_add_with_id(boom, "k")
            assert again is not None
            assert again is not ts
            await again.wait()

    async def test_blocking_add_waits_for_slot(self):
        gate = Gate()
        d = Dispatcher(1, 1)
        first = await d.add(gate)

        adder = asyncio.create_task(d.add(gate))
        await asyncio.sleep(0.02)
        assert not adder.done()

        await d.start()
        second = await asyncio.wait_for(adder, 2)
        gate.release.set()
        await first.wait()
        await second.wait()
        await d.shutdown()
        assert gate.started == 2


# ---------------------------------------------------------------------------
# Deduplication
# ---------------------------------------------------------------------------


class TestDeduplication:
    async def test_same_key_same_handle(self):
        gate = Gate()
        async with Dispatcher(1, 4) as d:
            a = d.try_add_with_id(gate, "key")
            b = d.try_add_with_id(gate, "key")
            assert a is b
            assert d.get("key") is a
            gate.release.set()
            await a.wait()
        assert gate.started == 1

    async def test_new_handle_after_completion(self):
        async def job():
            pass

        async with Dispatcher(1, 4) as d:
            a = d.try_add_with_id(job, "key")
            await a.wait()
            assert d.get("key") is None
            b = d.try_add_with_id(job, "key")
            assert b is not a
            await b.wait()

    async def test_empty_id_never_deduplicates(self):
        gate = Gate()
        async with Dispatcher(2, 4) as d:
            a = d.try_add_with_id(gate, "")
            b = d.try_add_with_id(gate, "")
            assert a is not b
            gate.release.set()
            await a.wait()
            await b.wait()
        assert gate.started == 2


# ---------------------------------------------------------------------------
# Back-pressure
# ---------------------------------------------------------------------------


class TestBackPressure:
    async def test_try_add_full_queue(self):
        d = Dispatcher(1, 1)
        assert d.try_add(lambda: None) is not None
        assert d.try_add(lambda: None) is None
        assert d.pending == 1
        await d.shutdown()

    async def test_full_queue_releases_key(self):
        d = Dispatcher(1, 1)
        assert d.try_add_with_id(lambda: None, "a") is not None
        assert d.try_add_with_id(lambda: None, "b") is None
        assert d.get("b") is None
        # a duplicate of a queued key is still handed back
        assert d.try_add_with_id(lambda: None, "a") is d.get("a")
        await d.shutdown()


# ---------------------------------------------------------------------------
# Shutdown
# ---------------------------------------------------------------------------


class TestShutdown:
    async def test_waits_for_in_flight(self):
        finished = []

        async def slow():
            await asyncio.sleep(0.05)
            finished.append(1)

        d = Dispatcher(1, 2)
        await d.start()
        ts = d.try_add(slow)
        await wait_until(lambda: d.running == 1)
        await d.shutdown()
        assert finished == [1]
        assert ts.done()

    async def test_queued_tasks_are_cancelled(self):
        gate = Gate()
        d = Dispatcher(1, 4)
        await d.start()
        running = d.try_add(gate)
        await wait_until(lambda: gate.started == 1)
        queued = d.try_add_with_id(gate, "queued")
        assert queued is not None

        shutdown = asyncio.create_task(d.shutdown())
        await asyncio.sleep(0.02)
        gate.release.set()
        await shutdown

        assert running.done() and not running.cancelled
        assert queued.done() and queued.cancelled
        assert d.get("queued") is None
        assert gate.started == 1

    async def test_submissions_after_shutdown(self):
        d = Dispatcher(1, 1)
        await d.start()
        await d.shutdown()
        assert d.try_add(lambda: None) is None
        assert d.try_add_with_id(lambda: None, "k") is None
        with pytest.raises(RuntimeError):
            await d.add(lambda: None)

    async def test_cancel_is_idempotent(self):
        d = Dispatcher(1, 1)
        ts = d.try_add_with_id(lambda: None, "k")
        ts.cancel()
        ts.cancel()
        assert ts.done() and ts.cancelled
        assert d.get("k") is None
        await d.shutdown()

    async def test_cancelled_while_queued_never_runs(self):
        ran = []
        d = Dispatcher(1, 2)
        ts = d.try_add(lambda: ran.append("cancelled"))
        ts.cancel()
        after = d.try_add(lambda: ran.append("after"))
        await d.start()
        await after.wait()
        await d.shutdown()
        assert ran == ["after"]
