# src/newrelic_logsink/engine/scheduler.py
"""BatchScheduler: buffer items and hand them to a delivery function in batches.

The scheduler knows nothing about what an item is. It is parameterized over
the item type and an injected ``deliver(items)`` callable.

Flush triggers (whichever comes first):
1. The buffer reaches ``batch_size_limit`` items
2. ``period_seconds`` elapse since the previous flush
3. An explicit flush() call

State machine:
    IDLE -> ACCUMULATING     first item enqueued after a flush
    ACCUMULATING -> FLUSHING size limit reached or timer tick
    FLUSHING -> IDLE / ACCUMULATING
                             flush finished (ACCUMULATING if items arrived meanwhile)
    any -> DRAINING          close() called: timer stops, final flush runs
    DRAINING -> STOPPED      final flush finished or grace period expired

Thread Safety:
    - enqueue() may be called from any thread and never blocks on I/O
    - All flushes run on the single worker thread, so at most one flush is
      in progress at a time. A trigger that fires during a flush leaves the
      wake event set and is served by exactly one follow-up flush.
    - The buffer is swapped out under the lock before delivery starts, so
      producers keep enqueuing while a snapshot is being delivered.

Shutdown:
    close() rejects further items, wakes the worker for one final flush and
    waits up to the grace period. Items still buffered when the grace period
    expires are lost.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Any, Generic, TypeVar

import structlog

from newrelic_logsink.contracts.enums import SchedulerState
from newrelic_logsink.engine.buffer import BoundedBuffer

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Deliver = Callable[[list[T]], object]


class BatchScheduler(Generic[T]):
    """Periodic, size-triggered batching with serialized delivery.

    Failure handling:
        - An exception from deliver() is logged and the batch is dropped.
          The worker keeps running; producers never see the failure.
        - Items enqueued after close() began are rejected and counted,
          with aggregate logging every _LOG_INTERVAL rejections.

    Heartbeat:
        After the first delivery, a timer tick that finds the buffer empty
        delivers a zero-item batch once ``heartbeat_interval_seconds`` have
        passed since the last delivery. None disables heartbeats.

    Example:
        scheduler = BatchScheduler(send_batch, batch_size_limit=500, period_seconds=2.0)
        scheduler.enqueue(item)
        scheduler.flush(timeout=5.0)
        scheduler.close()
    """

    _LOG_INTERVAL = 100

    def __init__(
        self,
        deliver: Deliver[T],
        *,
        batch_size_limit: int = 1000,
        period_seconds: float = 2.0,
        queue_limit: int = 100_000,
        heartbeat_interval_seconds: float | None = 120.0,
        shutdown_grace_seconds: float = 10.0,
        name: str = "newrelic-logsink-batch",
    ) -> None:
        """Initialize and start the worker thread.

        Raises:
            ValueError: If batch_size_limit < 1 or period_seconds <= 0.
        """
        if batch_size_limit < 1:
            raise ValueError(f"batch_size_limit must be >= 1, got {batch_size_limit}")
        if period_seconds <= 0:
            raise ValueError(f"period_seconds must be > 0, got {period_seconds}")

        self._deliver = deliver
        self._batch_size_limit = batch_size_limit
        self._period_seconds = period_seconds
        self._heartbeat_interval_seconds = heartbeat_interval_seconds
        self._shutdown_grace_seconds = shutdown_grace_seconds

        # _lock guards the buffer, state and cycle counters
        self._lock = threading.Lock()
        self._cycle_finished = threading.Condition(self._lock)
        self._buffer: BoundedBuffer[T] = BoundedBuffer(max_size=queue_limit)
        self._state = SchedulerState.IDLE
        self._cycles_started = 0
        self._cycles_completed = 0
        self._rejected_count = 0
        self._last_logged_rejected_count = 0

        # Worker-only metrics (single writer)
        self._batches_delivered = 0
        self._batches_failed = 0
        self._items_delivered = 0
        self._heartbeats = 0
        self._last_delivery: float | None = None

        self._wake = threading.Event()
        self._closing = threading.Event()
        self._worker_ready = threading.Event()
        self._worker = threading.Thread(target=self._run, name=name, daemon=True)
        self._worker.start()
        self._worker_ready.wait(timeout=5.0)

    @property
    def state(self) -> SchedulerState:
        with self._lock:
            return self._state

    @property
    def batch_size_limit(self) -> int:
        return self._batch_size_limit

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)

    def enqueue(self, item: T) -> bool:
        """Buffer an item for the next flush.

        Never blocks on delivery and never raises.

        Returns:
            True if the item was buffered, False if it was rejected because
            the scheduler is draining or stopped.
        """
        try:
            with self._lock:
                if self._state in (SchedulerState.DRAINING, SchedulerState.STOPPED):
                    self._rejected_count += 1
                    self._log_rejections_if_needed()
                    return False
                self._buffer.append(item)
                if self._state is SchedulerState.IDLE:
                    self._state = SchedulerState.ACCUMULATING
                size_reached = len(self._buffer) >= self._batch_size_limit
            if size_reached:
                self._wake.set()
            return True
        except Exception as e:
            logger.error("Failed to buffer item, item dropped", error=str(e))
            return False

    def _log_rejections_if_needed(self) -> None:
        """Log aggregate rejection message. Must be called while holding _lock."""
        if self._rejected_count == 1 or self._rejected_count - self._last_logged_rejected_count >= self._LOG_INTERVAL:
            logger.warning(
                "Items rejected after shutdown began",
                rejected_since_last_log=self._rejected_count - self._last_logged_rejected_count,
                rejected_total=self._rejected_count,
            )
            self._last_logged_rejected_count = self._rejected_count

    def flush(self, timeout: float | None = None) -> bool:
        """Request an immediate flush and wait for it to finish.

        Every item enqueued before this call is covered by the flush that
        this call waits for.

        Returns:
            True if the flush finished within timeout, False otherwise
            (including when the scheduler is stopped).
        """
        if threading.current_thread() is self._worker:
            # Called from deliver(); the current cycle cannot wait on itself
            return False
        with self._lock:
            if self._state is SchedulerState.STOPPED or self._closing.is_set():
                return False
            target = self._cycles_started + 1
        self._wake.set()
        with self._cycle_finished:
            return self._cycle_finished.wait_for(lambda: self._cycles_completed >= target, timeout=timeout)

    def close(self, grace_period_seconds: float | None = None) -> bool:
        """Stop the timer, run one final flush and wait for it.

        Shutdown Sequence:
        1. Enter DRAINING - enqueue() rejects from here on
        2. Wake the worker, which leaves its loop and runs the final flush
        3. Join the worker for up to the grace period
        4. Enter STOPPED

        Idempotent: later calls return immediately.

        Returns:
            True if the final flush completed within the grace period.
        """
        grace = self._shutdown_grace_seconds if grace_period_seconds is None else grace_period_seconds
        with self._lock:
            if self._state in (SchedulerState.DRAINING, SchedulerState.STOPPED):
                return not self._worker.is_alive()
            self._state = SchedulerState.DRAINING

        self._closing.set()
        self._wake.set()

        if threading.current_thread() is not self._worker:
            self._worker.join(timeout=grace)
        completed = not self._worker.is_alive()

        with self._lock:
            self._state = SchedulerState.STOPPED
            stranded = len(self._buffer)

        if not completed:
            logger.error(
                "Final flush did not complete within grace period, buffered items lost",
                grace_period_seconds=grace,
                buffered=stranded,
            )
        logger.info("Batch scheduler stopped", **self.health_metrics)
        return completed

    def _run(self) -> None:
        """Worker thread: wait for a trigger, flush, repeat; then drain."""
        self._worker_ready.set()

        next_tick = time.monotonic() + self._period_seconds
        while not self._closing.is_set():
            requested = self._wake.wait(timeout=max(0.0, next_tick - time.monotonic()))
            if self._closing.is_set():
                break
            self._wake.clear()
            self._flush_cycle(timer_tick=not requested)
            next_tick = time.monotonic() + self._period_seconds

        self._flush_cycle(timer_tick=False)

    def _flush_cycle(self, *, timer_tick: bool) -> None:
        """Snapshot the buffer and deliver it in batches of at most batch_size_limit."""
        with self._lock:
            snapshot = self._buffer.drain()
            self._cycles_started += 1
            if self._state is not SchedulerState.DRAINING:
                self._state = SchedulerState.FLUSHING

        try:
            if snapshot:
                for start in range(0, len(snapshot), self._batch_size_limit):
                    self._deliver_batch(snapshot[start : start + self._batch_size_limit])
            elif timer_tick and self._heartbeat_due():
                self._heartbeats += 1
                self._deliver_batch([])
        finally:
            with self._lock:
                self._cycles_completed += 1
                if self._state is SchedulerState.FLUSHING:
                    self._state = SchedulerState.ACCUMULATING if len(self._buffer) else SchedulerState.IDLE
                self._cycle_finished.notify_all()

    def _heartbeat_due(self) -> bool:
        if self._heartbeat_interval_seconds is None or self._last_delivery is None:
            return False
        return time.monotonic() - self._last_delivery >= self._heartbeat_interval_seconds

    def _deliver_batch(self, items: list[T]) -> None:
        try:
            self._deliver(items)
        except Exception as e:
            self._batches_failed += 1
            logger.error(
                "Batch delivery failed, batch dropped",
                item_count=len(items),
                error=str(e),
            )
        else:
            self._batches_delivered += 1
            self._items_delivered += len(items)
        finally:
            self._last_delivery = time.monotonic()

    @property
    def health_metrics(self) -> dict[str, Any]:
        """Snapshot of scheduler health.

        Worker-owned counters may be slightly stale when read from another
        thread; this is acceptable for monitoring.
        """
        with self._lock:
            state = self._state
            depth = len(self._buffer)
            dropped = self._buffer.dropped_count
            rejected = self._rejected_count
        return {
            "state": state.value,
            "buffer_depth": depth,
            "buffer_dropped": dropped,
            "rejected_after_close": rejected,
            "batches_delivered": self._batches_delivered,
            "batches_failed": self._batches_failed,
            "items_delivered": self._items_delivered,
            "heartbeats": self._heartbeats,
        }
