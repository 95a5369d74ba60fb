# src/newrelic_logsink/engine/buffer.py
"""Bounded FIFO buffer for records waiting to be flushed.

Drops the oldest item on overflow so producers never block.

Key design decisions:
- Ring buffer via deque(maxlen=N): automatic oldest-first eviction
- Overflow counted by checking was_full BEFORE append (deque evicts during)
- Aggregate logging: the first drop, then every 100 drops
"""

from collections import deque
from typing import Generic, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class BoundedBuffer(Generic[T]):
    """Ring buffer that drops oldest items on overflow.

    Thread Safety:
        NOT thread-safe. BatchScheduler serializes access with its lock.

    Example:
        buffer = BoundedBuffer[LogRecord](max_size=1000)
        buffer.append(record)
        snapshot = buffer.drain()
    """

    _LOG_INTERVAL = 100

    def __init__(self, max_size: int = 100_000) -> None:
        """Initialize the bounded buffer.

        Args:
            max_size: Maximum number of items to hold. When full, the oldest
                item is evicted on append.

        Raises:
            ValueError: If max_size < 1.
        """
        if max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {max_size}")
        self._buffer: deque[T] = deque(maxlen=max_size)
        self._dropped_count: int = 0
        self._last_logged_drop_count: int = 0

    def append(self, item: T) -> None:
        """Append an item, counting an eviction if the buffer was full."""
        was_full = len(self._buffer) == self._buffer.maxlen
        self._buffer.append(item)
        if was_full:
            self._dropped_count += 1
            if (
                self._dropped_count == 1
                or self._dropped_count - self._last_logged_drop_count >= self._LOG_INTERVAL
            ):
                logger.warning(
                    "Log buffer overflow - oldest records dropped",
                    dropped_since_last_log=self._dropped_count - self._last_logged_drop_count,
                    dropped_total=self._dropped_count,
                    buffer_size=self._buffer.maxlen,
                    hint="Consider increasing queue_limit or lowering period_seconds",
                )
                self._last_logged_drop_count = self._dropped_count

    def drain(self) -> list[T]:
        """Remove and return every buffered item, oldest first."""
        items = list(self._buffer)
        self._buffer.clear()
        return items

    @property
    def dropped_count(self) -> int:
        """Number of items evicted due to overflow."""
        return self._dropped_count

    @property
    def max_size(self) -> int:
        maxlen = self._buffer.maxlen
        assert maxlen is not None
        return maxlen

    def __len__(self) -> int:
        return len(self._buffer)
