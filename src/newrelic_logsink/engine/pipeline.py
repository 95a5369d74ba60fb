# src/newrelic_logsink/engine/pipeline.py
"""LogPipeline: the sink that producers submit records to.

Data flow:
    submit(record) -> BatchScheduler buffer
    flush thread   -> classify + apply effects -> project -> Batch -> transport

Classification and projection run on the flush thread, off the producer's
path. A fault while handling one record drops that record only; a failed
delivery drops that batch only. Neither ever reaches the producer.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

import structlog

from newrelic_logsink.contracts.enums import DeliveryOutcome, LogLevel
from newrelic_logsink.contracts.records import Batch, BatchItem, LogRecord
from newrelic_logsink.core.sanitizer import Sanitizer
from newrelic_logsink.engine.classifier import Classifier
from newrelic_logsink.engine.projection import BatchItemProjector
from newrelic_logsink.engine.scheduler import BatchScheduler

if TYPE_CHECKING:
    from newrelic_logsink.contracts.config import RuntimeSinkConfig
    from newrelic_logsink.metrics.protocols import MetricsSink
    from newrelic_logsink.transport.protocols import TransportProtocol

logger = structlog.get_logger(__name__)


class LogPipeline:
    """Batching log sink for one application.

    Failure handling:
        - Records below ``minimum_level`` are ignored at submit time
        - Any exception while classifying, applying effects to the metrics
          sink, or projecting a record drops that record with a warning
        - A REJECTED or NETWORK_FAILURE outcome drops the batch; the
          transport has already logged the cause

    Thread Safety:
        submit() may be called from any thread. Everything after the buffer
        runs on the scheduler's single flush thread.

    Example:
        pipeline = LogPipeline(config, transport, metrics_sink=agent_sink)
        pipeline.submit(record)
        ...
        pipeline.close()
    """

    def __init__(
        self,
        config: RuntimeSinkConfig,
        transport: TransportProtocol,
        *,
        metrics_sink: MetricsSink | None = None,
    ) -> None:
        """Initialize the pipeline and start its flush thread.

        Args:
            config: Runtime configuration
            transport: Configured transport that receives each Batch
            metrics_sink: Receiver for classifier effects. None disables
                classification; records are still shipped as logs.
        """
        self._config = config
        self._transport = transport
        self._metrics_sink = metrics_sink

        sanitizer = Sanitizer(config.allowed_punctuation)
        self._classifier = Classifier(sanitizer, custom_event_name=config.custom_event_name)
        self._projector = BatchItemProjector(sanitizer)

        self._records_failed = 0
        self._batches_accepted = 0
        self._batches_rejected = 0
        self._batches_network_failure = 0

        self._scheduler: BatchScheduler[LogRecord] = BatchScheduler(
            self._emit_batch,
            batch_size_limit=config.batch_size_limit,
            period_seconds=config.period_seconds,
            queue_limit=config.queue_limit,
            heartbeat_interval_seconds=config.heartbeat_interval_seconds,
            shutdown_grace_seconds=config.shutdown_grace_seconds,
        )
        self._closed = False
        self._close_lock = threading.Lock()

    @property
    def application_name(self) -> str:
        return self._config.application_name

    @property
    def minimum_level(self) -> LogLevel:
        return self._config.minimum_level

    @property
    def transport(self) -> TransportProtocol:
        return self._transport

    def is_enabled(self, level: LogLevel) -> bool:
        """True if records at this level are shipped."""
        return level >= self._config.minimum_level

    def submit(self, record: LogRecord) -> None:
        """Accept a record for eventual delivery. Never raises or blocks on I/O."""
        if record.level < self._config.minimum_level:
            return
        self._scheduler.enqueue(record)

    def flush(self, timeout: float | None = None) -> bool:
        """Deliver everything submitted so far.

        Returns:
            True if the flush finished within timeout.
        """
        return self._scheduler.flush(timeout)

    def close(self, grace_period_seconds: float | None = None) -> bool:
        """Flush remaining records, then close the transport.

        Idempotent and safe to call from several threads; only the first
        call closes the scheduler and the transport.

        Returns:
            True if the final flush completed within the grace period.
        """
        with self._close_lock:
            if self._closed:
                return True
            self._closed = True
        completed = self._scheduler.close(grace_period_seconds)
        try:
            self._transport.close()
        except Exception as e:
            logger.warning("Transport close failed", transport=self._transport.name, error=str(e))
        return completed

    def __enter__(self) -> LogPipeline:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _emit_batch(self, records: list[LogRecord]) -> None:
        """Flush-thread callback: turn records into one Batch and deliver it."""
        items: list[BatchItem] = []
        for record in records:
            item = self._process_record(record)
            if item is not None:
                items.append(item)

        batch = Batch(application_name=self._config.application_name, items=tuple(items))
        outcome = self._transport.deliver(batch)

        # The transport has already logged why a batch was dropped
        if outcome is DeliveryOutcome.ACCEPTED:
            self._batches_accepted += 1
        elif outcome is DeliveryOutcome.REJECTED:
            self._batches_rejected += 1
        else:
            self._batches_network_failure += 1

    def _process_record(self, record: LogRecord) -> BatchItem | None:
        try:
            if self._metrics_sink is not None:
                for effect in self._classifier.classify(record):
                    effect.apply(self._metrics_sink)
            return self._projector.project(record)
        except Exception as e:
            self._records_failed += 1
            logger.warning(
                "Failed to process log record, record dropped",
                timestamp=record.timestamp.isoformat(),
                message_template=record.message_template,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    @property
    def health_metrics(self) -> dict[str, Any]:
        """Pipeline and scheduler counters for monitoring."""
        return {
            **self._scheduler.health_metrics,
            "records_failed": self._records_failed,
            "batches_accepted": self._batches_accepted,
            "batches_rejected": self._batches_rejected,
            "batches_network_failure": self._batches_network_failure,
        }
