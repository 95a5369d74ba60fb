# src/newrelic_logsink/engine/__init__.py
"""Classification, projection and batching of log records."""

from newrelic_logsink.engine.buffer import BoundedBuffer
from newrelic_logsink.engine.classifier import Classifier
from newrelic_logsink.engine.pipeline import LogPipeline
from newrelic_logsink.engine.projection import BatchItemProjector
from newrelic_logsink.engine.scheduler import BatchScheduler

__all__ = [
    "BatchItemProjector",
    "BatchScheduler",
    "BoundedBuffer",
    "Classifier",
    "LogPipeline",
]
