"""Metrics collectors passed into the services and request hooks."""

from __future__ import annotations

import atexit
import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Iterator

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

TagKey = tuple[str, tuple[tuple[str, str], ...]]


def _key(name: str, tags: dict[str, Any]) -> TagKey:
    return name, tuple(sorted((k, str(v)) for k, v in tags.items()))


@dataclass
class TimingStats:
    """Running aggregate of the durations recorded under one timer."""

    count: int = 0
    total: float = 0.0
    max: float = 0.0

    def add(self, millis: float) -> None:
        self.count += 1
        self.total += millis
        self.max = max(self.max, millis)

    @property
    def mean(self) -> float:
        return self.total / self.count if self.count else 0.0


class MetricsCollector(ABC):
    """Sink for counters, timers and gauges."""

    @abstractmethod
    def increment(self, name: str, value: float = 1, **tags: Any) -> None:
        """Add ``value`` to the counter ``name``."""

    @abstractmethod
    def timing(self, name: str, millis: float, **tags: Any) -> None:
        """Record a duration in milliseconds."""

    @abstractmethod
    def gauge(self, name: str, value: float, **tags: Any) -> None:
        """Record the latest value of ``name``."""

    @contextmanager
    def timer(self, name: str, **tags: Any) -> Iterator[None]:
        """Time the enclosed block and record it under ``name``."""

        start = time.perf_counter()
        try:
            yield
        finally:
            self.timing(name, (time.perf_counter() - start) * 1000, **tags)


class InMemoryMetrics(MetricsCollector):
    """Keep metrics in process; used for local development and tests."""

    def __init__(self):
        self.counters: dict[TagKey, float] = defaultdict(float)
        self.timings: dict[TagKey, TimingStats] = defaultdict(TimingStats)
        self.gauges: dict[TagKey, float] = {}

    def increment(self, name: str, value: float = 1, **tags: Any) -> None:
        self.counters[_key(name, tags)] += value

    def timing(self, name: str, millis: float, **tags: Any) -> None:
        self.timings[_key(name, tags)].add(millis)

    def gauge(self, name: str, value: float, **tags: Any) -> None:
        self.gauges[_key(name, tags)] = value

    def count(self, name: str, **tags: Any) -> float:
        """Sum every counter named ``name`` whose tags include ``tags``."""

        wanted = set(_key(name, tags)[1])
        return sum(
            value
            for (counter_name, counter_tags), value in self.counters.items()
            if counter_name == name and wanted.issubset(counter_tags)
        )

    def timing_count(self, name: str) -> int:
        return sum(
            stats.count for (timer_name, _), stats in self.timings.items() if timer_name == name
        )


class CloudWatchMetrics(MetricsCollector):
    """Publish metrics to Amazon CloudWatch under a single namespace.

    Only metric families the dashboards use are exported, and the ``path`` tag
    is dropped to keep dimension cardinality low. Data points are buffered and
    sent by a background thread every ``step_seconds``, or sooner once a full
    batch is waiting. Publishing failures are logged and never propagate into
    request handling.
    """

    EXPORTED_PREFIXES = ("http.", "image.", "webapp.", "db.", "verification.")
    IGNORED_TAGS = frozenset({"path"})
    MAX_BATCH_SIZE = 1000

    def __init__(
        self,
        namespace: str,
        region_name: str | None = None,
        client: Any = None,
        application: str = "webapp",
        step_seconds: float = 60.0,
    ):
        self.namespace = namespace
        self.application = application
        self.step_seconds = step_seconds
        self.client = client or boto3.client("cloudwatch", region_name=region_name)

        self._buffer: list[dict[str, Any]] = []
        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._wakeup = threading.Event()
        self._worker = threading.Thread(
            target=self._run, name="cloudwatch-metrics", daemon=True
        )
        self._worker.start()
        atexit.register(self.close)

    def _dimensions(self, tags: dict[str, Any]) -> list[dict[str, str]]:
        dimensions = [{"Name": "application", "Value": self.application}]
        for name, value in sorted(tags.items()):
            if name in self.IGNORED_TAGS:
                continue
            dimensions.append({"Name": name, "Value": str(value)})
        return dimensions

    def _put(self, name: str, value: float, unit: str, tags: dict[str, Any]) -> None:
        if not name.startswith(self.EXPORTED_PREFIXES):
            return
        datum = {
            "MetricName": name,
            "Dimensions": self._dimensions(tags),
            "Timestamp": datetime.now(UTC),
            "Value": value,
            "Unit": unit,
        }
        with self._lock:
            self._buffer.append(datum)
            full = len(self._buffer) >= self.MAX_BATCH_SIZE
        if full:
            self._wakeup.set()

    def _run(self) -> None:
        while not self._stopped.is_set():
            self._wakeup.wait(self.step_seconds)
            self._wakeup.clear()
            self.flush()

    def pending(self) -> int:
        with self._lock:
            return len(self._buffer)

    def flush(self) -> None:
        """Send every buffered data point, one request per batch."""

        with self._lock:
            data, self._buffer = self._buffer, []
        for start in range(0, len(data), self.MAX_BATCH_SIZE):
            batch = data[start : start + self.MAX_BATCH_SIZE]
            try:
                self.client.put_metric_data(Namespace=self.namespace, MetricData=batch)
            except (BotoCoreError, ClientError):
                logger.exception("Failed to publish %d metric data points", len(batch))

    def close(self) -> None:
        """Stop the publishing thread and send whatever is still buffered."""

        if self._stopped.is_set():
            return
        self._stopped.set()
        self._wakeup.set()
        self._worker.join(timeout=5)
        self.flush()

    def increment(self, name: str, value: float = 1, **tags: Any) -> None:
        self._put(name, value, "Count", tags)

    def timing(self, name: str, millis: float, **tags: Any) -> None:
        self._put(name, millis, "Milliseconds", tags)

    def gauge(self, name: str, value: float, **tags: Any) -> None:
        self._put(name, value, "None", tags)
