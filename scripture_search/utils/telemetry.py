"""Per-request telemetry for search pipelines."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from .observability import get_logger

TelemetryListener = Callable[[str, Dict[str, Any]], None]


class StructuredTelemetry:
    """Collects stage timings, counters and annotations for one search request.

    A fresh instance is created for every request so concurrent searches never
    share state; listeners receive each event as it is recorded.
    """

    def __init__(
        self,
        name: str,
        *,
        time_fn: Optional[Callable[[], float]] = None,
        max_events: int = 256,
        listeners: Optional[Iterable[TelemetryListener]] = None,
    ) -> None:
        self.name = name
        self._time_fn = time_fn or time.perf_counter
        self._max_events = max(1, int(max_events))
        self._listeners: List[TelemetryListener] = list(listeners or [])
        self._timings: Dict[str, Dict[str, float]] = {}
        self._counters: Dict[str, float] = {}
        self._events: List[Dict[str, Any]] = []
        self._metadata: Dict[str, Any] = {"trace_name": name}
        self._started_at = self.now()
        self._notify("trace_started", {"name": name})

    def _notify(self, event_type: str, payload: Dict[str, Any]) -> None:
        for listener in self._listeners:
            try:
                listener(event_type, dict(payload))
            except Exception:
                # A faulty listener must not break the search it observes.
                continue

    def now(self) -> float:
        return float(self._time_fn())

    def elapsed(self) -> float:
        """Seconds since the trace started."""

        return max(0.0, self.now() - self._started_at)

    def record_timing(
        self,
        name: str,
        duration: float,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        duration = max(0.0, float(duration))
        bucket = self._timings.setdefault(
            name, {"count": 0, "total": 0.0, "min": duration, "max": duration}
        )
        bucket["count"] += 1
        bucket["total"] += duration
        bucket["min"] = min(bucket["min"], duration)
        bucket["max"] = max(bucket["max"], duration)

        event: Dict[str, Any] = {"name": name, "duration": duration}
        if metadata:
            event["metadata"] = dict(metadata)
        self._events.append(event)
        if len(self._events) > self._max_events:
            self._events = self._events[-self._max_events :]

        self._notify("timing", {"name": name, "duration": duration, "metadata": dict(metadata or {})})

    @contextmanager
    def timer(
        self,
        name: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Iterator[Dict[str, Any]]:
        """Time the enclosed block; callers may add metadata to the yielded dict."""

        payload: Dict[str, Any] = dict(metadata or {})
        start = self.now()
        try:
            yield payload
        finally:
            self.record_timing(name, self.now() - start, payload)

    def increment(self, name: str, amount: float = 1.0) -> None:
        value = float(amount)
        self._counters[name] = self._counters.get(name, 0.0) + value
        self._notify("counter", {"name": name, "delta": value, "value": self._counters[name]})

    def annotate(self, key: str, value: Any) -> None:
        self._metadata[key] = value
        self._notify("metadata", {"key": key, "value": value})

    def snapshot(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "elapsed": self.elapsed(),
            "timings": {key: dict(value) for key, value in self._timings.items()},
            "counters": dict(self._counters),
            "events": [dict(event) for event in self._events],
            "metadata": dict(self._metadata),
        }


class TelemetryLogger:
    """Listener that forwards telemetry events to the project logger."""

    def __init__(
        self,
        *,
        logger: Optional[logging.LoggerAdapter] = None,
        level: int = logging.DEBUG,
        level_map: Optional[Dict[str, int]] = None,
    ) -> None:
        self._logger = logger or get_logger(__name__).bind(component="telemetry")
        self._default_level = level
        self._level_map = dict(level_map or {})

    def __call__(self, event_type: str, payload: Dict[str, Any]) -> None:
        level = self._level_map.get(event_type, self._default_level)
        if not self._logger.isEnabledFor(level):
            return

        context = {"telemetry.event": event_type}
        context.update({str(key): value for key, value in payload.items()})
        name = payload.get("name") or payload.get("key") or "event"
        self._logger.log(level, f"Telemetry {event_type}: {name}", context=context)


__all__ = ["StructuredTelemetry", "TelemetryLogger", "TelemetryListener"]
