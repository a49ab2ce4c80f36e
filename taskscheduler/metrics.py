"""In-process metrics in the Prometheus text exposition format."""

from __future__ import annotations

import bisect
import itertools
import math
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Union

DEFAULT_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)

Labels = Union[None, str, Iterable[object], Mapping[str, object]]


def _fmt(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def _labels_text(names, values, extra=()) -> str:
    pairs = [*zip(names, values), *extra]
    if not pairs:
        return ""
    return "{" + ",".join(f'{n}="{_escape(v)}"' for n, v in pairs) + "}"


class _Metric:
    kind = "untyped"

    def __init__(self, name: str, help: str, label_names: Iterable[str] = ()):
        self.name = name
        self.help = help
        self.label_names = tuple(label_names)
        self._lock = threading.Lock()

    def _key(self, labels: Labels) -> tuple[str, ...]:
        if labels is None:
            values: tuple[str, ...] = ()
        elif isinstance(labels, str):
            values = (labels,)
        elif isinstance(labels, Mapping):
            if set(labels) != set(self.label_names):
                raise ValueError(
                    f"{self.name}: expected labels {self.label_names}, got {tuple(labels)}"
                )
            values = tuple(str(labels[n]) for n in self.label_names)
        else:
            values = tuple(str(v) for v in labels)
        if len(values) != len(self.label_names):
            raise ValueError(
                f"{self.name}: expected {len(self.label_names)} label values, got {len(values)}"
            )
        return values

    def _header(self) -> list[str]:
        return [f"# HELP {self.name} {self.help}", f"# TYPE {self.name} {self.kind}"]


class Counter(_Metric):
    """A monotonically increasing value per label set."""

    kind = "counter"

    def __init__(self, name: str, help: str, label_names: Iterable[str] = ()):
        super().__init__(name, help, label_names)
        self._values: dict[tuple[str, ...], float] = {}

    def inc(self, labels: Labels = None, amount: float = 1.0) -> None:
        if amount < 0:
            raise ValueError("counter cannot decrease in value")
        key = self._key(labels)
        with self._lock:
            self._values[key] = self._values.get(key, 0.0) + amount

    def value(self, labels: Labels = None) -> float:
        key = self._key(labels)
        with self._lock:
            return self._values.get(key, 0.0)

    def render(self) -> str:
        with self._lock:
            items = sorted(self._values.items())
        if not items and not self.label_names:
            items = [((), 0.0)]
        lines = self._header()
        lines += [f"{self.name}{_labels_text(self.label_names, k)} {_fmt(v)}" for k, v in items]
        return "\n".join(lines) + "\n"


class Gauge(_Metric):
    """A single value that can go up and down."""

    kind = "gauge"

    def __init__(self, name: str, help: str):
        super().__init__(name, help)
        self._value = 0.0

    @property
    def value(self) -> float:
        with self._lock:
            return self._value

    def inc(self, amount: float = 1.0) -> None:
        with self._lock:
            self._value += amount

    def dec(self, amount: float = 1.0) -> None:
        with self._lock:
            self._value -= amount

    def set(self, value: float) -> None:
        with self._lock:
            self._value = float(value)

    def render(self) -> str:
        return "\n".join([*self._header(), f"{self.name} {_fmt(self.value)}"]) + "\n"


@dataclass
class _Series:
    counts: list[int]
    total: float = 0.0
    count: int = 0


class Histogram(_Metric):
    """Observations sorted into cumulative buckets per label set."""

    kind = "histogram"

    def __init__(
        self,
        name: str,
        help: str,
        label_names: Iterable[str] = (),
        buckets: Iterable[float] = DEFAULT_BUCKETS,
    ):
        super().__init__(name, help, label_names)
        bounds = sorted(float(b) for b in buckets if not math.isinf(float(b)))
        if not bounds or len(set(bounds)) != len(bounds):
            raise ValueError("histogram buckets must be distinct and non-empty")
        self.buckets = tuple(bounds)
        self._series: dict[tuple[str, ...], _Series] = {}

    def observe(self, labels: Labels = None, value: float = 0.0) -> None:
        key = self._key(labels)
        index = bisect.bisect_left(self.buckets, value)
        with self._lock:
            series = self._series.get(key)
            if series is None:
                series = self._series[key] = _Series(counts=[0] * len(self.buckets))
            if index < len(self.buckets):
                series.counts[index] += 1
            series.total += value
            series.count += 1

    def count(self, labels: Labels = None) -> int:
        key = self._key(labels)
        with self._lock:
            series = self._series.get(key)
            return series.count if series else 0

    def total(self, labels: Labels = None) -> float:
        key = self._key(labels)
        with self._lock:
            series = self._series.get(key)
            return series.total if series else 0.0

    def render(self) -> str:
        lines = self._header()
        with self._lock:
            snapshot = sorted(
                (k, list(s.counts), s.total, s.count) for k, s in self._series.items()
            )
        for key, counts, total, count in snapshot:
            for bound, cumulative in zip(self.buckets, itertools.accumulate(counts)):
                labels = _labels_text(self.label_names, key, [("le", _fmt(bound))])
                lines.append(f"{self.name}_bucket{labels} {cumulative}")
            labels = _labels_text(self.label_names, key, [("le", "+Inf")])
            lines.append(f"{self.name}_bucket{labels} {count}")
            plain = _labels_text(self.label_names, key)
            lines.append(f"{self.name}_sum{plain} {_fmt(total)}")
            lines.append(f"{self.name}_count{plain} {count}")
        return "\n".join(lines) + "\n"


@dataclass
class Registry:
    """A named collection of metrics rendered together."""

    _metrics: dict[str, _Metric] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def register(self, *args: _Metric) -> None:
        """Add metrics; raises ValueError if any name is already registered."""
        with self._lock:
            names = [m.name for m in args]
            for name in names:
                if name in self._metrics or names.count(name) > 1:
                    raise ValueError(
                        f"duplicate metrics collector registration attempted: {name}"
                    )
            self._metrics.update((m.name, m) for m in args)

    def render(self) -> str:
        with self._lock:
            metrics = list(self._metrics.values())
        return "".join(m.render() for m in metrics)


TASKS_SUBMITTED = Counter(
    "task_submitted_total", "Total number of submitted tasks", ["priority"]
)
TASKS_PROCESSED = Counter(
    "task_processed_total", "Total number of processed tasks", ["status"]
)
TASKS_IN_QUEUE = Gauge("task_queue_length", "Number of tasks currently in the queue")
TASK_DURATION = Histogram(
    "task_processing_seconds",
    "Duration in seconds of task processing",
    ["priority"],
    DEFAULT_BUCKETS,
)

REGISTRY = Registry()


def init(registry: Registry | None = None) -> Registry:
    """Register the scheduler's metrics with ``registry`` (the default one if omitted)."""
    target = REGISTRY if registry is None else registry
    target.register(TASKS_SUBMITTED, TASKS_PROCESSED, TASKS_IN_QUEUE, TASK_DURATION)
    return target