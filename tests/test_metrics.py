import pytest

from taskscheduler import metrics
from taskscheduler.metrics import Counter, Gauge, Histogram, Registry


def test_counter_starts_at_zero_and_increments():
    counter = Counter("demo_total", "Demo", ["priority"])
    assert counter.value("high") == 0
    counter.inc("high")
    counter.inc(("high",), 2)
    counter.inc({"priority": "low"})
    assert counter.value("high") == 3
    assert counter.value(["low"]) == 1


def test_counter_rejects_negative():
    counter = Counter("demo_total", "Demo", ["priority"])
    with pytest.raises(ValueError):
        counter.inc("high", -1)


def test_counter_rejects_wrong_labels():
    counter = Counter("demo_total", "Demo", ["priority"])
    with pytest.raises(ValueError):
        counter.inc(("a", "b"))
    with pytest.raises(ValueError):
        counter.inc({"status": "x"})


def test_counter_render():
    counter = Counter("demo_total", "Demo help", ["priority"])
    counter.inc("high", 2)
    text = counter.render()
    assert "# HELP demo_total Demo help" in text.splitlines()
    assert "# TYPE demo_total counter" in text.splitlines()
    assert 'demo_total{priority="high"} 2' in text.splitlines()


def test_counter_render_escapes_label_values():
    counter = Counter("demo_total", "Demo", ["path"])
    counter.inc('a"b')
    assert 'demo_total{path="a\\"b"} 1' in counter.render()


def test_gauge_inc_dec_set():
    gauge = Gauge("demo_gauge", "Demo")
    gauge.inc()
    gauge.inc(4)
    gauge.dec()
    assert gauge.value == 4
    gauge.set(1.5)
    assert gauge.value == 1.5
    assert "demo_gauge 1.5" in gauge.render().splitlines()


def _bucket_counts(text, name):
    return [
        int(line.rsplit(" ", 1)[1])
        for line in text.splitlines()
        if line.startswith(f"{name}_bucket")
    ]


def test_histogram_count_and_total():
    hist = Histogram("demo_seconds", "Demo", ["priority"])
    hist.observe("high", 0.5)
    hist.observe("high", 1.5)
    assert hist.count("high") == 2
    assert hist.total("high") == pytest.approx(2.0)
    assert hist.count("low") == 0


def test_histogram_render_is_cumulative():
    hist = Histogram("demo_seconds", "Demo", buckets=(1.0, 2.0))
    hist.observe(None, 1.5)
    hist.observe(None, 3.0)
    hist.observe(None, 0.5)
    text = hist.render()
    counts = _bucket_counts(text, "demo_seconds")
    assert counts == sorted(counts)
    assert counts[-1] == hist.count()
    assert 'demo_seconds_bucket{le="+Inf"} 3' in text.splitlines()
    assert "demo_seconds_count 3" in text.splitlines()


def test_histogram_default_buckets():
    hist = Histogram("demo_seconds", "Demo")
    assert hist.buckets == metrics.DEFAULT_BUCKETS


def test_histogram_rejects_duplicate_buckets():
    with pytest.raises(ValueError):
        Histogram("demo_seconds", "Demo", buckets=(1.0, 1.0))


def test_registry_rejects_duplicates():
    registry = Registry()
    registry.register(Gauge("one", "One"))
    with pytest.raises(ValueError, match="duplicate"):
        registry.register(Counter("one", "Other"))


def test_registry_render_includes_all():
    registry = Registry()
    registry.register(Gauge("first_gauge", "A"), Counter("second_total", "B"))
    text = registry.render()
    assert "# TYPE first_gauge gauge" in text
    assert "# TYPE second_total counter" in text


def test_init_registers_scheduler_metrics():
    registry = metrics.init(Registry())
    text = registry.render()
    for name in (
        "task_submitted_total",
        "task_processed_total",
        "task_queue_length",
        "task_processing_seconds",
    ):
        assert f"# TYPE {name}" in text


def test_init_twice_fails():
    registry = Registry()
    metrics.init(registry)
    with pytest.raises(ValueError):
        metrics.init(registry)