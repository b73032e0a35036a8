"""
Tests for metric identifiers and the in-memory registry.
"""

import threading

import pytest

from request_metrics.monitoring.metrics import (
    Counter, MetricId, MetricType, MetricsRegistry, Timer, get_registry
)


@pytest.mark.monitoring
@pytest.mark.unit
def test_metric_id_equality():
    a = MetricId("aws.request.requestCount", {"serviceName": "s3", "error": "false"})
    b = MetricId("aws.request.requestCount", {"error": "false", "serviceName": "s3"})
    c = MetricId("aws.request.requestCount", {"serviceName": "ec2", "error": "false"})

    assert a == b
    assert hash(a) == hash(b)
    assert a != c
    assert a != "aws.request.requestCount"


@pytest.mark.monitoring
@pytest.mark.unit
def test_metric_id_with_tag():
    base = MetricId("aws.request.throttling", {"error": "true"})
    tagged = base.with_tag("throttleException", "SlowDown")

    assert base.tags == {"error": "true"}
    assert tagged.tags == {"error": "true", "throttleException": "SlowDown"}
    assert tagged.name == base.name
    assert base.with_tag("error", "false").tags == {"error": "false"}


@pytest.mark.monitoring
@pytest.mark.unit
def test_metric_id_tags_are_a_copy():
    metric_id = MetricId("x", {"a": "1"})
    metric_id.tags["a"] = "2"
    assert metric_id.tags == {"a": "1"}


@pytest.mark.monitoring
@pytest.mark.unit
def test_counter_increment(registry):
    counter = registry.counter(registry.create_id("requests", {"serviceName": "s3"}))

    assert counter.get_value() == 0
    counter.increment()
    counter.increment(5)
    assert counter.count() == 6

    with pytest.raises(ValueError):
        counter.increment(-1)

    counter.reset()
    assert counter.count() == 0


@pytest.mark.monitoring
@pytest.mark.unit
def test_timer_record(registry):
    timer = registry.timer(registry.create_id("latency"))

    timer.record(400)
    timer.record(200)
    timer.record(-5)

    assert timer.count() == 2
    assert timer.total_time() == 600
    assert timer.max_time() == 400
    assert timer.get_stats() == {"count": 2, "total_time": 600, "mean": 300.0, "max": 400}

    timer.reset()
    assert timer.get_value()["count"] == 0


@pytest.mark.monitoring
@pytest.mark.unit
def test_equal_ids_share_a_metric(registry):
    first = registry.counter(registry.create_id("requests", {"a": "1"}))
    second = registry.counter(MetricId("requests", {"a": "1"}))
    other = registry.counter(MetricId("requests", {"a": "2"}))

    assert first is second
    assert first is not other


@pytest.mark.monitoring
@pytest.mark.unit
def test_type_mismatch(registry):
    metric_id = MetricId("requests")
    registry.counter(metric_id)

    with pytest.raises(ValueError):
        registry.timer(metric_id)


@pytest.mark.monitoring
@pytest.mark.unit
def test_registry_listing(registry):
    registry.counter(MetricId("requests", {"a": "1"}))
    registry.counter(MetricId("requests", {"a": "2"}))
    registry.timer(MetricId("latency"))

    assert len(registry.list_ids()) == 3
    assert all(isinstance(c, Counter) for c in registry.counters())
    assert [t.id for t in registry.timers()] == [MetricId("latency")]
    assert registry.get_metric(MetricId("latency")).metric_type == MetricType.TIMER
    assert registry.get_metric(MetricId("missing")) is None
    assert registry.get_stats() == {
        "total_metrics": 3,
        "metric_types": {"counter": 2, "timer": 1},
        "metric_names": ["latency", "requests"],
    }

    registry.clear()
    assert registry.list_ids() == []


@pytest.mark.monitoring
@pytest.mark.unit
def test_metric_info(registry):
    info = registry.timer(MetricId("latency", {"error": "false"})).get_info()
    assert info["name"] == "latency"
    assert info["tags"] == {"error": "false"}
    assert info["type"] == "timer"


@pytest.mark.monitoring
@pytest.mark.unit
def test_concurrent_increments(registry):
    metric_id = MetricId("requests")

    def work():
        for _ in range(1000):
            registry.counter(metric_id).increment()

    threads = [threading.Thread(target=work) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert registry.counter(metric_id).count() == 8000


@pytest.mark.monitoring
@pytest.mark.unit
def test_global_registry():
    assert isinstance(get_registry(), MetricsRegistry)
    assert get_registry() is get_registry()
    assert isinstance(get_registry().timer(MetricId("global.test.timer")), Timer)
    get_registry().clear()
