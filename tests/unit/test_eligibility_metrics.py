"""Unit tests for eligibility Prometheus helpers."""

from eligibility_service.observability import eligibility_metrics


class DummyMetric:
    def __init__(self):
        self.events = []

    def labels(self, **labels):
        self.events.append({"labels": labels})
        return self

    def inc(self, amount=1):
        self.events.append({"inc": amount})

    def observe(self, value):
        self.events.append({"observe": value})


def _enable_metrics(monkeypatch):
    monkeypatch.setattr(eligibility_metrics, "_enabled", lambda: True)


def test_record_upstream_call(monkeypatch):
    _enable_metrics(monkeypatch)
    calls, latency = DummyMetric(), DummyMetric()
    monkeypatch.setattr(eligibility_metrics, "UPSTREAM_CALLS_TOTAL", calls)
    monkeypatch.setattr(eligibility_metrics, "UPSTREAM_LATENCY_SECONDS", latency)

    eligibility_metrics.record_upstream_call("procedure", "success", 0.42)

    assert calls.events == [{"labels": {"kind": "procedure", "outcome": "success"}}, {"inc": 1}]
    assert latency.events == [{"labels": {"kind": "procedure"}}, {"observe": 0.42}]


def test_record_fallback_and_report(monkeypatch):
    _enable_metrics(monkeypatch)
    fallback, reports = DummyMetric(), DummyMetric()
    monkeypatch.setattr(eligibility_metrics, "FALLBACK_TOTAL", fallback)
    monkeypatch.setattr(eligibility_metrics, "REPORTS_TOTAL", reports)

    eligibility_metrics.record_fallback("transport_error")
    eligibility_metrics.record_report(synthetic=True)

    assert fallback.events[0] == {"labels": {"reason": "transport_error"}}
    assert reports.events[0] == {"labels": {"synthetic": "true"}}


def test_record_short_circuit_counts(monkeypatch):
    _enable_metrics(monkeypatch)
    counter = DummyMetric()
    monkeypatch.setattr(eligibility_metrics, "SHORT_CIRCUITS_TOTAL", counter)

    eligibility_metrics.record_short_circuit(7)

    assert counter.events == [{"inc": 7}]


def test_disabled_metrics_are_noops(monkeypatch):
    monkeypatch.setattr(eligibility_metrics, "_enabled", lambda: False)
    counter = DummyMetric()
    monkeypatch.setattr(eligibility_metrics, "FALLBACK_TOTAL", counter)

    eligibility_metrics.record_fallback("upstream_error")

    assert counter.events == []
