"""Tests for latency percentiles and the recorder."""

import time

import pytest

from analysis_ledger.persistence.timing import (
    LatencyRecorder,
    LatencySummary,
    p95_ms,
    percentile_ms,
    timed,
)


class TestPercentiles:
    def test_nearest_rank_p95_of_150(self):
        assert p95_ms(list(range(1, 151))) == 143.0

    def test_order_does_not_matter(self):
        samples = list(range(150, 0, -1))
        assert p95_ms(samples) == 143.0

    def test_single_sample(self):
        assert p95_ms([7.5]) == 7.5

    def test_empty(self):
        assert p95_ms([]) == 0.0

    def test_median(self):
        assert percentile_ms([1, 2, 3, 4], 50.0) == 2.0


class TestLatencySummary:
    def test_from_samples(self):
        summary = LatencySummary.from_samples("project.save", [1.0, 2.0, 3.0, 10.0])
        assert summary.count == 4
        assert summary.max_ms == 10.0
        assert summary.mean_ms == pytest.approx(4.0)
        assert summary.p95_ms == 10.0

    def test_within_is_strict(self):
        summary = LatencySummary.from_samples("op", [100.0])
        assert not summary.within(100.0)
        assert summary.within(100.1)

    def test_empty_summary(self):
        summary = LatencySummary.from_samples("op", [])
        assert summary.count == 0
        assert summary.within(1.0)


class TestLatencyRecorder:
    def test_record_converts_to_ms(self):
        recorder = LatencyRecorder()
        recorder.record("op", 0.25)
        assert recorder.samples("op") == [250.0]

    def test_measure(self):
        recorder = LatencyRecorder()
        with recorder.measure("sleep"):
            time.sleep(0.01)
        assert recorder.samples("sleep")[0] >= 10.0

    def test_measure_records_on_error(self):
        recorder = LatencyRecorder()
        with pytest.raises(KeyError):
            with recorder.measure("broken"):
                raise KeyError("x")
        assert len(recorder.samples("broken")) == 1

    def test_operations_and_reset(self):
        recorder = LatencyRecorder()
        recorder.record("b", 0.001)
        recorder.record("a", 0.001)
        assert recorder.operations == ["a", "b"]
        assert set(recorder.summaries()) == {"a", "b"}
        recorder.reset()
        assert recorder.operations == []
        assert recorder.samples("a") == []


class _Widget:
    metric_name = "widget"

    def __init__(self, recorder=None):
        self.recorder = recorder

    @timed("spin")
    def spin(self, value):
        return value * 2


class TestTimedDecorator:
    def test_records_under_metric_name(self):
        recorder = LatencyRecorder()
        assert _Widget(recorder).spin(4) == 8
        assert recorder.operations == ["widget.spin"]

    def test_without_recorder(self):
        assert _Widget().spin(2) == 4

    def test_preserves_name(self):
        assert _Widget.spin.__name__ == "spin"
