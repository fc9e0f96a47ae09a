"""
Tests for Detector Registry — concurrency, isolation, timeouts and the deadline.
"""

import asyncio

import pytest

from threatscope.core.detector_registry import DetectorRegistry
from threatscope.core.errors import DetectorUnavailable
from threatscope.models.signal_models import DetectorStatus, Signal, SignalCategory


def _signal(kind, weight=5.0, source=""):
    return Signal(category=SignalCategory.ANALYSIS, kind=kind, weight=weight, source=source)


def sync_detector(subject):
    return [_signal("SYNC")]


async def async_detector(subject):
    await asyncio.sleep(0.01)
    return [_signal("ASYNC")]


def raising_detector(subject):
    raise RuntimeError("boom")


def unavailable_detector(subject):
    raise DetectorUnavailable("unavailable_detector", "no data")


async def slow_detector(subject):
    await asyncio.sleep(5)
    return [_signal("SLOW")]


def test_runs_sync_and_async_detectors():
    registry = DetectorRegistry({"sync": sync_detector, "async": async_detector})
    result = asyncio.run(registry.run(object()))

    assert [s.kind for s in result.signals] == ["SYNC", "ASYNC"]
    assert all(t.status == DetectorStatus.OK for t in result.traces)
    assert result.unavailable == []


def test_signal_order_follows_registration_not_completion():
    async def finishes_last(subject):
        await asyncio.sleep(0.05)
        return [_signal("FIRST_REGISTERED")]

    registry = DetectorRegistry({"late": finishes_last, "early": sync_detector})
    result = asyncio.run(registry.run(object()))
    assert [s.kind for s in result.signals] == ["FIRST_REGISTERED", "SYNC"]


def test_source_defaults_to_detector_name():
    registry = DetectorRegistry({"named": sync_detector})
    result = asyncio.run(registry.run(object()))
    assert result.signals[0].source == "named"


def test_failing_detectors_do_not_affect_others():
    registry = DetectorRegistry(
        {
            "ok": sync_detector,
            "raises": raising_detector,
            "missing": unavailable_detector,
            "fine": async_detector,
        }
    )
    result = asyncio.run(registry.run(object()))

    assert [s.kind for s in result.signals] == ["SYNC", "ASYNC"]
    assert result.unavailable == ["raises", "missing"]
    traces = {t.detector: t for t in result.traces}
    assert "RuntimeError" in traces["raises"].error
    assert traces["missing"].error == "no data"


def test_detector_timeout():
    registry = DetectorRegistry({"slow": slow_detector, "ok": sync_detector}, detector_timeout=0.1)
    result = asyncio.run(registry.run(object()))

    assert [s.kind for s in result.signals] == ["SYNC"]
    assert result.unavailable == ["slow"]
    assert "timed out" in result.traces[0].error


def test_deadline_abandons_pending_detectors():
    registry = DetectorRegistry({"slow": slow_detector, "ok": async_detector}, detector_timeout=10)
    result = asyncio.run(registry.run(object(), deadline=0.2))

    assert [s.kind for s in result.signals] == ["ASYNC"]
    assert result.unavailable == ["slow"]
    assert "deadline" in result.traces[0].error


def test_non_signal_output_is_a_failure():
    registry = DetectorRegistry({"bad": lambda subject: ["not a signal"]})
    result = asyncio.run(registry.run(object()))
    assert result.unavailable == ["bad"]


def test_empty_registry():
    result = asyncio.run(DetectorRegistry().run(object()))
    assert result.signals == []
    assert result.traces == []


def test_duplicate_registration_rejected():
    registry = DetectorRegistry({"a": sync_detector})
    with pytest.raises(ValueError):
        registry.register("a", sync_detector)
    registry.register("b", async_detector)
    assert registry.names == ["a", "b"]
