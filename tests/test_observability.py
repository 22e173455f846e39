"""
Tests for per-step trace collection.
"""

from __future__ import annotations

import pytest

from txlens_api.observability import TraceCollector


def test_successful_step_is_recorded():
    trace = TraceCollector("addr")
    with trace.step("fetch", detail="accountAddress"):
        pass
    [step] = trace.as_list()
    assert step.step == "fetch"
    assert step.ok is True
    assert step.detail == "accountAddress"
    assert step.duration_ms >= 0


def test_failed_step_records_error_and_reraises():
    trace = TraceCollector()
    with pytest.raises(RuntimeError, match="boom"):
        with trace.step("summarize", detail="records=1"):
            raise RuntimeError("boom")
    [step] = trace.as_list()
    assert step.ok is False
    assert step.detail == "boom"
