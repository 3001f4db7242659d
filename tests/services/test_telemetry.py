"""Tests for telemetry primitives: Span, trace_span, @traced."""

from __future__ import annotations

import time
from collections.abc import Generator
from pathlib import Path

import pytest

from storyweb.services.graph import GraphService
from storyweb.services.result import ServiceError, ServiceResult
from storyweb.services.telemetry import (
    Span,
    _current_span,
    disable_telemetry,
    enable_telemetry,
    get_current_span,
    trace_span,
    traced,
)


@pytest.fixture(autouse=True)
def _reset_telemetry_state() -> Generator[None]:
    """Ensure clean telemetry state for every test."""
    yield
    disable_telemetry()
    _current_span.set(None)


# ── Span unit tests ──────────────────────────────────────────────────


class TestSpan:
    def test_duration_before_end_is_zero(self) -> None:
        span = Span(name="test")
        assert span.duration_ms == 0.0

    def test_duration_after_end(self) -> None:
        span = Span(name="test")
        time.sleep(0.005)
        span.end()
        assert span.duration_ms > 0

    def test_to_dict_minimal(self) -> None:
        span = Span(name="root")
        span.end()
        d = span.to_dict()
        assert d["name"] == "root"
        assert "duration_ms" in d
        assert "children" not in d
        assert "annotations" not in d

    def test_to_dict_with_children(self) -> None:
        root = Span(name="root")
        child = Span(name="child", parent=root)
        root.children.append(child)
        child.end()
        root.end()
        d = root.to_dict()
        assert [c["name"] for c in d["children"]] == ["child"]

    def test_annotate(self) -> None:
        span = Span(name="test")
        span.annotate("nodes", 7)
        span.end()
        assert span.to_dict()["annotations"] == {"nodes": 7}


# ── trace_span tests ─────────────────────────────────────────────────


class TestTraceSpan:
    def test_disabled_yields_none(self) -> None:
        with trace_span("test") as span:
            assert span is None

    def test_no_root_yields_none(self) -> None:
        enable_telemetry()
        with trace_span("test") as span:
            assert span is None

    def test_nested_spans(self) -> None:
        enable_telemetry()
        root = Span(name="root")
        token = _current_span.set(root)
        try:
            with trace_span("a"):
                with trace_span("b") as inner:
                    assert get_current_span() is inner
            assert [c.name for c in root.children] == ["a"]
            assert [c.name for c in root.children[0].children] == ["b"]
            assert root.children[0].end_time is not None
            assert get_current_span() is root
        finally:
            _current_span.reset(token)


# ── @traced decorator tests ──────────────────────────────────────────


class TestTracedDecorator:
    def test_noop_when_disabled(self) -> None:
        @traced
        def my_func() -> ServiceResult:
            return ServiceResult(ok=True, op="test")

        assert my_func().meta is None

    def test_injects_meta_when_enabled(self) -> None:
        @traced
        def my_func() -> ServiceResult:
            with trace_span("stage"):
                pass
            return ServiceResult(ok=True, op="test", meta={"existing": "data"})

        enable_telemetry()
        result = my_func()
        assert result.meta is not None
        assert result.meta["existing"] == "data"
        assert result.meta["telemetry"]["name"].endswith("my_func")
        assert result.meta["telemetry"]["children"][0]["name"] == "stage"

    def test_error_result_gets_telemetry(self) -> None:
        @traced
        def my_func() -> ServiceResult:
            return ServiceResult(ok=False, op="test", error=ServiceError(code="X", message="no"))

        enable_telemetry()
        result = my_func()
        assert result.meta is not None and "telemetry" in result.meta

    def test_exception_propagates_and_resets_span(self) -> None:
        @traced
        def my_func() -> ServiceResult:
            msg = "boom"
            raise ValueError(msg)

        enable_telemetry()
        with pytest.raises(ValueError, match="boom"):
            my_func()
        assert get_current_span() is None

    def test_non_service_result_passthrough(self) -> None:
        @traced
        def my_func() -> str:
            return "hello"

        enable_telemetry()
        assert my_func() == "hello"


# ── @traced on the graph service ────────────────────────────────────


class TestTracedOnGraphService:
    def test_build_has_child_spans(self, story_file: Path) -> None:
        enable_telemetry()
        result = GraphService().build(story_file)
        assert result.ok
        assert result.meta is not None
        tel = result.meta["telemetry"]
        assert "GraphService.build" in tel["name"]
        (child,) = tel["children"]
        assert child["name"] == "build_graph"
        assert child["annotations"] == {"nodes": 7, "links": 4}

    def test_layout_records_settle(self, story_file: Path) -> None:
        enable_telemetry()
        result = GraphService().layout(story_file, ticks=5)
        assert result.meta is not None
        names = [c["name"] for c in result.meta["telemetry"]["children"]]
        assert names == ["build_graph", "compute_visibility", "settle"]

    def test_no_meta_without_telemetry(self, story_file: Path) -> None:
        assert GraphService().build(story_file).meta is None
